"""Tests for HTML documents and scrape results."""

from bs4 import BeautifulSoup

from scrapekit.scraping.document import ScrapeResult, load_document


class TestLoadDocument:
    """Tests for load_document."""

    def test_parses_html(self) -> None:
        """Test that HTML is parsed into a BeautifulSoup document."""
        document = load_document("<p class='x'>hi</p>")

        assert isinstance(document, BeautifulSoup)
        assert document.select_one("p.x").get_text() == "hi"

    def test_tolerates_broken_markup(self) -> None:
        """Test that unclosed tags still produce a document."""
        document = load_document("<div><p>one<p>two")

        assert [p.get_text() for p in document.select("div p")] == ["one", "two"]

    def test_empty_input(self) -> None:
        """Test that empty input yields an empty document."""
        assert load_document("").get_text() == ""


class TestScrapeResult:
    """Tests for ScrapeResult."""

    def test_text_and_queries(self) -> None:
        """Test text extraction and CSS queries."""
        html = "<ul><li>a</li><li>b</li></ul>"
        result = ScrapeResult(source=html, document=load_document(html))

        assert result.text == "ab"
        assert [li.get_text() for li in result.select("li")] == ["a", "b"]
        assert result.select_one("li").get_text() == "a"
        assert result.select_one("table") is None

    def test_metadata_defaults(self) -> None:
        """Test default url and cache flag."""
        result = ScrapeResult(source="", document=load_document(""))

        assert result.url is None
        assert result.from_cache is False
