"""Queryable HTML documents."""

from dataclasses import dataclass

from bs4 import BeautifulSoup, Tag


HTML_PARSER = "lxml"


def load_document(html: str) -> BeautifulSoup:
    """Parse an HTML string into a queryable document.

    Args:
        html: The HTML content.

    Returns:
        BeautifulSoup document supporting CSS selectors via ``select``.
    """
    return BeautifulSoup(html, HTML_PARSER)


@dataclass(frozen=True)
class ScrapeResult:
    """Result of scraping a page.

    Attributes:
        source: Raw HTML of the page.
        document: Parsed, queryable document.
        url: URL the page was fetched from, if known.
        from_cache: Whether the page was read from the local cache.
    """

    source: str
    document: BeautifulSoup
    url: str | None = None
    from_cache: bool = False

    @property
    def text(self) -> str:
        """Get the text content of the document."""
        return self.document.get_text()

    def select(self, selector: str) -> list[Tag]:
        """Query the document with a CSS selector.

        Args:
            selector: CSS selector.

        Returns:
            Matching elements, in document order.
        """
        return list(self.document.select(selector))

    def select_one(self, selector: str) -> Tag | None:
        """Get the first element matching a CSS selector."""
        return self.document.select_one(selector)
