"""Scraping helpers: HTML documents, page cache and the scraper client."""

from scrapekit.scraping.cache import (
    HtmlCache,
    read_html_from_cache,
    write_html_to_cache,
)
from scrapekit.scraping.document import ScrapeResult, load_document
from scrapekit.scraping.scraper import Scraper


__all__ = [
    "HtmlCache",
    "ScrapeResult",
    "Scraper",
    "load_document",
    "read_html_from_cache",
    "write_html_to_cache",
]
