"""HTTP client with layered profiles and interceptors, plus an HTML scraper."""

from scrapekit.bootstrap import bootstrap, register_default_profiles
from scrapekit.fetch import (
    ConfigValidationError,
    HttpClient,
    HttpRequest,
    HttpResponse,
    RequestFailedError,
)
from scrapekit.scraping import HtmlCache, ScrapeResult, Scraper


__all__ = [
    "ConfigValidationError",
    "HtmlCache",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "RequestFailedError",
    "ScrapeResult",
    "Scraper",
    "bootstrap",
    "register_default_profiles",
]
