"""Web scraper HTTP client."""

from collections.abc import Callable
from typing import Any

import structlog
from bs4 import BeautifulSoup

from scrapekit.fetch.client import HttpClient
from scrapekit.fetch.constants import HTML_CONTENT_TYPE, SCRAPER_PROFILE
from scrapekit.fetch.merge import ConfigInput, InterceptorsInput
from scrapekit.fetch.metrics import HttpMetrics
from scrapekit.fetch.profiles import Lineage
from scrapekit.fetch.schemas import parse_config
from scrapekit.fetch.transport import Transport
from scrapekit.scraping.cache import HtmlCache
from scrapekit.scraping.document import ScrapeResult, load_document
from scrapekit.settings.app import get_settings


logger = structlog.get_logger()


class Scraper(HttpClient):
    """HTTP client that fetches HTML pages as queryable documents.

    Requests default to an HTML content type. When the cache is enabled,
    every fetched page is written to it and ``scrape`` serves pages from it
    without touching the network.
    """

    def __init__(
        self,
        config: ConfigInput | None = None,
        interceptors: InterceptorsInput | None = None,
        *,
        transport: Transport | None = None,
        cache: HtmlCache | None = None,
        loader: Callable[[str], BeautifulSoup] = load_document,
    ) -> None:
        """Initialize the scraper.

        Args:
            config: Defaults merged over the scraper baseline.
            interceptors: Interceptors merged over the scraper baseline.
            transport: Network transport (defaults to HttpxTransport).
            cache: Page cache (defaults to one built from the environment).
            loader: Parses raw HTML into a queryable document.
        """
        self.loader = loader
        self.cache = (
            cache if cache is not None else HtmlCache.from_settings(get_settings())
        )
        if self.cache.enabled:
            interceptors = self.lineage.merge_interceptors(
                interceptors or {}, {"response": [self.cache.store_response]}
            )
        super().__init__(config, interceptors, transport=transport)

    def _options(self) -> dict[str, Any]:
        return {**super()._options(), "cache": self.cache, "loader": self.loader}

    @staticmethod
    def build_result(
        html: str,
        url: str | None = None,
        from_cache: bool = False,
        loader: Callable[[str], BeautifulSoup] = load_document,
    ) -> ScrapeResult:
        """Wrap raw HTML into a scrape result.

        Args:
            html: Raw HTML.
            url: URL of the page, if known.
            from_cache: Whether the HTML came from the cache.
            loader: Parses raw HTML into a queryable document.

        Returns:
            Scrape result holding the source and the parsed document.
        """
        return ScrapeResult(
            source=html,
            document=loader(html),
            url=url,
            from_cache=from_cache,
        )

    def has_cache(self, cache_id: str) -> bool:
        """Check if a page is cached under the given id."""
        return self.cache.has(cache_id)

    def get_from_cache(self, cache_id: str) -> ScrapeResult:
        """Build a scrape result from a cached page.

        Args:
            cache_id: Id of the cached page.

        Returns:
            Scrape result for the cached HTML.

        Raises:
            OSError: If the cached file cannot be read.
        """
        return self.build_result(
            self.cache.read(cache_id), from_cache=True, loader=self.loader
        )

    async def scrape(self, config: ConfigInput | None = None) -> ScrapeResult:
        """Fetch a page and parse it.

        Args:
            config: Per-call configuration (typically origin and path).

        Returns:
            Scrape result with the raw HTML and the parsed document.
        """
        if self.cache.enabled:
            merged = self.lineage.merge_config(self.defaults, config or {})
            target = parse_config(merged)
            cache_id = HtmlCache.cache_id_for(target.path)
            if self.cache.has(cache_id):
                HttpMetrics.get_instance().record_cache_hit()
                logger.info(
                    "cache_hit",
                    component="scraper",
                    cache_id=cache_id,
                    path=target.path,
                )
                return self.build_result(
                    self.cache.read(cache_id),
                    url=target.url,
                    from_cache=True,
                    loader=self.loader,
                )

        response = await self.send(config)
        return self.build_result(
            response.content, url=str(response.url), loader=self.loader
        )


Scraper.lineage = Lineage(
    name=SCRAPER_PROFILE,
    factory=Scraper,
    defaults={"headers": {"content-type": HTML_CONTENT_TYPE}},
    parent=HttpClient.lineage,
)
