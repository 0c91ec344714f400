"""On-disk cache of scraped HTML pages, keyed by URL path."""

from pathlib import Path

import httpx
import structlog

from scrapekit.fetch.metrics import HttpMetrics
from scrapekit.fetch.response import HttpResponse
from scrapekit.settings.app import AppSettings


logger = structlog.get_logger()

CACHE_FILE_SUFFIX = ".html"

# Cache id used for the root path
ROOT_CACHE_ID = "index"


def cache_file_path(directory: Path | str, name: str) -> Path:
    """Resolve the file path of a cache entry.

    Args:
        directory: Cache directory.
        name: File name without the extension; may contain '/'.

    Returns:
        Path of the entry under ``directory``.

    Raises:
        ValueError: If the entry would fall outside the cache directory.
    """
    path = Path(directory) / f"{name}{CACHE_FILE_SUFFIX}"
    root = Path(directory).resolve()
    if not path.resolve().is_relative_to(root):
        raise ValueError(f"Cache entry {name!r} escapes cache directory {root}")
    return path


def write_html_to_cache(directory: Path | str, name: str, content: str) -> Path:
    """Save HTML content to the cache directory.

    Intermediate directories are created as needed.

    Args:
        directory: Cache directory.
        name: File name without the extension; may contain '/'.
        content: The HTML content to save.

    Returns:
        Path of the written file.

    Raises:
        ValueError: If the entry would fall outside the cache directory.
    """
    path = cache_file_path(directory, name)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def read_html_from_cache(directory: Path | str, name: str) -> str:
    """Read HTML content from the cache directory.

    Args:
        directory: Cache directory.
        name: File name without the extension.

    Returns:
        The cached HTML content.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the entry would fall outside the cache directory.
    """
    path = cache_file_path(directory, name)
    return path.read_text(encoding="utf-8")


class HtmlCache:
    """Local cache of HTML pages.

    Pages are stored as ``<directory>/<id>.html`` where the id is the URL
    path without its leading separator. Read and write failures propagate
    to the caller.
    """

    def __init__(self, directory: Path | str, enabled: bool = False) -> None:
        """Initialize the cache.

        Args:
            directory: Directory holding the cached pages.
            enabled: Whether scrapers should read and write this cache.
        """
        self.directory = Path(directory)
        self.enabled = enabled
        self._log = logger.bind(component="cache", directory=str(self.directory))

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "HtmlCache":
        """Build the cache from environment settings."""
        return cls(settings.cache_dir, enabled=settings.enable_cache)

    @staticmethod
    def cache_id_for(url: httpx.URL | str) -> str:
        """Derive the cache id of a URL or path.

        Args:
            url: Absolute URL or path.

        Returns:
            The path without its leading '/', or ``index`` for the root.
            The root and ``/index`` therefore share one entry.
        """
        path = httpx.URL(str(url)).path
        return path[1:] if path.startswith("/") and len(path) > 1 else ROOT_CACHE_ID

    def path_for(self, cache_id: str) -> Path:
        """Get the file path of a cache id.

        Raises:
            ValueError: If the id would fall outside the cache directory.
        """
        return cache_file_path(self.directory, cache_id)

    def has(self, cache_id: str) -> bool:
        """Check if a page is cached under the given id."""
        return self.path_for(cache_id).is_file()

    def read(self, cache_id: str) -> str:
        """Read a cached page.

        Args:
            cache_id: Id of the page.

        Returns:
            The cached HTML.
        """
        content = read_html_from_cache(self.directory, cache_id)
        self._log.debug("cache_read", cache_id=cache_id, bytes=len(content))
        return content

    def write(self, cache_id: str, content: str) -> Path:
        """Write a page to the cache.

        Args:
            cache_id: Id of the page.
            content: The HTML to store.

        Returns:
            Path of the written file.
        """
        path = write_html_to_cache(self.directory, cache_id, content)
        HttpMetrics.get_instance().record_cache_write()
        self._log.debug("cache_write", cache_id=cache_id, bytes=len(content))
        return path

    def store_response(self, response: HttpResponse) -> HttpResponse:
        """Response interceptor persisting the response content.

        Args:
            response: Response whose body has been resolved.

        Returns:
            The same response.
        """
        self.write(self.cache_id_for(response.request.url), response.content)
        return response
