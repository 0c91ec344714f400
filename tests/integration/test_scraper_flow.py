"""Integration tests for clients and scrapers against a local HTTP server."""

import asyncio
import json
import threading
from collections.abc import Generator
from http.server import BaseHTTPRequestHandler, HTTPServer
from pathlib import Path

import pytest

from scrapekit.bootstrap import register_default_profiles
from scrapekit.fetch.client import HttpClient
from scrapekit.fetch.errors import RedirectNotAllowedError, RequestFailedError
from scrapekit.fetch.metrics import HttpMetrics
from scrapekit.fetch.profiles import ProfileRegistry
from scrapekit.fetch.request import HttpRequest
from scrapekit.fetch.response import HttpResponse
from scrapekit.fetch.transport import HttpxTransport
from scrapekit.scraping.cache import HtmlCache
from scrapekit.scraping.scraper import Scraper


def get_server_origin(server: HTTPServer) -> str:
    """Get the origin of a test server.

    Args:
        server: The HTTP server instance.

    Returns:
        Origin URL without a trailing slash.
    """
    host, port = server.server_address[0], server.server_address[1]
    if isinstance(host, bytes):
        host = host.decode("utf-8")
    return f"http://{host}:{port}"


def local_transport() -> HttpxTransport:
    """Build a transport that ignores proxy settings from the environment."""
    return HttpxTransport(timeout=5.0, trust_env=False)


def _client(server: HTTPServer) -> HttpClient:
    return HttpClient(
        {"origin": get_server_origin(server)}, transport=local_transport()
    )


class SiteHandler(BaseHTTPRequestHandler):
    """HTTP handler serving a tiny site and a JSON API."""

    # Requests seen by the server, as (method, path, headers)
    seen: list[tuple[str, str, dict[str, str]]] = []

    def log_message(self, format: str, *args: object) -> None:  # noqa: A002
        """Suppress log messages during tests."""

    def _record(self) -> None:
        SiteHandler.seen.append(
            (self.command, self.path, {k.lower(): v for k, v in self.headers.items()})
        )

    def _send(self, status: int, content_type: str, body: bytes) -> None:
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_GET(self) -> None:  # noqa: N802
        """Serve pages, API items, redirects and errors."""
        self._record()
        if self.path == "/":
            body = b"<html><body><a href='/docs/intro'>Intro</a></body></html>"
            self._send(200, "text/html; charset=utf-8", body)
        elif self.path == "/docs/intro":
            body = "<html><body><h1>Intro</h1><p>Héllo</p></body></html>".encode()
            self._send(200, "text/html; charset=utf-8", body)
        elif self.path == "/api/items":
            self._send(200, "application/json", b'{"items":[1,2,3]}')
        elif self.path == "/old":
            self.send_response(301)
            self.send_header("Location", "/docs/intro")
            self.send_header("Content-Length", "0")
            self.end_headers()
        else:
            self._send(404, "text/plain", b"Not Found")

    def do_POST(self) -> None:  # noqa: N802
        """Echo the JSON body back."""
        self._record()
        length = int(self.headers.get("Content-Length", "0"))
        payload = json.loads(self.rfile.read(length) or b"{}")
        self._send(201, "application/json", json.dumps({"echo": payload}).encode())


@pytest.fixture
def site_server() -> Generator[HTTPServer]:
    """Start a local HTTP server for the site."""
    SiteHandler.seen = []
    server = HTTPServer(("127.0.0.1", 0), SiteHandler)
    thread = threading.Thread(target=server.serve_forever)
    thread.daemon = True
    thread.start()
    yield server
    server.shutdown()
    server.server_close()


@pytest.fixture(autouse=True)
def reset_singletons() -> Generator[None]:
    """Reset profile registry and metrics around each test."""
    ProfileRegistry.reset()
    HttpMetrics.reset()
    yield
    ProfileRegistry.reset()
    HttpMetrics.reset()


class TestHttpClientFlow:
    """End-to-end tests for HttpClient."""

    def test_json_api_with_auth_interceptor(self, site_server: HTTPServer) -> None:
        """Test defaults, interceptors and JSON resolution over the network."""

        def add_auth(request: HttpRequest) -> HttpRequest:
            request.headers["authorization"] = "Bearer test-token"
            return request

        def unwrap_items(response: HttpResponse) -> HttpResponse:
            response.data = response.data["items"]
            return response

        register_default_profiles()
        HttpClient.define_defaults({"headers": {"user-agent": "scrapekit-test"}})
        api = HttpClient(
            {"origin": get_server_origin(site_server)},
            {"request": [add_auth], "response": [unwrap_items]},
            transport=local_transport(),
        )

        response = asyncio.run(api.get({"path": "/api/items"}))

        assert response.status == 200
        assert response.data == [1, 2, 3]
        method, path, headers = SiteHandler.seen[0]
        assert (method, path) == ("GET", "/api/items")
        assert headers["authorization"] == "Bearer test-token"
        assert headers["user-agent"] == "scrapekit-test"

    def test_post_json(self, site_server: HTTPServer) -> None:
        """Test posting a JSON body."""
        api = _client(site_server)

        response = asyncio.run(api.post({"path": "/echo", "json": {"q": "x"}}))

        assert response.status == 201
        assert response.data == {"echo": {"q": "x"}}
        assert SiteHandler.seen[0][2]["content-type"].startswith("application/json")

    def test_not_found(self, site_server: HTTPServer) -> None:
        """Test that a 404 surfaces as RequestFailedError."""
        api = _client(site_server)

        with pytest.raises(RequestFailedError) as exc_info:
            asyncio.run(api.get({"path": "/missing"}))

        assert exc_info.value.status == 404
        assert exc_info.value.response.status_text == "Not Found"

    def test_redirect_policies(self, site_server: HTTPServer) -> None:
        """Test following and refusing redirects."""
        api = _client(site_server)

        followed = asyncio.run(api.get({"path": "/old"}))
        assert followed.status == 200
        assert str(followed.url).endswith("/docs/intro")

        with pytest.raises(RedirectNotAllowedError):
            asyncio.run(api.get({"path": "/old", "redirect": "error"}))


class TestScraperFlow:
    """End-to-end tests for Scraper with the page cache."""

    def test_scrape_cache_and_fork(
        self, site_server: HTTPServer, tmp_path: Path
    ) -> None:
        """Test scraping, caching to disk and serving from cache."""
        register_default_profiles()
        scraper = Scraper(
            {"origin": get_server_origin(site_server)},
            transport=local_transport(),
            cache=HtmlCache(tmp_path, enabled=True),
        )

        home = asyncio.run(scraper.scrape())
        link = home.select_one("a")["href"]
        page = asyncio.run(scraper.scrape({"path": link}))
        again = asyncio.run(scraper.fork().scrape({"path": link}))

        assert page.select_one("h1").get_text() == "Intro"
        assert page.select_one("p").get_text() == "Héllo"
        assert again.from_cache is True
        assert again.source == page.source
        assert (tmp_path / "index.html").is_file()
        assert (tmp_path / "docs" / "intro.html").is_file()
        assert [path for _, path, _ in SiteHandler.seen] == ["/", "/docs/intro"]
        assert SiteHandler.seen[0][2]["content-type"] == "text/html; charset=utf-8"

        metrics = HttpMetrics.get_instance()
        assert metrics.cache_hits_total == 1
        assert metrics.get_responses_total("scraper") == 2
