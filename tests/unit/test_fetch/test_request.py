"""Unit tests for HttpRequest."""

import asyncio

import pytest

from scrapekit.fetch.request import HttpRequest
from scrapekit.fetch.schemas import parse_config


def _request(**config: object) -> HttpRequest:
    return HttpRequest(parse_config({"origin": "https://x.test", **config}))


class TestHttpRequest:
    """Tests for request construction."""

    def test_fields_from_config(self) -> None:
        """Test that the request mirrors the validated config."""
        request = _request(path="/items", method="post", json={"n": 1})

        assert request.method == "POST"
        assert str(request.url) == "https://x.test/items"
        assert request.body == '{"n":1}'
        assert "json" in request.content_type

    def test_method_url_body_read_only(self) -> None:
        """Test that method, url and body cannot be reassigned."""
        request = _request()

        with pytest.raises(AttributeError):
            request.method = "PUT"  # type: ignore[misc]
        with pytest.raises(AttributeError):
            request.url = "https://y.test"  # type: ignore[misc,assignment]
        with pytest.raises(AttributeError):
            request.body = "x"  # type: ignore[misc]

    def test_headers_independent_from_config(self) -> None:
        """Test that request headers are a copy of the config headers."""
        config = parse_config({"headers": {"a": "1"}})
        request = HttpRequest(config)

        request.headers["b"] = "2"

        assert "b" not in config.headers
        assert request.total_headers == 2

    def test_to_httpx(self) -> None:
        """Test conversion to an httpx request."""
        request = _request(path="/items", body="hello", headers={"x-test": "1"})

        outgoing = request.to_httpx()

        assert outgoing.method == "GET"
        assert str(outgoing.url) == "https://x.test/items"
        assert outgoing.headers["x-test"] == "1"
        assert outgoing.content == b"hello"


class TestRequestInterceptors:
    """Tests for the request interceptor pipeline."""

    def test_add_interceptors_deduplicates(self) -> None:
        """Test that an interceptor is registered once."""

        def tag(request: HttpRequest) -> HttpRequest:
            return request

        request = _request().add_interceptors(tag, tag)
        request.add_interceptors(tag)

        assert request.interceptors == [tag]

    def test_interceptors_run_in_order(self) -> None:
        """Test that later interceptors see earlier mutations."""
        seen: list[str] = []

        def first(request: HttpRequest) -> HttpRequest:
            request.headers["x-order"] = "first"
            seen.append("first")
            return request

        async def second(request: HttpRequest) -> HttpRequest:
            await asyncio.sleep(0)
            seen.append(f"second saw {request.headers['x-order']}")
            request.headers["x-order"] = "second"
            return request

        def third(request: HttpRequest) -> HttpRequest:
            seen.append(f"third saw {request.headers['x-order']}")
            return request

        request = _request().add_interceptors(first, second, third)
        result = asyncio.run(request.intercept())

        assert result is request
        assert seen == ["first", "second saw first", "third saw second"]
        assert request.headers["x-order"] == "second"
