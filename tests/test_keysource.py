"""Tests for lib/keysource.py - HttpKeySource with a mocked transport."""

import httpx
import pytest

from devman_cli.lib.errors import KeySourceError
from devman_cli.lib.keysource import HttpKeySource
from devman_cli.lib.result import Err, Ok


def transport_returning(status: int, content: bytes = b"") -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/webos_rsa"
        return httpx.Response(status, content=content)

    return httpx.MockTransport(handler)


class TestHttpKeySource:
    def test_url(self) -> None:
        assert HttpKeySource().url_for("10.0.0.5") == "http://10.0.0.5:9991/webos_rsa"

    def test_url_custom_port(self) -> None:
        assert HttpKeySource(port=8080).url_for("tv.lan") == "http://tv.lan:8080/webos_rsa"

    @pytest.mark.asyncio
    async def test_fetch_ok(self) -> None:
        source = HttpKeySource(transport=transport_returning(200, b"KEY"))
        assert await source.fetch("10.0.0.5") == Ok(b"KEY")

    @pytest.mark.asyncio
    async def test_fetch_http_error(self) -> None:
        source = HttpKeySource(transport=transport_returning(404))

        result = await source.fetch("10.0.0.5")

        assert isinstance(result, Err)
        assert result.error.address == "10.0.0.5"
        assert "HTTP 404" in result.error.reason

    @pytest.mark.asyncio
    async def test_fetch_empty_body(self) -> None:
        source = HttpKeySource(transport=transport_returning(200, b""))
        assert await source.fetch("10.0.0.5") == Err(
            KeySourceError("10.0.0.5", "empty key returned")
        )

    @pytest.mark.asyncio
    async def test_fetch_connection_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        source = HttpKeySource(transport=httpx.MockTransport(handler))

        result = await source.fetch("10.0.0.5")

        assert isinstance(result, Err)
        assert "ConnectError" in result.error.reason
