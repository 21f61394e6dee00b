"""Tests for the stdio and SSE provider server handles."""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncIterator
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from starlette.testclient import TestClient

from uniserve.core.config import ProviderName
from uniserve.core.errors import AdapterStateError, TransportError
from uniserve.providers.server import SseProviderServer, StdioProviderServer


def _fake_mcp_server(run: Any) -> MagicMock:
    server = MagicMock()
    server.run = run
    server.create_initialization_options = MagicMock(return_value={})
    return server


@contextlib.asynccontextmanager
async def _fake_stdio() -> AsyncIterator[tuple[MagicMock, MagicMock]]:
    yield MagicMock(), MagicMock()


class TestStdioProviderServer:
    async def test_start_and_stop(self) -> None:
        async def run_forever(*args: Any) -> None:
            await asyncio.Event().wait()

        mcp_server = _fake_mcp_server(AsyncMock(side_effect=run_forever))
        server = StdioProviderServer(ProviderName.CLAUDE, lambda: mcp_server)

        with patch("uniserve.providers.server.stdio_server", _fake_stdio):
            await server.start()
            assert server.status == "running"
            await asyncio.sleep(0)
            await server.stop()

        assert server.status == "stopped"
        mcp_server.run.assert_awaited_once()

    async def test_wait_returns_when_session_ends(self) -> None:
        mcp_server = _fake_mcp_server(AsyncMock(return_value=None))
        server = StdioProviderServer(ProviderName.CLAUDE, lambda: mcp_server)

        with patch("uniserve.providers.server.stdio_server", _fake_stdio):
            await server.start()
            await asyncio.wait_for(server.wait(), timeout=1)
            await asyncio.sleep(0)

        mcp_server.run.assert_awaited_once()
        assert server.status == "stopped"
        await server.stop()

    async def test_crashed_session_reports_error(self, caplog: pytest.LogCaptureFixture) -> None:
        mcp_server = _fake_mcp_server(AsyncMock(side_effect=RuntimeError("session crashed")))
        server = StdioProviderServer(ProviderName.CLAUDE, lambda: mcp_server)

        with patch("uniserve.providers.server.stdio_server", _fake_stdio):
            await server.start()
            await asyncio.wait_for(server.wait(), timeout=1)
            await asyncio.sleep(0)

        info = server.get_info()
        assert info.status == "error"
        assert info.error == "session crashed"
        assert "stdio session failed: session crashed" in caplog.text

        await server.stop()
        assert server.status == "stopped"

    async def test_stop_without_start(self) -> None:
        server = StdioProviderServer(ProviderName.CLAUDE, MagicMock())
        await server.stop()
        assert server.status == "stopped"

    async def test_reload_unsupported(self) -> None:
        server = StdioProviderServer(ProviderName.CLAUDE, MagicMock())
        with pytest.raises(AdapterStateError, match="does not support reload"):
            await server.reload()


class TestSseApp:
    def setup_method(self) -> None:
        self.server = SseProviderServer(
            ProviderName.OPENAI,
            MagicMock(),
            host="127.0.0.1",
            port=4200,
            name="weather-app",
            version="2.0.0",
        )

    def test_health(self) -> None:
        client = TestClient(self.server.build_app())
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert "timestamp" in body

    def test_info(self) -> None:
        client = TestClient(self.server.build_app())
        assert client.get("/info").json() == {
            "name": "weather-app",
            "version": "2.0.0",
            "protocol": "mcp",
            "transport": "sse",
            "generation": 0,
        }

    def test_cors_headers(self) -> None:
        client = TestClient(self.server.build_app())
        response = client.get("/health", headers={"Origin": "https://chatgpt.com"})
        assert response.headers["access-control-allow-origin"] == "*"

    def test_cors_disabled(self) -> None:
        server = SseProviderServer(ProviderName.OPENAI, MagicMock(), cors=False)
        client = TestClient(server.build_app())
        response = client.get("/health", headers={"Origin": "https://chatgpt.com"})
        assert "access-control-allow-origin" not in response.headers

    def test_info_snapshot(self) -> None:
        info = self.server.get_info()
        assert info.url == "http://127.0.0.1:4200"
        assert info.port == 4200
        assert info.status == "stopped"


class TestSseLifecycle:
    async def test_start_stop(self) -> None:
        async def fake_serve(self: Any, sockets: Any = None) -> None:
            self.started = True
            while not self.should_exit:
                await asyncio.sleep(0.01)

        server = SseProviderServer(ProviderName.OPENAI, MagicMock(), port=4300)
        with patch("uniserve.providers.server.uvicorn.Server.serve", fake_serve):
            await server.start()
            assert server.status == "running"
            await server.reload()
            assert server.status == "running"
            assert server.generation == 1
            await server.stop()

        assert server.status == "stopped"

    async def test_bind_failure_is_transport_error(self) -> None:
        async def exiting_serve(self: Any, sockets: Any = None) -> None:
            raise SystemExit(1)

        server = SseProviderServer(ProviderName.OPENAI, MagicMock(), port=4301)
        with patch("uniserve.providers.server.uvicorn.Server.serve", exiting_serve):
            with pytest.raises(TransportError, match="could not serve on localhost:4301"):
                await server.start()

        info = server.get_info()
        assert info.status == "error"
        assert info.error is not None

    async def test_early_exit_is_transport_error(self) -> None:
        async def returning_serve(self: Any, sockets: Any = None) -> None:
            return None

        server = SseProviderServer(ProviderName.OPENAI, MagicMock(), port=4302)
        with patch("uniserve.providers.server.uvicorn.Server.serve", returning_serve):
            with pytest.raises(TransportError, match="exited during startup"):
                await server.start()

        assert server.status == "error"

    async def test_wait_returns_after_stop(self) -> None:
        async def fake_serve(self: Any, sockets: Any = None) -> None:
            self.started = True
            while not self.should_exit:
                await asyncio.sleep(0.01)

        server = SseProviderServer(ProviderName.OPENAI, MagicMock(), port=4303)
        with patch("uniserve.providers.server.uvicorn.Server.serve", fake_serve):
            await server.start()
            waiter = asyncio.create_task(server.wait())
            await asyncio.sleep(0.02)
            assert not waiter.done()
            await server.stop()
            await asyncio.wait_for(waiter, timeout=1)
