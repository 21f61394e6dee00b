"""Provider server handles backed by the MCP SDK transports.

- :class:`StdioProviderServer` serves one MCP session over stdin/stdout.
- :class:`SseProviderServer` serves MCP over HTTP + Server-Sent Events with
  uvicorn, creating a fresh MCP server per SSE connection.

Both run their transport in a background task so ``start()`` returns once
the server is accepting traffic.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import uvicorn
from mcp.server.sse import SseServerTransport
from mcp.server.stdio import stdio_server
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Mount, Route

from uniserve.core.errors import TransportError
from uniserve.providers.base import ProviderServer, ProviderServerInfo

if TYPE_CHECKING:
    from mcp.server.lowlevel import Server

    from uniserve.core.config import ProviderName

logger = logging.getLogger(__name__)

McpServerFactory = Callable[[], "Server[Any, Any]"]

_STARTUP_POLL_INTERVAL = 0.05


class StdioProviderServer(ProviderServer):
    """Serves a single MCP session on the process's stdio."""

    def __init__(self, provider: ProviderName, server_factory: McpServerFactory) -> None:
        super().__init__(provider, "stdio")
        self._server_factory = server_factory
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        self._status = "starting"
        self._error = None
        mcp_server = self._server_factory()
        self._task = asyncio.create_task(self._serve(mcp_server))
        self._task.add_done_callback(self._session_ended)
        self._status = "running"
        logger.info("%s MCP server listening on stdio", self.provider.value)

    async def _serve(self, mcp_server: Server[Any, Any]) -> None:
        async with stdio_server() as (read_stream, write_stream):
            await mcp_server.run(
                read_stream,
                write_stream,
                mcp_server.create_initialization_options(),
            )

    def _session_ended(self, task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            self._status = "stopped"
            logger.info("%s stdio session closed", self.provider.value)
        else:
            self._status = "error"
            self._error = str(exc) or type(exc).__name__
            logger.error("%s stdio session failed: %s", self.provider.value, self._error)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None:
            if not task.done():
                task.cancel()
            await asyncio.wait({task})
        self._status = "stopped"

    async def wait(self) -> None:
        """Block until the stdio session ends (client closed stdin)."""
        if self._task is not None:
            await asyncio.wait({self._task})


class SseProviderServer(ProviderServer):
    """Serves MCP over HTTP/SSE on ``host:port``.

    Endpoints: ``GET /sse`` (event stream), ``POST /messages/`` (client
    messages), ``GET /health`` and ``GET /info``.
    """

    def __init__(
        self,
        provider: ProviderName,
        server_factory: McpServerFactory,
        *,
        host: str = "localhost",
        port: int = 3000,
        cors: bool = True,
        name: str = "uniserve",
        version: str = "1.0.0",
    ) -> None:
        super().__init__(provider, "sse")
        self._server_factory = server_factory
        self.host = host
        self.port = port
        self._cors = cors
        self._name = name
        self._version = version
        self._uvicorn: uvicorn.Server | None = None
        self._task: asyncio.Task[None] | None = None
        self._generation = 0

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @property
    def generation(self) -> int:
        """Number of reloads performed since start."""
        return self._generation

    def build_app(self) -> Starlette:
        """Build the Starlette application serving the MCP endpoints."""
        sse = SseServerTransport("/messages/")

        async def handle_sse(request: Request) -> Response:
            logger.info("SSE client connected")
            mcp_server = self._server_factory()
            async with sse.connect_sse(
                request.scope,
                request.receive,
                request._send,  # noqa: SLF001
            ) as (read_stream, write_stream):
                await mcp_server.run(
                    read_stream,
                    write_stream,
                    mcp_server.create_initialization_options(),
                )
            logger.info("SSE client disconnected")
            return Response()

        async def health(_: Request) -> JSONResponse:
            return JSONResponse(
                {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}
            )

        async def info(_: Request) -> JSONResponse:
            return JSONResponse(
                {
                    "name": self._name,
                    "version": self._version,
                    "protocol": "mcp",
                    "transport": "sse",
                    "generation": self._generation,
                }
            )

        middleware = (
            [Middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])]
            if self._cors
            else []
        )
        return Starlette(
            routes=[
                Route("/health", health, methods=["GET"]),
                Route("/info", info, methods=["GET"]),
                Route("/sse", handle_sse, methods=["GET"]),
                Mount("/messages/", app=sse.handle_post_message),
            ],
            middleware=middleware,
        )

    async def start(self) -> None:
        self._status = "starting"
        self._error = None
        config = uvicorn.Config(
            self.build_app(),
            host=self.host,
            port=self.port,
            log_level="warning",
            lifespan="off",
        )
        self._uvicorn = uvicorn.Server(config)
        self._task = asyncio.create_task(self._serve(self._uvicorn))

        while not self._uvicorn.started:
            if self._task.done():
                self._status = "error"
                try:
                    self._task.result()
                except TransportError as exc:
                    self._error = exc.detail
                    raise
                self._error = "server exited during startup"
                raise TransportError(self.provider.value, self._error)
            await asyncio.sleep(_STARTUP_POLL_INTERVAL)

        self._status = "running"
        logger.info("%s MCP server listening on %s/sse", self.provider.value, self.url)

    async def _serve(self, server: uvicorn.Server) -> None:
        try:
            await server.serve()
        except SystemExit as exc:
            # uvicorn exits the process when it cannot bind
            detail = f"could not serve on {self.host}:{self.port} (exit status {exc.code})"
            raise TransportError(self.provider.value, detail) from exc

    async def stop(self) -> None:
        server, self._uvicorn = self._uvicorn, None
        task, self._task = self._task, None
        if server is not None:
            server.should_exit = True
        try:
            if task is not None:
                await task
        finally:
            self._status = "stopped"

    async def wait(self) -> None:
        if self._task is not None:
            await asyncio.wait({self._task})

    async def reload(self) -> None:
        """Serve subsequent SSE sessions from freshly built MCP servers."""
        self._generation += 1
        logger.info("%s reloaded (generation %d)", self.provider.value, self._generation)

    def get_info(self) -> ProviderServerInfo:
        return ProviderServerInfo(
            provider=self.provider.value,
            transport=self.transport,
            port=self.port,
            url=self.url,
            status=self._status,
            error=self._error,
        )
