"""Binds a provider adapter to an MCP SDK low-level server.

The MCP SDK owns JSON-RPC framing and the transport; this module only wires
``tools/list``, ``tools/call``, ``resources/list`` and ``resources/read`` to
the adapter and its registries.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from mcp import types
from mcp.server.lowlevel import Server

if TYPE_CHECKING:
    from uniserve.providers.base import ProviderAdapter

logger = logging.getLogger(__name__)


def build_mcp_server(adapter: ProviderAdapter) -> Server:
    """Create an MCP server whose request handlers delegate to *adapter*."""
    config = adapter.config
    server: Server = Server(config.name, version=config.version)

    async def list_tools(_: types.ListToolsRequest) -> types.ServerResult:
        tools = [types.Tool.model_validate(d.to_wire()) for d in adapter.tool_definitions()]
        return types.ServerResult(types.ListToolsResult(tools=tools))

    async def call_tool(request: types.CallToolRequest) -> types.ServerResult:
        tool = adapter.find_tool(request.params.name)
        context = adapter.new_context(request_id=_current_request_id(server))
        logger.debug("tools/call %s (request %s)", tool.name, context.request_id)
        payload = await adapter.handle_tool_call(tool, request.params.arguments or {}, context)
        return types.ServerResult(types.CallToolResult.model_validate(payload))

    async def list_resources(_: types.ListResourcesRequest) -> types.ServerResult:
        resources = [types.Resource.model_validate(r.to_wire()) for r in adapter.list_resources()]
        return types.ServerResult(types.ListResourcesResult(resources=resources))

    async def read_resource(request: types.ReadResourceRequest) -> types.ServerResult:
        uri = str(request.params.uri)
        mime_type, text = adapter.read_resource(uri)
        contents = [types.TextResourceContents.model_validate({"uri": uri, "mimeType": mime_type, "text": text})]
        return types.ServerResult(types.ReadResourceResult(contents=contents))

    server.request_handlers[types.ListToolsRequest] = list_tools
    server.request_handlers[types.CallToolRequest] = call_tool
    # Resources are only advertised by providers that serve component templates.
    if adapter.capabilities.supports_component_templates:
        server.request_handlers[types.ListResourcesRequest] = list_resources
        server.request_handlers[types.ReadResourceRequest] = read_resource
    return server


def _current_request_id(server: Server) -> str | None:
    try:
        return str(server.request_context.request_id)
    except LookupError:
        return None
