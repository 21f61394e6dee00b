"""Claude Desktop provider adapter (MCP over stdio, text only)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from uniserve.core.config import ProviderName
from uniserve.providers.base import ProviderAdapter, ProviderCapabilities, ProviderResponse
from uniserve.providers.mcp_server import build_mcp_server
from uniserve.providers.server import StdioProviderServer

if TYPE_CHECKING:
    from uniserve.core.models import UniversalResponse
    from uniserve.core.tool import UniversalTool


class ClaudeAdapter(ProviderAdapter):
    """Adapter for Claude Desktop.

    Components are not rendered; a response that carries only a component is
    degraded to a ``[Component: <type>]`` text note.
    """

    name: ClassVar[ProviderName] = ProviderName.CLAUDE
    capabilities: ClassVar[ProviderCapabilities] = ProviderCapabilities(
        supports_components=False,
        transports=frozenset({"stdio"}),
        supports_file_upload=True,
        supports_streaming=True,
        mcp_version="2025-06-18",
    )

    def _tool_metadata(self, tool: UniversalTool) -> dict[str, Any]:
        hints = tool.metadata.claude
        return dict(hints.model_extra or {}) if hints is not None else {}

    def convert_response(
        self,
        response: UniversalResponse,
        tool: UniversalTool | None = None,
    ) -> ProviderResponse:
        content = [self._mcp_content(item) for item in response.content]
        if response.component is not None and not content:
            content.append({"type": "text", "text": f"[Component: {response.component.type}]"})

        result: ProviderResponse = {"content": content}
        if response.is_error:
            result["isError"] = True
        return result

    def _create_server(self) -> StdioProviderServer:
        return StdioProviderServer(self.name, lambda: build_mcp_server(self))
