"""OpenAI (ChatGPT apps) provider adapter.

Serves MCP over HTTP/SSE and renders components as widgets: each registered
component is exposed as a ``ui://widget/<type>.html`` resource whose document
loads the component's OpenAI bundle.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, ClassVar

from uniserve.components.resource import (
    WIDGET_MIME_TYPE,
    McpResource,
    bootstrap_document,
    bundle_data_url,
    resource_descriptor,
    resource_uri,
)
from uniserve.core.config import OpenAISettings, ProviderName
from uniserve.core.errors import ComponentNotFoundError
from uniserve.providers.base import ProviderAdapter, ProviderCapabilities, ProviderResponse
from uniserve.providers.mcp_server import build_mcp_server
from uniserve.providers.server import SseProviderServer

if TYPE_CHECKING:
    from uniserve.core.config import ServerConfig
    from uniserve.core.models import ComponentBundle, ComponentReference, UniversalResponse
    from uniserve.core.tool import UniversalTool

logger = logging.getLogger(__name__)

_META_PREFIX = "openai/"


class OpenAIAdapter(ProviderAdapter):
    """Adapter for ChatGPT apps (MCP over SSE with widget components)."""

    name: ClassVar[ProviderName] = ProviderName.OPENAI
    capabilities: ClassVar[ProviderCapabilities] = ProviderCapabilities(
        supports_components=True,
        transports=frozenset({"sse", "http"}),
        supports_reload=True,
        supports_component_templates=True,
        supports_oauth=True,
        supports_file_upload=True,
        supports_streaming=True,
        mcp_version="2025-06-18",
    )

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._settings = OpenAISettings()

    @property
    def settings(self) -> OpenAISettings:
        return self._settings

    def _on_initialize(self, config: ServerConfig) -> None:
        settings = config.provider_settings(self.name)
        if isinstance(settings, OpenAISettings):
            self._settings = settings

    # -- conversion ------------------------------------------------------------

    def _tool_metadata(self, tool: UniversalTool) -> dict[str, Any]:
        hints = tool.metadata.openai
        if hints is None:
            return {}
        meta: dict[str, Any] = {}
        if hints.output_template is not None:
            meta["openai/outputTemplate"] = hints.output_template
        if hints.widget_accessible is not None:
            meta["openai/widgetAccessible"] = hints.widget_accessible
        if hints.invoking is not None:
            meta["openai/toolInvocation/invoking"] = hints.invoking
        if hints.invoked is not None:
            meta["openai/toolInvocation/invoked"] = hints.invoked
        if hints.result_can_produce_widget is not None:
            meta["openai/resultCanProduceWidget"] = hints.result_can_produce_widget
        for key, value in (hints.model_extra or {}).items():
            meta[key if key.startswith(_META_PREFIX) else f"{_META_PREFIX}{key}"] = value
        return meta

    def convert_response(
        self,
        response: UniversalResponse,
        tool: UniversalTool | None = None,
    ) -> ProviderResponse:
        result: ProviderResponse = {
            "content": [self._mcp_content(item) for item in response.content],
        }
        if response.is_error:
            result["isError"] = True

        meta: dict[str, Any] = {}
        if response.component is not None:
            meta.update(self.convert_component(response.component) or {})
            result["structuredContent"] = dict(response.component.props)
        meta.update(response.metadata)
        if meta:
            result["_meta"] = meta
        return result

    def convert_component(self, component: ComponentReference) -> dict[str, Any] | None:
        widget_accessible = component.metadata.get("widgetAccessible")
        return {
            "openai/outputTemplate": resource_uri(component.type),
            "openai/widgetAccessible": widget_accessible if isinstance(widget_accessible, bool) else False,
        }

    # -- component resources ---------------------------------------------------

    def _bundle_ref(self, component_type: str) -> str | None:
        bundle = self._components.get_bundle(component_type, self.name)
        return _bundle_reference(bundle) if bundle is not None else None

    def get_component_template(self, component_type: str, props: dict[str, Any]) -> str | None:
        """Return the widget document for *component_type*, or ``None`` without a bundle.

        *props* are delivered to the widget as ``structuredContent`` at call
        time, not baked into the document.
        """
        del props
        bundle_ref = self._bundle_ref(component_type)
        if bundle_ref is None:
            return None
        return bootstrap_document(bundle_ref, component_type)

    def list_resources(self) -> list[McpResource]:
        resources: list[McpResource] = []
        for component in self._components.get_all():
            bundle_ref = self._bundle_ref(component.type)
            if bundle_ref is None:
                logger.debug("Skipping component %s: no %s bundle", component.type, self.name.value)
                continue
            resources.append(resource_descriptor(component, bundle_ref))
        return resources

    def read_resource(self, uri: str) -> tuple[str, str]:
        for component in self._components.get_all():
            if resource_uri(component.type) != uri:
                continue
            document = self.get_component_template(component.type, {})
            if document is None:
                break
            return WIDGET_MIME_TYPE, document
        raise ComponentNotFoundError(uri)

    # -- server ----------------------------------------------------------------

    def _create_server(self) -> SseProviderServer:
        config = self.config
        return SseProviderServer(
            self.name,
            lambda: build_mcp_server(self),
            host=self._settings.host,
            port=self._settings.port,
            cors=self._settings.cors,
            name=config.name,
            version=config.version,
        )


def _bundle_reference(bundle: ComponentBundle) -> str:
    return bundle.url if bundle.url else bundle_data_url(bundle.code)
