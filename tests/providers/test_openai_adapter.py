"""Tests for OpenAIAdapter."""

from __future__ import annotations

import pytest
from pydantic import BaseModel

from uniserve.components.resource import WIDGET_MIME_TYPE, bundle_data_url
from uniserve.core.config import OpenAISettings, ProviderName, ServerConfig
from uniserve.core.errors import ComponentNotFoundError
from uniserve.core.models import (
    ComponentBundle,
    ComponentDefinition,
    ComponentReference,
    ImageContent,
    UniversalResponse,
)
from uniserve.core.registry import ComponentRegistry, ToolRegistry
from uniserve.core.responses import (
    component_response,
    error_response,
    mixed_response,
    text_response,
)
from uniserve.core.tool import UniversalTool, create_tool
from uniserve.providers.openai import OpenAIAdapter
from uniserve.providers.server import SseProviderServer


class _Empty(BaseModel):
    pass


class TestCapabilities:
    def test_declared(self) -> None:
        caps = OpenAIAdapter.capabilities
        assert OpenAIAdapter.name is ProviderName.OPENAI
        assert caps.supports_components is True
        assert caps.transports == frozenset({"sse", "http"})
        assert caps.supports_reload is True


class TestInitialize:
    async def test_reads_openai_settings(self, server_config: ServerConfig) -> None:
        adapter = OpenAIAdapter()
        await adapter.initialize(server_config)
        assert adapter.settings.port == 4100
        assert adapter.settings.host == "localhost"

    async def test_defaults_without_settings(self) -> None:
        adapter = OpenAIAdapter()
        await adapter.initialize(ServerConfig(name="app"))
        assert adapter.settings == OpenAISettings()
        assert adapter.settings.port == 3000


class TestConvertTool:
    def test_no_metadata(self, weather_tool: UniversalTool) -> None:
        wire = OpenAIAdapter().convert_tool(weather_tool).to_wire()
        assert "_meta" not in wire
        assert wire["inputSchema"]["properties"]["units"]["enum"] == ["celsius", "fahrenheit"]

    def test_openai_metadata_keys(self) -> None:
        tool = create_tool(
            "show",
            description="Show weather",
            input=_Empty,
            handler=lambda a, c: text_response(""),
            metadata={
                "openai": {
                    "outputTemplate": "ui://widget/weather-card.html",
                    "widgetAccessible": True,
                    "invoking": "Fetching...",
                    "invoked": "Fetched",
                    "resultCanProduceWidget": True,
                    "locale": "en",
                }
            },
        )
        meta = OpenAIAdapter().convert_tool(tool).metadata
        assert meta == {
            "openai/outputTemplate": "ui://widget/weather-card.html",
            "openai/widgetAccessible": True,
            "openai/toolInvocation/invoking": "Fetching...",
            "openai/toolInvocation/invoked": "Fetched",
            "openai/resultCanProduceWidget": True,
            "openai/locale": "en",
        }


class TestConvertResponse:
    def setup_method(self) -> None:
        self.adapter = OpenAIAdapter()

    def test_text(self) -> None:
        result = self.adapter.convert_response(text_response("hi"))
        assert result == {"content": [{"type": "text", "text": "hi"}]}

    def test_error_becomes_text(self) -> None:
        result = self.adapter.convert_response(error_response("E", "broken"))
        assert result == {"content": [{"type": "text", "text": "Error: broken"}], "isError": True}

    def test_image_passthrough(self) -> None:
        response = UniversalResponse(content=[ImageContent(data="AAA", mime_type="image/png")])
        result = self.adapter.convert_response(response)
        assert result["content"] == [{"type": "image", "data": "AAA", "mimeType": "image/png"}]

    def test_component_meta(self) -> None:
        result = self.adapter.convert_response(component_response("weather-card", {"temp": 20}))
        assert result["content"] == []
        assert result["_meta"] == {
            "openai/outputTemplate": "ui://widget/weather-card.html",
            "openai/widgetAccessible": False,
        }
        assert result["structuredContent"] == {"temp": 20}

    def test_widget_accessible_from_component_metadata(self) -> None:
        response = UniversalResponse(
            component=ComponentReference(type="w", metadata={"widgetAccessible": True})
        )
        result = self.adapter.convert_response(response)
        assert result["_meta"]["openai/widgetAccessible"] is True

    def test_response_metadata_merged(self) -> None:
        response = mixed_response("Here", "w", {})
        response.metadata["openai/locale"] = "fr"
        result = self.adapter.convert_response(response)
        assert result["content"] == [{"type": "text", "text": "Here"}]
        assert result["_meta"]["openai/locale"] == "fr"
        assert result["_meta"]["openai/outputTemplate"] == "ui://widget/w.html"

    def test_convert_component(self) -> None:
        assert self.adapter.convert_component(ComponentReference(type="chart")) == {
            "openai/outputTemplate": "ui://widget/chart.html",
            "openai/widgetAccessible": False,
        }


class TestComponentResources:
    def setup_method(self) -> None:
        self.components = ComponentRegistry()
        self.components.register(
            ComponentDefinition(type="weather-card", title="Weather", description="Forecast")
        )
        self.components.register(ComponentDefinition(type="unbundled"))
        self.components.register_bundle(
            ComponentBundle(type="weather-card", code="mount()", provider=ProviderName.OPENAI)
        )
        self.adapter = OpenAIAdapter(ToolRegistry(), self.components)

    def test_list_resources_only_bundled(self) -> None:
        resources = [r.to_wire() for r in self.adapter.list_resources()]
        assert resources == [
            {
                "uri": "ui://widget/weather-card.html",
                "name": "Weather",
                "description": "Forecast",
                "mimeType": WIDGET_MIME_TYPE,
            }
        ]

    def test_read_resource_inlines_code(self) -> None:
        mime_type, document = self.adapter.read_resource("ui://widget/weather-card.html")
        assert mime_type == WIDGET_MIME_TYPE
        assert "<script>mount()</script>" in document

    def test_read_resource_prefers_url(self) -> None:
        self.components.register_bundle(
            ComponentBundle(
                type="weather-card",
                code="mount()",
                provider=ProviderName.OPENAI,
                url="https://cdn.example.com/weather.js",
            )
        )
        _, document = self.adapter.read_resource("ui://widget/weather-card.html")
        assert 'src="https://cdn.example.com/weather.js"' in document

    def test_read_unknown_resource(self) -> None:
        with pytest.raises(ComponentNotFoundError):
            self.adapter.read_resource("ui://widget/missing.html")

    def test_read_unbundled_resource(self) -> None:
        with pytest.raises(ComponentNotFoundError):
            self.adapter.read_resource("ui://widget/unbundled.html")

    def test_component_template(self) -> None:
        template = self.adapter.get_component_template("weather-card", {"temp": 1})
        assert template is not None
        assert "<title>weather-card</title>" in template
        assert self.adapter.get_component_template("unbundled", {}) is None

    def test_claude_bundle_is_ignored(self) -> None:
        self.components.register_bundle(
            ComponentBundle(
                type="unbundled", code=bundle_data_url("x"), provider=ProviderName.CLAUDE
            )
        )
        assert [r.uri for r in self.adapter.list_resources()] == ["ui://widget/weather-card.html"]


class TestCreateServer:
    async def test_sse_server_from_settings(self, server_config: ServerConfig) -> None:
        adapter = OpenAIAdapter()
        await adapter.initialize(server_config)
        server = adapter._create_server()
        assert isinstance(server, SseProviderServer)
        info = server.get_info()
        assert info.transport == "sse"
        assert info.port == 4100
        assert info.url == "http://localhost:4100"
        assert info.status == "stopped"
