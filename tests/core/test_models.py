"""Tests for the universal data model."""

from __future__ import annotations

import pytest
from pydantic import TypeAdapter, ValidationError

from uniserve.core.config import ComponentMetadata, ProviderName
from uniserve.core.models import (
    ComponentDefinition,
    ContentItem,
    ErrorContent,
    ErrorDetail,
    ImageContent,
    ResourceContent,
    TextContent,
    ToolContext,
    UniversalResponse,
)


class TestContentItems:
    def test_discriminated_union(self) -> None:
        adapter = TypeAdapter(ContentItem)
        assert isinstance(adapter.validate_python({"type": "text", "text": "hi"}), TextContent)
        assert isinstance(
            adapter.validate_python({"type": "error", "error": {"code": "E", "message": "m"}}),
            ErrorContent,
        )
        assert isinstance(
            adapter.validate_python({"type": "image", "data": "AAA", "mimeType": "image/png"}),
            ImageContent,
        )
        assert isinstance(
            adapter.validate_python({"type": "resource", "resource": {"uri": "file:///a"}}),
            ResourceContent,
        )

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TypeAdapter(ContentItem).validate_python({"type": "video"})

    def test_image_wire_uses_camel_case(self) -> None:
        image = ImageContent(data="AAA", mime_type="image/png")
        assert image.to_wire() == {"type": "image", "data": "AAA", "mimeType": "image/png"}

    def test_resource_wire_drops_absent_keys(self) -> None:
        item = ResourceContent.model_validate(
            {"type": "resource", "resource": {"uri": "file:///a", "text": "x"}}
        )
        assert item.to_wire() == {"type": "resource", "resource": {"uri": "file:///a", "text": "x"}}

    def test_error_detail_data_presence(self) -> None:
        assert ErrorDetail(code="E", message="m").has_data is False
        assert ErrorDetail(code="E", message="m", data=None).has_data is True


class TestUniversalResponse:
    def test_content_defaults_to_empty(self) -> None:
        assert UniversalResponse().to_wire() == {"content": []}

    def test_text_concatenates_text_items(self) -> None:
        response = UniversalResponse(
            content=[TextContent(text="a"), TextContent(text="b")],
        )
        assert response.text == "ab"

    def test_metadata_in_wire(self) -> None:
        response = UniversalResponse(metadata={"k": 1})
        assert response.to_wire()["metadata"] == {"k": 1}


class TestToolContext:
    def test_generates_request_id(self) -> None:
        first = ToolContext(provider=ProviderName.CLAUDE)
        second = ToolContext(provider=ProviderName.CLAUDE)
        assert first.request_id
        assert first.request_id != second.request_id

    def test_wire_shape(self) -> None:
        ctx = ToolContext(provider=ProviderName.OPENAI, request_id="r1", session_id="s1")
        assert ctx.to_wire() == {
            "provider": "openai",
            "requestId": "r1",
            "sessionId": "s1",
            "metadata": {},
        }

    def test_extra_fields_kept(self) -> None:
        ctx = ToolContext(provider="claude", locale="en-US")
        assert ctx.provider is ProviderName.CLAUDE
        assert ctx.to_wire()["locale"] == "en-US"

    def test_unknown_provider_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ToolContext(provider="gemini")


class TestComponentDefinition:
    def test_display_title_falls_back_to_type(self) -> None:
        assert ComponentDefinition(type="weather-card").display_title == "weather-card"
        assert ComponentDefinition(type="w", title="Weather").display_title == "Weather"

    def test_per_provider_metadata(self) -> None:
        component = ComponentDefinition.model_validate(
            {"type": "w", "metadata": {"openai": {"render_hints": {"height": 300}}}}
        )
        assert component.metadata[ProviderName.OPENAI] == ComponentMetadata(
            render_hints={"height": 300}
        )
