"""Tests for UniversalTool and create_tool."""

from __future__ import annotations

import pytest
from pydantic import BaseModel, ValidationError

from uniserve.core.config import ToolMetadata
from uniserve.core.responses import text_response
from uniserve.core.schema import UniversalSchema
from uniserve.core.tool import UniversalTool, create_tool


class EchoInput(BaseModel):
    message: str


def echo(args: EchoInput, ctx: object) -> object:
    return text_response(args.message)


class TestCreateTool:
    def test_title_defaults_to_name(self) -> None:
        tool = create_tool("echo", description="Echo", input=EchoInput, handler=echo)
        assert tool.title == "echo"

    def test_explicit_title(self) -> None:
        tool = create_tool("echo", description="Echo", input=EchoInput, handler=echo, title="Echo!")
        assert tool.title == "Echo!"

    def test_wraps_model_in_schema(self) -> None:
        tool = create_tool("echo", description="Echo", input=EchoInput, handler=echo)
        assert isinstance(tool.input_schema, UniversalSchema)
        assert tool.input_schema.model is EchoInput

    def test_accepts_existing_schema(self) -> None:
        schema = UniversalSchema(EchoInput)
        tool = create_tool("echo", description="Echo", input=schema, handler=echo)
        assert tool.input_schema is schema

    def test_metadata_from_dict(self) -> None:
        tool = create_tool(
            "echo",
            description="Echo",
            input=EchoInput,
            handler=echo,
            metadata={"openai": {"widgetAccessible": True}},
        )
        assert isinstance(tool.metadata, ToolMetadata)
        assert tool.metadata.openai is not None
        assert tool.metadata.openai.widget_accessible is True

    def test_default_metadata_is_empty(self) -> None:
        tool = create_tool("echo", description="Echo", input=EchoInput, handler=echo)
        assert tool.metadata == ToolMetadata()


class TestUniversalTool:
    def test_immutable(self) -> None:
        tool = create_tool("echo", description="Echo", input=EchoInput, handler=echo)
        with pytest.raises(ValidationError):
            tool.name = "other"  # type: ignore[misc]

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            create_tool("", description="Echo", input=EchoInput, handler=echo)

    def test_direct_construction(self) -> None:
        tool = UniversalTool(name="echo", description="Echo", input_schema=EchoInput, handler=echo)
        assert tool.title == "echo"
        assert tool.input_schema.model is EchoInput
