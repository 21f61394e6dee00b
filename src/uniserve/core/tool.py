"""Universal tool definition."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from uniserve.core.config import ToolMetadata
from uniserve.core.models import ToolContext, UniversalResponse
from uniserve.core.schema import UniversalSchema

ToolHandler = Callable[[Any, ToolContext], UniversalResponse | Awaitable[UniversalResponse]]


class UniversalTool(BaseModel):
    """A provider-independent callable capability.

    Instances are immutable; ``name`` identifies the tool within a registry.
    ``title`` falls back to ``name`` when not given.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(min_length=1)
    title: str = ""
    description: str
    input_schema: UniversalSchema
    handler: Callable[..., Any]
    metadata: ToolMetadata = Field(default_factory=ToolMetadata)

    @model_validator(mode="before")
    @classmethod
    def _defaults(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            if not data.get("title"):
                data["title"] = data.get("name", "")
            schema = data.get("input_schema")
            if schema is not None and not isinstance(schema, UniversalSchema):
                data["input_schema"] = UniversalSchema.of(schema)
            if isinstance(data.get("metadata"), dict):
                data["metadata"] = ToolMetadata.model_validate(data["metadata"])
        return data


def create_tool(
    name: str,
    *,
    description: str,
    input: UniversalSchema[Any] | type[BaseModel],  # noqa: A002
    handler: ToolHandler,
    title: str | None = None,
    metadata: ToolMetadata | dict[str, Any] | None = None,
) -> UniversalTool:
    """Create a universal tool.

    Example::

        class WeatherInput(BaseModel):
            city: str = Field(description="City name")
            units: Literal["celsius", "fahrenheit"] = "celsius"

        async def get_weather(args: WeatherInput, ctx: ToolContext) -> UniversalResponse:
            return text_response(f"Sunny in {args.city}")

        tool = create_tool(
            "get_weather",
            description="Get weather for a city",
            input=WeatherInput,
            handler=get_weather,
        )
    """
    return UniversalTool(
        name=name,
        title=title or name,
        description=description,
        input_schema=UniversalSchema.of(input),
        handler=handler,
        metadata=metadata if metadata is not None else ToolMetadata(),
    )
