"""Shared fixtures: a weather tool and an initialized-config factory."""

from __future__ import annotations

from typing import Literal

import pytest
from pydantic import BaseModel, Field

from uniserve.core.config import ServerConfig
from uniserve.core.models import ToolContext, UniversalResponse
from uniserve.core.responses import text_response
from uniserve.core.tool import UniversalTool, create_tool


class WeatherInput(BaseModel):
    city: str = Field(description="City name")
    units: Literal["celsius", "fahrenheit"] = "celsius"


def weather_handler(args: WeatherInput, ctx: ToolContext) -> UniversalResponse:
    return text_response(f"Sunny in {args.city} ({args.units})")


@pytest.fixture
def weather_tool() -> UniversalTool:
    return create_tool(
        "get_weather",
        description="Get weather for a city",
        input=WeatherInput,
        handler=weather_handler,
    )


@pytest.fixture
def server_config() -> ServerConfig:
    return ServerConfig(
        name="weather-app",
        version="2.0.0",
        providers={"openai": {"port": 4100}, "claude": {}},
    )
