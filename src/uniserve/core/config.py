"""Server configuration, provider identities, and per-provider metadata.

The provider set is closed: every provider the system can serve is a member
of :class:`ProviderName`, and each one has a typed settings model and a typed
tool-metadata model.  Configuration is loaded once at application assembly and
is read-only afterwards (all models here are frozen).
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from uniserve.core.errors import ConfigurationError

Transport = Literal["http", "sse", "stdio", "websocket"]


class ProviderName(str, Enum):
    """The statically known provider surfaces."""

    OPENAI = "openai"
    CLAUDE = "claude"


# ---------------------------------------------------------------------------
# Provider settings (one model per provider)
# ---------------------------------------------------------------------------


class ProviderSettings(BaseModel):
    """Settings shared by every provider."""

    model_config = ConfigDict(frozen=True, extra="allow")

    enabled: bool = Field(default=True, description="Serve this provider on listen().")
    transport: Transport = Field(default="stdio", description="Wire transport to serve on.")


class OpenAISettings(ProviderSettings):
    """Settings for the OpenAI (ChatGPT apps) provider: HTTP with SSE."""

    transport: Transport = "sse"
    host: str = "localhost"
    port: int = 3000
    cors: bool = True


class ClaudeSettings(ProviderSettings):
    """Settings for the Claude Desktop provider (stdio only)."""

    transport: Transport = "stdio"


SETTINGS_BY_PROVIDER: dict[ProviderName, type[ProviderSettings]] = {
    ProviderName.OPENAI: OpenAISettings,
    ProviderName.CLAUDE: ClaudeSettings,
}


def openai(**options: Any) -> OpenAISettings:
    """Build OpenAI provider settings (``providers={ProviderName.OPENAI: openai(port=3000)}``)."""
    return OpenAISettings(**options)


def claude(**options: Any) -> ClaudeSettings:
    """Build Claude provider settings."""
    return ClaudeSettings(**options)


# ---------------------------------------------------------------------------
# Server configuration
# ---------------------------------------------------------------------------


class ServerConfig(BaseModel):
    """Top-level configuration handed to every provider adapter.

    Example YAML::

        name: weather-app
        version: "1.0.0"
        providers:
          openai:
            port: 3000
          claude:
            enabled: false
    """

    model_config = ConfigDict(frozen=True)

    name: str
    version: str = "1.0.0"
    providers: dict[ProviderName, ProviderSettings] = Field(default_factory=dict)

    @field_validator("providers", mode="before")
    @classmethod
    def _coerce_provider_settings(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        coerced: dict[ProviderName, ProviderSettings] = {}
        for key, settings in value.items():
            provider = ProviderName(key)
            settings_cls = SETTINGS_BY_PROVIDER[provider]
            if settings is None:
                settings = settings_cls()
            elif isinstance(settings, dict):
                settings = settings_cls.model_validate(settings)
            elif isinstance(settings, ProviderSettings) and not isinstance(settings, settings_cls):
                settings = settings_cls.model_validate(settings.model_dump())
            coerced[provider] = settings
        return coerced

    def provider_settings(self, provider: ProviderName) -> ProviderSettings | None:
        """Return the settings for *provider*, or ``None`` if unconfigured."""
        return self.providers.get(provider)

    def enabled_providers(self) -> list[ProviderName]:
        """Return configured providers whose ``enabled`` flag is set, in declaration order."""
        return [name for name, settings in self.providers.items() if settings.enabled]

    @classmethod
    def from_yaml(cls, path: str | Path) -> ServerConfig:
        """Read a YAML config file, expanding ``${VAR}`` environment references.

        Raises:
            ConfigurationError: On read, parse, or validation failure.
        """
        p = Path(path)
        try:
            raw = p.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(f"Cannot read {p}: {exc}") from exc

        try:
            data: Any = yaml.safe_load(os.path.expandvars(raw))
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"YAML parse error: {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigurationError("Server config YAML must be a mapping")

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigurationError(str(exc)) from exc


# ---------------------------------------------------------------------------
# Per-provider tool metadata
# ---------------------------------------------------------------------------


class OpenAIToolMetadata(BaseModel):
    """OpenAI-specific hints attached to a tool."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    output_template: str | None = Field(default=None, alias="outputTemplate")
    widget_accessible: bool | None = Field(default=None, alias="widgetAccessible")
    invoking: str | None = None
    invoked: str | None = None
    result_can_produce_widget: bool | None = Field(default=None, alias="resultCanProduceWidget")


class ClaudeToolMetadata(BaseModel):
    """Claude-specific hints attached to a tool (free-form for now)."""

    model_config = ConfigDict(frozen=True, extra="allow")


class ToolMetadata(BaseModel):
    """Per-provider tool metadata, keyed by the closed provider set."""

    model_config = ConfigDict(frozen=True)

    openai: OpenAIToolMetadata | None = None
    claude: ClaudeToolMetadata | None = None

    def for_provider(self, provider: ProviderName) -> OpenAIToolMetadata | ClaudeToolMetadata | None:
        """Return the metadata block for *provider*."""
        if provider is ProviderName.OPENAI:
            return self.openai
        if provider is ProviderName.CLAUDE:
            return self.claude
        msg = f"Unknown provider: {provider!r}"
        raise ValueError(msg)


class ComponentMetadata(BaseModel):
    """Provider-specific bundling and rendering hints for a component."""

    model_config = ConfigDict(frozen=True)

    bundle_config: dict[str, Any] = Field(default_factory=dict)
    render_hints: dict[str, Any] = Field(default_factory=dict)
