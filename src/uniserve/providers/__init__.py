"""Provider adapters, one per member of :class:`ProviderName`."""

from __future__ import annotations

from typing import TYPE_CHECKING

from uniserve.core.config import ProviderName
from uniserve.providers.base import (
    ProviderAdapter,
    ProviderCapabilities,
    ProviderResponse,
    ProviderServer,
    ProviderServerInfo,
    ProviderToolDefinition,
)
from uniserve.providers.claude import ClaudeAdapter
from uniserve.providers.openai import OpenAIAdapter

if TYPE_CHECKING:
    from uniserve.core.registry import ComponentRegistry, ToolRegistry


def create_adapter(
    provider: ProviderName,
    registry: ToolRegistry | None = None,
    components: ComponentRegistry | None = None,
) -> ProviderAdapter:
    """Build the adapter for *provider* over the shared registries."""
    match ProviderName(provider):
        case ProviderName.OPENAI:
            return OpenAIAdapter(registry, components)
        case ProviderName.CLAUDE:
            return ClaudeAdapter(registry, components)


__all__ = [
    "ClaudeAdapter",
    "OpenAIAdapter",
    "ProviderAdapter",
    "ProviderCapabilities",
    "ProviderResponse",
    "ProviderServer",
    "ProviderServerInfo",
    "ProviderToolDefinition",
    "create_adapter",
]
