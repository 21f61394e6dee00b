"""Universal core: tools, schemas, responses, registries and configuration."""

from uniserve.core.config import (
    ClaudeSettings,
    ClaudeToolMetadata,
    ComponentMetadata,
    OpenAISettings,
    OpenAIToolMetadata,
    ProviderName,
    ProviderSettings,
    ServerConfig,
    ToolMetadata,
    claude,
    openai,
)
from uniserve.core.errors import (
    AdapterNotInitializedError,
    AdapterStateError,
    ComponentNotFoundError,
    ConfigurationError,
    RegistrationConflictError,
    ToolNotFoundError,
    TransportError,
    UniserveError,
)
from uniserve.core.models import (
    ComponentBundle,
    ComponentDefinition,
    ComponentReference,
    ComponentState,
    ErrorContent,
    ErrorDetail,
    ImageContent,
    ResourceContent,
    TextContent,
    ToolContext,
    UniversalResponse,
)
from uniserve.core.registry import ComponentRegistry, ToolRegistry
from uniserve.core.responses import (
    component_response,
    error_component_response,
    error_response,
    loading_response,
    mixed_response,
    text_response,
)
from uniserve.core.schema import (
    ProviderSchema,
    UniversalSchema,
    ValidationFailure,
    ValidationIssue,
    ValidationSuccess,
)
from uniserve.core.tool import UniversalTool, create_tool

__all__ = [
    "AdapterNotInitializedError",
    "AdapterStateError",
    "ClaudeSettings",
    "ClaudeToolMetadata",
    "ComponentBundle",
    "ComponentDefinition",
    "ComponentMetadata",
    "ComponentNotFoundError",
    "ComponentReference",
    "ComponentRegistry",
    "ComponentState",
    "ConfigurationError",
    "ErrorContent",
    "ErrorDetail",
    "ImageContent",
    "OpenAISettings",
    "OpenAIToolMetadata",
    "ProviderName",
    "ProviderSchema",
    "ProviderSettings",
    "RegistrationConflictError",
    "ResourceContent",
    "ServerConfig",
    "TextContent",
    "ToolContext",
    "ToolMetadata",
    "ToolNotFoundError",
    "ToolRegistry",
    "TransportError",
    "UniserveError",
    "UniversalResponse",
    "UniversalSchema",
    "UniversalTool",
    "ValidationFailure",
    "ValidationIssue",
    "ValidationSuccess",
    "claude",
    "component_response",
    "create_tool",
    "error_component_response",
    "error_response",
    "loading_response",
    "mixed_response",
    "openai",
    "text_response",
]
