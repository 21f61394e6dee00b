"""Provider adapter contract shared by every provider.

Each provider surface (OpenAI, Claude) has one concrete adapter that converts
universal tools, schemas and responses into that provider's wire format and
owns the provider's transport server.

Server lifecycle::

    absent --start_server()--> running --stop_server()--> absent
                                  |
                                  +--reload_server()--> running

``stop_server()`` is idempotent and ``cleanup()`` always delegates to it.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field

from uniserve.core.errors import (
    AdapterNotInitializedError,
    AdapterStateError,
    ComponentNotFoundError,
    ToolNotFoundError,
    TransportError,
)
from uniserve.core.models import (
    ComponentReference,
    ContentItem,
    ErrorContent,
    ImageContent,
    ResourceContent,
    TextContent,
    ToolContext,
    UniversalResponse,
)
from uniserve.core.registry import ComponentRegistry, ToolRegistry
from uniserve.core.responses import error_response
from uniserve.core.schema import ProviderSchema, UniversalSchema, ValidationFailure
from uniserve.utils.telemetry import (
    ATTR_PROVIDER,
    ATTR_REQUEST_ID,
    ATTR_RESPONSE_IS_ERROR,
    ATTR_TOOL_NAME,
    ATTR_VALIDATION_OK,
    get_tracer,
)

if TYPE_CHECKING:
    from uniserve.components.resource import McpResource
    from uniserve.core.config import ProviderName, ServerConfig, Transport
    from uniserve.core.tool import UniversalTool

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

VALIDATION_ERROR_CODE = "VALIDATION_ERROR"

ProviderResponse = dict[str, Any]
ServerStatus = Literal["starting", "running", "stopped", "error"]


# ---------------------------------------------------------------------------
# Static declarations
# ---------------------------------------------------------------------------


class ProviderCapabilities(BaseModel):
    """What a provider surface can do; checked before optional operations."""

    model_config = ConfigDict(frozen=True)

    supports_components: bool
    transports: frozenset[str]
    supports_reload: bool = False
    supports_component_templates: bool = False
    supports_oauth: bool = False
    supports_file_upload: bool = False
    supports_streaming: bool = False
    mcp_version: str | None = None


class ProviderServerInfo(BaseModel):
    """Snapshot of a running (or failed) provider server."""

    provider: str
    transport: str
    port: int | None = None
    url: str | None = None
    status: ServerStatus
    error: str | None = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class ProviderToolDefinition(BaseModel):
    """A tool as declared to one provider."""

    name: str
    title: str | None = None
    description: str
    input_schema: dict[str, Any]
    metadata: dict[str, Any] = Field(default_factory=dict)

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }
        if self.title is not None:
            wire["title"] = self.title
        if self.metadata:
            wire["_meta"] = dict(self.metadata)
        return wire


# ---------------------------------------------------------------------------
# Server handle
# ---------------------------------------------------------------------------


class ProviderServer(ABC):
    """Handle on one provider's transport server."""

    def __init__(self, provider: ProviderName, transport: Transport) -> None:
        self.provider = provider
        self.transport = transport
        self._status: ServerStatus = "stopped"
        self._error: str | None = None

    @property
    def status(self) -> ServerStatus:
        return self._status

    @abstractmethod
    async def start(self) -> None:
        """Begin serving; raises :class:`TransportError` on failure."""

    @abstractmethod
    async def stop(self) -> None:
        """Stop serving and release the transport."""

    async def reload(self) -> None:
        """Refresh served definitions without leaving the running state."""
        msg = f"{type(self).__name__} does not support reload"
        raise AdapterStateError(msg)

    async def wait(self) -> None:
        """Block until the server stops serving."""
        await asyncio.Event().wait()

    def get_info(self) -> ProviderServerInfo:
        return ProviderServerInfo(
            provider=self.provider.value,
            transport=self.transport,
            status=self._status,
            error=self._error,
        )


# ---------------------------------------------------------------------------
# Adapter contract
# ---------------------------------------------------------------------------


class ProviderAdapter(ABC):
    """Translator between the universal model and one provider.

    Subclasses set ``name`` and ``capabilities`` and implement the
    provider-specific hooks.  ``initialize()`` must be awaited exactly once
    before tool calls or server operations.
    """

    name: ClassVar[ProviderName]
    capabilities: ClassVar[ProviderCapabilities]

    def __init__(
        self,
        registry: ToolRegistry | None = None,
        components: ComponentRegistry | None = None,
    ) -> None:
        self._registry = registry if registry is not None else ToolRegistry()
        self._components = components if components is not None else ComponentRegistry()
        self._config: ServerConfig | None = None
        self._server: ProviderServer | None = None

    # -- state ---------------------------------------------------------------

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def components(self) -> ComponentRegistry:
        return self._components

    @property
    def config(self) -> ServerConfig:
        if self._config is None:
            raise AdapterNotInitializedError(self.name.value)
        return self._config

    @property
    def is_initialized(self) -> bool:
        return self._config is not None

    @property
    def server(self) -> ProviderServer | None:
        return self._server

    @property
    def is_running(self) -> bool:
        return self._server is not None

    async def initialize(self, config: ServerConfig) -> None:
        """Capture *config* and convert every registered tool once."""
        if self._config is not None:
            msg = f"Adapter '{self.name.value}' is already initialized"
            raise AdapterStateError(msg)
        self._config = config
        self._on_initialize(config)
        definitions = self.tool_definitions()
        logger.info(
            "Initialized %s adapter for %s v%s (%d tools)",
            self.name.value,
            config.name,
            config.version,
            len(definitions),
        )

    def _on_initialize(self, config: ServerConfig) -> None:
        """Hook for provider-specific settings extraction."""

    def _require_initialized(self) -> ServerConfig:
        return self.config

    # -- conversion ------------------------------------------------------------

    def convert_schema(self, schema: UniversalSchema[Any]) -> ProviderSchema:
        """Convert *schema* to this provider's schema (cached per provider)."""
        return schema.provider_schema(self.name.value, self._convert_schema)

    def _convert_schema(self, schema: UniversalSchema[Any]) -> ProviderSchema:
        return schema.to_provider_schema()

    def convert_tool(self, tool: UniversalTool) -> ProviderToolDefinition:
        """Convert a universal tool into this provider's tool declaration."""
        return ProviderToolDefinition(
            name=tool.name,
            title=tool.title,
            description=tool.description,
            input_schema=self.convert_schema(tool.input_schema).to_wire(),
            metadata=self._tool_metadata(tool),
        )

    @abstractmethod
    def _tool_metadata(self, tool: UniversalTool) -> dict[str, Any]:
        """Provider-specific metadata for a tool declaration."""

    @abstractmethod
    def convert_response(
        self,
        response: UniversalResponse,
        tool: UniversalTool | None = None,
    ) -> ProviderResponse:
        """Convert a universal response into this provider's result envelope."""

    def convert_component(self, component: ComponentReference) -> dict[str, Any] | None:
        """Provider rendering metadata for *component*; ``None`` when unsupported."""
        return None

    def get_component_template(self, component_type: str, props: dict[str, Any]) -> str | None:
        """HTML template for *component_type*; ``None`` when unsupported or unknown."""
        return None

    def tool_definitions(self) -> list[ProviderToolDefinition]:
        """Convert every registered tool, in registration order."""
        return [self.convert_tool(tool) for tool in self._registry.get_all()]

    def find_tool(self, name: str) -> UniversalTool:
        tool = self._registry.get(name)
        if tool is None:
            raise ToolNotFoundError(name)
        return tool

    def list_resources(self) -> list[McpResource]:
        """Component resources to advertise; empty for providers without components."""
        return []

    def read_resource(self, uri: str) -> tuple[str, str]:
        """Return ``(mime_type, text)`` for a resource URI."""
        raise ComponentNotFoundError(uri)

    @staticmethod
    def _mcp_content(item: ContentItem) -> dict[str, Any]:
        """Map one universal content item to an MCP content block."""
        if isinstance(item, TextContent):
            return {"type": "text", "text": item.text}
        if isinstance(item, ErrorContent):
            return {"type": "text", "text": f"Error: {item.error.message}"}
        if isinstance(item, ImageContent | ResourceContent):
            return item.to_wire()
        msg = f"Unsupported content item: {item!r}"
        raise TypeError(msg)

    # -- invocation ------------------------------------------------------------

    def new_context(self, request_id: str | None = None, **extra: Any) -> ToolContext:
        """Build a :class:`ToolContext` for one invocation through this provider."""
        if request_id is None:
            return ToolContext(provider=self.name, **extra)
        return ToolContext(provider=self.name, request_id=request_id, **extra)

    async def handle_tool_call(
        self,
        tool: UniversalTool,
        raw_input: Any,
        context: ToolContext,
    ) -> ProviderResponse:
        """Validate *raw_input*, run the handler, and convert its response.

        Invalid input yields a provider-formatted error result and the handler
        is never invoked.  Exceptions raised by the handler propagate.
        """
        self._require_initialized()
        with _tracer.start_as_current_span("uniserve.tool_call") as span:
            span.set_attribute(ATTR_PROVIDER, self.name.value)
            span.set_attribute(ATTR_TOOL_NAME, tool.name)
            span.set_attribute(ATTR_REQUEST_ID, context.request_id)

            validation = tool.input_schema.validate(raw_input)
            if isinstance(validation, ValidationFailure):
                span.set_attribute(ATTR_VALIDATION_OK, False)
                logger.info(
                    "Rejected input for %s via %s: %s",
                    tool.name,
                    self.name.value,
                    validation.summary(),
                )
                return self.convert_response(_validation_error_response(validation), tool)

            span.set_attribute(ATTR_VALIDATION_OK, True)
            result = tool.handler(validation.data, context)
            if inspect.isawaitable(result):
                result = await result

            span.set_attribute(ATTR_RESPONSE_IS_ERROR, result.is_error)
            return self.convert_response(result, tool)

    # -- server lifecycle ------------------------------------------------------

    @abstractmethod
    def _create_server(self) -> ProviderServer:
        """Build (but do not start) this provider's server handle."""

    async def start_server(self) -> ProviderServer:
        """Start the transport server and hold its handle."""
        self._require_initialized()
        if self._server is not None:
            msg = f"{self.name.value} server is already running"
            raise AdapterStateError(msg)

        server = self._create_server()
        try:
            await server.start()
        except TransportError:
            raise
        except Exception as exc:
            raise TransportError(self.name.value, str(exc)) from exc

        self._server = server
        info = server.get_info()
        logger.info(
            "%s server ready (%s)",
            self.name.value,
            info.url or info.transport,
        )
        return server

    async def stop_server(self) -> None:
        """Stop the held server; a no-op when none is running.

        The handle is released before stopping, so the adapter is back in
        the absent state even when the stop itself fails.
        """
        server, self._server = self._server, None
        if server is None:
            return
        try:
            await server.stop()
        except TransportError:
            raise
        except Exception as exc:
            raise TransportError(self.name.value, str(exc)) from exc
        logger.info("%s server stopped", self.name.value)

    async def reload_server(self) -> None:
        """Reload the running server in place (status stays ``running``)."""
        if not self.capabilities.supports_reload:
            msg = f"{self.name.value} does not support reload"
            raise AdapterStateError(msg)
        if self._server is None:
            msg = f"{self.name.value} server is not running"
            raise AdapterStateError(msg)
        await self._server.reload()
        logger.info("%s server reloaded", self.name.value)

    async def cleanup(self) -> None:
        """Release all resources; safe to call at any time."""
        await self.stop_server()


def _validation_error_response(failure: ValidationFailure) -> UniversalResponse:
    return error_response(
        VALIDATION_ERROR_CODE,
        f"Input validation error: {failure.summary()}",
        data={"issues": [issue.to_wire() for issue in failure.issues]},
    )
