"""Application assembly: registries, configuration and provider lifecycle.

Usage::

    app = create_app("weather-app", providers={"openai": openai(port=3000)})

    @app.tool("get_weather", description="Get weather for a city", input=WeatherInput)
    async def get_weather(args: WeatherInput, ctx: ToolContext) -> UniversalResponse:
        return text_response(f"Sunny in {args.city}")

    await app.listen()
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

from uniserve.core.config import ProviderName, ProviderSettings, ServerConfig
from uniserve.core.errors import ConfigurationError, TransportError
from uniserve.core.registry import ComponentRegistry, ToolRegistry
from uniserve.core.tool import create_tool

if TYPE_CHECKING:
    from pydantic import BaseModel

    from uniserve.core.config import ToolMetadata
    from uniserve.core.models import ComponentBundle, ComponentDefinition
    from uniserve.core.schema import UniversalSchema
    from uniserve.core.tool import ToolHandler, UniversalTool
    from uniserve.providers.base import ProviderAdapter

logger = logging.getLogger(__name__)

AdapterFactory = Callable[[ProviderName, ToolRegistry, ComponentRegistry], "ProviderAdapter"]


def _default_adapter_factory(
    provider: ProviderName,
    registry: ToolRegistry,
    components: ComponentRegistry,
) -> ProviderAdapter:
    from uniserve.providers import create_adapter

    return create_adapter(provider, registry, components)


class App:
    """A set of tools and components served to every enabled provider.

    Tools and components may be registered at any time; adapters read the
    shared registries on each request.
    """

    def __init__(
        self,
        config: ServerConfig,
        *,
        adapter_factory: AdapterFactory | None = None,
    ) -> None:
        self._config = config
        self._registry = ToolRegistry()
        self._components = ComponentRegistry()
        self._adapter_factory = adapter_factory or _default_adapter_factory
        self._adapters: dict[ProviderName, ProviderAdapter] = {}

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def component_registry(self) -> ComponentRegistry:
        return self._components

    @property
    def adapters(self) -> dict[ProviderName, ProviderAdapter]:
        """Adapters initialized by :meth:`listen`, keyed by provider."""
        return dict(self._adapters)

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    def tool(
        self,
        name: str,
        *,
        description: str,
        input: UniversalSchema[Any] | type[BaseModel],  # noqa: A002
        handler: ToolHandler | None = None,
        title: str | None = None,
        metadata: ToolMetadata | dict[str, Any] | None = None,
    ) -> Any:
        """Register a tool.

        With *handler* the tool is registered immediately and the app is
        returned; without it, returns a decorator that registers the
        decorated function and returns it unchanged.
        """

        def register(fn: ToolHandler) -> UniversalTool:
            tool = create_tool(
                name,
                description=description,
                input=input,
                handler=fn,
                title=title,
                metadata=metadata,
            )
            self._registry.register(tool)
            return tool

        if handler is not None:
            register(handler)
            return self

        def decorator(fn: ToolHandler) -> ToolHandler:
            register(fn)
            return fn

        return decorator

    def tools(self, tools: Iterable[UniversalTool]) -> App:
        """Register several prebuilt tools."""
        for tool in tools:
            self._registry.register(tool)
        return self

    def get_tools(self) -> list[UniversalTool]:
        return self._registry.get_all()

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    def component(self, definition: ComponentDefinition) -> App:
        self._components.register(definition)
        return self

    def bundle(self, bundle: ComponentBundle) -> App:
        """Attach a compiled bundle to a registered component."""
        self._components.register_bundle(bundle)
        return self

    def get_components(self) -> list[ComponentDefinition]:
        return self._components.get_all()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def enabled_providers(self) -> list[ProviderName]:
        return self._config.enabled_providers()

    def server_config(self) -> ServerConfig:
        return self._config

    def configure(self, config: ServerConfig) -> App:
        """Replace the server configuration before :meth:`listen`."""
        if self._adapters:
            raise ConfigurationError("Cannot reconfigure an app whose providers are initialized")
        self._config = config
        return self

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def listen(self) -> None:
        """Initialize and start every enabled provider.

        A provider that fails to start is logged and skipped.

        Raises:
            ConfigurationError: If no provider is enabled.
            TransportError: If no provider server could be started.
        """
        enabled = self.enabled_providers()
        if not enabled:
            raise ConfigurationError(
                "No providers enabled. Configure at least one provider, "
                "e.g. create_app(name, providers={'openai': openai(port=3000)})"
            )

        failures: dict[ProviderName, Exception] = {}
        for provider in enabled:
            adapter = self._adapters.get(provider)
            if adapter is None:
                adapter = self._adapter_factory(provider, self._registry, self._components)
                await adapter.initialize(self._config)
                self._adapters[provider] = adapter
            if adapter.is_running:
                continue
            try:
                await adapter.start_server()
            except TransportError as exc:
                logger.error("Failed to start %s: %s", provider.value, exc)
                failures[provider] = exc

        running = [p for p, a in self._adapters.items() if a.is_running]
        if not running:
            detail = "; ".join(f"{p.value}: {exc}" for p, exc in failures.items())
            raise TransportError(",".join(p.value for p in enabled), detail or "no servers started")

        if failures:
            logger.warning(
                "Some providers failed to start (%d/%d); %d running",
                len(failures),
                len(enabled),
                len(running),
            )
        logger.info(
            "%s ready: providers=%s tools=%d",
            self._config.name,
            ",".join(p.value for p in running),
            len(self._registry),
        )

    async def reload(self) -> None:
        """Reload every running server whose provider supports it."""
        for adapter in self._adapters.values():
            if adapter.is_running and adapter.capabilities.supports_reload:
                await adapter.reload_server()

    async def close(self) -> None:
        """Stop every provider server; failures are logged, not raised."""
        if not self._adapters:
            return
        logger.info("Shutting down %s", self._config.name)
        results = await asyncio.gather(
            *(adapter.cleanup() for adapter in self._adapters.values()),
            return_exceptions=True,
        )
        for provider, result in zip(self._adapters, results, strict=True):
            if isinstance(result, BaseException):
                logger.error("Error stopping %s: %s", provider.value, result)
            else:
                logger.info("%s stopped", provider.value)

    async def serve_forever(self) -> None:
        """Listen, block until every started server has stopped serving, then close.

        A stdio server stops when its client closes the session, so an app
        serving only Claude returns once Claude disconnects.
        """
        await self.listen()
        try:
            await asyncio.gather(
                *(
                    adapter.server.wait()
                    for adapter in self._adapters.values()
                    if adapter.server is not None
                )
            )
        finally:
            await self.close()


def create_app(
    name: str,
    version: str = "1.0.0",
    providers: dict[ProviderName | str, ProviderSettings | dict[str, Any] | None] | None = None,
    *,
    adapter_factory: AdapterFactory | None = None,
) -> App:
    """Create an :class:`App` from a name, version and provider settings."""
    config = ServerConfig.model_validate(
        {"name": name, "version": version, "providers": providers or {}}
    )
    return App(config, adapter_factory=adapter_factory)
