"""In-process catalogs of tools and components.

Both registries preserve insertion order and guard mutation with a lock so
that register/remove may happen while requests are being served.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from typing import TYPE_CHECKING

from uniserve.core.errors import ComponentNotFoundError, RegistrationConflictError

if TYPE_CHECKING:
    from uniserve.core.config import ProviderName
    from uniserve.core.models import ComponentBundle, ComponentDefinition
    from uniserve.core.tool import UniversalTool

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Ordered catalog of :class:`UniversalTool` keyed by unique name.

    Usage::

        registry = ToolRegistry()
        registry.register(weather_tool)
        registry.get("get_weather")      # -> UniversalTool | None
        registry.remove("get_weather")   # -> True
    """

    def __init__(self) -> None:
        self._tools: dict[str, UniversalTool] = {}
        self._lock = threading.Lock()

    def register(self, tool: UniversalTool) -> None:
        """Add *tool*; raises :class:`RegistrationConflictError` on a duplicate name."""
        with self._lock:
            if tool.name in self._tools:
                raise RegistrationConflictError("tool", tool.name)
            self._tools[tool.name] = tool
        logger.debug("Registered tool %s", tool.name)

    def get(self, name: str) -> UniversalTool | None:
        with self._lock:
            return self._tools.get(name)

    def get_all(self) -> list[UniversalTool]:
        """Return all tools in registration order."""
        with self._lock:
            return list(self._tools.values())

    def has(self, name: str) -> bool:
        with self._lock:
            return name in self._tools

    def remove(self, name: str) -> bool:
        """Remove a tool; returns whether one was present."""
        with self._lock:
            return self._tools.pop(name, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._tools.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def __iter__(self) -> Iterator[UniversalTool]:
        return iter(self.get_all())


class ComponentRegistry:
    """Catalog of component definitions and their per-provider bundles."""

    def __init__(self) -> None:
        self._components: dict[str, ComponentDefinition] = {}
        self._bundles: dict[str, dict[ProviderName, ComponentBundle]] = {}
        self._lock = threading.Lock()

    def register(self, component: ComponentDefinition) -> None:
        """Add *component*; raises :class:`RegistrationConflictError` on a duplicate type."""
        with self._lock:
            if component.type in self._components:
                raise RegistrationConflictError("component", component.type)
            self._components[component.type] = component
            self._bundles[component.type] = {}
        logger.debug("Registered component %s", component.type)

    def get(self, component_type: str) -> ComponentDefinition | None:
        with self._lock:
            return self._components.get(component_type)

    def get_all(self) -> list[ComponentDefinition]:
        with self._lock:
            return list(self._components.values())

    def has(self, component_type: str) -> bool:
        with self._lock:
            return component_type in self._components

    def register_bundle(self, bundle: ComponentBundle) -> None:
        """Attach a compiled bundle to an already registered component."""
        with self._lock:
            provider_bundles = self._bundles.get(bundle.type)
            if provider_bundles is None:
                raise ComponentNotFoundError(bundle.type)
            provider_bundles[bundle.provider] = bundle

    def get_bundle(self, component_type: str, provider: ProviderName) -> ComponentBundle | None:
        with self._lock:
            return self._bundles.get(component_type, {}).get(provider)

    def get_all_bundles(self, component_type: str) -> list[ComponentBundle]:
        with self._lock:
            return list(self._bundles.get(component_type, {}).values())

    def clear(self) -> None:
        with self._lock:
            self._components.clear()
            self._bundles.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._components)
