"""Shared error types for the uniserve core and provider layers."""


class UniserveError(Exception):
    """Base error for all uniserve failures."""


class RegistrationConflictError(UniserveError):
    """A tool or component with the same name is already registered."""

    def __init__(self, kind: str, name: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f'{kind.capitalize()} "{name}" is already registered')


class ToolNotFoundError(UniserveError):
    """Requested tool does not exist in the registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool not found: {name}")


class ComponentNotFoundError(UniserveError):
    """Requested component type has not been registered."""

    def __init__(self, component_type: str) -> None:
        self.component_type = component_type
        super().__init__(f'Component "{component_type}" is not registered')


class ConfigurationError(UniserveError):
    """Server or provider configuration is missing or invalid."""


class AdapterStateError(UniserveError):
    """An adapter operation was invoked in the wrong lifecycle state."""


class AdapterNotInitializedError(AdapterStateError):
    """An adapter was used before ``initialize()`` was called."""

    def __init__(self, provider: str) -> None:
        self.provider = provider
        super().__init__(f"Adapter '{provider}' not initialized. Call initialize() first.")


class TransportError(UniserveError):
    """Starting or stopping a provider's transport server failed."""

    def __init__(self, provider: str, detail: str = "") -> None:
        self.provider = provider
        self.detail = detail
        super().__init__(
            f"Transport error for provider '{provider}'" + (f": {detail}" if detail else "")
        )
