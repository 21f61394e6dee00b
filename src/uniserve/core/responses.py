"""Response constructors for building a UniversalResponse.

All builders are pure: they allocate a fresh response on every call and never
touch shared state.
"""

from __future__ import annotations

from typing import Any

from uniserve.core.models import (
    ComponentReference,
    ComponentState,
    ContentItem,
    ErrorContent,
    ErrorDetail,
    TextContent,
    UniversalResponse,
)

DEFAULT_LOADING_COMPONENT = "loading-spinner"
DEFAULT_ERROR_COMPONENT = "error-card"
LOADING_PLACEHOLDER = "Loading..."
GENERIC_ERROR_CODE = "ERROR"

_OMITTED: Any = object()


def text_response(text: str) -> UniversalResponse:
    """Create a text-only response."""
    return UniversalResponse(content=[TextContent(text=text)])


def component_response(
    component_type: str,
    props: dict[str, Any],
    text_fallback: str | None = None,
    *,
    loading_component: str | None = None,
    loading_props: dict[str, Any] | None = None,
    error_component: str | None = None,
    error_props: dict[str, Any] | None = None,
) -> UniversalResponse:
    """Create a response that renders *component_type*.

    Content is empty unless *text_fallback* is given.  Loading and error
    states are attached only when their component is named.
    """
    content: list[ContentItem] = [TextContent(text=text_fallback)] if text_fallback else []
    loading_state = (
        ComponentState(component=loading_component, props=loading_props)
        if loading_component
        else None
    )
    error_state = (
        ComponentState(component=error_component, props=error_props)
        if error_component
        else None
    )
    return UniversalResponse(
        content=content,
        component=ComponentReference(
            type=component_type,
            props=dict(props),
            loading_state=loading_state,
            error_state=error_state,
        ),
    )


def mixed_response(text: str, component_type: str, props: dict[str, Any]) -> UniversalResponse:
    """Create a response with both text and a component."""
    return UniversalResponse(
        content=[TextContent(text=text)],
        component=ComponentReference(type=component_type, props=dict(props)),
    )


def error_response(code: str, message: str, data: Any = _OMITTED) -> UniversalResponse:
    """Create an error response.

    ``data`` appears in the error payload only when the caller passes it.
    """
    if data is _OMITTED:
        detail = ErrorDetail(code=code, message=message)
    else:
        detail = ErrorDetail(code=code, message=message, data=data)
    return UniversalResponse(content=[ErrorContent(error=detail)])


def loading_response(
    component_type: str = DEFAULT_LOADING_COMPONENT,
    props: dict[str, Any] | None = None,
) -> UniversalResponse:
    """Create a placeholder response shown while work is in progress.

    Example::

        return loading_response("weather-card-loading", {"city": "Portland"})
    """
    return UniversalResponse(
        content=[TextContent(text=LOADING_PLACEHOLDER)],
        component=ComponentReference(type=component_type, props=dict(props or {})),
    )


def error_component_response(
    message: str,
    component_type: str = DEFAULT_ERROR_COMPONENT,
    props: dict[str, Any] | None = None,
) -> UniversalResponse:
    """Create an error response that also renders an error component.

    The component receives ``{"message": message, **props}``.
    """
    return UniversalResponse(
        content=[ErrorContent(error=ErrorDetail(code=GENERIC_ERROR_CODE, message=message))],
        component=ComponentReference(
            type=component_type,
            props={"message": message, **(props or {})},
        ),
    )
