"""Universal data model: the provider-independent shapes every tool speaks.

Handlers return a :class:`UniversalResponse`; provider adapters translate it
into their own wire envelope.  Nothing in this module knows about a specific
provider's format.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_serializer

from uniserve.core.config import ComponentMetadata, ProviderName

# ---------------------------------------------------------------------------
# Content items
# ---------------------------------------------------------------------------


class TextContent(BaseModel):
    """Plain text content item."""

    type: Literal["text"] = "text"
    text: str

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump()


class ErrorDetail(BaseModel):
    """Structured error payload.

    ``data`` is only serialized when it was explicitly supplied, so an
    omitted value stays omitted instead of becoming ``null``.
    """

    code: str
    message: str
    data: Any = None

    @model_serializer(mode="wrap")
    def _omit_unset_data(self, handler: Any) -> dict[str, Any]:
        dumped: dict[str, Any] = handler(self)
        if "data" not in self.model_fields_set:
            dumped.pop("data", None)
        return dumped

    @property
    def has_data(self) -> bool:
        return "data" in self.model_fields_set


class ErrorContent(BaseModel):
    """Error content item: ``{type: "error", error: {code, message, data?}}``."""

    type: Literal["error"] = "error"
    error: ErrorDetail

    def to_wire(self) -> dict[str, Any]:
        return {"type": self.type, "error": self.error.model_dump()}


class ImageContent(BaseModel):
    """Image content item (base64 payload or URL)."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["image"] = "image"
    data: str
    mime_type: str | None = Field(default=None, alias="mimeType")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ResourceBody(BaseModel):
    """The embedded resource of a :class:`ResourceContent` item."""

    model_config = ConfigDict(populate_by_name=True)

    uri: str
    mime_type: str | None = Field(default=None, alias="mimeType")
    text: str | None = None


class ResourceContent(BaseModel):
    """Embedded resource content item."""

    type: Literal["resource"] = "resource"
    resource: ResourceBody

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


ContentItem = Annotated[
    TextContent | ErrorContent | ImageContent | ResourceContent,
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Component references
# ---------------------------------------------------------------------------


class ComponentState(BaseModel):
    """A component + props pair shown while loading or on failure."""

    component: str
    props: dict[str, Any] | None = None


class ComponentReference(BaseModel):
    """Pointer to a renderable widget by type name."""

    model_config = ConfigDict(populate_by_name=True)

    type: str
    props: dict[str, Any] = Field(default_factory=dict)
    loading_state: ComponentState | None = Field(default=None, alias="loadingState")
    error_state: ComponentState | None = Field(default=None, alias="errorState")
    metadata: dict[str, Any] = Field(default_factory=dict)

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {"type": self.type, "props": dict(self.props)}
        if self.loading_state is not None:
            wire["loadingState"] = self.loading_state.model_dump(exclude_none=True)
        if self.error_state is not None:
            wire["errorState"] = self.error_state.model_dump(exclude_none=True)
        if self.metadata:
            wire["metadata"] = dict(self.metadata)
        return wire


# ---------------------------------------------------------------------------
# Universal response
# ---------------------------------------------------------------------------


class UniversalResponse(BaseModel):
    """The canonical handler return shape.

    ``content`` is always present (possibly empty) and a response carries at
    most one ``component``.  Build instances through the constructors in
    :mod:`uniserve.core.responses`.
    """

    content: list[ContentItem] = Field(default_factory=list)
    component: ComponentReference | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def text(self) -> str:
        """Concatenated text of all text items."""
        return "".join(item.text for item in self.content if isinstance(item, TextContent))

    @property
    def errors(self) -> list[ErrorDetail]:
        return [item.error for item in self.content if isinstance(item, ErrorContent)]

    @property
    def is_error(self) -> bool:
        return any(isinstance(item, ErrorContent) for item in self.content)

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {"content": [item.to_wire() for item in self.content]}
        if self.component is not None:
            wire["component"] = self.component.to_wire()
        if self.metadata:
            wire["metadata"] = dict(self.metadata)
        return wire


# ---------------------------------------------------------------------------
# Tool context
# ---------------------------------------------------------------------------


class ToolContext(BaseModel):
    """Per-invocation metadata handed to a tool handler.

    Extra fields supplied by a transport are kept as-is.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    provider: ProviderName
    request_id: str = Field(default_factory=lambda: uuid4().hex, alias="requestId")
    session_id: str | None = Field(default=None, alias="sessionId")
    user_id: str | None = Field(default=None, alias="userId")
    metadata: dict[str, Any] = Field(default_factory=dict)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Component definitions and bundles
# ---------------------------------------------------------------------------


class ComponentDefinition(BaseModel):
    """A renderable widget known to the application."""

    type: str
    title: str | None = None
    description: str | None = None
    source_path: str | None = None
    metadata: dict[ProviderName, ComponentMetadata] = Field(default_factory=dict)

    @property
    def display_title(self) -> str:
        return self.title or self.type


class ComponentBundle(BaseModel):
    """Compiled widget code for one component and provider."""

    type: str
    code: str
    provider: ProviderName
    url: str | None = None
