"""Component resources served to widget-capable providers."""

from uniserve.components.resource import (
    WIDGET_MIME_TYPE,
    McpResource,
    OpenAIComponentMetadata,
    bootstrap_document,
    bundle_data_url,
    openai_component_metadata,
    resource_descriptor,
    resource_uri,
)

__all__ = [
    "WIDGET_MIME_TYPE",
    "McpResource",
    "OpenAIComponentMetadata",
    "bootstrap_document",
    "bundle_data_url",
    "openai_component_metadata",
    "resource_descriptor",
    "resource_uri",
]
