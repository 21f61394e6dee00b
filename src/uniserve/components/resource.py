"""Component resource binder.

Maps a component type to its stable ``ui://`` resource identifier and builds
the minimal HTML document that loads the component's bundle inside a
provider's widget frame.
"""

from __future__ import annotations

import base64
import html
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from uniserve.core.models import ComponentDefinition

WIDGET_MIME_TYPE = "text/html+skybridge"
_DATA_URL_PREFIX = "data:"


def resource_uri(component_type: str) -> str:
    """Return the resource URI for *component_type* (``ui://widget/<type>.html``)."""
    return f"ui://widget/{component_type}.html"


def bundle_data_url(code: str) -> str:
    """Encode bundle *code* as an inline ``data:`` URL usable as a bundle reference."""
    encoded = base64.b64encode(code.encode("utf-8")).decode("ascii")
    return f"data:text/javascript;base64,{encoded}"


def _decode_data_url(bundle_ref: str) -> str:
    _, _, payload = bundle_ref.partition(",")
    return base64.b64decode(payload).decode("utf-8")


def bootstrap_document(
    bundle_ref: str,
    component_type: str,
    *,
    nonce: str | None = None,
) -> str:
    """Build the HTML document that mounts *component_type*.

    A ``data:`` *bundle_ref* is decoded and inlined as script content; any
    other reference is emitted as ``<script src=...>``.  The CSP meta tag is
    the renderer's concern and is not emitted here.
    """
    nonce_attr = f' nonce="{html.escape(nonce, quote=True)}"' if nonce else ""

    if bundle_ref.startswith(_DATA_URL_PREFIX):
        code = _decode_data_url(bundle_ref).replace("</script", "<\\/script")
        script = f"<script{nonce_attr}>{code}</script>"
    else:
        script = f'<script src="{html.escape(bundle_ref, quote=True)}"{nonce_attr}></script>'

    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{html.escape(component_type)}</title>
  <style>
    * {{ box-sizing: border-box; }}
    body {{ margin: 0; padding: 0; font-family: system-ui, -apple-system, sans-serif; }}
    #root {{ width: 100%; height: 100vh; }}
  </style>
</head>
<body>
  <div id="root"></div>
  {script}
</body>
</html>"""


class McpResource(BaseModel):
    """A component resource entry for a provider's resource catalog."""

    model_config = ConfigDict(populate_by_name=True)

    uri: str
    name: str
    description: str | None = None
    mime_type: str = Field(default=WIDGET_MIME_TYPE, alias="mimeType")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def resource_descriptor(component: ComponentDefinition, bundle_url: str) -> McpResource:
    """Bind *component* to its resource entry.

    *bundle_url* is accepted for parity with :func:`bootstrap_document`; the
    descriptor itself only carries the URI.
    """
    del bundle_url
    return McpResource(
        uri=resource_uri(component.type),
        name=component.display_title,
        description=component.description,
        mime_type=WIDGET_MIME_TYPE,
    )


class OpenAIComponentMetadata(BaseModel):
    """OpenAI widget hints derived from a component definition."""

    output_template: str
    widget_accessible: bool = False
    description: str | None = None
    invoking: str | None = None
    invoked: str | None = None
    result_can_produce_widget: bool = True

    def to_meta(self) -> dict[str, Any]:
        """Render as OpenAI ``_meta`` keys."""
        meta: dict[str, Any] = {
            "openai/outputTemplate": self.output_template,
            "openai/widgetAccessible": self.widget_accessible,
            "openai/resultCanProduceWidget": self.result_can_produce_widget,
        }
        if self.invoking is not None:
            meta["openai/toolInvocation/invoking"] = self.invoking
        if self.invoked is not None:
            meta["openai/toolInvocation/invoked"] = self.invoked
        return meta


def openai_component_metadata(
    component: ComponentDefinition,
    *,
    widget_accessible: bool = False,
    invoking: str | None = None,
    invoked: str | None = None,
    result_can_produce_widget: bool = True,
) -> OpenAIComponentMetadata:
    """Derive OpenAI widget metadata, defaulting status text from the title."""
    title = component.display_title
    return OpenAIComponentMetadata(
        output_template=resource_uri(component.type),
        widget_accessible=widget_accessible,
        description=component.description,
        invoking=invoking if invoking is not None else f"Loading {title}...",
        invoked=invoked if invoked is not None else f"{title} loaded",
        result_can_produce_widget=result_can_produce_widget,
    )
