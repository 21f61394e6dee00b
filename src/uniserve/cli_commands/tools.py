"""``uniserve tools``: inspect tools as each provider sees them."""

from __future__ import annotations

import asyncio
import sys
from typing import TYPE_CHECKING

import click

from uniserve.cli_commands._output import console, load_app, print_json, print_tool_definitions
from uniserve.core.config import ProviderName
from uniserve.core.errors import ToolNotFoundError

if TYPE_CHECKING:
    from uniserve.providers.base import ProviderAdapter

_PROVIDER_CHOICE = click.Choice([p.value for p in ProviderName])


@click.group()
def tools() -> None:
    """Inspect registered tools."""


def _adapter_for(app_ref: str, provider: str) -> ProviderAdapter:
    from uniserve.providers import create_adapter

    app = load_app(app_ref)
    adapter = create_adapter(ProviderName(provider), app.registry, app.component_registry)
    asyncio.run(adapter.initialize(app.server_config()))
    return adapter


@tools.command("list")
@click.argument("app_ref", metavar="APP")
@click.option(
    "--provider",
    "-p",
    type=_PROVIDER_CHOICE,
    multiple=True,
    help="Provider to convert for (repeatable; default: all).",
)
@click.option("--json", "as_json", is_flag=True, help="Print the wire declarations as JSON.")
def list_tools(app_ref: str, provider: tuple[str, ...], as_json: bool) -> None:
    """List the tools of APP (module:attribute) per provider."""
    providers = provider or tuple(p.value for p in ProviderName)
    for name in providers:
        definitions = _adapter_for(app_ref, name).tool_definitions()
        if as_json:
            print_json({"provider": name, "tools": [d.to_wire() for d in definitions]})
        elif definitions:
            print_tool_definitions(name, definitions)
        else:
            console.print(f"[yellow]No tools registered ({name}).[/yellow]")


@tools.command("schema")
@click.argument("app_ref", metavar="APP")
@click.argument("tool_name", metavar="TOOL")
@click.option("--provider", "-p", type=_PROVIDER_CHOICE, required=True, help="Target provider.")
def schema(app_ref: str, tool_name: str, provider: str) -> None:
    """Print the input schema of TOOL converted for a provider."""
    adapter = _adapter_for(app_ref, provider)
    try:
        tool = adapter.find_tool(tool_name)
    except ToolNotFoundError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)
    print_json(adapter.convert_schema(tool.input_schema).to_wire())
