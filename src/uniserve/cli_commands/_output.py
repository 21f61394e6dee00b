"""Shared CLI output formatters and app loading."""

from __future__ import annotations

import importlib
import json
from typing import TYPE_CHECKING, Any

import click
from rich.console import Console
from rich.table import Table

from uniserve.core.app import App

if TYPE_CHECKING:
    from uniserve.providers.base import ProviderToolDefinition

console = Console()
err_console = Console(stderr=True)


def load_app(ref: str) -> App:
    """Import ``module:attribute`` and return the :class:`App` it names."""
    module_name, sep, attribute = ref.partition(":")
    if not sep or not module_name or not attribute:
        raise click.BadParameter(f"expected module:attribute, got {ref!r}", param_hint="APP")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise click.BadParameter(f"cannot import {module_name!r}: {exc}", param_hint="APP") from exc

    target: Any = module
    for part in attribute.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as exc:
            raise click.BadParameter(f"{module_name!r} has no attribute {attribute!r}", param_hint="APP") from exc

    if callable(target) and not isinstance(target, App):
        target = target()
    if not isinstance(target, App):
        raise click.BadParameter(f"{ref!r} is not a uniserve App", param_hint="APP")
    return target


def print_tool_definitions(provider: str, definitions: list[ProviderToolDefinition]) -> None:
    """Pretty-print converted tool declarations as a table."""
    table = Table(title=f"Tools ({provider})")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Title")
    table.add_column("Description")
    table.add_column("Required")
    table.add_column("Meta", style="dim")

    for definition in definitions:
        required = definition.input_schema.get("required", [])
        table.add_row(
            definition.name,
            definition.title or "",
            _truncate(definition.description),
            ", ".join(required) or "-",
            ", ".join(sorted(definition.metadata)) or "-",
        )

    console.print(table)


def print_json(data: Any) -> None:
    console.print_json(json.dumps(data, default=str))


def _truncate(text: str, max_len: int = 60) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
