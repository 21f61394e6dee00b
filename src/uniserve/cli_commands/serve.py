"""``uniserve serve``: run an app's provider servers until interrupted."""

from __future__ import annotations

import asyncio
import sys

import click

from uniserve.cli_commands._output import err_console, load_app
from uniserve.core.config import ServerConfig
from uniserve.core.errors import UniserveError


@click.command()
@click.argument("app_ref", metavar="APP")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML server config overriding the app's own.",
)
def serve(app_ref: str, config_path: str | None) -> None:
    """Serve APP (module:attribute) to every enabled provider.

    Status goes to stderr; stdout is left to stdio transports.
    """
    app = load_app(app_ref)
    try:
        if config_path is not None:
            app.configure(ServerConfig.from_yaml(config_path))
        asyncio.run(app.serve_forever())
    except KeyboardInterrupt:
        err_console.print("Stopped.")
    except UniserveError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)
