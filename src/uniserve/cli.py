"""uniserve CLI entrypoint."""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from uniserve import __version__

LOG_LEVEL_ENV = "UNISERVE_LOG_LEVEL"


def configure_logging(level: str) -> None:
    """Send log records to stderr; stdout may carry the stdio JSON-RPC stream."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


@click.group()
@click.version_option(version=__version__, prog_name="uniserve")
@click.option(
    "--log-level",
    envvar=LOG_LEVEL_ENV,
    default="INFO",
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging verbosity (also read from UNISERVE_LOG_LEVEL).",
)
def main(log_level: str) -> None:
    """uniserve: serve universal tools to AI assistant providers."""
    configure_logging(log_level)


# Register subcommands
from uniserve.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
