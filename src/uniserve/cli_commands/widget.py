"""``uniserve widget``: print a component's bootstrap document."""

from __future__ import annotations

from pathlib import Path

import click

from uniserve.components.resource import bootstrap_document, bundle_data_url


@click.command()
@click.argument("component_type", metavar="TYPE")
@click.argument("bundle_ref", metavar="BUNDLE_REF")
@click.option("--nonce", default=None, help="CSP nonce for the script tag.")
@click.option(
    "--inline",
    is_flag=True,
    help="Treat BUNDLE_REF as a local file and inline its code.",
)
def widget(component_type: str, bundle_ref: str, nonce: str | None, inline: bool) -> None:
    """Print the HTML document that mounts TYPE from BUNDLE_REF."""
    if inline:
        path = Path(bundle_ref)
        if not path.is_file():
            raise click.BadParameter(f"no such file: {bundle_ref}", param_hint="BUNDLE_REF")
        bundle_ref = bundle_data_url(path.read_text(encoding="utf-8"))
    click.echo(bootstrap_document(bundle_ref, component_type, nonce=nonce))
