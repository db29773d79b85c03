"""Root Typer application, mounts sub-commands."""

from __future__ import annotations

import logging

import typer

from extension_reconciler.cli.options import VerboseOption
from extension_reconciler.utils.logging import configure_logging

app = typer.Typer(
    name="extrec",
    help="Extension reconciler - inspect the inputs of an extension install.",
    no_args_is_help=True,
)


@app.callback()
def _root(verbose: bool = VerboseOption) -> None:
    configure_logging(level=logging.DEBUG if verbose else logging.WARNING)


def _register_commands() -> None:
    from extension_reconciler.cli.commands.validate_cmd import app as validate_app
    from extension_reconciler.cli.commands.preflight_cmd import app as preflight_app
    from extension_reconciler.cli.commands.release_cmd import app as release_app
    from extension_reconciler.cli.commands.metadata_cmd import app as metadata_app

    app.add_typer(validate_app, name="validate", help="Validate an InstallAIExtension manifest")
    app.add_typer(preflight_app, name="preflight", help="Check required catalog CRDs")
    app.add_typer(release_app, name="release", help="Show the observed state of a release")
    app.add_typer(metadata_app, name="metadata", help="Resolve UIPlugin catalog metadata")


_register_commands()


def main() -> None:
    app()
