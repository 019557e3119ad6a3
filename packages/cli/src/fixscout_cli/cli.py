"""CLI entry point for fixscout.

Commands:
  analyze   — find out whether a reported SDK bug was fixed in a later release
  releases  — list the stable releases a scan would read for a version
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from fixscout_cli.commands.analyze import analyze_cmd
from fixscout_cli.commands.releases import releases_cmd


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("fixscout"),
    prog_name="fixscout",
)
@click.option(
    "--config",
    "config_path",
    default=".fixscout.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="FIXSCOUT_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log every pipeline step (DEBUG level) to stderr.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Check whether a reported SDK bug is already fixed in a later release."""
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


main.add_command(analyze_cmd)
main.add_command(releases_cmd)
