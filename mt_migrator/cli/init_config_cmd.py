"""CLI command handler for writing a starter configuration file."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from mt_migrator.cli.common import cli
from mt_migrator.core.config import create_default_config
from mt_migrator.utils.logging import setup_logger


@cli.command("init-config")
@click.option(
    "--output",
    default="config.yaml",
    show_default=True,
    help="Where to write the configuration file",
)
def init_config(output: str) -> None:
    """Write a configuration file listing every option with its default.

    An existing file is left untouched.
    """
    setup_logger()
    if not create_default_config(Path(output)):
        sys.exit(1)
    click.echo(f"Edit {output} with your database settings, then run: mt-migrator --config {output}")
