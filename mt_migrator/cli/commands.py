#!/usr/bin/env python3
"""
Main execution module for the Movable Type to WordPress migration tool.

This module assembles the click command group from the subcommand modules
and provides the console-script entry point.
"""

from __future__ import annotations

from mt_migrator.cli import init_config_cmd, migrate_cmd, validate_cmd  # noqa: F401
from mt_migrator.cli.common import cli, handle_exception

__all__ = ["cli", "handle_exception", "main"]


def main() -> None:
    """Main entry point for the Movable Type to WordPress migration tool."""
    cli()


if __name__ == "__main__":
    main()
