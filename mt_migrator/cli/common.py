"""Shared CLI infrastructure: option decorators, error handlers, and the CLI group."""

from __future__ import annotations

import logging
from typing import Callable, ClassVar

import click
from sqlalchemy.exc import SQLAlchemyError

import mt_migrator
from mt_migrator.exceptions import MigrationAbortedError, MigratorError
from mt_migrator.utils.logging import log_with_context

# Create logger instance
logger = logging.getLogger("mt_migrator")


# ---------------------------------------------------------------------------
# Custom click.Group that defaults to ``migrate``.
# When the first CLI token starts with ``-`` (i.e. a flag, not a subcommand)
# the group silently prepends ``migrate`` so that
#   ``mt-migrator --config config.yaml``
# runs a migration.
# ---------------------------------------------------------------------------


class DefaultGroup(click.Group):
    """Click group that defaults to the ``migrate`` subcommand."""

    # Flags that belong to the group itself and should NOT trigger the
    # ``migrate`` default.
    _GROUP_FLAGS: ClassVar[set[str]] = {"--help", "--version", "-h"}

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        """Prepend ``migrate`` when the first token is a flag.

        Args:
            ctx: The current Click context.
            args: Raw CLI argument list.

        Returns:
            The (possibly modified) argument list for further parsing.
        """
        if args and args[0].startswith("-") and args[0] not in self._GROUP_FLAGS:
            args = ["migrate", *args]
        return super().parse_args(ctx, args)


# ---------------------------------------------------------------------------
# Shared option decorator
# ---------------------------------------------------------------------------


def common_options(f: Callable[..., None]) -> Callable[..., None]:
    """Decorator that adds options shared across multiple subcommands.

    Args:
        f: The Click command function to decorate.

    Returns:
        The decorated function with common options attached.
    """
    f = click.option(
        "--config",
        default="config.yaml",
        show_default=True,
        help="Path to config YAML",
    )(f)
    f = click.option(
        "--verbose",
        "-v",
        is_flag=True,
        default=False,
        help="Enable verbose console logging (shows DEBUG level messages)",
    )(f)
    f = click.option(
        "--debug_sql",
        is_flag=True,
        default=False,
        help="Log every SQL statement sent to either database (creates very large log files)",
    )(f)
    return f


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group(
    cls=DefaultGroup,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.version_option(version=mt_migrator.__version__, prog_name="mt-migrator")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Movable Type to WordPress migration tool.

    Args:
        ctx: The Click context (injected by ``@click.pass_context``).
    """
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------


def handle_exception(e: BaseException) -> None:
    """Handle different types of exceptions.

    Args:
        e: The exception to handle.
    """
    if isinstance(e, MigrationAbortedError):
        log_with_context(logging.ERROR, str(e), entity=e.pipeline)
        log_with_context(
            logging.INFO,
            "Steps before the failed one are complete. Fix the problem and run "
            "the migration again; every step replaces what it wrote last time.",
        )
    elif isinstance(e, MigratorError):
        log_with_context(logging.ERROR, str(e))
    elif isinstance(e, SQLAlchemyError):
        log_with_context(logging.ERROR, f"Database error: {e}")
        log_with_context(
            logging.INFO,
            "Check the connection settings in your config and that both databases are reachable.",
        )
    elif isinstance(e, FileNotFoundError):
        log_with_context(logging.ERROR, f"File not found: {e}")
        log_with_context(
            logging.INFO,
            "Please check that all required files exist and paths are correct.",
        )
    elif isinstance(e, KeyboardInterrupt):
        log_with_context(logging.WARNING, "Migration interrupted by user.")
        log_with_context(
            logging.INFO,
            "The step that was running is incomplete; run the migration again.",
        )
    else:
        log_with_context(logging.ERROR, f"Migration failed: {e}", exc_info=True)
