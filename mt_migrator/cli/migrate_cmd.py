"""CLI command handler for the migrate workflow."""

from __future__ import annotations

import datetime
import logging
import os
import sys
from pathlib import Path
from types import SimpleNamespace

import click

from mt_migrator.cli.common import cli, common_options, handle_exception
from mt_migrator.cli.report import generate_report, print_summary
from mt_migrator.core.config import load_config
from mt_migrator.core.context import MigrationContext
from mt_migrator.core.migrator import MovableTypeToWordPressMigrator
from mt_migrator.core.state import MigrationState
from mt_migrator.utils.logging import log_with_context, setup_logger

# Create logger instance
logger = logging.getLogger("mt_migrator")


# ---------------------------------------------------------------------------
# migrate subcommand
# ---------------------------------------------------------------------------


@cli.command()
@common_options
@click.option(
    "--no_progress",
    is_flag=True,
    default=False,
    help="Hide the per-table progress bars",
)
def migrate(config: str, verbose: bool, debug_sql: bool, no_progress: bool) -> None:
    """Copy a Movable Type blog's content into a WordPress database.

    Every table the migration writes is emptied first. Run against a
    WordPress database you are prepared to overwrite.

    Args:
        config: Path to config YAML.
        verbose: Enable verbose console logging.
        debug_sql: Log every SQL statement.
        no_progress: Hide progress bars.
    """
    args = SimpleNamespace(
        config=config,
        verbose=verbose,
        debug_sql=debug_sql,
        no_progress=no_progress,
    )

    # Create output directory early so all operations are logged to file
    output_dir = create_migration_output_directory()

    # Set up logger with output directory for file logging
    setup_logger(args.verbose, args.debug_sql, output_dir)

    log_startup_info(args)
    log_with_context(logging.INFO, f"Output directory: {output_dir}")

    state = MigrationState()
    context: MigrationContext | None = None
    failed = False

    try:
        migration_config = load_config(Path(args.config))
        context = MigrationContext.from_config(
            migration_config,
            output_dir=output_dir,
            verbose=args.verbose,
            debug_sql=args.debug_sql,
            show_progress=not args.no_progress,
        )
        log_with_context(logging.INFO, f"Source: {migration_config.source.display_name}")
        log_with_context(
            logging.INFO, f"Destination: {migration_config.destination.display_name}"
        )

        MovableTypeToWordPressMigrator(context, state).migrate()
    except (Exception, KeyboardInterrupt) as e:
        handle_exception(e)
        failed = True
    finally:
        if context is not None:
            try:
                report_path = generate_report(state, context, output_dir)
                log_with_context(logging.INFO, f"Migration report: {report_path}")
            except OSError as e:
                log_with_context(logging.ERROR, f"Failed to write migration report: {e}")
            context.close()

    print_summary(state)

    if failed or state.has_errors:
        sys.exit(1)

    log_with_context(logging.INFO, "Migration completed successfully!")


# ---------------------------------------------------------------------------
# Module-level helper functions
# ---------------------------------------------------------------------------


def log_startup_info(args: SimpleNamespace) -> None:
    """Log startup information.

    Args:
        args: Parsed CLI arguments containing migration parameters.
    """
    config_path = Path(args.config)
    if not config_path.is_absolute():
        config_path = Path.cwd() / args.config

    log_with_context(logging.INFO, "Starting migration with the following parameters:")
    log_with_context(logging.INFO, f"- Config: {config_path}")
    log_with_context(logging.INFO, f"- Verbose logging: {args.verbose}")
    log_with_context(logging.INFO, f"- Debug SQL: {args.debug_sql}")
    log_with_context(logging.INFO, f"- Progress bars: {not args.no_progress}")


def create_migration_output_directory() -> str:
    """Create output directory for migration with timestamp.

    Returns:
        The path to the newly created output directory.
    """
    timestamp = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    output_dir = f"migration_logs/run_{timestamp}"

    os.makedirs(output_dir, exist_ok=True)

    return output_dir
