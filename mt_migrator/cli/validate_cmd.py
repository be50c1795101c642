"""CLI command handler for the preflight table check."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from mt_migrator.cli.common import cli, common_options, handle_exception
from mt_migrator.constants import MT_TABLES, WP_TABLES
from mt_migrator.core.config import load_config
from mt_migrator.core.context import MigrationContext
from mt_migrator.utils.logging import log_with_context, setup_logger


def find_missing_tables(context: MigrationContext) -> dict[str, list[str]]:
    """Return the tables each store lacks, keyed by store name.

    Args:
        context: Migration context with both stores.

    Returns:
        ``{"source": [...], "destination": [...]}``, empty lists when complete.
    """
    return {
        "source": context.source.missing_tables(MT_TABLES),
        "destination": context.destination.missing_tables(
            [context.wp_table(name) for name in WP_TABLES]
        ),
    }


# ---------------------------------------------------------------------------
# validate subcommand
# ---------------------------------------------------------------------------


@cli.command()
@common_options
def validate(config: str, verbose: bool, debug_sql: bool) -> None:
    """Check both databases are reachable and have every table the migration uses.

    Makes no changes to either database.

    Args:
        config: Path to config YAML.
        verbose: Enable verbose console logging.
        debug_sql: Log every SQL statement.
    """
    setup_logger(verbose, debug_sql)

    context: MigrationContext | None = None
    try:
        migration_config = load_config(Path(config))
        context = MigrationContext.from_config(
            migration_config, verbose=verbose, debug_sql=debug_sql, show_progress=False
        )
        missing = find_missing_tables(context)
    except Exception as e:
        handle_exception(e)
        sys.exit(1)
    finally:
        if context is not None:
            context.close()

    problems = False
    for store, tables in missing.items():
        if tables:
            problems = True
            log_with_context(
                logging.ERROR,
                f"The {store} database is missing tables: {', '.join(tables)}",
            )
        else:
            log_with_context(logging.INFO, f"The {store} database has every table needed")

    if problems:
        sys.exit(1)

    log_with_context(logging.INFO, "Validation completed successfully!")
