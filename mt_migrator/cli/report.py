"""
Report generation functionality for Movable Type to WordPress migration
"""

from __future__ import annotations

import logging
import os
from typing import Any

import yaml

from mt_migrator.core.context import MigrationContext
from mt_migrator.core.state import MigrationState
from mt_migrator.utils.logging import log_with_context


def print_summary(state: MigrationState) -> None:
    """Print a summary of the migration run to the console."""
    print("\n" + "=" * 80)
    print("MIGRATION SUMMARY")
    print("=" * 80)
    print(f"{'Step':<20}{'Status':<12}{'Rows':>10}{'Pages':>8}{'Seconds':>10}")
    print("-" * 80)
    for name, result in state.transfers.items():
        print(
            f"{name:<20}{result.status.value:<12}{result.rows:>10}"
            f"{result.pages:>8}{result.elapsed:>10.1f}"
        )
    print("-" * 80)
    print(f"Rows transferred: {state.total_rows}")
    print(f"Category counts updated: {len(state.term_counts)}")

    if state.errors:
        print(f"\nErrors: {len(state.errors)}")
        for error in state.errors:
            print(f"  {error['pipeline']}: {error['type']}: {error['message']}")
    print("=" * 80)


def build_report(state: MigrationState, context: MigrationContext) -> dict[str, Any]:
    """Assemble the report contents as plain data."""
    config = context.config
    return {
        "migration_summary": {
            "started_at": state.started_at,
            "finished_at": state.finished_at,
            "source": config.source.display_name,
            "destination": config.destination.display_name,
            "blog_ids": list(config.blog_ids),
            "batch_size": config.batch_size,
            "table_prefix": config.table_prefix,
            "total_rows": state.total_rows,
            "status": "failed" if state.has_errors else "completed",
        },
        "pipelines": {
            name: {
                "status": result.status.value,
                "rows": result.rows,
                "pages": result.pages,
                "select_calls": result.select_calls,
                "last_id": result.last_id,
                "elapsed_seconds": round(result.elapsed, 3),
                "error": result.error,
            }
            for name, result in state.transfers.items()
        },
        "taxonomy_counts": {
            "updated": len(state.term_counts),
            "counts": dict(sorted(state.term_counts.items())),
        },
        "errors": list(state.errors),
    }


def generate_report(
    state: MigrationState,
    context: MigrationContext,
    output_dir: str,
    output_file: str = "migration_report.yaml",
) -> str:
    """Write the migration report to ``output_dir`` and return its path."""
    report_path = os.path.join(output_dir, output_file)
    report = build_report(state, context)

    with open(report_path, "w") as f:
        yaml.safe_dump(report, f, default_flow_style=False, sort_keys=False)

    log_with_context(logging.INFO, f"Migration report generated: {report_path}")
    return report_path
