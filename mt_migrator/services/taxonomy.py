"""Post-link pass that recomputes category post counts."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from mt_migrator.constants import WP_TERM_RELATIONSHIPS, WP_TERM_TAXONOMY
from mt_migrator.utils.logging import log_with_context

if TYPE_CHECKING:
    from mt_migrator.core.context import MigrationContext


COUNT_SQL = """
select count(1) as count, term_taxonomy_id
from {table}
group by term_taxonomy_id
"""


def update_term_counts(ctx: MigrationContext) -> dict[int, int]:
    """
    Set every linked term_taxonomy row's count to its relationship count.

    Must run after the post category links are written. Rows with no links
    keep whatever count they already had (0 after the category transfer).

    Args:
        ctx: Migration context

    Returns:
        term_taxonomy_id -> count for every updated row
    """
    rows = ctx.destination.raw_query(
        COUNT_SQL.format(table=ctx.wp_table(WP_TERM_RELATIONSHIPS))
    )

    counts: dict[int, int] = {}
    for row in rows:
        term_taxonomy_id = row["term_taxonomy_id"]
        count = int(row["count"])
        ctx.destination.update(
            ctx.wp_table(WP_TERM_TAXONOMY),
            {"count": count},
            {"term_taxonomy_id": term_taxonomy_id},
        )
        counts[term_taxonomy_id] = count

    log_with_context(
        logging.INFO,
        f"Updated post counts for {len(counts)} categories",
        table=ctx.wp_table(WP_TERM_TAXONOMY),
        rows=len(counts),
    )
    return counts
