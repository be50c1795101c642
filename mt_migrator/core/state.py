"""
Migration state container for the Movable Type to WordPress migration.

Mutable tracking state for a migration run, separated from the immutable
configuration (MigrationContext).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from mt_migrator.core.engine import EngineStatus, TransferResult


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class MigrationState:
    """Holds all mutable tracking state for a migration run."""

    # pipeline name -> result, in run order
    transfers: dict[str, TransferResult] = field(default_factory=dict)

    # term_taxonomy_id -> count written by the taxonomy count pass
    term_counts: dict[int, int] = field(default_factory=dict)

    errors: list[dict[str, Any]] = field(default_factory=list)

    started_at: str | None = None
    finished_at: str | None = None

    def start(self) -> None:
        """Reset per-run state at the start of a migration run."""
        self.transfers = {}
        self.term_counts = {}
        self.errors = []
        self.started_at = _now_iso()
        self.finished_at = None

    def finish(self) -> None:
        self.finished_at = _now_iso()

    def begin_transfer(self, pipeline: str) -> TransferResult:
        """Register and return the result record for a pipeline."""
        result = TransferResult(pipeline=pipeline)
        self.transfers[pipeline] = result
        return result

    def record_error(self, pipeline: str, error: BaseException) -> None:
        self.errors.append(
            {
                "pipeline": pipeline,
                "type": error.__class__.__name__,
                "message": str(error),
            }
        )

    @property
    def has_errors(self) -> bool:
        """Return True if any pipeline failed."""
        return bool(self.errors) or any(
            result.status == EngineStatus.FAILED for result in self.transfers.values()
        )

    @property
    def total_rows(self) -> int:
        """Rows transferred across all pipelines."""
        return sum(result.rows for result in self.transfers.values())
