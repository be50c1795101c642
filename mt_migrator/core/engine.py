"""
Batched table transfer.

Moves an unbounded source table into the destination a page at a time:
the pipeline's destination tables are cleared once, then pages of source
rows are read in ascending primary key order and handed to the pipeline's
insert step until a short page signals the end.

A table whose size is an exact multiple of the page size costs one extra
select that comes back empty; that is how the end is detected.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable

from tqdm import tqdm

from mt_migrator.types import Row
from mt_migrator.utils.logging import log_with_context


@runtime_checkable
class Pipeline(Protocol):
    """The delete / select / insert triple for one entity type."""

    name: str
    primary_key: str

    def delete(self) -> None:
        """Clear the destination tables for this entity type."""

    def select(self, last_id: int) -> list[Row]:
        """Return up to a page of source rows with primary key > last_id, ascending."""

    def insert(self, rows: list[Row]) -> None:
        """Map and write one page of source rows."""


class EngineStatus(str, Enum):
    """Lifecycle of one transfer."""

    IDLE = "idle"
    DELETING = "deleting"
    PAGING = "paging"
    DONE = "done"
    FAILED = "failed"


@dataclass
class TransferResult:
    """Outcome of one pipeline's transfer."""

    pipeline: str
    status: EngineStatus = EngineStatus.IDLE
    rows: int = 0
    pages: int = 0
    select_calls: int = 0
    last_id: int = 0
    elapsed: float = 0.0
    error: str | None = None


class BatchTransferEngine:
    """Runs pipelines page by page with a fixed page size."""

    def __init__(self, batch_size: int, show_progress: bool = True) -> None:
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.batch_size = batch_size
        self.show_progress = show_progress

    def run(
        self, pipeline: Pipeline, result: TransferResult | None = None
    ) -> TransferResult:
        """
        Transfer every source row of one pipeline.

        Any exception from the pipeline leaves the result FAILED and is
        re-raised; nothing already written is rolled back.

        Args:
            pipeline: The entity pipeline to drive
            result: Result to fill in, so callers keep it when the run fails

        Returns:
            The transfer result (status DONE)
        """
        if result is None:
            result = TransferResult(pipeline=pipeline.name)
        started = time.monotonic()

        progress = tqdm(
            desc=f"{pipeline.name}",
            unit="rows",
            disable=not self.show_progress,
            leave=False,
        )
        try:
            result.status = EngineStatus.DELETING
            log_with_context(
                logging.DEBUG,
                f"Clearing destination tables for {pipeline.name}",
                entity=pipeline.name,
            )
            pipeline.delete()

            result.status = EngineStatus.PAGING
            while True:
                rows = pipeline.select(result.last_id)
                result.select_calls += 1

                if rows:
                    result.last_id = rows[-1][pipeline.primary_key]
                    pipeline.insert(rows)
                    result.rows += len(rows)
                    result.pages += 1
                    progress.update(len(rows))
                    log_with_context(
                        logging.DEBUG,
                        f"Transferred page {result.pages} of {pipeline.name} ({len(rows)} rows)",
                        entity=pipeline.name,
                        page=result.pages,
                        last_id=result.last_id,
                    )

                if len(rows) < self.batch_size:
                    break

            result.status = EngineStatus.DONE
        except BaseException as e:
            result.status = EngineStatus.FAILED
            result.error = str(e) or e.__class__.__name__
            raise
        finally:
            result.elapsed = time.monotonic() - started
            progress.close()

        log_with_context(
            logging.INFO,
            f"Migrated {result.rows} {pipeline.name} rows in {result.pages} pages",
            entity=pipeline.name,
            rows=result.rows,
        )
        return result
