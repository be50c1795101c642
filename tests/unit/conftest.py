"""Unit test configuration and shared fixtures."""

from __future__ import annotations

from typing import Any

import pytest

# ---------------------------------------------------------------------------
# In-memory pipeline for driving the transfer engine
# ---------------------------------------------------------------------------


class FakePipeline:
    """Pipeline over a list of ids that records every call the engine makes.

    ``calls`` holds ``("delete",)``, ``("select", last_id)`` and
    ``("insert", [ids])`` tuples in call order. ``fail_on`` names a step
    ("delete", "select" or "insert") that raises ``RuntimeError``.
    """

    name = "fake"
    primary_key = "id"

    def __init__(self, ids: list[int], batch_size: int, fail_on: str | None = None):
        self.ids = sorted(ids)
        self.batch_size = batch_size
        self.fail_on = fail_on
        self.calls: list[tuple[Any, ...]] = []
        self.inserted: list[int] = []

    def delete(self) -> None:
        self.calls.append(("delete",))
        if self.fail_on == "delete":
            raise RuntimeError("delete failed")

    def select(self, last_id: int) -> list[dict[str, Any]]:
        self.calls.append(("select", last_id))
        if self.fail_on == "select":
            raise RuntimeError("select failed")
        remaining = [i for i in self.ids if i > last_id]
        return [{"id": i} for i in remaining[: self.batch_size]]

    def insert(self, rows: list[dict[str, Any]]) -> None:
        ids = [row["id"] for row in rows]
        self.calls.append(("insert", ids))
        if self.fail_on == "insert":
            raise RuntimeError("insert failed")
        self.inserted.extend(ids)

    @property
    def select_calls(self) -> int:
        return sum(1 for call in self.calls if call[0] == "select")


@pytest.fixture()
def make_pipeline():
    """Factory fixture: ``make_pipeline(ids, batch_size, fail_on=None)``."""

    def _make(ids: list[int], batch_size: int, fail_on: str | None = None) -> FakePipeline:
        return FakePipeline(ids, batch_size, fail_on)

    return _make
