"""Custom exception hierarchy for the Movable Type to WordPress migration tool."""

from __future__ import annotations

from typing import Any


class MigratorError(Exception):
    """Base exception for all migration-related errors."""


class ConfigError(MigratorError):
    """Raised when configuration is invalid or missing."""


class StoreError(MigratorError):
    """Raised when a database operation fails (connectivity, constraints, SQL)."""

    def __init__(
        self,
        message: str,
        store: str | None = None,
        operation: str | None = None,
        table: str | None = None,
    ) -> None:
        super().__init__(message)
        self.store = store
        self.operation = operation
        self.table = table


class MappingError(MigratorError):
    """Raised when a source value has no destination mapping."""

    def __init__(self, message: str, field: str | None = None, value: Any = None) -> None:
        super().__init__(message)
        self.field = field
        self.value = value


class MigrationAbortedError(MigratorError):
    """Raised when a pipeline fails and the remaining pipelines are not run."""

    def __init__(self, message: str, pipeline: str | None = None) -> None:
        super().__init__(message)
        self.pipeline = pipeline
