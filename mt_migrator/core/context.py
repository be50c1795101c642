"""Immutable migration context.

MigrationContext is a frozen dataclass that holds the configuration, the
two store connections and the mapping strategies for a migration run. It
is created once and passed to the engine and every pipeline; nothing
reads connections or settings from module globals.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo
from zoneinfo import ZoneInfo

from mt_migrator.core.config import MigrationConfig
from mt_migrator.services.mappers import TimestampFormatter
from mt_migrator.services.store import StoreAdapter
from mt_migrator.services.strategies import (
    ContentFormatStrategy,
    GuidGenerator,
    build_content_formatter,
    build_guid_generator,
)


@dataclass(frozen=True)
class MigrationContext:
    """Immutable context for a migration run. Created once, shared everywhere."""

    # Loaded configuration
    config: MigrationConfig

    # Movable Type (read) and WordPress (written) databases
    source: StoreAdapter
    destination: StoreAdapter

    # Mapping strategies
    guid_generator: GuidGenerator
    content_formatter: ContentFormatStrategy

    # Run output
    output_dir: str | None = None

    # Mode flags
    verbose: bool = False
    debug_sql: bool = False
    show_progress: bool = True

    @classmethod
    def from_config(
        cls,
        config: MigrationConfig,
        output_dir: str | None = None,
        verbose: bool = False,
        debug_sql: bool = False,
        show_progress: bool = True,
    ) -> MigrationContext:
        """Build the stores and strategies a configuration describes."""
        return cls(
            config=config,
            source=StoreAdapter.from_config(config.source, "source"),
            destination=StoreAdapter.from_config(config.destination, "destination"),
            guid_generator=build_guid_generator(config),
            content_formatter=build_content_formatter(config),
            output_dir=output_dir,
            verbose=verbose,
            debug_sql=debug_sql,
            show_progress=show_progress,
        )

    @property
    def batch_size(self) -> int:
        """Rows per page."""
        return self.config.batch_size

    @property
    def blog_ids(self) -> list[int]:
        """Movable Type blogs being migrated."""
        return self.config.blog_ids

    @property
    def tzinfo(self) -> tzinfo:
        """Timezone of the naive datetimes in the source database."""
        return ZoneInfo(self.config.timezone)

    @property
    def timestamps(self) -> TimestampFormatter:
        """Formatter for WordPress local and GMT datetime columns."""
        return TimestampFormatter(self.tzinfo, self.config.date_format)

    def wp_table(self, name: str) -> str:
        """Prefixed WordPress table name, e.g. ``posts`` -> ``wp_posts``."""
        return f"{self.config.table_prefix}{name}"

    def close(self) -> None:
        """Release both database connections."""
        self.source.dispose()
        self.destination.dispose()
