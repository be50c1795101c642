"""
Swappable strategies used while mapping entries.

Movable Type installations put the GUID of a post wherever their templates
say, and the database does not record it, so the GUID comes from a
configurable generator. Post content formatting is likewise configurable,
for installations that need renderers for markdown or textile entries.
"""

from __future__ import annotations

import logging
from datetime import timezone
from typing import Callable, Protocol

from mt_migrator.constants import DEFAULT_DATE_FORMAT
from mt_migrator.core.config import MigrationConfig, resolve_reference
from mt_migrator.exceptions import ConfigError
from mt_migrator.services.mappers import TimestampFormatter, basename_to_slug
from mt_migrator.types import MTEntry
from mt_migrator.utils.formatting import ContentFormatter
from mt_migrator.utils.logging import log_with_context


class GuidGenerator(Protocol):
    """Returns the permanent GUID for a Movable Type entry row."""

    def __call__(self, entry: MTEntry) -> str: ...


class ContentFormatStrategy(Protocol):
    """Turns entry text, extended text and convert_breaks into HTML."""

    def __call__(
        self,
        entry_text: str | None,
        entry_text_more: str | None,
        convert_breaks: str | None,
    ) -> str: ...


class IdGuidGenerator:
    """``<entry_id>@<domain>``, the GUID older Movable Type templates emit."""

    def __init__(self, domain: str) -> None:
        self.domain = domain

    def __call__(self, entry: MTEntry) -> str:
        return f"{entry['entry_id']}@{self.domain}"


class PermalinkGuidGenerator:
    """``<domain>/YYYY/MM/<basename>/``, the entry permalink used as GUID.

    Entries without a creation date get ``<domain>/<basename>/``.
    """

    def __init__(self, domain: str, date_format: str = DEFAULT_DATE_FORMAT) -> None:
        self.domain = domain.rstrip("/")
        # Only used for parsing, so the zone does not matter
        self.timestamps = TimestampFormatter(timezone.utc, date_format)

    def __call__(self, entry: MTEntry) -> str:
        basename = basename_to_slug(entry.get("entry_basename"))
        created_on = entry.get("entry_created_on")
        if self.timestamps.is_missing(created_on):
            return f"{self.domain}/{basename}/"
        created_on = self.timestamps.parse(created_on, "entry_created_on")
        return f"{self.domain}{created_on:/%Y/%m/}{basename}/"


_BUILTIN_GUID_GENERATORS: dict[str, Callable[[MigrationConfig], GuidGenerator]] = {
    "id": lambda config: IdGuidGenerator(config.guid.domain),
    "permalink": lambda config: PermalinkGuidGenerator(
        config.guid.domain, config.date_format
    ),
}


def build_guid_generator(config: MigrationConfig) -> GuidGenerator:
    """
    Build the GUID generator named by the configuration.

    ``guid.generator`` may be empty or ``"id"`` (the default), ``"permalink"``,
    or a ``package.module:attribute`` reference to a callable taking the
    entry row.

    Raises:
        ConfigError: If the reference cannot be resolved to a callable
    """
    name = config.guid.generator or "id"
    if name in _BUILTIN_GUID_GENERATORS:
        return _BUILTIN_GUID_GENERATORS[name](config)

    generator = resolve_reference(name)
    if not callable(generator):
        raise ConfigError(f"GUID generator '{name}' is not callable")
    log_with_context(logging.INFO, f"Using custom GUID generator {name}")
    return generator


def build_content_formatter(config: MigrationConfig) -> ContentFormatStrategy:
    """
    Build the content-format strategy named by the configuration.

    Without ``content_formatter`` the default :class:`ContentFormatter`
    is used.

    Raises:
        ConfigError: If the reference cannot be resolved to a callable
    """
    if not config.content_formatter:
        return ContentFormatter()

    formatter = resolve_reference(config.content_formatter)
    if not callable(formatter):
        raise ConfigError(
            f"Content formatter '{config.content_formatter}' is not callable"
        )
    log_with_context(
        logging.INFO, f"Using custom content formatter {config.content_formatter}"
    )
    return formatter
