"""
Configuration module for the Movable Type to WordPress migration tool.

This module provides functions for loading configuration settings from YAML
files, creating a default configuration file, and resolving the strategy
overrides (GUID generator, content formatter) a configuration can name.
"""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from sqlalchemy.engine import URL, make_url

from mt_migrator.constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_DATE_FORMAT,
    DEFAULT_GUID_DOMAIN,
    DEFAULT_TABLE_PREFIX,
    DEFAULT_TIMEZONE,
)
from mt_migrator.exceptions import ConfigError
from mt_migrator.utils.logging import log_with_context


@dataclass
class DatabaseConfig:
    """Connection settings for one of the two databases."""

    url: str | None = None
    driver: str = "mysql+pymysql"
    host: str = "localhost"
    port: int | None = 3306
    username: str | None = "root"
    password: str | None = None
    database: str | None = None
    charset: str | None = None
    # Re-decode text written as UTF-8 bytes into tables declared with
    # ``charset`` (Movable Type did this with latin1 tables).
    repair_utf8: bool = False
    echo: bool = False

    @classmethod
    def from_dict(
        cls, data: dict[str, Any] | None, default_charset: str | None = None
    ) -> DatabaseConfig:
        data = data or {}
        return cls(
            url=data.get("url"),
            driver=data.get("driver", cls.driver),
            host=data.get("host", cls.host),
            port=data.get("port", cls.port),
            username=data.get("username", cls.username),
            password=data.get("password"),
            database=data.get("database"),
            charset=data.get("charset", default_charset),
            repair_utf8=data.get("repair_utf8", False),
            echo=data.get("echo", False),
        )

    def to_url(self) -> URL:
        """Build the SQLAlchemy URL for this database."""
        if self.url:
            return make_url(self.url)

        query = {"charset": self.charset} if self.charset else {}
        return URL.create(
            self.driver,
            username=self.username,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.database,
            query=query,
        )

    @property
    def display_name(self) -> str:
        """The URL with the password masked, for logs."""
        return self.to_url().render_as_string(hide_password=True)


@dataclass
class GuidConfig:
    """Settings for the post/page GUID strategy."""

    domain: str = DEFAULT_GUID_DOMAIN
    generator: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> GuidConfig:
        if not data:
            return cls()
        return cls(
            domain=data.get("domain", cls.domain),
            generator=data.get("generator"),
        )


@dataclass
class MigrationConfig:
    """Typed configuration for the migration tool.

    All fields have defaults matching a single-blog Movable Type 4/5
    installation migrating into a fresh WordPress database.
    """

    source: DatabaseConfig = field(
        default_factory=lambda: DatabaseConfig(charset="latin1")
    )
    destination: DatabaseConfig = field(
        default_factory=lambda: DatabaseConfig(charset="utf8mb4")
    )

    # Source datetimes are local times in this zone; GMT columns are derived
    timezone: str = DEFAULT_TIMEZONE
    date_format: str = DEFAULT_DATE_FORMAT

    # Rows per page; bounds memory use
    batch_size: int = DEFAULT_BATCH_SIZE

    # Movable Type blogs to bring over, flattened into one WordPress site
    blog_ids: list[int] = field(default_factory=lambda: [1])

    table_prefix: str = DEFAULT_TABLE_PREFIX

    guid: GuidConfig = field(default_factory=GuidConfig)
    content_formatter: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.batch_size, int) or self.batch_size <= 0:
            raise ConfigError(
                f"Invalid batch_size '{self.batch_size}': must be a positive integer"
            )
        if not self.blog_ids:
            raise ConfigError("blog_ids must list at least one Movable Type blog id")
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigError(f"Invalid timezone '{self.timezone}': {e}") from e

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MigrationConfig:
        """Create a MigrationConfig from a raw config dictionary."""
        blog_ids = data.get("blog_ids", [1])
        if isinstance(blog_ids, int):
            blog_ids = [blog_ids]
        return cls(
            source=DatabaseConfig.from_dict(data.get("source"), "latin1"),
            destination=DatabaseConfig.from_dict(data.get("destination"), "utf8mb4"),
            timezone=data.get("timezone", DEFAULT_TIMEZONE),
            date_format=data.get("date_format", DEFAULT_DATE_FORMAT),
            batch_size=data.get("batch_size", DEFAULT_BATCH_SIZE),
            blog_ids=list(blog_ids),
            table_prefix=data.get("table_prefix", DEFAULT_TABLE_PREFIX),
            guid=GuidConfig.from_dict(data.get("guid")),
            content_formatter=data.get("content_formatter"),
        )


def load_config(config_path: Path) -> MigrationConfig:
    """
    Load configuration from YAML file and apply default values.

    If the file doesn't exist or is not valid YAML, a warning is logged and
    default settings are used. Values that are present but invalid raise.

    Args:
        config_path: Path to the config YAML file

    Returns:
        MigrationConfig with all necessary defaults applied

    Raises:
        ConfigError: If a configured value is invalid
    """
    raw: dict[str, Any] = {}

    if config_path.exists():
        try:
            with open(config_path) as f:
                loaded_config = yaml.safe_load(f)
                # Handle None result from empty file
                if loaded_config is not None:
                    raw = loaded_config
            log_with_context(logging.INFO, f"Loaded configuration from {config_path}")
        except (yaml.YAMLError, OSError) as e:
            log_with_context(
                logging.WARNING, f"Failed to load config file {config_path}: {e}"
            )
    else:
        log_with_context(
            logging.WARNING,
            f"Config file {config_path} not found, using default settings",
        )

    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {config_path} must contain a YAML mapping")

    return MigrationConfig.from_dict(raw)


def create_default_config(output_path: Path) -> bool:
    """
    Create a default configuration file.

    The file lists every supported option with its default value. An
    existing file is never overwritten.

    Args:
        output_path: Path where the default config should be saved

    Returns:
        True if the config file was created successfully, False otherwise
    """
    if output_path.exists():
        log_with_context(
            logging.WARNING,
            f"Config file {output_path} already exists, not overwriting",
        )
        return False

    default_config = {
        "source": {
            "driver": "mysql+pymysql",
            "host": "localhost",
            "port": 3306,
            "username": "root",
            "password": "password",
            "database": "example_mt",
            # Movable Type wrote UTF-8 bytes into latin1 tables
            "charset": "latin1",
            "repair_utf8": False,
        },
        "destination": {
            "driver": "mysql+pymysql",
            "host": "localhost",
            "port": 3306,
            "username": "root",
            "password": "password",
            "database": "example_wp",
            "charset": "utf8mb4",
        },
        "timezone": DEFAULT_TIMEZONE,
        "date_format": DEFAULT_DATE_FORMAT,
        "batch_size": DEFAULT_BATCH_SIZE,
        "blog_ids": [1],
        "table_prefix": DEFAULT_TABLE_PREFIX,
        "guid": {"domain": DEFAULT_GUID_DOMAIN, "generator": None},
        "content_formatter": None,
    }

    try:
        with open(output_path, "w") as f:
            yaml.safe_dump(default_config, f, default_flow_style=False, sort_keys=False)
        log_with_context(logging.INFO, f"Created default config file at {output_path}")
        return True
    except OSError as e:
        log_with_context(logging.ERROR, f"Failed to create default config file: {e}")
        return False


def resolve_reference(reference: str) -> Any:
    """
    Import the object named by a ``package.module:attribute`` reference.

    Args:
        reference: Dotted module path and attribute name separated by a colon

    Returns:
        The referenced object

    Raises:
        ConfigError: If the reference is malformed or cannot be imported
    """
    module_name, sep, attribute = reference.partition(":")
    if not sep or not module_name or not attribute:
        raise ConfigError(
            f"Invalid reference '{reference}': expected 'package.module:attribute'"
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"Cannot import module '{module_name}': {e}") from e

    target: Any = module
    for part in attribute.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as e:
            raise ConfigError(
                f"Module '{module_name}' has no attribute '{attribute}'"
            ) from e
    return target
