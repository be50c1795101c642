"""
Logging module for the Movable Type to WordPress migration tool
"""

import logging
import os
from typing import Any, Optional

# Module-level flag to track if SQL debug logging is enabled
_DEBUG_SQL_ENABLED = False

# Record attributes that carry migration context (see log_with_context)
CONTEXT_FIELDS = ("entity", "table", "page", "last_id", "rows")


def setup_main_log_file(output_dir: str) -> logging.FileHandler:
    """
    Set up a file handler for the main migration log file.

    Args:
        output_dir: The output directory path

    Returns:
        The file handler for the main log file
    """
    os.makedirs(output_dir, exist_ok=True)

    log_file = os.path.join(output_dir, "migration.log")

    file_handler = logging.FileHandler(log_file, mode="w")
    file_handler.setLevel(logging.DEBUG)  # Always use DEBUG level for file handlers

    # The file always gets the context suffix; it is the record operators grep
    formatter = EnhancedFormatter(
        "%(asctime)s - %(levelname)s - %(message)s", include_context=True
    )
    file_handler.setFormatter(formatter)

    logger = logging.getLogger("mt_migrator")
    logger.addHandler(file_handler)

    logger.info(f"Main log file created at: {log_file}")
    return file_handler


class EnhancedFormatter(logging.Formatter):
    """
    Custom formatter that supports verbose mode (module and line information)
    and appends the migration context attached by log_with_context.
    """

    def __init__(
        self,
        fmt=None,
        datefmt=None,
        style="%",
        verbose=False,
        include_context=False,
    ):
        if verbose:
            fmt = "%(asctime)s - %(name)s - %(levelname)s - [%(module)s:%(lineno)d] - %(message)s"
        elif not fmt:
            fmt = "%(asctime)s - %(levelname)s - %(message)s"

        super().__init__(fmt, datefmt, style)
        self.include_context = include_context or verbose

    def format(self, record):
        result = super().format(record)

        if self.include_context:
            context = [
                f"{name}={getattr(record, name)}"
                for name in CONTEXT_FIELDS
                if getattr(record, name, None) is not None
            ]
            if context:
                result += f" [{' '.join(context)}]"

        return result


def setup_logger(
    verbose: bool = False, debug_sql: bool = False, output_dir: Optional[str] = None
) -> logging.Logger:
    """
    Set up and return the logger with appropriate formatting.

    Args:
        verbose: If True, set console handler to DEBUG level; otherwise INFO level
        debug_sql: If True, log every statement SQLAlchemy emits
        output_dir: Optional output directory for the main log file

    Returns:
        Configured logger instance
    """
    global _DEBUG_SQL_ENABLED
    _DEBUG_SQL_ENABLED = debug_sql

    logger = logging.getLogger("mt_migrator")

    # Clear any existing handlers to prevent duplicate messages
    if logger.handlers:
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
            handler.close()

    logger.setLevel(logging.DEBUG)  # Always set logger to DEBUG to capture all logs

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(EnhancedFormatter(verbose=verbose))
    logger.addHandler(console_handler)

    if output_dir:
        setup_main_log_file(output_dir)

    if debug_sql:
        sql_logger = logging.getLogger("sqlalchemy.engine")
        sql_logger.setLevel(logging.DEBUG)

        if output_dir:
            sql_log_file = os.path.join(output_dir, "sql_debug.log")
            sql_handler = logging.FileHandler(sql_log_file, mode="w")
            sql_handler.setLevel(logging.DEBUG)
            sql_handler.setFormatter(EnhancedFormatter())
            sql_logger.addHandler(sql_handler)
            logger.info(f"SQL debug logging enabled, writing to {sql_log_file}")
        else:
            sql_logger.propagate = True
            logger.info("SQL debug logging enabled, writing to console")

    return logger


def log_with_context(level: int, message: str, **kwargs: Any) -> None:
    """
    Log a message with additional context information.

    Args:
        level: The logging level (e.g., logging.INFO)
        message: The log message
        **kwargs: Additional context to include in the log record
    """
    # Filter out None values from kwargs
    extras = {k: v for k, v in kwargs.items() if v is not None}

    # exc_info is a logging keyword, not record context
    exc_info = extras.pop("exc_info", None)

    logger = logging.getLogger("mt_migrator")
    logger.log(level, message, extra=extras, exc_info=exc_info)


def is_debug_sql_enabled() -> bool:
    """Check if SQL debug logging is enabled."""
    return _DEBUG_SQL_ENABLED


def get_logger():
    """Get the mt_migrator logger, creating it with defaults if needed."""
    migrator_logger = logging.getLogger("mt_migrator")
    if not migrator_logger.handlers:
        # If no handlers, set up a basic logger
        migrator_logger.setLevel(logging.INFO)
        handler = logging.StreamHandler()
        handler.setLevel(logging.INFO)
        handler.setFormatter(EnhancedFormatter())
        migrator_logger.addHandler(handler)
    return migrator_logger


# Module logger - will be properly initialized when setup_logger is called
logger = get_logger()
