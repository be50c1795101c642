"""Core migration logic including configuration, the transfer engine and orchestration."""

__all__ = [
    "config",
    "context",
    "engine",
    "migrator",
    "state",
]
