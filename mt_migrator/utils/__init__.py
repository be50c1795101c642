"""Shared utilities for logging and content formatting."""

__all__ = [
    "formatting",
    "logging",
]
