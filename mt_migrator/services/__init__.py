"""Database access, field mapping and the per-entity pipelines."""

__all__ = [
    "mappers",
    "pipelines",
    "store",
    "strategies",
    "taxonomy",
]
