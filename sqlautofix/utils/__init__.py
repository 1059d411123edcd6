"""
Shared utilities - logging and error types
"""

from sqlautofix.utils.errors import AutoFixError, SchemaSnapshotError, SelfCheckError

__all__ = [
    "AutoFixError",
    "SchemaSnapshotError",
    "SelfCheckError",
]
