"""
Configuration layer - Settings and constants
"""

from sqlautofix.config.settings import settings, Settings, PROJECT_ROOT
from sqlautofix.config.constants import (
    SQL_KEYWORDS,
    CLAUSE_ORDER,
    MAX_EDIT_DISTANCE,
    MAX_PASSES,
    MAX_IDENTIFIER_INPUT_CHARS,
)

__all__ = [
    "settings",
    "Settings",
    "PROJECT_ROOT",
    "SQL_KEYWORDS",
    "CLAUSE_ORDER",
    "MAX_EDIT_DISTANCE",
    "MAX_PASSES",
    "MAX_IDENTIFIER_INPUT_CHARS",
]
