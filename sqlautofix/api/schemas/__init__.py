"""
API schemas for request/response models
"""

from sqlautofix.api.schemas.sql import (
    FixRequest,
    FixItem,
    FixResponse,
    FormatRequest,
    FormatResponse,
)
from sqlautofix.api.schemas.health import HealthResponse

__all__ = [
    "FixRequest",
    "FixItem",
    "FixResponse",
    "FormatRequest",
    "FormatResponse",
    "HealthResponse",
]
