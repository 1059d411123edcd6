"""
Request/response models for the SQL auto-fix and format endpoints
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional, Tuple

from sqlautofix.sql.correction.types import AutoAcceptPolicy, FixResult


class FixRequest(BaseModel):
    """
    Query typed by the user plus the schema snapshot of the connected database.

    tables accepts {"users": ["id", "name"]} or {"users": {"columns": [...]}};
    leave it empty when not connected (identifier correction is then skipped).
    """
    sql: str = Field(
        ...,
        min_length=1,
        max_length=100_000,
        description="SQL as typed by the user"
    )
    tables: Dict[str, Any] = Field(
        default_factory=dict,
        description="Schema snapshot: table name -> column names"
    )
    auto_accept: Optional[AutoAcceptPolicy] = Field(
        default=None,
        description="Overrides the configured auto-accept policy for this request"
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "sql": "SELECT * FROM usres WHERE actve = true",
                    "tables": {"users": ["id", "active"]},
                }
            ]
        }
    }


class FixItem(BaseModel):
    """One applied correction; span indexes the submitted sql"""
    original: str
    replacement: str
    kind: str
    span: Tuple[int, int]
    confidence: str
    description: str = ""


class FixResponse(BaseModel):
    """
    Proposed correction and what the caller should do with it

    Attributes:
        fixed_sql: Corrected SQL (equals the input when changed is False)
        changed: Whether any fix was applied
        confidence: Lowest confidence across fixes (None when unchanged)
        fixes: Individual corrections, in the order they were applied
        needs_confirmation: Show the fixes to the user before executing
        auto_applied: fixed_sql may be executed right away
        sql: What to execute now under the effective policy
    """
    fixed_sql: str
    changed: bool
    confidence: Optional[str] = None
    fixes: List[FixItem] = Field(default_factory=list)
    needs_confirmation: bool = False
    auto_applied: bool = False
    sql: str

    @classmethod
    def from_result(
        cls,
        result: FixResult,
        sql: str,
        needs_confirmation: bool,
        auto_applied: bool,
    ) -> "FixResponse":
        return cls(
            **result.to_dict(),
            sql=sql,
            needs_confirmation=needs_confirmation,
            auto_applied=auto_applied,
        )


class FormatRequest(BaseModel):
    """SQL to pretty-print"""
    sql: str = Field(..., min_length=1, max_length=100_000)
    dialect: Optional[str] = Field(default=None, description="sqlglot dialect (defaults to SQL_DIALECT)")
    indent: Optional[int] = Field(default=None, ge=0, le=8)


class FormatResponse(BaseModel):
    """Formatted SQL; changed is False when the input was already formatted or could not be parsed"""
    sql: str
    changed: bool
