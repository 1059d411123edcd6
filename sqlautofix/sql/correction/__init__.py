"""
SQL auto-correction engine - deterministic fixes for hand-typed SQL.

This package turns a query with typos into a proposed corrected query:
1. Tokenizer: lossless lexical split of the raw text
2. Correctors: keyword typos, identifier typos (against a schema snapshot),
   clause order, unterminated string literals
3. Pipeline: runs the correctors and aggregates confidence
4. Policy: decides whether the caller may auto-apply the result
"""

from sqlautofix.sql.correction.types import (
    AutoAcceptPolicy,
    Confidence,
    Fix,
    FixKind,
    FixResult,
    Token,
    TokenKind,
)
from sqlautofix.sql.correction.tokenizer import tokenize, render
from sqlautofix.sql.correction.schema import SchemaSnapshot, load_schema_snapshot
from sqlautofix.sql.correction.pipeline import fix
from sqlautofix.sql.correction.policy import QueryReview, requires_confirmation, review_query
from sqlautofix.sql.correction.metrics import (
    record_review,
    get_metrics_summary,
    log_metrics_summary,
    reset_metrics,
)

__all__ = [
    "AutoAcceptPolicy",
    "Confidence",
    "Fix",
    "FixKind",
    "FixResult",
    "Token",
    "TokenKind",
    "tokenize",
    "render",
    "SchemaSnapshot",
    "load_schema_snapshot",
    "fix",
    "QueryReview",
    "requires_confirmation",
    "review_query",
    "record_review",
    "get_metrics_summary",
    "log_metrics_summary",
    "reset_metrics",
]
