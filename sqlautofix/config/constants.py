"""
Application constants

Centralized constants used by the SQL correction engine.
"""

from typing import FrozenSet, Tuple

# ============================================================================
# SQL Keywords
# ============================================================================

# Reserved words the keyword corrector knows about. Kept deliberately short:
# every entry is a potential typo target, so words that collide with common
# column names (DATE, USER, NAME, ...) are left out.
SQL_KEYWORDS: FrozenSet[str] = frozenset({
    "SELECT", "FROM", "WHERE", "GROUP", "BY", "HAVING", "ORDER", "LIMIT", "OFFSET",
    "JOIN", "INNER", "LEFT", "RIGHT", "FULL", "OUTER", "CROSS", "ON", "USING",
    "AS", "AND", "OR", "NOT", "IN", "IS", "NULL", "LIKE", "ILIKE", "BETWEEN",
    "EXISTS", "DISTINCT", "UNION", "ALL", "INTERSECT", "EXCEPT",
    "CASE", "WHEN", "THEN", "ELSE", "END", "ASC", "DESC",
    "INSERT", "INTO", "VALUES", "UPDATE", "SET", "DELETE",
    "CREATE", "ALTER", "DROP", "TABLE", "TRUE", "FALSE", "WITH", "RETURNING",
    "DEFAULT",
})

# Other PostgreSQL words. Recognized as keywords so valid SQL is left alone,
# but never offered as a correction target.
RECOGNIZED_WORDS: FrozenSet[str] = frozenset({
    "FOR", "OF", "SHARE", "NOWAIT", "SKIP", "LOCKED",
    "NULLS", "FIRST", "LAST", "FETCH", "NEXT", "ROW", "ROWS", "ONLY", "TIES",
    "AT", "TIME", "ZONE", "INTERVAL", "CAST", "COLLATE", "ESCAPE", "SIMILAR",
    "ANY", "SOME", "ARRAY", "ISNULL", "NOTNULL", "SYMMETRIC",
    "OVER", "PARTITION", "WINDOW", "FILTER", "WITHIN", "RANGE", "GROUPS",
    "PRECEDING", "FOLLOWING", "UNBOUNDED", "CURRENT",
    "GROUPING", "SETS", "ROLLUP", "CUBE",
    "LATERAL", "NATURAL", "RECURSIVE", "ORDINALITY", "TABLESAMPLE",
    "CONFLICT", "DO", "NOTHING",
    "CURRENT_DATE", "CURRENT_TIME", "CURRENT_TIMESTAMP", "CURRENT_USER", "USER",
    "PRIMARY", "KEY", "REFERENCES", "CONSTRAINT", "UNIQUE", "CHECK",
    "IF", "TO", "NO", "INDEX", "VIEW", "TRUNCATE",
    "EXPLAIN", "ANALYZE", "BEGIN", "COMMIT", "ROLLBACK",
})

# Keywords that may directly precede "(" (EXISTS (...), VALUES (...))
PAREN_KEYWORDS: FrozenSet[str] = frozenset({"EXISTS", "VALUES", "IN", "USING"})

# Keywords after which the next identifier names a table
TABLE_INTRODUCERS: FrozenSet[str] = frozenset({"FROM", "JOIN", "INTO", "UPDATE"})

# Set operators split a statement into independently ordered query blocks
SET_OPERATORS: FrozenSet[str] = frozenset({"UNION", "INTERSECT", "EXCEPT"})


# ============================================================================
# Clause Order
# ============================================================================

# Canonical top-level clause order (GROUP BY / ORDER BY are two-word clauses)
CLAUSE_ORDER: Tuple[str, ...] = (
    "SELECT",
    "FROM",
    "WHERE",
    "GROUP BY",
    "HAVING",
    "ORDER BY",
    "LIMIT",
)

# Clauses whose bare identifiers are expected to be column references
COLUMN_CLAUSES: FrozenSet[str] = frozenset({
    "SELECT", "WHERE", "GROUP BY", "HAVING", "ORDER BY", "ON",
})


# ============================================================================
# Correction Bounds
# ============================================================================

MAX_EDIT_DISTANCE = 2            # No typo fix is ever further away than this
SHORT_TOKEN_LENGTH = 3           # Tokens this short only accept distance 1
MIN_KEYWORD_CANDIDATE_LENGTH = 2  # Single letters are never keyword typos
MAX_PASSES = 2                   # Full pipeline passes per fix() call
MAX_IDENTIFIER_INPUT_CHARS = 20_000  # Larger inputs skip identifier correction
