"""
SQL pretty-printer using sqlglot.

Used after a fix has been accepted, to show the corrected query in a readable
layout. The correction engine never calls it: fixed_sql keeps the user's own
layout so that fix spans stay meaningful.
"""

from typing import Optional

import sqlglot
from loguru import logger
from sqlglot.errors import ParseError, TokenError


def format_sql(sql: str, dialect: Optional[str] = None, indent: Optional[int] = None) -> str:
    """
    Pretty-print SQL with uppercase keywords and one clause per line.

    Args:
        sql: SQL to format (one or more statements)
        dialect: sqlglot dialect (defaults to settings.sql_dialect)
        indent: Spaces per indentation level (defaults to settings.format_indent)

    Returns:
        Formatted SQL, or the input unchanged when sqlglot cannot parse it

    Example:
        >>> print(format_sql("select id, name from users where active = true"))
        SELECT
          id,
          name
        FROM users
        WHERE
          active = TRUE
    """
    if not sql or not sql.strip():
        return sql

    if dialect is None or indent is None:
        from sqlautofix.config.settings import settings
        dialect = dialect or settings.sql_dialect
        indent = settings.format_indent if indent is None else indent

    try:
        statements = [s for s in sqlglot.parse(sql, read=dialect) if s is not None]
    except (ParseError, TokenError) as e:
        logger.warning(f"Could not format SQL ({dialect}), returning it unchanged: {e}")
        return sql

    if not statements:
        return sql

    formatted = ";\n\n".join(s.sql(dialect=dialect, pretty=True, indent=indent) for s in statements)
    logger.debug(f"Formatted {len(statements)} statement(s) for {dialect}")
    return formatted
