"""
Correction pipeline - runs every corrector and builds the FixResult.

Stages run in a fixed order, each taking the token list produced by the one
before it:

    keyword -> identifier -> clause order -> quote balance

The whole sequence runs at most MAX_PASSES times over the same token stream so
that fixes exposed by a later stage (e.g. a statement split off by a closed
quote) are still picked up. Spans always refer to the original input.

fix() is pure and total: it never raises. If anything goes wrong, including the
render self-check, the input comes back unchanged.
"""

from typing import Callable, List, Tuple

from loguru import logger

from sqlautofix.config.constants import MAX_IDENTIFIER_INPUT_CHARS, MAX_PASSES
from sqlautofix.sql.correction.clauses import correct_clause_order
from sqlautofix.sql.correction.identifiers import correct_identifiers
from sqlautofix.sql.correction.keywords import correct_keywords
from sqlautofix.sql.correction.quotes import correct_quotes
from sqlautofix.sql.correction.schema import SchemaLike, SchemaSnapshot, as_snapshot
from sqlautofix.sql.correction.tokenizer import render, tokenize
from sqlautofix.sql.correction.types import Fix, FixResult, Token
from sqlautofix.utils.errors import SelfCheckError

Stage = Callable[[List[Token], SchemaSnapshot], Tuple[List[Token], List[Fix]]]

IDENTIFIER_STAGE = "identifier"

STAGES: Tuple[Tuple[str, Stage], ...] = (
    ("keyword", correct_keywords),
    (IDENTIFIER_STAGE, correct_identifiers),
    ("clause_order", correct_clause_order),
    ("quote_balance", correct_quotes),
)


def fix(raw_sql: str, schema: SchemaLike = None) -> FixResult:
    """
    Propose a corrected version of raw_sql.

    Args:
        raw_sql: SQL as typed by the user
        schema: SchemaSnapshot, plain {table: [columns]} mapping, or None when
            not connected (identifier correction is then skipped)

    Returns:
        FixResult; changed is False and fixed_sql echoes the input when there
        is nothing to fix or the engine could not run

    Example:
        >>> result = fix("SELEC * FROM users", {"users": ["id", "name"]})
        >>> result.fixed_sql, result.confidence
        ('SELECT * FROM users', <Confidence.HIGH: 'high'>)
    """
    if not isinstance(raw_sql, str) or not raw_sql.strip():
        return FixResult.unchanged(raw_sql if isinstance(raw_sql, str) else "")

    try:
        return _run(raw_sql, as_snapshot(schema))
    except SelfCheckError as e:
        logger.error(f"Auto-fix self-check failed, returning input unchanged: {e}")
    except Exception:
        logger.exception("Auto-fix failed, returning input unchanged")
    return FixResult.unchanged(raw_sql)


def _run(raw_sql: str, schema: SchemaSnapshot) -> FixResult:
    tokens = tokenize(raw_sql)
    skip_identifiers = len(raw_sql) > MAX_IDENTIFIER_INPUT_CHARS
    if skip_identifiers:
        logger.warning(
            f"Input is {len(raw_sql)} chars (limit {MAX_IDENTIFIER_INPUT_CHARS}); "
            "skipping identifier correction"
        )

    fixes: List[Fix] = []
    for pass_num in range(1, MAX_PASSES + 1):
        pass_fixes: List[Fix] = []
        for name, stage in STAGES:
            if name == IDENTIFIER_STAGE and skip_identifiers:
                continue
            tokens, stage_fixes = stage(tokens, schema)
            pass_fixes.extend(stage_fixes)

        logger.debug(f"Pass {pass_num}: {len(pass_fixes)} fixes")
        fixes.extend(pass_fixes)
        if not pass_fixes:
            break

    if not fixes:
        return FixResult.unchanged(raw_sql)

    _self_check(raw_sql, tokens, fixes)
    result = FixResult.from_fixes(render(tokens), fixes)
    logger.info(
        f"Auto-fix proposed {len(fixes)} fixes "
        f"(confidence: {result.confidence.value}): {result.fixed_sql[:200]}"
    )
    return result


def _self_check(raw_sql: str, tokens: List[Token], fixes: List[Fix]) -> None:
    """
    Every token no fix touched must render exactly as in the input, and every
    part of the input no fix touched must still be rendered.

    Raises:
        SelfCheckError: On the first token or input range that breaks this
    """
    for token in tokens:
        if token.synthetic or _covered(token.start, token.end, fixes):
            continue
        original = raw_sql[token.start:token.end]
        if token.text != original:
            raise SelfCheckError(
                f"Token at {token.start}:{token.end} renders {token.text!r}, "
                f"input has {original!r}"
            )

    cursor = 0
    for start, end in sorted(t.span for t in tokens if not t.synthetic):
        if start > cursor and not _covered(cursor, start, fixes):
            raise SelfCheckError(f"Input {cursor}:{start} ({raw_sql[cursor:start]!r}) was dropped")
        cursor = max(cursor, end)
    if cursor < len(raw_sql) and not _covered(cursor, len(raw_sql), fixes):
        raise SelfCheckError(f"Input {cursor}:{len(raw_sql)} ({raw_sql[cursor:]!r}) was dropped")


def _covered(start: int, end: int, fixes: List[Fix]) -> bool:
    return any(low <= start and end <= high for low, high in (f.span for f in fixes))
