"""
Auto-accept policy - decides whether a FixResult may be applied without asking.

The engine only computes confidence. Whether to run the fixed SQL right away or
show the fixes for confirmation is the caller's decision, made here:

- ALWAYS: apply any non-empty fix set
- HIGH:   apply only when the aggregate confidence is HIGH
- NEVER:  always ask

Whatever the policy, a result containing a QUOTE_BALANCE fix always asks.
"""

from dataclasses import dataclass
from typing import Optional, Union

from loguru import logger

from sqlautofix.sql.correction.metrics import record_review
from sqlautofix.sql.correction.pipeline import fix
from sqlautofix.sql.correction.schema import SchemaLike
from sqlautofix.sql.correction.types import AutoAcceptPolicy, Confidence, FixResult

PolicyLike = Union[AutoAcceptPolicy, str]


def as_policy(policy: PolicyLike) -> AutoAcceptPolicy:
    """
    Accept an enum member or its (case-insensitive) value.

    Raises:
        ValueError: For an unknown policy name
    """
    if isinstance(policy, AutoAcceptPolicy):
        return policy
    return AutoAcceptPolicy(str(policy).strip().lower())


def requires_confirmation(result: FixResult, policy: PolicyLike) -> bool:
    """
    Decide whether a result must be confirmed before it is executed.

    Args:
        result: Output of fix()
        policy: Configured auto-accept policy

    Returns:
        True when the user has to confirm the fixes

    Example:
        >>> requires_confirmation(fix("SELEC 1"), AutoAcceptPolicy.HIGH)
        False
    """
    if not result.changed:
        return False

    if result.has_quote_fix:
        logger.debug("Confirmation required: result closes an unterminated string")
        return True

    policy = as_policy(policy)
    if policy == AutoAcceptPolicy.ALWAYS:
        return False
    if policy == AutoAcceptPolicy.HIGH:
        return result.confidence != Confidence.HIGH
    return True


@dataclass(frozen=True)
class QueryReview:
    """
    What the execution flow should do with a query.

    Attributes:
        sql: SQL to execute now (fixed SQL when auto-applied, else the raw input)
        result: The engine's FixResult
        needs_confirmation: Fixes must be shown to the user before applying
        auto_applied: sql is the fixed SQL, applied without asking
    """
    sql: str
    result: FixResult
    needs_confirmation: bool = False
    auto_applied: bool = False


def review_query(
    raw_sql: str,
    schema: SchemaLike = None,
    settings=None,
    policy: Optional[PolicyLike] = None,
) -> QueryReview:
    """
    Run the engine ahead of query execution and apply the auto-accept policy.

    Args:
        raw_sql: SQL as typed by the user
        schema: Current schema snapshot (None when not connected)
        settings: Settings instance (defaults to the global settings)
        policy: Overrides settings.autofix_auto_accept for this call

    Returns:
        QueryReview describing what to execute
    """
    if settings is None:
        from sqlautofix.config.settings import settings

    if not settings.autofix_enabled:
        logger.debug("Auto-fix disabled, executing input as-is")
        return QueryReview(sql=raw_sql, result=FixResult.unchanged(raw_sql))

    result = fix(raw_sql, schema)
    if not result.changed:
        record_review(result, auto_applied=False)
        return QueryReview(sql=raw_sql, result=result)

    effective = as_policy(policy if policy is not None else settings.autofix_auto_accept)
    confirm = requires_confirmation(result, effective)
    review = QueryReview(
        sql=raw_sql if confirm else result.fixed_sql,
        result=result,
        needs_confirmation=confirm,
        auto_applied=not confirm,
    )
    record_review(result, auto_applied=review.auto_applied)

    if review.auto_applied:
        logger.info(f"Auto-applied {len(result.fixes)} fixes (policy={effective.value})")
    else:
        logger.info(
            f"{len(result.fixes)} fixes need confirmation "
            f"(policy={effective.value}, confidence={result.confidence.value})"
        )
    return review
