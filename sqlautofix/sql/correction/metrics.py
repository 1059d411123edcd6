"""
Correction metrics - track what the auto-fixer does for the execution flow.

This module provides observability into the correction system:
- Which fix kinds are most common
- How often fixes are auto-applied vs sent for confirmation
- How many queries needed no correction at all

Metrics are recorded by review_query(), never by fix() itself: the engine
stays free of shared state.
"""

from collections import Counter
from typing import Any, Dict
from loguru import logger

from sqlautofix.sql.correction.types import FixResult


# Global metrics (in-memory, per process)
correction_metrics: Dict[str, Counter] = {
    "fixes_by_kind": Counter(),        # {"keyword_typo": 12, "quote_balance": 2}
    "fixes_by_confidence": Counter(),  # {"high": 10, "medium": 3, "low": 2}
    "outcomes": Counter(),             # {"unchanged": 40, "auto_applied": 9, "confirmation": 4}
}


def record_review(result: FixResult, auto_applied: bool) -> None:
    """
    Record the outcome of one reviewed query.

    Args:
        result: FixResult produced for the query
        auto_applied: Whether the fixed SQL was applied without confirmation

    Example:
        >>> record_review(fix("SELEC 1"), auto_applied=True)
        >>> correction_metrics["outcomes"]["auto_applied"]
        1
    """
    if not result.changed:
        correction_metrics["outcomes"]["unchanged"] += 1
        return

    for item in result.fixes:
        correction_metrics["fixes_by_kind"][item.kind.value] += 1
        correction_metrics["fixes_by_confidence"][item.confidence.value] += 1

    outcome = "auto_applied" if auto_applied else "confirmation"
    correction_metrics["outcomes"][outcome] += 1
    logger.debug(f"Recorded {outcome}: {len(result.fixes)} fixes")


def get_metrics_summary() -> Dict[str, Any]:
    """
    Get a summary of correction metrics.

    Returns:
        Dict with correction statistics

    Example:
        >>> summary = get_metrics_summary()
        >>> summary["total_reviews"]
        13
        >>> summary["auto_apply_rate"]
        0.69
    """
    outcomes = correction_metrics["outcomes"]
    total_reviews = sum(outcomes.values())
    corrected = outcomes["auto_applied"] + outcomes["confirmation"]

    return {
        "total_reviews": total_reviews,
        "total_unchanged": outcomes["unchanged"],
        "total_corrected": corrected,
        "total_fixes": sum(correction_metrics["fixes_by_kind"].values()),
        "auto_apply_rate": outcomes["auto_applied"] / corrected if corrected > 0 else 0.0,
        "correction_rate": corrected / total_reviews if total_reviews > 0 else 0.0,
        "by_kind": dict(correction_metrics["fixes_by_kind"]),
        "by_confidence": dict(correction_metrics["fixes_by_confidence"]),
    }


def log_metrics_summary() -> None:
    """
    Log a summary of correction metrics at INFO level.

    Useful for debugging and monitoring correction system health.
    """
    summary = get_metrics_summary()

    if summary["total_reviews"] == 0:
        logger.info("No queries reviewed yet")
        return

    logger.info("=" * 60)
    logger.info("SQL AUTO-FIX METRICS")
    logger.info("=" * 60)
    logger.info(f"Queries reviewed: {summary['total_reviews']}")
    logger.info(f"Queries corrected: {summary['total_corrected']} ({summary['correction_rate']:.1%})")
    logger.info(f"Auto-applied: {summary['auto_apply_rate']:.1%} of corrected queries")
    logger.info(f"Total fixes: {summary['total_fixes']}")
    logger.info("=" * 60)

    if summary["by_kind"]:
        logger.info("Top fix kinds:")
        for kind, count in Counter(summary["by_kind"]).most_common(5):
            logger.info(f"  - {kind}: {count}")


def reset_metrics() -> None:
    """Reset all metrics (useful for testing)."""
    for counter in correction_metrics.values():
        counter.clear()
    logger.debug("Correction metrics reset")
