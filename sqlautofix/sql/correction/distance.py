"""
Bounded edit distance shared by the keyword and identifier correctors.

Levenshtein distance with adjacent transpositions counted as a single edit
(optimal string alignment), so "FORM" -> "FROM" and "usres" -> "users" are one
edit away like the typos they are. The bound keeps the cost of comparing one
token against a whole vocabulary small: a comparison is abandoned as soon as a
whole row of the matrix exceeds the limit.
"""

from typing import Iterable, List, Optional, Tuple


def bounded_distance(a: str, b: str, limit: int) -> int:
    """
    Edit distance between a and b, capped at limit + 1.

    Comparison is case-insensitive.

    Args:
        a: First string
        b: Second string
        limit: Largest distance the caller cares about

    Returns:
        The exact distance when it is <= limit, otherwise limit + 1

    Example:
        >>> bounded_distance("SELEC", "select", 2)
        1
        >>> bounded_distance("FORM", "FROM", 2)
        1
        >>> bounded_distance("users", "orders", 1)
        2
    """
    a = a.lower()
    b = b.lower()
    over = limit + 1

    if a == b:
        return 0
    if abs(len(a) - len(b)) > limit:
        return over
    if not a or not b:
        return min(max(len(a), len(b)), over)

    before_previous: List[int] = []
    previous = list(range(len(b) + 1))
    for i in range(1, len(a) + 1):
        current = [i] + [0] * len(b)
        row_min = i
        for j in range(1, len(b) + 1):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            value = min(
                previous[j] + 1,         # deletion
                current[j - 1] + 1,      # insertion
                previous[j - 1] + cost,  # substitution
            )
            if i > 1 and j > 1 and a[i - 1] == b[j - 2] and a[i - 2] == b[j - 1]:
                value = min(value, before_previous[j - 2] + 1)  # transposition
            current[j] = value
            row_min = min(row_min, value)
        if row_min > limit:
            return over
        before_previous, previous = previous, current

    return min(previous[-1], over)


def rank_candidates(word: str, candidates: Iterable[str], limit: int) -> List[Tuple[int, str]]:
    """
    Candidates within limit of word, closest first.

    Duplicates (case-insensitive) are collapsed onto their first spelling.
    Ties keep the candidates' input order.
    """
    seen = set()
    ranked = []
    for candidate in candidates:
        key = candidate.lower()
        if key in seen:
            continue
        seen.add(key)
        distance = bounded_distance(word, candidate, limit)
        if distance <= limit:
            ranked.append((distance, candidate))
    ranked.sort(key=lambda item: item[0])
    return ranked


def closest_unique(word: str, candidates: Iterable[str], limit: int) -> Optional[Tuple[int, str]]:
    """
    The single closest candidate within limit, or None.

    None is also returned when two candidates share the smallest distance:
    an ambiguous guess is worse than no guess.

    Example:
        >>> closest_unique("usres", ["users", "orders"], 2)
        (1, 'users')
        >>> closest_unique("id", ["IN", "IS"], 1) is None
        True
    """
    ranked = rank_candidates(word, candidates, limit)
    if not ranked:
        return None
    if len(ranked) > 1 and ranked[1][0] == ranked[0][0]:
        return None
    return ranked[0]
