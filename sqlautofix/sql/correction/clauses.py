"""
Clause-order corrector - moves top-level clauses into canonical order.

    SELECT -> FROM -> WHERE -> GROUP BY -> HAVING -> ORDER BY -> LIMIT

Only clauses at parenthesis depth 0 count. The token stream is split into
statements at ";" and into query blocks at UNION / INTERSECT / EXCEPT, and each
block is handled on its own. A clause runs from its keyword to the next clause
keyword of the same block.

The clauses that stay put are the longest run already in canonical order;
every other clause is "displaced" and reported with one CLAUSE_REORDER fix.
"""

from dataclasses import dataclass
from itertools import combinations
from typing import List, Optional, Sequence, Tuple

from loguru import logger

from sqlautofix.config.constants import CLAUSE_ORDER, SET_OPERATORS
from sqlautofix.sql.correction.keywords import keyword_of
from sqlautofix.sql.correction.tokenizer import render
from sqlautofix.sql.correction.types import Confidence, Fix, FixKind, Token, TokenKind

_SINGLE_WORD_CLAUSES = {"SELECT", "FROM", "WHERE", "HAVING", "LIMIT"}


@dataclass
class _Clause:
    kind: str
    body: List[Token]      # Keyword through last non-whitespace token
    trailing: List[Token]  # Whitespace after the body

    @property
    def rank(self) -> int:
        return CLAUSE_ORDER.index(self.kind)

    @property
    def span(self) -> Tuple[int, int]:
        return (self.body[0].start, self.body[-1].end)

    @property
    def text(self) -> str:
        return render(self.body)


def correct_clause_order(tokens: List[Token], schema=None) -> Tuple[List[Token], List[Fix]]:
    """
    Reorder out-of-sequence top-level clauses.

    Args:
        tokens: Token stream (not modified)
        schema: Unused; accepted so every stage has the same signature

    Returns:
        New token stream and one CLAUSE_REORDER fix per displaced clause

    Example:
        >>> tokens, fixes = correct_clause_order(tokenize("SELECT id FROM t ORDER BY id WHERE id > 1"))
        >>> render(tokens)
        'SELECT id FROM t WHERE id > 1 ORDER BY id'
        >>> [f.replacement for f in fixes]
        ['WHERE id > 1']
    """
    out: List[Token] = []
    fixes: List[Fix] = []

    for block, separator in _split_blocks(tokens):
        reordered, block_fixes = _reorder_block(block)
        out.extend(reordered)
        out.extend(separator)
        fixes.extend(block_fixes)

    return out, fixes


# ============================================================================
# Blocks
# ============================================================================

def _split_blocks(tokens: List[Token]) -> List[Tuple[List[Token], List[Token]]]:
    """
    Split at depth-0 ";" and set operators.

    Returns (block, separator) pairs; the separator is the ";" or set operator
    token (empty for the last block).
    """
    pieces = []
    current: List[Token] = []
    depth = 0

    for token in tokens:
        if token.is_punct("("):
            depth += 1
        elif token.is_punct(")"):
            depth = max(0, depth - 1)
        elif depth == 0 and (token.is_punct(";") or keyword_of(token) in SET_OPERATORS):
            pieces.append((current, [token]))
            current = []
            continue
        current.append(token)

    pieces.append((current, []))
    return pieces


def _clause_starts(block: List[Token]) -> List[Tuple[int, str]]:
    """(index, clause kind) for every depth-0 clause keyword in the block."""
    starts = []
    depth = 0
    for index, token in enumerate(block):
        if token.is_punct("("):
            depth += 1
            continue
        if token.is_punct(")"):
            depth = max(0, depth - 1)
            continue
        if depth:
            continue

        word = keyword_of(token)
        if word in _SINGLE_WORD_CLAUSES:
            starts.append((index, word))
        elif word in ("GROUP", "ORDER") and keyword_of(_next_significant(block, index)) == "BY":
            starts.append((index, f"{word} BY"))
    return starts


def _next_significant(block: List[Token], index: int) -> Optional[Token]:
    for token in block[index + 1:]:
        if not token.is_trivia:
            return token
    return None


# ============================================================================
# Reordering
# ============================================================================

def _reorder_block(block: List[Token]) -> Tuple[List[Token], List[Fix]]:
    starts = _clause_starts(block)
    if len(starts) < 2:
        return block, []

    kinds = [kind for _, kind in starts]
    if len(set(kinds)) != len(kinds):
        logger.debug(f"Repeated clause in block, leaving order alone: {kinds}")
        return block, []

    clauses = []
    for n, (start, kind) in enumerate(starts):
        end = starts[n + 1][0] if n + 1 < len(starts) else len(block)
        body = list(block[start:end])
        trailing: List[Token] = []
        while body and body[-1].kind == TokenKind.WHITESPACE:
            trailing.insert(0, body.pop())
        clauses.append(_Clause(kind=kind, body=body, trailing=trailing))

    ranks = [clause.rank for clause in clauses]
    if ranks == sorted(ranks):
        return block, []

    kept = _kept_positions(ranks)
    ordered = sorted(clauses, key=lambda clause: clause.rank)

    # The whitespace runs between clauses stay where they were; only the
    # clause bodies move.
    gaps = [clause.trailing for clause in clauses[:-1]]
    out = list(block[:starts[0][0]])
    for n, clause in enumerate(ordered):
        if n:
            out.extend(_separator(ordered[n - 1], gaps[n - 1]))
        out.extend(clause.body)
    tail = list(clauses[-1].trailing)
    if _ends_in_line_comment(ordered[-1]) and not _has_newline(tail):
        tail.append(_synthetic_whitespace(ordered[-1], "\n"))
    out.extend(tail)

    fixes = []
    for position, clause in enumerate(clauses):
        if position in kept:
            continue
        landed = ordered.index(clause)
        if landed == 0:
            where = "to the start of the query"
        else:
            where = f"after {ordered[landed - 1].kind}"
        fix = Fix(
            original=clause.text,
            replacement=clause.text,
            kind=FixKind.CLAUSE_REORDER,
            span=clause.span,
            confidence=Confidence.MEDIUM,
            description=f"Moved {clause.kind} clause {where}",
        )
        fixes.append(fix)
        logger.debug(f"Clause fix: {fix.description}")

    return out, fixes


def _kept_positions(ranks: Sequence[int]) -> Tuple[int, ...]:
    """
    Positions of the longest subsequence already in canonical order.

    Ties go to the subsequence that keeps the earliest clauses, so in
    SELECT FROM ORDER-BY WHERE the WHERE clause is the one that moves.
    """
    for size in range(len(ranks), 0, -1):
        for positions in combinations(range(len(ranks)), size):
            picked = [ranks[p] for p in positions]
            if picked == sorted(picked):
                return positions
    return ()


def _separator(previous: _Clause, gap: List[Token]) -> List[Token]:
    """The original gap, plus a newline when a -- comment would swallow the next clause."""
    if not gap:
        gap = [_synthetic_whitespace(previous, " ")]
    if _ends_in_line_comment(previous) and not _has_newline(gap):
        gap = gap + [_synthetic_whitespace(previous, "\n")]
    return gap


def _ends_in_line_comment(clause: _Clause) -> bool:
    last = clause.body[-1]
    return last.kind == TokenKind.COMMENT and last.text.startswith("--")


def _has_newline(tokens: List[Token]) -> bool:
    return any("\n" in token.text for token in tokens)


def _synthetic_whitespace(previous: _Clause, text: str) -> Token:
    end = previous.body[-1].end
    return Token(kind=TokenKind.WHITESPACE, text=text, start=end, end=end, synthetic=True)
