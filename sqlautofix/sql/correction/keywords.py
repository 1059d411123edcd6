"""
Keyword corrector - fixes misspelled reserved words.

Identifiers that exactly match a keyword are reclassified as KEYWORD tokens
(their text is left alone). Other identifiers are compared against the keyword
set and replaced by the uppercase keyword when exactly one keyword is close
enough. Schema names always win over keyword guesses: a token that is as close
to a table or column name as to a keyword is left for the identifier corrector.

RECOGNIZED_WORDS (FOR, NULLS, AT, ONLY, ...) are reclassified like keywords but
are never a replacement. A word strictly closer to one of them than to any
correction target is left alone.
"""

from dataclasses import replace
from typing import List, Optional, Tuple

from loguru import logger
from sqlglot.parser import Parser

from sqlautofix.config.constants import (
    MAX_EDIT_DISTANCE,
    MIN_KEYWORD_CANDIDATE_LENGTH,
    PAREN_KEYWORDS,
    RECOGNIZED_WORDS,
    SHORT_TOKEN_LENGTH,
    SQL_KEYWORDS,
    TABLE_INTRODUCERS,
)
from sqlautofix.sql.correction.distance import rank_candidates
from sqlautofix.sql.correction.schema import SchemaSnapshot
from sqlautofix.sql.correction.tokenizer import significant_indices
from sqlautofix.sql.correction.types import Confidence, Fix, FixKind, Token, TokenKind

# Sorted so that candidate ranking never depends on set iteration order
_VOCABULARY_SORTED = tuple(sorted(SQL_KEYWORDS | RECOGNIZED_WORDS))

# Built-in function names sqlglot knows (COUNT, MIN, COALESCE, ...)
_FUNCTION_NAMES = frozenset(Parser.FUNCTIONS)


def keyword_of(token: Optional[Token]) -> Optional[str]:
    """
    Uppercase keyword a token spells, or None.

    Works on both reclassified KEYWORD tokens and raw IDENTIFIER tokens so that
    later stages can run on a stream the keyword corrector has not seen.
    Recognized words only count once the keyword corrector has reclassified
    them, which it does not do for schema names.
    """
    if token is None:
        return None
    upper = token.upper
    if token.kind == TokenKind.KEYWORD:
        return upper if upper in SQL_KEYWORDS or upper in RECOGNIZED_WORDS else None
    if token.kind == TokenKind.IDENTIFIER:
        return upper if upper in SQL_KEYWORDS else None
    return None


def distance_limit(word: str) -> int:
    """Short tokens only tolerate one edit."""
    return 1 if len(word) <= SHORT_TOKEN_LENGTH else MAX_EDIT_DISTANCE


def correct_keywords(tokens: List[Token], schema: SchemaSnapshot) -> Tuple[List[Token], List[Fix]]:
    """
    Reclassify exact keywords and fix misspelled ones.

    Args:
        tokens: Token stream (not modified)
        schema: Known tables and columns

    Returns:
        New token stream and the KEYWORD_TYPO fixes applied, in order

    Example:
        >>> tokens, fixes = correct_keywords(tokenize("SELEC * FROM users"), SchemaSnapshot())
        >>> tokens[0].text, fixes[0].confidence
        ('SELECT', <Confidence.HIGH: 'high'>)
    """
    out = list(tokens)
    fixes: List[Fix] = []
    significant = significant_indices(out)
    previous: Optional[Token] = None

    for position, index in enumerate(significant):
        token = out[index]

        if token.kind == TokenKind.IDENTIFIER:
            if _is_exact_keyword(token, schema):
                out[index] = replace(token, kind=TokenKind.KEYWORD)
            else:
                following = out[significant[position + 1]] if position + 1 < len(significant) else None
                fix = _keyword_fix(token, previous, following, schema)
                if fix:
                    out[index] = replace(token, kind=TokenKind.KEYWORD, text=fix.replacement)
                    fixes.append(fix)
                    logger.debug(f"Keyword fix: {fix}")

        previous = out[index]

    return out, fixes


def _is_exact_keyword(token: Token, schema: SchemaSnapshot) -> bool:
    if token.upper in SQL_KEYWORDS:
        return True
    return token.upper in RECOGNIZED_WORDS and not schema.has_name(token.text)


def _keyword_fix(
    token: Token,
    previous: Optional[Token],
    following: Optional[Token],
    schema: SchemaSnapshot,
) -> Optional[Fix]:
    """
    KEYWORD_TYPO fix for token, or None when it is not a misspelled keyword.

    Right before "(" only EXISTS / VALUES / IN / USING are accepted, and only
    for words that are not known function names; such fixes are MEDIUM since a
    user-defined function looks the same.
    """
    if not _is_candidate(token, previous, following, schema):
        return None

    before_paren = following is not None and following.is_punct("(")
    if before_paren and (len(token.text) <= SHORT_TOKEN_LENGTH or token.upper in _FUNCTION_NAMES):
        return None

    match = _closest_keyword(token.text, schema)
    if not match:
        return None
    distance, keyword = match
    if before_paren and keyword not in PAREN_KEYWORDS:
        return None

    high = distance == 1 and not before_paren
    return Fix(
        original=token.text,
        replacement=keyword,
        kind=FixKind.KEYWORD_TYPO,
        span=token.span,
        confidence=Confidence.HIGH if high else Confidence.MEDIUM,
        description=f"Corrected keyword '{token.text}' to '{keyword}'",
    )


def _is_candidate(
    token: Token,
    previous: Optional[Token],
    following: Optional[Token],
    schema: SchemaSnapshot,
) -> bool:
    """Positions where an unknown word is a name, not a misspelled keyword, are skipped."""
    if len(token.text) < MIN_KEYWORD_CANDIDATE_LENGTH:
        return False
    if schema.has_name(token.text):
        return False
    if previous is not None:
        if previous.is_punct("."):
            return False
        if keyword_of(previous) == "AS":
            return False
        if keyword_of(previous) in TABLE_INTRODUCERS:
            return False
    if following is not None and following.is_punct("."):
        return False
    return True


def _closest_keyword(word: str, schema: SchemaSnapshot) -> Optional[Tuple[int, str]]:
    """
    The unambiguous keyword closest to word, or None.

    A correction target tied with a recognized word still wins ("FORM" is one
    edit from both FROM and FOR). Two-edit matches must keep the first letter;
    without that guard ordinary column names ("name" -> "CASE") turn into
    keywords.
    """
    limit = distance_limit(word)
    ranked = rank_candidates(word, _VOCABULARY_SORTED, limit)
    if not ranked:
        return None

    distance = ranked[0][0]
    targets = [keyword for d, keyword in ranked if d == distance and keyword in SQL_KEYWORDS]
    if not targets:
        logger.debug(f"'{word}' is closest to {ranked[0][1]}, which is never a replacement")
        return None
    if len(targets) > 1:
        logger.debug(f"Ambiguous keyword match for '{word}': {targets[:2]}")
        return None

    keyword = targets[0]
    if distance == MAX_EDIT_DISTANCE and keyword[0] != word[0].upper():
        return None

    if not schema.is_empty and rank_candidates(word, schema.all_names(), distance):
        logger.debug(f"'{word}' is as close to a schema name as to {keyword}; leaving it")
        return None

    return distance, keyword
