"""
Quote/balance corrector - closes unterminated string literals.

The tokenizer marks a literal that runs off the end of the input as
unterminated. The closing quote goes right before the first ";" inside the
literal (the statement most likely ended there) or at end-of-input. These
fixes are always LOW confidence: where the literal was meant to end is a
guess, so callers must confirm them.
"""

from dataclasses import replace
from typing import List, Tuple

from loguru import logger

from sqlautofix.sql.correction.tokenizer import tokenize
from sqlautofix.sql.correction.types import Confidence, Fix, FixKind, Token, TokenKind


def correct_quotes(tokens: List[Token], schema=None) -> Tuple[List[Token], List[Fix]]:
    """
    Close every unterminated string literal.

    Args:
        tokens: Token stream (not modified)
        schema: Unused; accepted so every stage has the same signature

    Returns:
        New token stream and one QUOTE_BALANCE fix per literal closed

    Example:
        >>> tokens, fixes = correct_quotes(tokenize("SELECT 'abc; SELECT 1"))
        >>> render(tokens)
        "SELECT 'abc'; SELECT 1"
    """
    out: List[Token] = []
    fixes: List[Fix] = []

    for token in tokens:
        if token.kind == TokenKind.STRING_LITERAL and token.unterminated:
            closed, fix = _close_literal(token)
            out.extend(closed)
            fixes.append(fix)
            logger.debug(f"Quote fix: {fix}")
        else:
            out.append(token)

    return out, fixes


def _close_literal(token: Token) -> Tuple[List[Token], Fix]:
    quote = token.text[0]
    text = token.text

    cut = text.find(";", 1)
    if cut != -1:
        rest = tokenize(text[cut:], offset=token.start + cut)
        # Closing here must not leave a new unterminated literal behind
        if not any(t.unterminated for t in rest):
            body = text[:cut]
            closed = replace(token, text=body + quote, end=token.start + cut, unterminated=False)
            return [closed] + rest, _quote_fix(token, body, quote, "before ';'")

    closed = replace(token, text=text + quote, unterminated=False)
    return [closed], _quote_fix(token, text, quote, "at end of input")


def _quote_fix(token: Token, body: str, quote: str, where: str) -> Fix:
    return Fix(
        original=body,
        replacement=body + quote,
        kind=FixKind.QUOTE_BALANCE,
        span=(token.start, token.start + len(body)),
        confidence=Confidence.LOW,
        description=f"Closed unterminated string literal {where}",
    )
