"""
SQL tokenizer - splits raw, possibly malformed text into positioned tokens.

This is the ONLY place that looks at raw characters. Every corrector works on
the token list, which always covers the whole input: each offset belongs to
exactly one token and concatenating the token texts reproduces the input.

The tokenizer never fails. Characters it does not understand become
one-character PUNCTUATION tokens, and string literals or block comments that
run off the end of the input simply extend to the end.
"""

from typing import List, Tuple

from sqlautofix.sql.correction.types import Token, TokenKind

WHITESPACE_CHARS = " \t\r\n\f\v"
QUOTE_CHARS = "'\""
MULTI_CHAR_OPERATORS = ("<=", ">=", "<>", "!=", "||", "::")


def tokenize(text: str, offset: int = 0) -> List[Token]:
    """
    Tokenize SQL text.

    Args:
        text: Raw SQL text
        offset: Added to every span; used when re-tokenizing a slice of a
            larger input so spans keep pointing into the original

    Returns:
        Tokens covering the whole of text, in order

    Example:
        >>> [t.text for t in tokenize("SELECT a, 'x' FROM t")]
        ['SELECT', ' ', 'a', ',', ' ', "'x'", ' ', 'FROM', ' ', 't']
    """
    tokens: List[Token] = []
    pos = 0
    length = len(text)

    while pos < length:
        char = text[pos]

        if char in WHITESPACE_CHARS:
            end = _scan_while(text, pos, lambda c: c in WHITESPACE_CHARS)
            kind, unterminated = TokenKind.WHITESPACE, False
        elif text.startswith("--", pos):
            newline = text.find("\n", pos)
            end = length if newline == -1 else newline
            kind, unterminated = TokenKind.COMMENT, False
        elif text.startswith("/*", pos):
            close = text.find("*/", pos + 2)
            end = length if close == -1 else close + 2
            kind, unterminated = TokenKind.COMMENT, False
        elif char in QUOTE_CHARS:
            end, unterminated = _scan_string(text, pos)
            kind = TokenKind.STRING_LITERAL
        elif char.isdigit():
            end = _scan_number(text, pos)
            kind, unterminated = TokenKind.NUMBER, False
        elif _is_word_char(char):
            end = _scan_while(text, pos, _is_word_char)
            kind, unterminated = TokenKind.IDENTIFIER, False
        else:
            end = pos + _operator_length(text, pos)
            kind, unterminated = TokenKind.PUNCTUATION, False

        tokens.append(Token(
            kind=kind,
            text=text[pos:end],
            start=offset + pos,
            end=offset + end,
            unterminated=unterminated,
        ))
        pos = end

    return tokens


def render(tokens: List[Token]) -> str:
    """Concatenate token texts back into SQL."""
    return "".join(token.text for token in tokens)


def layout(tokens: List[Token]) -> List[Tuple[int, int]]:
    """
    Offsets of each token in the rendered text.

    Token spans always refer to the original input; this gives the positions
    in the rewritten text, shifted by every earlier replacement.
    """
    positions = []
    cursor = 0
    for token in tokens:
        positions.append((cursor, cursor + len(token.text)))
        cursor += len(token.text)
    return positions


def significant_indices(tokens: List[Token]) -> List[int]:
    """Indices of tokens that are neither whitespace nor comments."""
    return [i for i, token in enumerate(tokens) if not token.is_trivia]


# ============================================================================
# Scanners
# ============================================================================

def _is_word_char(char: str) -> bool:
    return char.isalnum() or char == "_"


def _scan_while(text: str, pos: int, predicate) -> int:
    end = pos
    while end < len(text) and predicate(text[end]):
        end += 1
    return end


def _scan_string(text: str, pos: int) -> Tuple[int, bool]:
    """
    Scan a quoted literal starting at pos.

    A doubled quote character is an escaped quote. Returns the end offset and
    whether the literal was left unterminated (it then runs to end-of-input).
    """
    quote = text[pos]
    end = pos + 1
    while end < len(text):
        if text[end] == quote:
            if end + 1 < len(text) and text[end + 1] == quote:
                end += 2
                continue
            return end + 1, False
        end += 1
    return len(text), True


def _scan_number(text: str, pos: int) -> int:
    """Digits with at most one decimal point, which must be followed by a digit."""
    end = _scan_while(text, pos, str.isdigit)
    if end + 1 < len(text) and text[end] == "." and text[end + 1].isdigit():
        end = _scan_while(text, end + 1, str.isdigit)
    return end


def _operator_length(text: str, pos: int) -> int:
    for operator in MULTI_CHAR_OPERATORS:
        if text.startswith(operator, pos):
            return len(operator)
    return 1
