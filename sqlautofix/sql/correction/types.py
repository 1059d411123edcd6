"""
Type definitions for the SQL auto-correction engine.

Everything the correctors exchange is an immutable value:
- Token: a classified, positioned slice of the input
- Fix: one correction, reported against the *original* text
- FixResult: the outcome of one fix() call

Correctors never mutate a token in place; they build new lists with
dataclasses.replace(), so a pipeline pass can be retried safely.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple


class TokenKind(Enum):
    """Lexical class of a token."""
    KEYWORD = "keyword"
    IDENTIFIER = "identifier"
    STRING_LITERAL = "string_literal"
    NUMBER = "number"
    PUNCTUATION = "punctuation"
    WHITESPACE = "whitespace"
    COMMENT = "comment"


@dataclass(frozen=True)
class Token:
    """
    A classified slice of the input.

    Attributes:
        kind: Lexical class
        text: Current text (may differ from the original after a correction)
        start: Start offset in the original input
        end: End offset in the original input (exclusive)
        unterminated: String literal that reached end-of-input without a closing quote
        synthetic: Inserted by a corrector; has a zero-width span
    """
    kind: TokenKind
    text: str
    start: int
    end: int
    unterminated: bool = False
    synthetic: bool = False

    @property
    def span(self) -> Tuple[int, int]:
        return (self.start, self.end)

    @property
    def upper(self) -> str:
        return self.text.upper()

    @property
    def is_trivia(self) -> bool:
        """Whitespace and comments carry no syntax."""
        return self.kind in (TokenKind.WHITESPACE, TokenKind.COMMENT)

    def is_keyword(self, *words: str) -> bool:
        """True for a KEYWORD token, optionally restricted to the given words."""
        if self.kind != TokenKind.KEYWORD:
            return False
        return not words or self.upper in words

    def is_punct(self, *chars: str) -> bool:
        if self.kind != TokenKind.PUNCTUATION:
            return False
        return not chars or self.text in chars


class FixKind(Enum):
    """Category of a correction."""
    KEYWORD_TYPO = "keyword_typo"
    IDENTIFIER_TYPO = "identifier_typo"
    CLAUSE_REORDER = "clause_reorder"
    MISSING_KEYWORD = "missing_keyword"
    QUOTE_BALANCE = "quote_balance"


_CONFIDENCE_RANK = {"low": 0, "medium": 1, "high": 2}


class Confidence(Enum):
    """
    Certainty of a correction, ordered HIGH > MEDIUM > LOW.

    Example:
        >>> Confidence.lowest([Confidence.HIGH, Confidence.MEDIUM])
        <Confidence.MEDIUM: 'medium'>
    """
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _CONFIDENCE_RANK[self.value]

    def __lt__(self, other: "Confidence") -> bool:
        if not isinstance(other, Confidence):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: "Confidence") -> bool:
        if not isinstance(other, Confidence):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: "Confidence") -> bool:
        if not isinstance(other, Confidence):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: "Confidence") -> bool:
        if not isinstance(other, Confidence):
            return NotImplemented
        return self.rank >= other.rank

    @classmethod
    def lowest(cls, tiers: Iterable["Confidence"]) -> Optional["Confidence"]:
        """Weakest tier in the iterable, or None when it is empty."""
        tiers = list(tiers)
        return min(tiers) if tiers else None


class AutoAcceptPolicy(str, Enum):
    """Caller-side rule for applying a FixResult without asking."""
    ALWAYS = "always"
    HIGH = "high"
    NEVER = "never"


@dataclass(frozen=True)
class Fix:
    """
    A single correction.

    Attributes:
        original: Text that was replaced (as it appeared in the input)
        replacement: Text that replaced it
        kind: Correction category
        span: (start, end) of the corrected text in the original input
        confidence: How certain the correction is
        description: Human-readable summary for confirmation prompts

    Example:
        >>> fix = Fix("SELEC", "SELECT", FixKind.KEYWORD_TYPO, (0, 5), Confidence.HIGH)
        >>> str(fix)
        "keyword_typo 'SELEC' -> 'SELECT' at 0:5 (high)"
    """
    original: str
    replacement: str
    kind: FixKind
    span: Tuple[int, int]
    confidence: Confidence
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "original": self.original,
            "replacement": self.replacement,
            "kind": self.kind.value,
            "span": list(self.span),
            "confidence": self.confidence.value,
            "description": self.description,
        }

    def __str__(self) -> str:
        start, end = self.span
        return (
            f"{self.kind.value} {self.original!r} -> {self.replacement!r} "
            f"at {start}:{end} ({self.confidence.value})"
        )


@dataclass(frozen=True)
class FixResult:
    """
    Outcome of one fix() call.

    confidence is the weakest tier among the fixes; a result without fixes
    carries no confidence at all (None).
    """
    fixed_sql: str
    fixes: Tuple[Fix, ...] = field(default_factory=tuple)
    confidence: Optional[Confidence] = None

    @property
    def changed(self) -> bool:
        return bool(self.fixes)

    @property
    def has_quote_fix(self) -> bool:
        return any(f.kind == FixKind.QUOTE_BALANCE for f in self.fixes)

    @classmethod
    def from_fixes(cls, fixed_sql: str, fixes: List[Fix]) -> "FixResult":
        return cls(
            fixed_sql=fixed_sql,
            fixes=tuple(fixes),
            confidence=Confidence.lowest(f.confidence for f in fixes),
        )

    @classmethod
    def unchanged(cls, raw_sql: str) -> "FixResult":
        return cls(fixed_sql=raw_sql)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fixed_sql": self.fixed_sql,
            "fixes": [f.to_dict() for f in self.fixes],
            "confidence": self.confidence.value if self.confidence else None,
            "changed": self.changed,
        }
