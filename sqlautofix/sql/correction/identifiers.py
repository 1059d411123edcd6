"""
Identifier corrector - fixes misspelled table and column names.

Each identifier is first given a role from its position:
- TABLE:      right after FROM/JOIN/INTO/UPDATE, or after a comma in FROM
- QUALIFIER:  right before a "." (table name or alias)
- QUALIFIED:  right after a "." (column of the qualifier's table)
- COLUMN:     bare word inside SELECT/WHERE/GROUP BY/HAVING/ORDER BY/ON
- ALIAS:      after AS, right after a table reference or expression, or a CTE name

Tables are resolved first so that column candidates can be narrowed to the
tables the statement actually reads. Aliases and function names are never
corrected, and neither is anything that already matches the schema exactly.
"""

from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence, Tuple

from loguru import logger

from sqlautofix.config.constants import COLUMN_CLAUSES, MAX_EDIT_DISTANCE, TABLE_INTRODUCERS
from sqlautofix.sql.correction.distance import closest_unique
from sqlautofix.sql.correction.keywords import keyword_of
from sqlautofix.sql.correction.schema import SchemaSnapshot
from sqlautofix.sql.correction.tokenizer import significant_indices
from sqlautofix.sql.correction.types import Confidence, Fix, FixKind, Token, TokenKind

TABLE = "table"
QUALIFIER = "qualifier"
QUALIFIED = "qualified"
COLUMN = "column"
ALIAS = "alias"
SKIP = "skip"

# Keywords that open a clause for role purposes ("GROUP"/"ORDER" need a BY)
_CLAUSE_OPENERS = {"SELECT", "FROM", "WHERE", "HAVING", "LIMIT", "ON", "SET", "VALUES", "RETURNING"}


@dataclass
class _Reference:
    """An identifier in a name-bearing position."""
    index: int                      # Index into the token list
    role: str
    clause: Optional[str] = None
    qualifier: Optional[int] = None  # Reference index of the QUALIFIER for QUALIFIED
    table_ref: Optional[int] = None  # Reference index of the TABLE an ALIAS names
    resolved: Optional[str] = None   # Canonical table name once known


def correct_identifiers(tokens: List[Token], schema: SchemaSnapshot) -> Tuple[List[Token], List[Fix]]:
    """
    Fix table and column names that are close to exactly one schema name.

    Args:
        tokens: Token stream (not modified)
        schema: Known tables and columns; an empty snapshot makes this a no-op

    Returns:
        New token stream and the IDENTIFIER_TYPO fixes applied, in order

    Example:
        >>> schema = SchemaSnapshot.from_dict({"users": ["id", "active"]})
        >>> tokens, fixes = correct_identifiers(tokenize("SELECT actve FROM usres"), schema)
        >>> [f.replacement for f in fixes]
        ['users', 'active']
    """
    out = list(tokens)
    if schema.is_empty:
        return out, []

    references = _classify(out)
    aliases = _alias_names(out, references)
    fixes: List[Fix] = []

    # 1. Tables
    for ref in references:
        if ref.role != TABLE:
            continue
        word = out[ref.index].text
        if word.lower() in aliases:
            continue
        ref.resolved = schema.table(word)
        if ref.resolved is None:
            fix = _replace(out, ref.index, schema.table_names, schema, "table", column_owners=None)
            if fix:
                fixes.append(fix)
                ref.resolved = fix.replacement

    alias_tables = _alias_tables(out, references)
    referenced = []
    for ref in references:
        if ref.role == TABLE and ref.resolved and ref.resolved not in referenced:
            referenced.append(ref.resolved)

    # 2. Qualifiers (table names or aliases)
    for ref in references:
        if ref.role != QUALIFIER:
            continue
        word = out[ref.index].text
        lowered = word.lower()
        if lowered in alias_tables:
            ref.resolved = alias_tables[lowered]
            continue
        if lowered in aliases:
            continue
        ref.resolved = schema.table(word)
        if ref.resolved is None and not schema.has_name(word):
            fix = _replace(out, ref.index, schema.table_names, schema, "table", column_owners=None)
            if fix:
                fixes.append(fix)
                ref.resolved = fix.replacement

    # 3. Columns
    for ref in references:
        if ref.role == QUALIFIED:
            qualifier = references[ref.qualifier] if ref.qualifier is not None else None
            table = qualifier.resolved if qualifier else None
            word = out[ref.index].text
            if schema.has_name(word) or (qualifier is not None and table is None and _is_alias(out, qualifier, aliases)):
                continue
            if table:
                candidates = schema.columns_of(table)
                owners = (table,)
            else:
                candidates = schema.column_names
                owners = None
            fix = _replace(out, ref.index, candidates, schema, "column", column_owners=owners)
            if fix:
                fixes.append(fix)

        elif ref.role == COLUMN:
            word = out[ref.index].text
            if word.lower() in aliases or schema.has_name(word):
                continue
            if referenced:
                candidates = [c for table in referenced for c in schema.columns_of(table)]
                owners = tuple(referenced)
            else:
                candidates = list(schema.all_names())
                owners = None
            fix = _replace(out, ref.index, candidates, schema, "column", column_owners=owners)
            if fix:
                fixes.append(fix)

    return out, fixes


# ============================================================================
# Replacement
# ============================================================================

def _replace(
    out: List[Token],
    index: int,
    candidates: Sequence[str],
    schema: SchemaSnapshot,
    what: str,
    column_owners: Optional[Tuple[str, ...]],
) -> Optional[Fix]:
    """
    Replace out[index] with its unique closest candidate, if any.

    column_owners limits which tables count when deciding whether a matched
    column name is shared by several tables (None means all tables).
    """
    token = out[index]
    match = closest_unique(token.text, candidates, MAX_EDIT_DISTANCE)
    if match is None:
        return None
    distance, replacement = match

    confidence = Confidence.HIGH if distance == 1 else Confidence.MEDIUM
    if what == "column":
        owners = schema.tables_with_column(replacement)
        if column_owners is not None:
            owners = tuple(t for t in owners if t in column_owners)
        if len(owners) > 1:
            confidence = Confidence.MEDIUM

    out[index] = replace(token, text=replacement)
    fix = Fix(
        original=token.text,
        replacement=replacement,
        kind=FixKind.IDENTIFIER_TYPO,
        span=token.span,
        confidence=confidence,
        description=f"Corrected {what} name '{token.text}' to '{replacement}'",
    )
    logger.debug(f"Identifier fix: {fix}")
    return fix


# ============================================================================
# Role Classification
# ============================================================================

def _classify(tokens: List[Token]) -> List[_Reference]:
    """Walk significant tokens, tracking the clause at each parenthesis depth."""
    significant = significant_indices(tokens)
    references: List[_Reference] = []
    by_index: Dict[int, int] = {}
    clause_stack: List[Optional[str]] = [None]

    def at(position: int) -> Optional[Token]:
        if 0 <= position < len(significant):
            return tokens[significant[position]]
        return None

    for position, index in enumerate(significant):
        token = tokens[index]

        if token.is_punct("("):
            clause_stack.append(clause_stack[-1])
            continue
        if token.is_punct(")"):
            if len(clause_stack) > 1:
                clause_stack.pop()
            continue

        word = keyword_of(token)
        if word:
            following = keyword_of(at(position + 1))
            if word in ("GROUP", "ORDER") and following == "BY":
                clause_stack[-1] = f"{word} BY"
            elif word in _CLAUSE_OPENERS:
                clause_stack[-1] = word
            elif word == "JOIN":
                clause_stack[-1] = "FROM"
            continue

        if token.kind != TokenKind.IDENTIFIER:
            continue

        previous = at(position - 1)
        following = at(position + 1)
        clause = clause_stack[-1]
        ref = _Reference(index=index, role=SKIP, clause=clause)

        if previous is not None and previous.is_punct("."):
            ref.role = QUALIFIED
            qualifier_token = at(position - 2)
            qualifier_index = significant[position - 2] if position >= 2 else None
            if qualifier_index is not None and qualifier_index in by_index:
                ref.qualifier = by_index[qualifier_index]
                qualifier = references[ref.qualifier]
                # schema.table after FROM: the qualified part is the table
                if keyword_of(at(position - 3)) in TABLE_INTRODUCERS:
                    qualifier.role = SKIP
                    ref.role = TABLE
                    ref.qualifier = None
            elif qualifier_token is None or qualifier_token.kind != TokenKind.IDENTIFIER:
                ref.role = SKIP
        elif following is not None and following.is_punct("."):
            ref.role = QUALIFIER
        elif following is not None and following.is_punct("("):
            ref.role = SKIP  # function call
        elif previous is not None and previous.is_punct("::"):
            ref.role = SKIP  # type name in a cast
        elif keyword_of(following) == "AS" and _opens_paren(at(position + 2)):
            ref.role = ALIAS  # CTE name: name AS (
        elif keyword_of(previous) == "AS":
            ref.role = ALIAS
            ref.table_ref = _table_before(references, by_index, significant, position - 2)
        elif keyword_of(previous) in TABLE_INTRODUCERS:
            ref.role = TABLE
        elif previous is not None and previous.is_punct(",") and clause == "FROM":
            ref.role = TABLE
        elif previous is not None and (previous.kind == TokenKind.IDENTIFIER or previous.is_punct(")")):
            ref.role = ALIAS
            ref.table_ref = _table_before(references, by_index, significant, position - 1)
        elif clause in COLUMN_CLAUSES:
            ref.role = COLUMN

        by_index[index] = len(references)
        references.append(ref)

    return references


def _opens_paren(token: Optional[Token]) -> bool:
    return token is not None and token.is_punct("(")


def _table_before(
    references: List[_Reference],
    by_index: Dict[int, int],
    significant: List[int],
    position: int,
) -> Optional[int]:
    """Reference index of the TABLE identifier at a significant position, if any."""
    if position < 0:
        return None
    ref_index = by_index.get(significant[position])
    if ref_index is not None and references[ref_index].role == TABLE:
        return ref_index
    return None


def _alias_names(tokens: List[Token], references: List[_Reference]) -> Dict[str, Optional[int]]:
    """Lowercased alias and CTE names -> the TABLE reference they name (if any)."""
    return {
        tokens[ref.index].text.lower(): ref.table_ref
        for ref in references
        if ref.role == ALIAS
    }


def _alias_tables(tokens: List[Token], references: List[_Reference]) -> Dict[str, str]:
    """Lowercased table alias -> resolved table name."""
    mapping = {}
    for ref in references:
        if ref.role == ALIAS and ref.table_ref is not None:
            table = references[ref.table_ref].resolved
            if table:
                mapping[tokens[ref.index].text.lower()] = table
    return mapping


def _is_alias(tokens: List[Token], ref: _Reference, aliases: Dict[str, Optional[int]]) -> bool:
    return tokens[ref.index].text.lower() in aliases
