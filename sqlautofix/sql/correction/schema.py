"""
Schema snapshot - read-only index of known table and column names.

The snapshot is supplied by the schema provider before each fix() call. The
engine only reads it: no caching, no mutation. An empty snapshot means "not
connected yet" and turns identifier correction off.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from loguru import logger

from sqlautofix.utils.errors import SchemaSnapshotError


@dataclass(frozen=True)
class SchemaSnapshot:
    """
    Immutable mapping of table name -> ordered column names.

    Lookups are case-insensitive; the original spelling is what corrections
    suggest.

    Example:
        >>> schema = SchemaSnapshot.from_dict({"users": ["id", "name"]})
        >>> schema.table("USERS")
        'users'
        >>> schema.columns_of("users")
        ('id', 'name')
    """
    tables: Tuple[Tuple[str, Tuple[str, ...]], ...] = ()
    _tables_by_lower: Dict[str, str] = field(default_factory=dict, init=False, repr=False, compare=False)
    _columns_by_table: Dict[str, Tuple[str, ...]] = field(default_factory=dict, init=False, repr=False, compare=False)
    _tables_by_column: Dict[str, Tuple[str, ...]] = field(default_factory=dict, init=False, repr=False, compare=False)
    _column_spelling: Dict[str, str] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self):
        tables_by_lower: Dict[str, str] = {}
        columns_by_table: Dict[str, Tuple[str, ...]] = {}
        tables_by_column: Dict[str, List[str]] = {}
        column_spelling: Dict[str, str] = {}

        for table_name, columns in self.tables:
            tables_by_lower.setdefault(table_name.lower(), table_name)
            columns_by_table[table_name.lower()] = tuple(columns)
            for column in columns:
                column_spelling.setdefault(column.lower(), column)
                owners = tables_by_column.setdefault(column.lower(), [])
                if table_name not in owners:
                    owners.append(table_name)

        object.__setattr__(self, "_tables_by_lower", tables_by_lower)
        object.__setattr__(self, "_columns_by_table", columns_by_table)
        object.__setattr__(
            self, "_tables_by_column", {k: tuple(v) for k, v in tables_by_column.items()}
        )
        object.__setattr__(self, "_column_spelling", column_spelling)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def empty(cls) -> "SchemaSnapshot":
        return cls()

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "SchemaSnapshot":
        """
        Build a snapshot from a plain mapping.

        Accepted shapes:
            {"users": ["id", "name"]}
            {"users": {"columns": ["id", "name"]}}
            {"tables": {"users": {"columns": ["id", "name"]}}}   (join graph document)

        Raises:
            SchemaSnapshotError: If the mapping has an unexpected shape
        """
        if not data:
            return cls()
        if not isinstance(data, Mapping):
            raise SchemaSnapshotError(f"Schema must be a mapping, got {type(data).__name__}")

        tables = data.get("tables") if isinstance(data.get("tables"), Mapping) else data

        entries = []
        for table_name, spec in tables.items():
            if not isinstance(table_name, str) or not table_name:
                raise SchemaSnapshotError(f"Invalid table name: {table_name!r}")
            entries.append((table_name, _columns_from_spec(table_name, spec)))

        logger.debug(f"Built schema snapshot with {len(entries)} tables")
        return cls(tables=tuple(entries))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def is_empty(self) -> bool:
        return not self.tables

    @property
    def table_names(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self.tables)

    @property
    def column_names(self) -> Tuple[str, ...]:
        """Every distinct column name across all tables, in first-seen order."""
        return tuple(self._column_spelling.values())

    def table(self, name: str) -> Optional[str]:
        """Canonical spelling of a table name, or None if unknown."""
        return self._tables_by_lower.get(name.lower())

    def columns_of(self, table: str) -> Tuple[str, ...]:
        return self._columns_by_table.get(table.lower(), ())

    def tables_with_column(self, column: str) -> Tuple[str, ...]:
        return self._tables_by_column.get(column.lower(), ())

    def has_name(self, name: str) -> bool:
        """True if name is a known table or column (case-insensitive)."""
        lowered = name.lower()
        return lowered in self._tables_by_lower or lowered in self._column_spelling

    def all_names(self) -> Tuple[str, ...]:
        """Table names followed by column names."""
        return self.table_names + self.column_names

    def to_dict(self) -> Dict[str, List[str]]:
        return {name: list(columns) for name, columns in self.tables}


SchemaLike = Union[SchemaSnapshot, Mapping[str, Any], None]


def as_snapshot(schema: SchemaLike) -> SchemaSnapshot:
    """Accept a snapshot, a plain mapping or None."""
    if isinstance(schema, SchemaSnapshot):
        return schema
    return SchemaSnapshot.from_dict(schema)


def load_schema_snapshot(path: Union[str, Path]) -> SchemaSnapshot:
    """
    Load a snapshot from a JSON file.

    Raises:
        SchemaSnapshotError: If the file is missing, not JSON or badly shaped
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise SchemaSnapshotError(f"Schema file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise SchemaSnapshotError(f"Schema file is not valid JSON: {path}: {e}") from e

    snapshot = SchemaSnapshot.from_dict(data)
    logger.info(f"Loaded schema snapshot from {path} ({len(snapshot.tables)} tables)")
    return snapshot


def _columns_from_spec(table_name: str, spec: Any) -> Tuple[str, ...]:
    if isinstance(spec, Mapping):
        spec = spec.get("columns", [])
    if isinstance(spec, str) or not isinstance(spec, (Sequence, Iterable)):
        raise SchemaSnapshotError(f"Columns of table '{table_name}' must be a list")

    columns = []
    for column in spec:
        if isinstance(column, Mapping):
            column = column.get("name")
        if not isinstance(column, str) or not column:
            raise SchemaSnapshotError(f"Invalid column in table '{table_name}': {column!r}")
        columns.append(column)
    return tuple(columns)
