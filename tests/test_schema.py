"""
Tests for the schema snapshot.
"""

import json

import pytest

from sqlautofix.sql.correction.schema import SchemaSnapshot, as_snapshot, load_schema_snapshot
from sqlautofix.utils.errors import AutoFixError, SchemaSnapshotError


@pytest.fixture
def snapshot():
    """Two tables sharing an id column"""
    return SchemaSnapshot.from_dict({
        "users": ["id", "name", "active"],
        "Orders": ["id", "user_id", "total"],
    })


class TestConstruction:
    """Test SchemaSnapshot.from_dict() shapes"""

    def test_plain_mapping(self, snapshot):
        """{table: [columns]}"""
        assert snapshot.table_names == ("users", "Orders")
        assert snapshot.columns_of("users") == ("id", "name", "active")

    def test_columns_key(self):
        """{table: {"columns": [...]}}"""
        schema = SchemaSnapshot.from_dict({"users": {"columns": ["id", "name"]}})
        assert schema.columns_of("users") == ("id", "name")

    def test_tables_document(self):
        """{"tables": {...}} documents, with column objects"""
        schema = SchemaSnapshot.from_dict({
            "tables": {"users": {"columns": [{"name": "id"}, {"name": "email"}]}}
        })
        assert schema.columns_of("users") == ("id", "email")

    def test_none_and_empty(self):
        """None and {} mean not connected"""
        assert SchemaSnapshot.from_dict(None).is_empty
        assert SchemaSnapshot.from_dict({}).is_empty
        assert SchemaSnapshot.empty().is_empty
        assert as_snapshot(None).is_empty

    def test_as_snapshot_passes_snapshots_through(self, snapshot):
        """An existing snapshot is used as-is"""
        assert as_snapshot(snapshot) is snapshot

    @pytest.mark.parametrize("data", [
        {"users": "id, name"},
        {"users": 5},
        {"users": ["id", 3]},
        {"users": [""]},
        ["users"],
    ])
    def test_malformed_documents(self, data):
        """Badly shaped schemas raise SchemaSnapshotError"""
        with pytest.raises(SchemaSnapshotError):
            SchemaSnapshot.from_dict(data)

    def test_error_hierarchy(self):
        """SchemaSnapshotError is an AutoFixError"""
        assert issubclass(SchemaSnapshotError, AutoFixError)


class TestLookups:
    """Test case-insensitive lookups"""

    def test_table_lookup_keeps_spelling(self, snapshot):
        """Lookups ignore case and return the canonical spelling"""
        assert snapshot.table("ORDERS") == "Orders"
        assert snapshot.table("missing") is None

    def test_columns_of_unknown_table(self, snapshot):
        """Unknown tables have no columns"""
        assert snapshot.columns_of("missing") == ()

    def test_tables_with_column(self, snapshot):
        """Shared columns list every owner"""
        assert snapshot.tables_with_column("ID") == ("users", "Orders")
        assert snapshot.tables_with_column("total") == ("Orders",)

    def test_has_name(self, snapshot):
        """Tables and columns are both names"""
        assert snapshot.has_name("USERS")
        assert snapshot.has_name("user_id")
        assert not snapshot.has_name("usres")

    def test_column_names_are_distinct(self, snapshot):
        """Shared columns appear once"""
        assert snapshot.column_names.count("id") == 1
        assert snapshot.all_names()[:2] == ("users", "Orders")

    def test_to_dict(self, snapshot):
        """to_dict() gives back the plain mapping"""
        assert snapshot.to_dict()["users"] == ["id", "name", "active"]

    def test_snapshots_compare_by_tables(self):
        """Equal documents give equal snapshots"""
        assert SchemaSnapshot.from_dict({"t": ["a"]}) == SchemaSnapshot.from_dict({"t": ["a"]})


class TestLoadFromFile:
    """Test load_schema_snapshot()"""

    def test_load_json(self, tmp_path):
        """A JSON schema file loads into a snapshot"""
        path = tmp_path / "schema.json"
        path.write_text(json.dumps({"users": ["id", "name"]}), encoding="utf-8")

        schema = load_schema_snapshot(path)

        assert schema.columns_of("users") == ("id", "name")

    def test_missing_file(self, tmp_path):
        """A missing file is a SchemaSnapshotError"""
        with pytest.raises(SchemaSnapshotError, match="not found"):
            load_schema_snapshot(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        """Broken JSON is a SchemaSnapshotError"""
        path = tmp_path / "schema.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(SchemaSnapshotError, match="not valid JSON"):
            load_schema_snapshot(str(path))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
