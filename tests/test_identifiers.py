"""
Tests for the identifier corrector.

Identifiers are checked after keywords, so each test runs both stages the way
the pipeline does.
"""

import pytest

from sqlautofix.sql.correction.identifiers import correct_identifiers
from sqlautofix.sql.correction.keywords import correct_keywords
from sqlautofix.sql.correction.schema import SchemaSnapshot
from sqlautofix.sql.correction.tokenizer import render, tokenize
from sqlautofix.sql.correction.types import Confidence, FixKind


@pytest.fixture
def schema():
    """users and orders share id"""
    return SchemaSnapshot.from_dict({
        "users": ["id", "name", "active"],
        "orders": ["id", "user_id", "total"],
    })


def run(sql, schema):
    """Keyword stage then identifier stage"""
    tokens, _ = correct_keywords(tokenize(sql), schema)
    tokens, fixes = correct_identifiers(tokens, schema)
    return render(tokens), fixes


class TestTableAndColumnTypos:
    """Test basic identifier correction"""

    def test_table_and_column(self, schema):
        """Misspelled table and column are both fixed"""
        fixed, fixes = run("SELECT * FROM usres WHERE actve = true", schema)

        assert fixed == "SELECT * FROM users WHERE active = true"
        assert [f.replacement for f in fixes] == ["users", "active"]
        assert all(f.kind == FixKind.IDENTIFIER_TYPO for f in fixes)
        assert all(f.confidence == Confidence.HIGH for f in fixes)

    def test_known_names_untouched(self, schema):
        """Exact matches are never corrected, whatever their case"""
        fixed, fixes = run("SELECT ID, Name FROM Users", schema)

        assert fixed == "SELECT ID, Name FROM Users"
        assert fixes == []

    def test_two_edit_column_is_medium(self, schema):
        """Two edits away gives MEDIUM"""
        fixed, fixes = run("SELECT totl_ FROM orders", schema)

        assert fixed == "SELECT total FROM orders"
        assert fixes[0].confidence == Confidence.MEDIUM

    def test_too_far_is_left_alone(self, schema):
        """Names more than two edits from anything stay as typed"""
        fixed, fixes = run("SELECT zzzzzz FROM users", schema)

        assert fixed == "SELECT zzzzzz FROM users"
        assert fixes == []

    def test_empty_schema_is_a_no_op(self):
        """Without a schema there is nothing to compare against"""
        tokens = tokenize("SELECT actve FROM usres")
        out, fixes = correct_identifiers(tokens, SchemaSnapshot())

        assert out == tokens
        assert fixes == []


class TestScoping:
    """Test that columns are matched against the tables in the statement"""

    def test_qualified_column_through_alias(self, schema):
        """u.nmae resolves u to users and fixes the column"""
        fixed, fixes = run("SELECT u.nmae FROM usres u", schema)

        assert fixed == "SELECT u.name FROM users u"
        assert [f.original for f in fixes] == ["usres", "nmae"]

    def test_qualified_column_through_table_name(self, schema):
        """orders.totl resolves against orders"""
        fixed, _ = run("SELECT orders.totl FROM orders", schema)
        assert fixed == "SELECT orders.total FROM orders"

    def test_misspelled_qualifier(self, schema):
        """A qualifier that is neither alias nor table is a table typo"""
        fixed, _ = run("SELECT ordres.total FROM orders", schema)
        assert fixed == "SELECT orders.total FROM orders"

    def test_shared_column_is_medium(self, schema):
        """A column that several tables in scope own is MEDIUM"""
        fixed, fixes = run("SELECT ide FROM users, orders", schema)

        assert fixed == "SELECT id FROM users, orders"
        assert fixes[0].confidence == Confidence.MEDIUM

    def test_column_limited_to_referenced_tables(self, schema):
        """Columns of tables not in the statement are not candidates"""
        fixed, fixes = run("SELECT totl FROM users", schema)

        assert fixed == "SELECT totl FROM users"
        assert fixes == []

    def test_join_tables_are_in_scope(self, schema):
        """JOIN brings its table's columns into scope"""
        fixed, _ = run("SELECT u.name, o.totl FROM users u JOIN orders o ON o.user_id = u.id", schema)
        assert fixed == "SELECT u.name, o.total FROM users u JOIN orders o ON o.user_id = u.id"


class TestNonReferences:
    """Test names that must never be corrected"""

    def test_aliases(self, schema):
        """An alias close to a table name is still an alias"""
        fixed, fixes = run("SELECT usr.id FROM users usr", schema)

        assert fixed == "SELECT usr.id FROM users usr"
        assert fixes == []

    def test_function_names(self):
        """cout(...) is a function call, not a column typo"""
        schema = SchemaSnapshot.from_dict({"users": ["id", "count"]})
        fixed, fixes = run("SELECT cout(id) FROM users", schema)

        assert fixed == "SELECT cout(id) FROM users"
        assert fixes == []

    def test_ambiguous_candidates(self):
        """cat and car are equally close to caz"""
        schema = SchemaSnapshot.from_dict({"pets": ["cat", "car"]})
        _, fixes = run("SELECT caz FROM pets", schema)
        assert fixes == []

    def test_cte_name(self, schema):
        """A CTE name is not a table typo"""
        sql = "WITH usrs AS (SELECT id FROM users) SELECT id FROM usrs"
        fixed, fixes = run(sql, schema)

        assert fixed == sql
        assert fixes == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
