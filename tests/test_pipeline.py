"""
Tests for the full correction pipeline - fix().

These tests verify:
1. The end-to-end scenarios (keyword, identifier, clause and quote fixes)
2. Result properties: idempotence, purity, confidence aggregation
3. fix() never raises and never produces a corrupted rewrite
"""

from dataclasses import replace

import pytest

from sqlautofix.sql.correction import pipeline
from sqlautofix.sql.correction.distance import bounded_distance
from sqlautofix.sql.correction.pipeline import fix
from sqlautofix.sql.correction.schema import SchemaSnapshot
from sqlautofix.sql.correction.types import Confidence, Fix, FixKind, TokenKind


USERS = {"users": ["id", "name"]}
USERS_ACTIVE = {"users": ["id", "active"]}


VALID_POSTGRES = [
    "SELECT * FROM users FOR UPDATE",
    "SELECT id FROM users ORDER BY id DESC NULLS LAST",
    "SELECT now() AT TIME ZONE 'UTC' FROM users",
    "SELECT id FROM users ORDER BY id FETCH FIRST 10 ROWS ONLY",
    "SELECT id FROM users ORDER BY id OFFSET 5 ROWS FETCH NEXT 10 ROWS ONLY",
    "SELECT row_number() OVER (PARTITION BY id ORDER BY id) FROM users",
    "SELECT CAST(id AS text) FROM users",
    "SELECT id FROM users WHERE id = ANY (ARRAY[1, 2])",
    "SELECT id FROM users WHERE created_at > now() - INTERVAL '1 day'",
    "SELECT name FROM users WHERE name LIKE 'a!%' ESCAPE '!'",
    "SELECT * FROM users u NATURAL JOIN orders o",
    "INSERT INTO users (id, name) VALUES (1, 'a') ON CONFLICT DO NOTHING",
]
SHOP = {"users": ["id", "name", "created_at"], "orders": ["id", "user_id"]}

SCENARIOS = [
    ("SELEC * FROM users", USERS),
    ("SELECT * FROM usres WHERE actve = true", USERS_ACTIVE),
    ("SELECT id, name FROM users", USERS),
    ("SELECT id FROM users ORDER BY id WHERE id > 1", USERS),
    ("SELECT * FROM users WHERE name = 'Alice", USERS),
    ("SELECT 'abc; SELEC 1", None),
    ("SELECT u.nmae FROM usres u -- who\nORDER BY u.id WHERE u.id > 1;", USERS),
]


class TestScenarios:
    """Test the end-to-end scenarios"""

    def test_keyword_typo(self):
        """SELEC -> SELECT"""
        result = fix("SELEC * FROM users", USERS)

        assert result.fixed_sql == "SELECT * FROM users"
        assert result.changed
        assert [f.kind for f in result.fixes] == [FixKind.KEYWORD_TYPO]
        assert result.confidence == Confidence.HIGH

    def test_identifier_typos(self):
        """usres -> users, actve -> active"""
        result = fix("SELECT * FROM usres WHERE actve = true", USERS_ACTIVE)

        assert result.fixed_sql == "SELECT * FROM users WHERE active = true"
        assert [f.kind for f in result.fixes] == [FixKind.IDENTIFIER_TYPO, FixKind.IDENTIFIER_TYPO]
        assert result.confidence == Confidence.HIGH

    def test_valid_query_unchanged(self):
        """Nothing to fix"""
        sql = "SELECT id, name FROM users"
        result = fix(sql, USERS)

        assert result.fixed_sql == sql
        assert not result.changed
        assert result.fixes == ()
        assert result.confidence is None

    def test_clause_reorder(self):
        """ORDER BY before WHERE"""
        result = fix("SELECT id FROM users ORDER BY id WHERE id > 1", USERS)

        assert result.fixed_sql == "SELECT id FROM users WHERE id > 1 ORDER BY id"
        assert [f.kind for f in result.fixes] == [FixKind.CLAUSE_REORDER]
        assert result.confidence == Confidence.MEDIUM

    def test_unterminated_string(self):
        """Closing quote goes at the end"""
        result = fix("SELECT * FROM users WHERE name = 'Alice", USERS)

        assert result.fixed_sql == "SELECT * FROM users WHERE name = 'Alice'"
        assert [f.kind for f in result.fixes] == [FixKind.QUOTE_BALANCE]
        assert result.confidence == Confidence.LOW
        assert result.has_quote_fix

    def test_second_pass_fixes_split_statement(self):
        """A statement split off by a closed quote gets its own keyword fixes"""
        result = fix("SELECT 'abc; SELEC 1")

        assert result.fixed_sql == "SELECT 'abc'; SELECT 1"
        assert [f.kind for f in result.fixes] == [FixKind.QUOTE_BALANCE, FixKind.KEYWORD_TYPO]
        assert result.confidence == Confidence.LOW

    def test_all_stages_together(self):
        """Identifier, clause and comment handling in one statement"""
        result = fix("SELECT u.nmae FROM usres u -- who\nORDER BY u.id WHERE u.id > 1;", USERS)

        assert result.fixed_sql == "SELECT u.name FROM users u -- who\nWHERE u.id > 1 ORDER BY u.id;"
        kinds = [f.kind for f in result.fixes]
        assert kinds.count(FixKind.IDENTIFIER_TYPO) == 2
        assert kinds.count(FixKind.CLAUSE_REORDER) == 1
        assert result.confidence == Confidence.MEDIUM

    def test_clause_reorder_keeps_line_breaks(self):
        """Moved clauses keep the whitespace that separated the clauses"""
        result = fix("SELECT id\nFROM users\nORDER BY id\nWHERE id > 1", USERS)

        assert result.fixed_sql == "SELECT id\nFROM users\nWHERE id > 1\nORDER BY id"
        assert [f.kind for f in result.fixes] == [FixKind.CLAUSE_REORDER]

    def test_paren_keyword_typo(self):
        """EXIST ( -> EXISTS ( needs confirmation"""
        result = fix("SELECT * FROM users WHERE EXIST (SELECT 1)", USERS)

        assert result.fixed_sql == "SELECT * FROM users WHERE EXISTS (SELECT 1)"
        assert result.confidence == Confidence.MEDIUM

    @pytest.mark.parametrize("sql", VALID_POSTGRES)
    def test_valid_postgres_unchanged(self, sql):
        """Valid PostgreSQL words are never rewritten into other keywords"""
        result = fix(sql, SHOP)

        assert result.changed is False
        assert result.fixed_sql == sql

    def test_schema_snapshot_instance(self):
        """A SchemaSnapshot works as well as a plain mapping"""
        snapshot = SchemaSnapshot.from_dict(USERS_ACTIVE)
        assert fix("SELECT actve FROM users", snapshot).fixed_sql == "SELECT active FROM users"

    def test_no_schema_skips_identifiers(self):
        """Not connected: only schema-free fixes apply"""
        result = fix("SELEC * FROM usres")

        assert result.fixed_sql == "SELECT * FROM usres"
        assert [f.kind for f in result.fixes] == [FixKind.KEYWORD_TYPO]


class TestResultProperties:
    """Test properties that hold for every input"""

    @pytest.mark.parametrize("sql,schema", SCENARIOS)
    def test_idempotent(self, sql, schema):
        """Fixing already-fixed SQL changes nothing"""
        first = fix(sql, schema)
        second = fix(first.fixed_sql, schema)

        assert not second.changed
        assert second.fixed_sql == first.fixed_sql

    @pytest.mark.parametrize("sql,schema", SCENARIOS)
    def test_pure(self, sql, schema):
        """Same input, same result"""
        assert fix(sql, schema) == fix(sql, schema)

    @pytest.mark.parametrize("sql,schema", SCENARIOS)
    def test_confidence_is_weakest_fix(self, sql, schema):
        """Aggregate confidence is the minimum over fixes"""
        result = fix(sql, schema)

        if result.fixes:
            assert result.confidence == min(f.confidence for f in result.fixes)
        else:
            assert result.confidence is None

    @pytest.mark.parametrize("sql,schema", SCENARIOS)
    def test_spans_point_into_input(self, sql, schema):
        """Typo and quote fix spans cover their original text in the raw input"""
        for item in fix(sql, schema).fixes:
            if item.kind == FixKind.CLAUSE_REORDER:
                continue
            start, end = item.span
            assert sql[start:end] == item.original

    @pytest.mark.parametrize("sql,schema", SCENARIOS)
    def test_typo_fixes_are_bounded(self, sql, schema):
        """No typo correction is more than two edits away"""
        for item in fix(sql, schema).fixes:
            if item.kind in (FixKind.KEYWORD_TYPO, FixKind.IDENTIFIER_TYPO):
                assert bounded_distance(item.original, item.replacement, 2) <= 2

    def test_to_dict(self):
        """Results serialize to plain data"""
        data = fix("SELEC * FROM users", USERS).to_dict()

        assert data["fixed_sql"] == "SELECT * FROM users"
        assert data["confidence"] == "high"
        assert data["changed"] is True
        assert data["fixes"][0]["kind"] == "keyword_typo"
        assert data["fixes"][0]["span"] == [0, 5]


class TestRobustness:
    """Test that fix() is total"""

    @pytest.mark.parametrize("sql", ["", "   \n", "';", "((((", "SELECT ¿? FROM"])
    def test_odd_inputs_do_not_raise(self, sql):
        """Garbage in, a FixResult out"""
        result = fix(sql, USERS)
        assert isinstance(result.fixed_sql, str)

    def test_blank_input_unchanged(self):
        """Whitespace-only input is echoed back"""
        result = fix("   ", USERS)

        assert result.fixed_sql == "   "
        assert not result.changed

    def test_malformed_schema_returns_input(self):
        """A schema that cannot be read leaves the query unchanged"""
        result = fix("SELEC 1", {"users": 5})

        assert result.fixed_sql == "SELEC 1"
        assert not result.changed

    def test_failing_stage_returns_input(self, monkeypatch):
        """An exception inside a stage never escapes"""
        def boom(tokens, schema):
            raise RuntimeError("stage failed")

        monkeypatch.setattr(pipeline, "STAGES", (("boom", boom),))

        result = fix("SELEC 1", USERS)
        assert result.fixed_sql == "SELEC 1"
        assert not result.changed

    def test_self_check_rejects_unreported_rewrite(self, monkeypatch):
        """A stage that rewrites text outside its fix spans is caught"""
        def sloppy(tokens, schema):
            tokens = list(tokens)
            tokens[0] = replace(tokens[0], text="DELETE")
            bogus = Fix(
                original="",
                replacement="",
                kind=FixKind.KEYWORD_TYPO,
                span=(100, 100),
                confidence=Confidence.HIGH,
            )
            return tokens, [bogus]

        monkeypatch.setattr(pipeline, "STAGES", (("sloppy", sloppy),))

        result = fix("SELECT 1", USERS)
        assert result.fixed_sql == "SELECT 1"
        assert not result.changed

    def test_self_check_rejects_dropped_text(self, monkeypatch):
        """A stage that drops input no fix covers is caught"""
        def dropping(tokens, schema):
            tokens = [t for t in tokens if t.kind != TokenKind.WHITESPACE]
            bogus = Fix(
                original="",
                replacement="",
                kind=FixKind.CLAUSE_REORDER,
                span=(100, 100),
                confidence=Confidence.MEDIUM,
            )
            return tokens, [bogus]

        monkeypatch.setattr(pipeline, "STAGES", (("dropping", dropping),))

        result = fix("SELECT 1", USERS)
        assert result.fixed_sql == "SELECT 1"
        assert not result.changed

    def test_oversized_input_skips_identifiers(self):
        """Huge inputs still get keyword fixes but no identifier fixes"""
        sql = "SELEC * FROM usres WHERE " + " AND ".join(["active = 1"] * 2000)
        assert len(sql) > 20_000

        result = fix(sql, USERS_ACTIVE)

        assert result.fixed_sql.startswith("SELECT * FROM usres WHERE")
        assert {f.kind for f in result.fixes} == {FixKind.KEYWORD_TYPO}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
