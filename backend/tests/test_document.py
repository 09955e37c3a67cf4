"""Tests for document import/export."""

import json
from datetime import datetime, timezone

import pytest

from visual_query import (
    SCHEMA_ID,
    DocumentImportError,
    build_sql,
    dumps_document,
    export_document,
    export_filename,
    is_valid_schema,
    load_document,
)
from visual_query.document import INVALID_SCHEMA_MESSAGE, PARSE_ERROR_MESSAGE, document_to_dict
from visual_query.query_types import Condition, QueryNode


# Shaped the way the frontend saves it
FRONTEND_DOCUMENT = {
    "$schema": "sql-forge/visual-query/v1",
    "meta": {
        "name": "vip orders",
        "createdAt": "2026-03-01T10:00:00.000Z",
        "updatedAt": "2026-03-01T10:05:00.000Z",
    },
    "root": {
        "id": "r00t001",
        "operation": "SELECT",
        "table": "orders",
        "selectColumns": "*",
        "pairs": [{"id": "p1", "column": "", "value": ""}],
        "conditions": [
            {"id": "c1", "column": "status", "operator": "IS NULL", "value": "", "logic": "AND"},
            {
                "id": "c2",
                "column": "customer_id",
                "operator": "IN",
                "value": "",
                "logic": "OR",
                "subQueryId": "sq1",
            },
        ],
        "joins": [],
        "orderBy": [],
        "limit": "",
        "subQueries": {
            "sq1": {
                "id": "sq1",
                "operation": "SELECT",
                "table": "vip_customers",
                "selectColumns": "id",
                "pairs": [],
                "conditions": [],
                "joins": [],
                "orderBy": [],
                "limit": "",
                "subQueries": {},
            }
        },
    },
}


def subquery_root():
    return QueryNode(
        table="users",
        conditions=[
            Condition(column="name", value="Bo"),
            Condition(column="id", operator="IN", sub_query_id="sq1"),
        ],
        sub_queries={"sq1": QueryNode(id="sq1", table="admins", select_columns="user_id")},
    )


class TestSchemaCheck:
    """Test envelope validation."""

    def test_valid(self):
        assert is_valid_schema(FRONTEND_DOCUMENT)

    @pytest.mark.parametrize("data", [
        None,
        [],
        "text",
        {"$schema": "sql-forge/visual-query/v2", "root": {}},
        {"$schema": SCHEMA_ID},
        {"$schema": SCHEMA_ID, "root": None},
        {"$schema": SCHEMA_ID, "root": []},
    ])
    def test_invalid(self, data):
        assert not is_valid_schema(data)


class TestImport:
    """Test loading saved documents."""

    def test_frontend_document(self):
        doc = load_document(json.dumps(FRONTEND_DOCUMENT))
        assert doc.meta.name == "vip orders"
        assert doc.root.sub_queries["sq1"].table == "vip_customers"
        assert doc.root.conditions[1].sub_query_id == "sq1"
        assert build_sql(doc.root) == (
            "SELECT *\n"
            "FROM orders\n"
            "WHERE status IS NULL\n"
            "  OR customer_id IN (\n"
            "    SELECT id\n"
            "    FROM vip_customers\n"
            "  );"
        )

    def test_not_json(self):
        with pytest.raises(DocumentImportError, match=PARSE_ERROR_MESSAGE):
            load_document("{not json")

    def test_wrong_schema(self):
        data = {**FRONTEND_DOCUMENT, "$schema": "something-else"}
        with pytest.raises(DocumentImportError, match=INVALID_SCHEMA_MESSAGE):
            load_document(json.dumps(data))

    def test_null_root(self):
        data = {**FRONTEND_DOCUMENT, "root": None}
        with pytest.raises(DocumentImportError, match=INVALID_SCHEMA_MESSAGE):
            load_document(json.dumps(data))

    def test_invalid_root(self):
        root = {**FRONTEND_DOCUMENT["root"], "operation": "MERGE"}
        with pytest.raises(DocumentImportError, match=INVALID_SCHEMA_MESSAGE):
            load_document(json.dumps({**FRONTEND_DOCUMENT, "root": root}))

    def test_missing_meta_gets_default_name(self):
        data = {"$schema": SCHEMA_ID, "root": {"table": "users"}}
        doc = load_document(json.dumps(data))
        assert doc.meta.name == "my_query"
        assert build_sql(doc.root) == "SELECT *\nFROM users;"


class TestExport:
    """Test writing documents."""

    def test_envelope(self):
        now = datetime(2026, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
        doc = export_document(subquery_root(), "admins", now=now)
        data = document_to_dict(doc)
        assert data["$schema"] == SCHEMA_ID
        assert data["meta"] == {
            "name": "admins",
            "createdAt": "2026-01-02T03:04:05.678Z",
            "updatedAt": "2026-01-02T03:04:05.678Z",
        }

    def test_blank_name(self):
        assert export_document(subquery_root(), "").meta.name == "my_query"

    def test_camel_case_keys(self):
        data = json.loads(dumps_document(export_document(subquery_root(), "q")))
        root = data["root"]
        assert root["selectColumns"] == "*"
        assert set(root["subQueries"]) == {"sq1"}
        assert "orderBy" in root
        assert "subQueryId" not in root["conditions"][0]
        assert root["conditions"][1]["subQueryId"] == "sq1"

    def test_round_trip(self):
        doc = export_document(subquery_root(), "round trip")
        loaded = load_document(dumps_document(doc))
        assert loaded.root == doc.root
        assert loaded.meta == doc.meta
        assert build_sql(loaded.root) == build_sql(doc.root)

    def test_frontend_round_trip(self):
        doc = load_document(json.dumps(FRONTEND_DOCUMENT))
        assert document_to_dict(doc) == FRONTEND_DOCUMENT

    @pytest.mark.parametrize("name,expected", [
        ("top customers", "top_customers.sqlforge.json"),
        ("a  b\tc", "a_b_c.sqlforge.json"),
        ("", "my_query.sqlforge.json"),
    ])
    def test_filename(self, name, expected):
        assert export_filename(name) == expected
