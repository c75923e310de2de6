"""Unit tests for result normalization."""

import datetime
import decimal
import ipaddress
import uuid

from polydb_mcp.lib.normalize import (
    QUERY_CAP,
    acknowledged,
    binding_value,
    bindings,
    count_envelope,
    flatten_bindings,
    has_bindings,
    partition_bulk,
    to_jsonable,
    truncate,
)


class TestTruncation:

    def test_count_is_pre_cap(self):
        envelope = count_envelope(range(250), "results", QUERY_CAP)

        assert envelope["count"] == 250
        assert len(envelope["results"]) == 100
        assert envelope["results"][-1] == 99

    def test_small_list_untouched(self):
        assert count_envelope([1, 2], "docs", 25) == {"count": 2, "docs": [1, 2]}

    def test_no_cap(self):
        assert len(count_envelope(range(150), cap=None)["results"]) == 150

    def test_truncate_none(self):
        assert truncate(None, 10) == []
        assert truncate([1, 2, 3], 2) == [1, 2]


SPARQL_RESULT = {
    "head": {"vars": ["s", "label"]},
    "results": {
        "bindings": [
            {"s": {"type": "uri", "value": "http://ex.org/a"},
             "label": {"type": "literal", "value": "A"}},
            {"s": {"type": "uri", "value": "http://ex.org/b"}},
        ]
    },
}


class TestBindings:

    def test_flatten(self):
        assert flatten_bindings(SPARQL_RESULT) == [
            {"s": "http://ex.org/a", "label": "A"},
            {"s": "http://ex.org/b"},
        ]

    def test_optional_variable(self):
        rows = bindings(SPARQL_RESULT)
        assert binding_value(rows[0], "label") == "A"
        assert binding_value(rows[1], "label") is None

    def test_non_binding_results(self):
        assert not has_bindings({"boolean": True})
        assert not has_bindings("@prefix ex: <http://ex.org/> .")
        assert bindings("text") == []
        assert flatten_bindings({"head": {}}) == []


class TestBulk:

    def test_partition(self):
        results = [
            {"id": "a", "ok": True, "rev": "1-x"},
            {"id": "b", "error": "conflict", "reason": "Document update conflict."},
            {"id": "c", "ok": True, "rev": "1-y"},
        ]
        summary = partition_bulk(results)

        assert summary["total"] == 3
        assert summary["succeeded"] == 2
        assert summary["failed"] == 1
        assert summary["results"] == results

    def test_acknowledged(self):
        assert acknowledged({"ok": True}) is True
        assert acknowledged({"id": "x"}) is None
        assert acknowledged("text") is None


class TestToJsonable:

    def test_driver_values(self):
        uid = uuid.UUID("12345678-1234-5678-1234-567812345678")
        row = {
            "id": uid,
            "at": datetime.datetime(2024, 1, 2, 3, 4, 5),
            "day": datetime.date(2024, 1, 2),
            "price": decimal.Decimal("9.99"),
            "ip": ipaddress.ip_address("10.0.0.1"),
            "blob": b"\x01\xff",
            "tags": {"b"},
            "pair": (1, "x"),
            "props": {"k": uid},
            "n": None,
        }

        assert to_jsonable(row) == {
            "id": "12345678-1234-5678-1234-567812345678",
            "at": "2024-01-02T03:04:05",
            "day": "2024-01-02",
            "price": "9.99",
            "ip": "10.0.0.1",
            "blob": "01ff",
            "tags": ["b"],
            "pair": [1, "x"],
            "props": {"k": "12345678-1234-5678-1234-567812345678"},
            "n": None,
        }

    def test_unknown_scalar_uses_text(self):
        class Duration:
            def __str__(self):
                return "1h"

        assert to_jsonable(Duration()) == "1h"
