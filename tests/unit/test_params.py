"""Unit tests for parameter descriptors and coercion."""

import pytest

from polydb_mcp.lib.params import BOOLEAN, INTEGER, JSON, Param, ParamSet, is_present, parse_int
from polydb_mcp.models.error_types import InvalidParameterError, MissingParameterError


class TestParseInt:

    def test_plain_integer(self):
        assert parse_int("42") == 42

    def test_leading_digits_only(self):
        assert parse_int("12abc") == 12
        assert parse_int("  -7 ") == -7

    def test_not_a_number(self):
        assert parse_int("abc") is None
        assert parse_int("") is None


def test_is_present():
    assert is_present("x")
    assert is_present("0")
    assert not is_present("")
    assert not is_present(None)


class TestParam:

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValueError):
            Param("x", "desc", kind="float")

    def test_schema_is_always_string(self):
        param = Param("limit", "Max rows", kind=INTEGER)
        assert param.schema() == {"type": "string", "description": "Max rows"}

    def test_boolean_is_exact_true(self):
        param = Param("flag", "desc", kind=BOOLEAN)
        assert param.coerce("true") is True
        assert param.coerce("True") is False
        assert param.coerce("yes") is False

    def test_invalid_integer(self):
        param = Param("limit", "desc", kind=INTEGER)
        with pytest.raises(InvalidParameterError) as exc_info:
            param.coerce("many")
        assert str(exc_info.value) == "Invalid integer for limit: 'many'"

    def test_json_error_carries_parser_message(self):
        param = Param("doc", "desc", kind=JSON)
        with pytest.raises(InvalidParameterError) as exc_info:
            param.coerce("{not json")
        assert "Expecting property name" in str(exc_info.value)
        assert exc_info.value.param_name == "doc"


class TestParamSet:

    @pytest.fixture
    def params(self):
        return ParamSet(
            Param("table", "Table", required="Table name required"),
            Param("data", "Data", kind=JSON, required="Data required"),
            Param("ttl", "TTL", kind=INTEGER),
            Param("limit", "Limit", kind=INTEGER, default=100),
            Param("include_docs", "Docs", kind=BOOLEAN),
        )

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValueError):
            ParamSet(Param("a", "x"), Param("a", "y"))

    def test_schema(self, params):
        schema = params.schema()
        assert list(schema) == ["table", "data", "ttl", "limit", "include_docs"]
        assert all(entry["type"] == "string" for entry in schema.values())

    def test_missing_required_uses_message(self, params):
        with pytest.raises(MissingParameterError) as exc_info:
            params.parse({"data": "{}"})
        assert str(exc_info.value) == "Table name required"
        assert exc_info.value.recoverable is False

    def test_empty_string_counts_as_missing(self, params):
        with pytest.raises(MissingParameterError) as exc_info:
            params.parse({"table": "", "data": "{}"})
        assert str(exc_info.value) == "Table name required"

    def test_missing_reported_before_malformed(self, params):
        with pytest.raises(MissingParameterError) as exc_info:
            params.parse({"table": "t", "ttl": "nope"})
        assert str(exc_info.value) == "Data required"

    def test_defaults_and_coercion(self, params):
        args = params.parse({"table": "users", "data": '{"id": 1, "name": "a"}', "ttl": "60"})

        assert args == {
            "table": "users",
            "data": {"id": 1, "name": "a"},
            "ttl": 60,
            "limit": 100,
            "include_docs": False,
        }

    def test_non_string_values_are_reencoded(self, params):
        args = params.parse({"table": "t", "data": {"k": [1, 2]}, "limit": 5, "include_docs": True})

        assert args["data"] == {"k": [1, 2]}
        assert args["limit"] == 5
        assert args["include_docs"] is True

    def test_none_raw_mapping(self):
        assert ParamSet(Param("x", "optional")).parse(None) == {"x": None}
