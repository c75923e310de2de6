"""Contract tests for the per-backend tool tables."""

import inspect

import pytest

from polydb_mcp.lib.params import ParamSet
from polydb_mcp.lib.tools import arangodb, cassandra, couchdb, virtuoso
from polydb_mcp.models.tool_descriptor import ToolSpec

EXPECTED_TOOLS = {
    "arango": (arangodb.TOOLS, {
        "arango_list_databases", "arango_list_collections", "arango_collection_info",
        "arango_create_collection", "arango_create_index", "arango_insert", "arango_get",
        "arango_update", "arango_delete", "arango_query", "arango_explain",
        "arango_traverse", "arango_list_graphs",
    }),
    "cassandra": (cassandra.TOOLS, {
        "cassandra_query", "cassandra_list_keyspaces", "cassandra_list_tables",
        "cassandra_describe_table", "cassandra_insert", "cassandra_update",
        "cassandra_delete", "cassandra_create_keyspace", "cassandra_create_table",
        "cassandra_drop_table", "cassandra_batch", "cassandra_cluster_info",
    }),
    "couchdb": (couchdb.TOOLS, {
        "couchdb_list_databases", "couchdb_create_database", "couchdb_delete_database",
        "couchdb_info", "couchdb_all_docs", "couchdb_get", "couchdb_insert", "couchdb_delete",
        "couchdb_find", "couchdb_create_index", "couchdb_view", "couchdb_bulk_docs",
        "couchdb_changes",
    }),
    "virtuoso": (virtuoso.TOOLS, {
        "virtuoso_select", "virtuoso_ask", "virtuoso_construct", "virtuoso_describe",
        "virtuoso_insert", "virtuoso_delete", "virtuoso_update", "virtuoso_list_graphs",
        "virtuoso_graph_stats", "virtuoso_find_by_type", "virtuoso_text_search",
        "virtuoso_list_prefixes", "virtuoso_load_rdf", "virtuoso_clear_graph",
    }),
}

ALL_SPECS = [
    (name, spec)
    for tools, _ in EXPECTED_TOOLS.values()
    for name, spec in tools.items()
]


@pytest.mark.parametrize("prefix", sorted(EXPECTED_TOOLS))
def test_tool_names(prefix):
    tools, expected = EXPECTED_TOOLS[prefix]
    assert set(tools) == expected
    assert all(name.startswith(prefix) for name in tools)


def test_tool_names_unique_across_backends():
    names = [name for name, _ in ALL_SPECS]
    assert len(names) == len(set(names))


@pytest.mark.parametrize("name,spec", ALL_SPECS, ids=[name for name, _ in ALL_SPECS])
def test_spec_shape(name, spec):
    assert isinstance(spec, ToolSpec)
    assert spec.description
    assert isinstance(spec.params, ParamSet)
    assert inspect.iscoroutinefunction(spec.handler)
    assert list(inspect.signature(spec.handler).parameters) == ["service", "params"]


@pytest.mark.parametrize("name,spec", ALL_SPECS, ids=[name for name, _ in ALL_SPECS])
def test_params_declared_as_strings(name, spec):
    for pname, entry in spec.params.schema().items():
        assert entry["type"] == "string"
        assert entry["description"], f"{name}.{pname} has no description"


def test_keyspace_and_database_params_are_optional():
    for tools, _ in (EXPECTED_TOOLS["cassandra"], EXPECTED_TOOLS["couchdb"]):
        for spec in tools.values():
            for param in spec.params:
                if param.name in ("keyspace", "database"):
                    assert param.required is None
