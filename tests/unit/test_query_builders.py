"""Unit tests for the AQL, CQL, CouchDB and SPARQL builders."""

import pytest

from polydb_mcp.lib.query import aql, couch, cql, sparql
from polydb_mcp.models.error_types import TranslationError


class TestAql:

    def test_traversal_depth_and_direction(self):
        query, bind_vars = aql.build_traversal("users/alice", "follows", "inbound", 2, 4)

        assert "IN 2..4 INBOUND @start @@edges" in query
        assert "RETURN { vertex: v, edge: e }" in query
        assert bind_vars == {"start": "users/alice", "@edges": "follows"}

    def test_traversal_defaults(self):
        query, _ = aql.build_traversal("users/alice", "follows")

        assert "IN 1..1 OUTBOUND" in query

    def test_unknown_direction(self):
        with pytest.raises(TranslationError):
            aql.build_traversal("users/alice", "follows", "sideways")

    def test_fulltext_ignores_unique(self):
        definition = aql.build_index_definition("fulltext", ["body"], unique=True)

        assert definition == {"type": "fulltext", "fields": ["body"]}

    def test_persistent_keeps_unique(self):
        fields = aql.split_fields("email, tenant")
        definition = aql.build_index_definition("persistent", fields, unique=True)

        assert definition == {"type": "persistent", "fields": ["email", "tenant"], "unique": True}

    def test_unknown_index_type(self):
        with pytest.raises(TranslationError) as exc_info:
            aql.build_index_definition("bitmap", ["x"])
        assert str(exc_info.value) == "Unknown index type: bitmap"


class TestCql:

    def test_insert_with_ttl(self):
        statement = cql.build_insert("shop", "users", {"id": 1, "name": "a"}, ttl=60)

        assert statement.query == "INSERT INTO shop.users (id, name) VALUES (?, ?) USING TTL 60"
        assert statement.values == [1, "a"]

    def test_insert_without_ttl(self):
        statement = cql.build_insert("shop", "users", {"name": "a", "id": 1})

        assert statement.query == "INSERT INTO shop.users (name, id) VALUES (?, ?)"
        assert statement.values == ["a", 1]

    def test_update_binds_set_then_where(self):
        statement = cql.build_update("shop", "users", {"name": "b", "age": 3}, {"id": 1, "tenant": "t"})

        assert statement.query == "UPDATE shop.users SET name = ?, age = ? WHERE id = ? AND tenant = ?"
        assert statement.values == ["b", 3, 1, "t"]

    def test_delete(self):
        statement = cql.build_delete("shop", "users", {"id": 1})

        assert statement.query == "DELETE FROM shop.users WHERE id = ?"
        assert statement.values == [1]

    def test_where_must_be_object(self):
        with pytest.raises(TranslationError):
            cql.build_delete("shop", "users", [1])

    def test_composite_primary_key(self):
        assert cql.primary_key_clause('["tenant", "id"]') == "(tenant, id)"

    def test_plain_primary_key_verbatim(self):
        assert cql.primary_key_clause("id") == "id"
        assert cql.primary_key_clause("(tenant), id") == "(tenant), id"

    def test_create_table(self):
        statement = cql.build_create_table("shop", "users", {"id": "uuid", "name": "text"}, '["id", "name"]')

        assert statement.query == (
            "CREATE TABLE IF NOT EXISTS shop.users (id uuid, name text, PRIMARY KEY ((id, name)))"
        )

    def test_create_keyspace_simple(self):
        statement = cql.build_create_keyspace("shop", 3)

        assert statement.query == (
            "CREATE KEYSPACE IF NOT EXISTS shop WITH replication = "
            "{'class': 'SimpleStrategy', 'replication_factor': 3}"
        )

    def test_create_keyspace_other_strategy_uses_datacenter(self):
        statement = cql.build_create_keyspace("shop", 2, "Anything", datacenter="dc1")

        assert statement.query.endswith("{'class': 'NetworkTopologyStrategy', 'dc1': 2}")

    def test_batch_entries(self):
        entries = cql.build_batch([
            "DELETE FROM shop.users WHERE id = 1",
            {"query": "INSERT INTO shop.users (id) VALUES (?)", "params": [2]},
        ])

        assert entries[0] == cql.BatchEntry("DELETE FROM shop.users WHERE id = 1")
        assert entries[1].params == [2]

    def test_batch_rejects_non_list(self):
        with pytest.raises(TranslationError):
            cql.build_batch({"query": "x"})


class TestCouch:

    def test_insert_with_id_uses_put(self):
        request = couch.insert("app", {"a": 1}, "doc/1")

        assert request.method == "PUT"
        assert request.path == "/app/doc%2F1"
        assert request.body == {"a": 1}

    def test_insert_without_id_uses_post(self):
        request = couch.insert("app", {"a": 1})

        assert request == couch.CouchRequest("POST", "/app", {"a": 1})

    def test_all_docs_default_limit(self):
        request = couch.all_docs("app", include_docs=True)

        assert request.path == "/app/_all_docs?include_docs=true&limit=100"

    def test_find_default_limit(self):
        request = couch.find("app", {"type": "user"})

        assert request.body == {"selector": {"type": "user"}, "limit": 25}

    def test_find_optional_fields(self):
        request = couch.find("app", {}, fields=["_id"], limit=5, skip=10, sort=[{"name": "asc"}])

        assert request.body == {
            "selector": {}, "limit": 5, "fields": ["_id"], "skip": 10, "sort": [{"name": "asc"}],
        }

    def test_view_flags(self):
        request = couch.view("app", "stats", "by_type", key='"user"', reduce="false", group="true")

        assert request.path == '/app/_design/stats/_view/by_type?key=%22user%22&reduce=false&group=true'

    def test_view_reduce_true_not_sent(self):
        request = couch.view("app", "stats", "by_type", reduce="true")

        assert request.path == "/app/_design/stats/_view/by_type"

    def test_delete_document(self):
        request = couch.delete_document("app", "a b", "1-abc")

        assert request == couch.CouchRequest("DELETE", "/app/a%20b?rev=1-abc")

    def test_changes(self):
        request = couch.changes("app", since="now")

        assert request.path == "/app/_changes?since=now&limit=100"


class TestSparql:

    def test_auto_limit_added(self):
        assert sparql.apply_default_limit("SELECT * WHERE { ?s ?p ?o }") == (
            "SELECT * WHERE { ?s ?p ?o } LIMIT 100"
        )

    def test_auto_limit_substring_check(self):
        query = "SELECT ?limitless WHERE { ?limitless ?p ?o }"
        assert sparql.apply_default_limit(query) == query

    def test_explicit_limit_respected(self):
        query = "select * where { ?s ?p ?o } limit 5"
        assert sparql.apply_default_limit(query, 10) == query

    def test_accept_types(self):
        assert sparql.accept_for("jsonld") == "application/ld+json"
        assert sparql.accept_for(None) == "text/turtle"
        assert sparql.accept_for("yaml") == "text/turtle"

    def test_text_search_escapes_quotes(self):
        query = sparql.build_text_search("O'Brien", "http://ex.org/g", 10)

        assert "bif:contains 'O''Brien'" in query
        assert "FROM <http://ex.org/g>" in query
        assert "LIMIT 10" in query

    def test_insert_data_graph(self):
        assert sparql.build_insert_data("<a> <b> <c> .", "http://ex.org/g") == (
            "INSERT DATA { INTO GRAPH <http://ex.org/g> { <a> <b> <c> . } }"
        )

    def test_delete_data_default_graph(self):
        assert sparql.build_delete_data("<a> <b> <c> .") == "DELETE DATA {  { <a> <b> <c> . } }"

    def test_graph_stats_queries(self):
        assert "FROM <http://ex.org/g>" in sparql.build_triple_count("http://ex.org/g")
        assert "FROM" not in sparql.build_triple_count()
        assert "LIMIT 20" in sparql.build_top_predicates()
        assert "?s a ?class" in sparql.build_top_classes()
