"""SPARQL query and update builders for Virtuoso.

Queries are built by text templating. URIs are wrapped in angle brackets as
given; the free-text search pattern is the only embedded literal and its
single quotes are doubled.
"""

from typing import Optional

SPARQL_RESULTS_JSON = "application/sparql-results+json"
ASK_PROBE = "ASK { ?s ?p ?o } LIMIT 1"

DEFAULT_SELECT_LIMIT = 100
DEFAULT_SEARCH_LIMIT = 50
TOP_N = 20
LIST_LIMIT = 100

DEFAULT_FORMAT = "turtle"
ACCEPT_TYPES = {
    "turtle": "text/turtle",
    "ntriples": "application/n-triples",
    "rdfxml": "application/rdf+xml",
    "jsonld": "application/ld+json",
}


def apply_default_limit(query: str, limit: int = DEFAULT_SELECT_LIMIT) -> str:
    """Append ``LIMIT n`` unless the query text mentions "limit" anywhere.

    The check is a plain case-insensitive substring test, not a parse.
    """
    if "limit" in query.lower():
        return query
    return f"{query} LIMIT {limit}"


def accept_for(format_name: Optional[str]) -> str:
    """Media type for an RDF format name; unknown names fall back to Turtle."""
    return ACCEPT_TYPES.get(format_name or DEFAULT_FORMAT, ACCEPT_TYPES[DEFAULT_FORMAT])


def escape_literal(text: str) -> str:
    return text.replace("'", "''")


def from_clause(graph: Optional[str]) -> str:
    return f"FROM <{graph}>" if graph else ""


def build_describe(uri: str) -> str:
    return f"DESCRIBE <{uri}>"


def build_insert_data(triples: str, graph: Optional[str] = None) -> str:
    graph_clause = f"INTO GRAPH <{graph}>" if graph else ""
    return f"INSERT DATA {{ {graph_clause} {{ {triples} }} }}"


def build_delete_data(triples: str, graph: Optional[str] = None) -> str:
    graph_clause = f"FROM GRAPH <{graph}>" if graph else ""
    return f"DELETE DATA {{ {graph_clause} {{ {triples} }} }}"


def build_load(url: str, graph: str) -> str:
    return f"LOAD <{url}> INTO GRAPH <{graph}>"


def build_clear_graph(graph: str) -> str:
    return f"CLEAR GRAPH <{graph}>"


def build_list_graphs(limit: int = LIST_LIMIT) -> str:
    return f"""
SELECT DISTINCT ?g (COUNT(*) as ?triples)
WHERE {{ GRAPH ?g {{ ?s ?p ?o }} }}
GROUP BY ?g
ORDER BY DESC(?triples)
LIMIT {limit}
"""


def build_triple_count(graph: Optional[str] = None) -> str:
    return f"SELECT (COUNT(*) as ?count) {from_clause(graph)} WHERE {{ ?s ?p ?o }}"


def build_top_predicates(graph: Optional[str] = None, limit: int = TOP_N) -> str:
    return f"""
SELECT ?p (COUNT(*) as ?count) {from_clause(graph)}
WHERE {{ ?s ?p ?o }}
GROUP BY ?p
ORDER BY DESC(?count)
LIMIT {limit}
"""


def build_top_classes(graph: Optional[str] = None, limit: int = TOP_N) -> str:
    return f"""
SELECT ?class (COUNT(?s) as ?count) {from_clause(graph)}
WHERE {{ ?s a ?class }}
GROUP BY ?class
ORDER BY DESC(?count)
LIMIT {limit}
"""


def build_find_by_type(rdf_type: str, graph: Optional[str] = None,
                       limit: int = DEFAULT_SEARCH_LIMIT) -> str:
    return f"""
SELECT ?resource ?label {from_clause(graph)}
WHERE {{
  ?resource a <{rdf_type}> .
  OPTIONAL {{ ?resource rdfs:label ?label }}
}}
LIMIT {limit}
"""


def build_text_search(pattern: str, graph: Optional[str] = None,
                      limit: int = DEFAULT_SEARCH_LIMIT) -> str:
    """Full-text search through Virtuoso's ``bif:contains``."""
    return f"""
SELECT ?s ?p ?o {from_clause(graph)}
WHERE {{
  ?s ?p ?o .
  ?o bif:contains '{escape_literal(pattern)}'
}}
LIMIT {limit}
"""


def build_list_prefixes(limit: int = LIST_LIMIT) -> str:
    return f"""
SELECT DISTINCT
  (REPLACE(STR(?p), "(#|/)[^#/]*$", "$1") as ?namespace)
WHERE {{ ?s ?p ?o }}
LIMIT {limit}
"""
