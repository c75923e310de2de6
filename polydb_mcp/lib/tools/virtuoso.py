"""Virtuoso tools: SPARQL queries and updates, graph statistics and search."""

import asyncio
from typing import Any, Dict, List, Mapping

from polydb_mcp.lib.logging_config import get_logger
from polydb_mcp.lib.normalize import (
    QUERY_CAP, SEARCH_CAP, binding_value, bindings, flatten_bindings, has_bindings, truncate,
)
from polydb_mcp.lib.params import INTEGER, Param, ParamSet, parse_int
from polydb_mcp.lib.query import sparql
from polydb_mcp.models.tool_descriptor import ToolSpec

logger = get_logger(__name__, {'backend': 'virtuoso'})

FORMAT = Param("format", "Output format: turtle, ntriples, rdfxml, jsonld (default: turtle)",
               default=sparql.DEFAULT_FORMAT)
OPTIONAL_GRAPH = Param("graph", "Graph URI (optional)")
TRIPLES_GRAPH = Param("graph", "Target graph URI (optional)")


def _count(row: Mapping, var: str) -> int:
    return parse_int(binding_value(row, var) or "0") or 0


SELECT = ParamSet(
    Param("query", "SPARQL SELECT query", required="Query required"),
    Param("limit", "Max results (default 100)", kind=INTEGER, default=sparql.DEFAULT_SELECT_LIMIT),
)


async def select(service, params: Mapping[str, Any]) -> Any:
    args = SELECT.parse(params)
    result = await service.query(sparql.apply_default_limit(args["query"], args["limit"]))
    if not has_bindings(result):
        return result
    rows = flatten_bindings(result)
    logger.info(f"SPARQL SELECT returned {len(rows)} rows")
    return {"count": len(rows), "results": truncate(rows, QUERY_CAP)}


ASK = ParamSet(Param("query", "SPARQL ASK query", required="Query required"))


async def ask(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    args = ASK.parse(params)
    result = await service.query(args["query"])
    return {"answer": result.get("boolean") if isinstance(result, dict) else None}


CONSTRUCT = ParamSet(
    Param("query", "SPARQL CONSTRUCT query", required="Query required"),
    FORMAT,
)


async def construct(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    args = CONSTRUCT.parse(params)
    data = await service.query(args["query"], sparql.accept_for(args["format"]))
    return {"format": args["format"], "data": data}


DESCRIBE = ParamSet(
    Param("uri", "URI of resource to describe", required="URI required"),
    FORMAT,
)


async def describe(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    args = DESCRIBE.parse(params)
    data = await service.query(sparql.build_describe(args["uri"]), sparql.accept_for(args["format"]))
    return {"uri": args["uri"], "format": args["format"], "data": data}


INSERT = ParamSet(
    Param("triples", "Triples in Turtle format (e.g., '<s> <p> <o> .')", required="Triples required"),
    TRIPLES_GRAPH,
)


async def insert(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    args = INSERT.parse(params)
    text = await service.update(sparql.build_insert_data(args["triples"], args["graph"]))
    return {"success": True, "message": f"Insert successful. {text}"}


DELETE = ParamSet(
    Param("triples", "Triples pattern in Turtle format", required="Triples required"),
    TRIPLES_GRAPH,
)


async def delete(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    args = DELETE.parse(params)
    text = await service.update(sparql.build_delete_data(args["triples"], args["graph"]))
    return {"success": True, "message": f"Delete successful. {text}"}


UPDATE = ParamSet(Param("query", "SPARQL UPDATE query", required="Query required"))


async def update(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    args = UPDATE.parse(params)
    text = await service.update(args["query"])
    return {"success": True, "message": f"Update successful. {text}"}


async def list_graphs(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    result = await service.query(sparql.build_list_graphs())
    graphs = [
        {"graph": binding_value(row, "g"), "triples": _count(row, "triples")}
        for row in bindings(result)
    ]
    return {"count": len(graphs), "graphs": graphs}


GRAPH_STATS = ParamSet(Param("graph", "Graph URI (optional, uses default graph if empty)"))


async def graph_stats(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    args = GRAPH_STATS.parse(params)
    graph = args["graph"]
    count_result, predicate_result, class_result = await asyncio.gather(
        service.query(sparql.build_triple_count(graph)),
        service.query(sparql.build_top_predicates(graph)),
        service.query(sparql.build_top_classes(graph)),
    )

    count_rows = bindings(count_result)
    triple_count = _count(count_rows[0], "count") if count_rows else 0

    return {
        "graph": graph or "default",
        "tripleCount": triple_count,
        "topPredicates": [
            {"predicate": binding_value(row, "p"), "count": _count(row, "count")}
            for row in bindings(predicate_result)
        ],
        "topClasses": [
            {"class": binding_value(row, "class"), "count": _count(row, "count")}
            for row in bindings(class_result)
        ],
    }


FIND_BY_TYPE = ParamSet(
    Param("type", "RDF type URI", required="Type required"),
    OPTIONAL_GRAPH,
    Param("limit", "Max results (default 50)", kind=INTEGER, default=sparql.DEFAULT_SEARCH_LIMIT),
)


async def find_by_type(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    args = FIND_BY_TYPE.parse(params)
    result = await service.query(sparql.build_find_by_type(args["type"], args["graph"], args["limit"]))
    resources = [
        {"uri": binding_value(row, "resource"), "label": binding_value(row, "label")}
        for row in bindings(result)
    ]
    return {"count": len(resources), "resources": truncate(resources, SEARCH_CAP)}


TEXT_SEARCH = ParamSet(
    Param("pattern", "Search pattern", required="Pattern required"),
    OPTIONAL_GRAPH,
    Param("limit", "Max results (default 50)", kind=INTEGER, default=sparql.DEFAULT_SEARCH_LIMIT),
)


async def text_search(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    args = TEXT_SEARCH.parse(params)
    result = await service.query(sparql.build_text_search(args["pattern"], args["graph"], args["limit"]))
    matches = [
        {
            "subject": binding_value(row, "s"),
            "predicate": binding_value(row, "p"),
            "object": binding_value(row, "o"),
        }
        for row in bindings(result)
    ]
    logger.info(f"Text search for '{args['pattern']}' matched {len(matches)} triples")
    return {"count": len(matches), "matches": truncate(matches, SEARCH_CAP)}


async def list_prefixes(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    result = await service.query(sparql.build_list_prefixes())
    namespaces: List[str] = []
    for row in bindings(result):
        namespace = binding_value(row, "namespace")
        if namespace and namespace not in namespaces:
            namespaces.append(namespace)
    return {"count": len(namespaces), "namespaces": namespaces}


LOAD_RDF = ParamSet(
    Param("url", "URL of RDF data to load", required="URL required"),
    Param("graph", "Target graph URI", required="Graph required"),
)


async def load_rdf(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    args = LOAD_RDF.parse(params)
    text = await service.update(sparql.build_load(args["url"], args["graph"]))
    logger.info(f"Loaded {args['url']} into {args['graph']}")
    return {"success": True, "message": f"Load successful. {text}"}


CLEAR_GRAPH = ParamSet(Param("graph", "Graph URI to clear", required="Graph required"))


async def clear_graph(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    args = CLEAR_GRAPH.parse(params)
    text = await service.update(sparql.build_clear_graph(args["graph"]))
    logger.info(f"Cleared graph {args['graph']}")
    return {"success": True, "message": f"Graph cleared. {text}"}


NO_PARAMS = ParamSet()

TOOLS: Dict[str, ToolSpec] = {
    "virtuoso_select": ToolSpec("Execute SPARQL SELECT query", SELECT, select),
    "virtuoso_ask": ToolSpec("Execute SPARQL ASK query (returns boolean)", ASK, ask),
    "virtuoso_construct": ToolSpec("Execute SPARQL CONSTRUCT query", CONSTRUCT, construct),
    "virtuoso_describe": ToolSpec("Describe an RDF resource", DESCRIBE, describe),
    "virtuoso_insert": ToolSpec("Insert RDF triples", INSERT, insert),
    "virtuoso_delete": ToolSpec("Delete RDF triples", DELETE, delete),
    "virtuoso_update": ToolSpec("Execute generic SPARQL UPDATE query", UPDATE, update),
    "virtuoso_list_graphs": ToolSpec("List all named graphs with triple counts", NO_PARAMS, list_graphs),
    "virtuoso_graph_stats": ToolSpec(
        "Get statistics for a graph (triple count, top predicates, top classes)", GRAPH_STATS, graph_stats
    ),
    "virtuoso_find_by_type": ToolSpec("Find resources by RDF type", FIND_BY_TYPE, find_by_type),
    "virtuoso_text_search": ToolSpec("Full-text search using Virtuoso bif:contains", TEXT_SEARCH, text_search),
    "virtuoso_list_prefixes": ToolSpec("List namespaces/prefixes used in the data", NO_PARAMS, list_prefixes),
    "virtuoso_load_rdf": ToolSpec("Load RDF data from a URL into a graph", LOAD_RDF, load_rdf),
    "virtuoso_clear_graph": ToolSpec("Clear all triples from a graph", CLEAR_GRAPH, clear_graph),
}
