"""ArangoDB tools: collections, documents, indexes, AQL and graph traversal."""

import asyncio
from typing import Any, Dict, Mapping

from polydb_mcp.lib.logging_config import get_logger, log_backend_query
from polydb_mcp.lib.normalize import QUERY_CAP, count_envelope
from polydb_mcp.lib.params import BOOLEAN, INTEGER, JSON, Param, ParamSet
from polydb_mcp.lib.query.aql import build_index_definition, build_traversal, split_fields
from polydb_mcp.models.error_types import BackendError, InvalidParameterError
from polydb_mcp.models.tool_descriptor import ToolSpec

logger = get_logger(__name__, {'backend': 'arangodb'})

COLLECTION = Param("collection", "Collection name", required="Collection name required")
KEY = Param("key", "Document _key", required="Document key required")


def _require_object(args: Mapping[str, Any], name: str) -> Dict[str, Any]:
    value = args[name]
    if not isinstance(value, dict):
        raise InvalidParameterError(name, f"{name} must be a JSON object")
    return value


async def list_databases(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    databases = await service.execute(lambda db: db.databases(), system=True)
    return {"databases": databases}


async def list_collections(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    collections = await service.execute(lambda db: db.collections())
    result = [
        {"name": c["name"], "type": "edge" if c.get("type") in ("edge", 3) else "document"}
        for c in collections
        if not c.get("system")
    ]
    logger.info(f"Listed {len(result)} ArangoDB collections")
    return {"collections": result}


COLLECTION_INFO = ParamSet(COLLECTION)


async def collection_info(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    args = COLLECTION_INFO.parse(params)
    name = args["collection"]
    properties, count, indexes = await asyncio.gather(
        service.execute(lambda db: db.collection(name).properties()),
        service.execute(lambda db: db.collection(name).count()),
        service.execute(lambda db: db.collection(name).indexes()),
    )
    return {"properties": properties, "count": count, "indexes": indexes}


CREATE_COLLECTION = ParamSet(
    Param("name", "Collection name", required="Collection name required"),
    Param("type", "Collection type: 'document' or 'edge'", default="document"),
)


async def create_collection(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    args = CREATE_COLLECTION.parse(params)
    name, kind = args["name"], args["type"]
    is_edge = kind == "edge"
    await service.execute(lambda db: db.create_collection(name, edge=is_edge))
    logger.info(f"Created ArangoDB collection {name} ({kind})")
    return {"success": True, "message": f"Collection '{name}' created ({kind})"}


CREATE_INDEX = ParamSet(
    COLLECTION,
    Param("type", "Index type: 'persistent', 'hash', 'skiplist', 'fulltext', 'geo'",
          required="Index type required"),
    Param("fields", "Comma-separated field names", required="Fields required"),
    Param("unique", "Unique index: 'true' or 'false' (default false)", kind=BOOLEAN),
)


async def create_index(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    args = CREATE_INDEX.parse(params)
    definition = build_index_definition(args["type"], split_fields(args["fields"]), args["unique"])
    name = args["collection"]
    result = await service.execute(lambda db: db.collection(name).add_index(definition))
    logger.info(f"Created {args['type']} index on {name}")
    return result


INSERT = ParamSet(
    COLLECTION,
    Param("document", "Document as JSON string", kind=JSON, required="Document required"),
)


async def insert(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    args = INSERT.parse(params)
    name, document = args["collection"], _require_object(args, "document")
    return await service.execute(lambda db: db.collection(name).insert(document))


GET = ParamSet(COLLECTION, KEY)


async def get(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    args = GET.parse(params)
    name, key = args["collection"], args["key"]
    document = await service.execute(lambda db: db.collection(name).get(key))
    if document is None:
        raise BackendError(service.name, f"ArangoDB error: document not found: {name}/{key}", status_code=404)
    return document


UPDATE = ParamSet(
    COLLECTION,
    KEY,
    Param("update", "Update data as JSON string", kind=JSON, required="Update data required"),
)


async def update(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    args = UPDATE.parse(params)
    name = args["collection"]
    patch = dict(_require_object(args, "update"), _key=args["key"])
    return await service.execute(lambda db: db.collection(name).update(patch, merge=True))


DELETE = ParamSet(COLLECTION, KEY)


async def delete(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    args = DELETE.parse(params)
    name, key = args["collection"], args["key"]
    return await service.execute(lambda db: db.collection(name).delete(key))


QUERY = ParamSet(
    Param("query", "AQL query to execute", required="Query required"),
    Param("bindVars", "Bind variables as JSON object (optional)", kind=JSON),
)


async def query(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    args = QUERY.parse(params)
    aql = args["query"]
    bind_vars = {} if args["bindVars"] is None else _require_object(args, "bindVars")
    log_backend_query(logger, service.name, aql, list(bind_vars.items()))
    results = await service.execute(lambda db: list(db.aql.execute(aql, bind_vars=bind_vars)))
    logger.info(f"AQL query returned {len(results)} results")
    return count_envelope(results, "results", QUERY_CAP)


EXPLAIN = ParamSet(Param("query", "AQL query to explain", required="Query required"))


async def explain(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    args = EXPLAIN.parse(params)
    aql = args["query"]
    return await service.execute(lambda db: db.aql.explain(aql))


TRAVERSE = ParamSet(
    Param("startVertex", "Start vertex ID (collection/key)", required="Start vertex required"),
    Param("edgeCollection", "Edge collection name", required="Edge collection required"),
    Param("direction", "Direction: 'outbound', 'inbound', or 'any'"),
    Param("minDepth", "Minimum depth (default 1)", kind=INTEGER, default=1),
    Param("maxDepth", "Maximum depth (default 1)", kind=INTEGER, default=1),
)


async def traverse(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    args = TRAVERSE.parse(params)
    aql, bind_vars = build_traversal(
        args["startVertex"], args["edgeCollection"], args["direction"],
        args["minDepth"], args["maxDepth"],
    )
    log_backend_query(logger, service.name, aql, list(bind_vars.items()))
    results = await service.execute(lambda db: list(db.aql.execute(aql, bind_vars=bind_vars)))
    return count_envelope(results, "results", QUERY_CAP)


async def list_graphs(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    graphs = await service.execute(lambda db: db.graphs())
    return {"graphs": graphs}


NO_PARAMS = ParamSet()

TOOLS: Dict[str, ToolSpec] = {
    "arango_list_databases": ToolSpec("List all ArangoDB databases", NO_PARAMS, list_databases),
    "arango_list_collections": ToolSpec("List all collections in the current database", NO_PARAMS, list_collections),
    "arango_collection_info": ToolSpec("Get detailed information about a collection", COLLECTION_INFO, collection_info),
    "arango_create_collection": ToolSpec("Create a new document or edge collection", CREATE_COLLECTION, create_collection),
    "arango_create_index": ToolSpec("Create an index on a collection", CREATE_INDEX, create_index),
    "arango_insert": ToolSpec("Insert a document into a collection", INSERT, insert),
    "arango_get": ToolSpec("Get a document by its _key", GET, get),
    "arango_update": ToolSpec("Update a document (partial update/merge)", UPDATE, update),
    "arango_delete": ToolSpec("Delete a document by its _key", DELETE, delete),
    "arango_query": ToolSpec("Execute an AQL query with optional bind variables", QUERY, query),
    "arango_explain": ToolSpec("Explain an AQL query execution plan", EXPLAIN, explain),
    "arango_traverse": ToolSpec("Traverse a graph from a start vertex", TRAVERSE, traverse),
    "arango_list_graphs": ToolSpec("List all named graphs in the database", NO_PARAMS, list_graphs),
}
