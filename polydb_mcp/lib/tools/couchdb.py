"""CouchDB tools: databases, documents, Mango queries, views and the changes feed."""

from typing import Any, Dict, Mapping

from polydb_mcp.lib.logging_config import get_logger
from polydb_mcp.lib.normalize import FIND_CAP, QUERY_CAP, acknowledged, partition_bulk, truncate
from polydb_mcp.lib.params import BOOLEAN, INTEGER, JSON, Param, ParamSet
from polydb_mcp.lib.query import couch
from polydb_mcp.models.tool_descriptor import ToolSpec

logger = get_logger(__name__, {'backend': 'couchdb'})

DATABASE = Param("database", "Database name (uses COUCHDB_DATABASE if not provided)")
DATABASE_NAME = Param("name", "Database name", required="Database name required")
DOC_ID = Param("id", "Document ID", required="Document ID required")


def _ack(result: Any) -> Dict[str, Any]:
    result = result if isinstance(result, dict) else {}
    return {"success": acknowledged(result), "id": result.get("id"), "rev": result.get("rev")}


async def list_databases(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    databases = await service.request("/_all_dbs")
    return {"count": len(databases), "databases": databases}


DATABASE_ADMIN = ParamSet(DATABASE_NAME)


async def create_database(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    args = DATABASE_ADMIN.parse(params)
    result = await service.execute(couch.database(args["name"], "PUT"))
    logger.info(f"Created CouchDB database {args['name']}")
    return {"success": True, "database": args["name"], "result": result}


async def delete_database(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    args = DATABASE_ADMIN.parse(params)
    result = await service.execute(couch.database(args["name"], "DELETE"))
    logger.info(f"Deleted CouchDB database {args['name']}")
    return {"success": True, "database": args["name"], "result": result}


INFO = ParamSet(DATABASE)


async def info(service, params: Mapping[str, Any]) -> Any:
    db = service.resolve_database(params.get("database"))
    return await service.execute(couch.database(db))


ALL_DOCS = ParamSet(
    DATABASE,
    Param("include_docs", "Include document bodies (true/false, default false)", kind=BOOLEAN),
    Param("limit", "Max documents to return (default 100)"),
    Param("skip", "Number of documents to skip"),
)


async def all_docs(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    db = service.resolve_database(params.get("database"))
    args = ALL_DOCS.parse(params)
    result = await service.execute(couch.all_docs(db, args["include_docs"], args["limit"], args["skip"]))
    rows = result.get("rows") or []
    return {
        "total_rows": result.get("total_rows"),
        "offset": result.get("offset"),
        "count": len(rows),
        "rows": truncate(rows, QUERY_CAP),
    }


GET = ParamSet(DATABASE, DOC_ID, Param("rev", "Specific revision (optional)"))


async def get(service, params: Mapping[str, Any]) -> Any:
    db = service.resolve_database(params.get("database"))
    args = GET.parse(params)
    return await service.execute(couch.get_document(db, args["id"], args["rev"]))


INSERT = ParamSet(
    DATABASE,
    Param("document", "Document as JSON string", kind=JSON, required="Document required"),
    Param("id", "Document ID (optional, auto-generated if not provided)"),
)


async def insert(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    db = service.resolve_database(params.get("database"))
    args = INSERT.parse(params)
    result = await service.execute(couch.insert(db, args["document"], args["id"]))
    return _ack(result)


DELETE = ParamSet(
    DATABASE,
    DOC_ID,
    Param("rev", "Document revision (_rev)", required="Document revision required"),
)


async def delete(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    db = service.resolve_database(params.get("database"))
    args = DELETE.parse(params)
    result = await service.execute(couch.delete_document(db, args["id"], args["rev"]))
    return _ack(result)


FIND = ParamSet(
    DATABASE,
    Param("selector", "Mango selector as JSON (e.g., '{\"type\": \"user\"}')", kind=JSON,
          required="Selector required"),
    Param("fields", "Fields to return as JSON array (optional)", kind=JSON),
    Param("limit", "Max documents to return (default 25)", kind=INTEGER),
    Param("skip", "Number of documents to skip", kind=INTEGER),
    Param("sort", "Sort order as JSON array (optional)", kind=JSON),
)


async def find(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    db = service.resolve_database(params.get("database"))
    args = FIND.parse(params)
    result = await service.execute(couch.find(
        db, args["selector"], args["fields"], args["limit"], args["skip"], args["sort"]
    ))
    docs = result.get("docs") or []
    logger.info(f"Mango query on {db} matched {len(docs)} documents")
    return {
        "count": len(docs),
        "docs": truncate(docs, FIND_CAP),
        "bookmark": result.get("bookmark"),
        "warning": result.get("warning"),
    }


CREATE_INDEX = ParamSet(
    DATABASE,
    Param("fields", "Fields to index as JSON array (e.g., '[\"type\", \"name\"]')", kind=JSON,
          required="Fields required"),
    Param("name", "Index name (optional)"),
    Param("ddoc", "Design document name (optional)"),
)


async def create_index(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    db = service.resolve_database(params.get("database"))
    args = CREATE_INDEX.parse(params)
    result = await service.execute(couch.create_index(db, args["fields"], args["name"], args["ddoc"]))
    return {"result": result.get("result"), "id": result.get("id"), "name": result.get("name")}


VIEW = ParamSet(
    DATABASE,
    Param("design", "Design document name (without _design/ prefix)",
          required="Design document name required"),
    Param("view", "View name", required="View name required"),
    Param("key", "Exact key to match (JSON value)"),
    Param("startkey", "Start key (JSON value)"),
    Param("endkey", "End key (JSON value)"),
    Param("limit", "Max rows to return"),
    Param("include_docs", "Include documents (true/false)", kind=BOOLEAN),
    Param("reduce", "Use reduce function (true/false)"),
    Param("group", "Group reduce results (true/false)"),
)


async def view(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    db = service.resolve_database(params.get("database"))
    args = VIEW.parse(params)
    result = await service.execute(couch.view(
        db, args["design"], args["view"],
        key=args["key"], startkey=args["startkey"], endkey=args["endkey"],
        limit=args["limit"], include_docs=args["include_docs"],
        reduce=args["reduce"], group=args["group"],
    ))
    rows = result.get("rows") or []
    return {
        "total_rows": result.get("total_rows"),
        "offset": result.get("offset"),
        "count": len(rows),
        "rows": truncate(rows, QUERY_CAP),
    }


BULK_DOCS = ParamSet(
    DATABASE,
    Param("docs", "Array of documents as JSON (include _deleted:true to delete)", kind=JSON,
          required="Documents required"),
)


async def bulk_docs(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    db = service.resolve_database(params.get("database"))
    args = BULK_DOCS.parse(params)
    results = await service.execute(couch.bulk_docs(db, args["docs"]))
    summary = partition_bulk(results)
    logger.info(
        f"Bulk write on {db}: {summary['succeeded']} succeeded, {summary['failed']} failed"
    )
    return summary


CHANGES = ParamSet(
    DATABASE,
    Param("since", "Start from this sequence (default: 0)"),
    Param("limit", "Max changes to return"),
    Param("include_docs", "Include document bodies (true/false)", kind=BOOLEAN),
)


async def changes(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    db = service.resolve_database(params.get("database"))
    args = CHANGES.parse(params)
    result = await service.execute(couch.changes(db, args["since"], args["limit"], args["include_docs"]))
    results = result.get("results") or []
    return {
        "last_seq": result.get("last_seq"),
        "count": len(results),
        "results": truncate(results, QUERY_CAP),
    }


NO_PARAMS = ParamSet()

TOOLS: Dict[str, ToolSpec] = {
    "couchdb_list_databases": ToolSpec("List all databases on the CouchDB server", NO_PARAMS, list_databases),
    "couchdb_create_database": ToolSpec("Create a new database", DATABASE_ADMIN, create_database),
    "couchdb_delete_database": ToolSpec("Delete a database", DATABASE_ADMIN, delete_database),
    "couchdb_info": ToolSpec("Get database information", INFO, info),
    "couchdb_all_docs": ToolSpec("Get all documents in a database", ALL_DOCS, all_docs),
    "couchdb_get": ToolSpec("Get a document by ID", GET, get),
    "couchdb_insert": ToolSpec("Create or update a document", INSERT, insert),
    "couchdb_delete": ToolSpec("Delete a document", DELETE, delete),
    "couchdb_find": ToolSpec("Find documents using Mango query selector", FIND, find),
    "couchdb_create_index": ToolSpec("Create a Mango index", CREATE_INDEX, create_index),
    "couchdb_view": ToolSpec("Query a view", VIEW, view),
    "couchdb_bulk_docs": ToolSpec("Insert, update, or delete multiple documents at once", BULK_DOCS, bulk_docs),
    "couchdb_changes": ToolSpec("Get database changes feed", CHANGES, changes),
}
