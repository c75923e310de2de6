"""Cassandra tools: CQL queries, row mutations, schema and cluster metadata.

Tools that touch a table resolve the keyspace first (parameter, then the
configured default) and fail with "Keyspace required" before checking
anything else.
"""

from typing import Any, Dict, Mapping

from polydb_mcp.lib.logging_config import get_logger
from polydb_mcp.lib.normalize import QUERY_CAP, truncate
from polydb_mcp.lib.params import INTEGER, JSON, Param, ParamSet
from polydb_mcp.lib.query import cql
from polydb_mcp.models.tool_descriptor import ToolSpec

logger = get_logger(__name__, {'backend': 'cassandra'})

KEYSPACE_DESCRIPTION = "Keyspace name (uses CASSANDRA_KEYSPACE if not provided)"

TABLE = Param("table", "Table name", required="Table name required")
KEYSPACE = Param("keyspace", KEYSPACE_DESCRIPTION)
WHERE = Param("where", "WHERE clause conditions as JSON object", kind=JSON,
              required="Where conditions required")


QUERY = ParamSet(
    Param("query", "CQL query to execute", required="Query required"),
    Param("params", "Query parameters as JSON array (optional)", kind=JSON),
    Param("keyspace", "Keyspace to use (optional, uses CASSANDRA_KEYSPACE if not provided)"),
)


async def query(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    args = QUERY.parse(params)
    result = await service.execute(args["query"], args["params"], keyspace=args["keyspace"])
    logger.info(f"CQL query returned {result.row_count} rows")
    return {
        "rowCount": result.row_count,
        "columns": result.columns,
        "rows": truncate(result.rows, QUERY_CAP),
    }


async def list_keyspaces(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    result = await service.execute("SELECT keyspace_name, replication FROM system_schema.keyspaces")
    keyspaces = [
        {"name": row["keyspace_name"], "replication": row["replication"]}
        for row in result.rows
    ]
    return {"count": len(keyspaces), "keyspaces": keyspaces}


LIST_TABLES = ParamSet(KEYSPACE)


async def list_tables(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    ks = service.resolve_keyspace(params.get("keyspace"))
    result = await service.execute(
        "SELECT table_name FROM system_schema.tables WHERE keyspace_name = ?",
        [ks]
    )
    tables = [row["table_name"] for row in result.rows]
    return {"keyspace": ks, "count": len(tables), "tables": tables}


DESCRIBE_TABLE = ParamSet(TABLE, KEYSPACE)


async def describe_table(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    ks = service.resolve_keyspace(params.get("keyspace"))
    args = DESCRIBE_TABLE.parse(params)
    table = args["table"]

    col_result = await service.execute(
        """SELECT column_name, type, kind, position
           FROM system_schema.columns
           WHERE keyspace_name = ? AND table_name = ?""",
        [ks, table]
    )
    columns = [
        {
            "name": row["column_name"],
            "type": row["type"],
            "kind": row["kind"],
            "position": row["position"],
        }
        for row in col_result.rows
    ]

    table_result = await service.execute(
        """SELECT bloom_filter_fp_chance, caching, comment, compaction, compression
           FROM system_schema.tables
           WHERE keyspace_name = ? AND table_name = ?""",
        [ks, table]
    )
    metadata = table_result.rows[0] if table_result.rows else {}

    return {
        "keyspace": ks,
        "table": table,
        "columns": columns,
        "metadata": {
            "bloomFilterFpChance": metadata.get("bloom_filter_fp_chance"),
            "caching": metadata.get("caching"),
            "comment": metadata.get("comment"),
            "compaction": metadata.get("compaction"),
            "compression": metadata.get("compression"),
        },
    }


INSERT = ParamSet(
    TABLE,
    Param("data", "Row data as JSON object", kind=JSON, required="Data required"),
    KEYSPACE,
    Param("ttl", "Time-to-live in seconds (optional)", kind=INTEGER),
)


async def insert(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    ks = service.resolve_keyspace(params.get("keyspace"))
    args = INSERT.parse(params)
    statement = cql.build_insert(ks, args["table"], args["data"], args["ttl"])
    await service.execute(statement.query, statement.values, prepare=True)
    logger.info(f"Inserted row into {ks}.{args['table']}")
    return {
        "success": True,
        "table": cql.qualified(ks, args["table"]),
        "columns": list(args["data"].keys()),
    }


UPDATE = ParamSet(
    TABLE,
    Param("set", "Values to set as JSON object", kind=JSON, required="Set values required"),
    WHERE,
    KEYSPACE,
)


async def update(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    ks = service.resolve_keyspace(params.get("keyspace"))
    args = UPDATE.parse(params)
    statement = cql.build_update(ks, args["table"], args["set"], args["where"])
    await service.execute(statement.query, statement.values, prepare=True)
    return {"success": True, "table": cql.qualified(ks, args["table"])}


DELETE = ParamSet(TABLE, WHERE, KEYSPACE)


async def delete(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    ks = service.resolve_keyspace(params.get("keyspace"))
    args = DELETE.parse(params)
    statement = cql.build_delete(ks, args["table"], args["where"])
    await service.execute(statement.query, statement.values, prepare=True)
    return {"success": True, "table": cql.qualified(ks, args["table"])}


CREATE_KEYSPACE = ParamSet(
    Param("name", "Keyspace name", required="Keyspace name required"),
    Param("replication_factor", "Replication factor (default: 1)", kind=INTEGER, default=1),
    Param("strategy", "Replication strategy: SimpleStrategy or NetworkTopologyStrategy (default: SimpleStrategy)",
          default=cql.SIMPLE_STRATEGY),
)


async def create_keyspace(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    args = CREATE_KEYSPACE.parse(params)
    statement = cql.build_create_keyspace(
        args["name"], args["replication_factor"], args["strategy"], service.config.local_datacenter
    )
    await service.execute(statement.query)
    logger.info(f"Created keyspace {args['name']}")
    return {
        "success": True,
        "keyspace": args["name"],
        "strategy": args["strategy"],
        "replicationFactor": args["replication_factor"],
    }


CREATE_TABLE = ParamSet(
    TABLE,
    Param("columns", "Column definitions as JSON object (e.g., '{\"id\": \"uuid\", \"name\": \"text\"}')",
          kind=JSON, required="Columns required"),
    Param("primary_key", "Primary key column(s) - single column or JSON array for composite",
          required="Primary key required"),
    KEYSPACE,
)


async def create_table(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    ks = service.resolve_keyspace(params.get("keyspace"))
    args = CREATE_TABLE.parse(params)
    statement = cql.build_create_table(ks, args["table"], args["columns"], args["primary_key"])
    await service.execute(statement.query)
    logger.info(f"Created table {ks}.{args['table']}")
    return {"success": True, "table": cql.qualified(ks, args["table"])}


DROP_TABLE = ParamSet(TABLE, KEYSPACE)


async def drop_table(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    ks = service.resolve_keyspace(params.get("keyspace"))
    args = DROP_TABLE.parse(params)
    statement = cql.build_drop_table(ks, args["table"])
    await service.execute(statement.query)
    logger.info(f"Dropped table {ks}.{args['table']}")
    return {"success": True, "table": cql.qualified(ks, args["table"]), "dropped": True}


BATCH = ParamSet(
    Param("statements", "Array of CQL statements as JSON", kind=JSON, required="Statements required"),
    KEYSPACE,
)


async def batch(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    args = BATCH.parse(params)
    entries = cql.build_batch(args["statements"])
    await service.batch(entries, keyspace=args["keyspace"])
    logger.info(f"Executed batch of {len(entries)} statements")
    return {"success": True, "statementCount": len(entries)}


async def cluster_info(service, params: Mapping[str, Any]) -> Dict[str, Any]:
    local_result = await service.execute(
        "SELECT cluster_name, release_version, data_center, rack FROM system.local"
    )
    local = local_result.rows[0] if local_result.rows else {}

    peers_result = await service.execute(
        "SELECT peer, data_center, rack, release_version FROM system.peers"
    )

    return {
        "cluster": local.get("cluster_name"),
        "version": local.get("release_version"),
        "localDataCenter": local.get("data_center"),
        "localRack": local.get("rack"),
        "peers": [
            {
                "peer": row.get("peer"),
                "dataCenter": row.get("data_center"),
                "rack": row.get("rack"),
                "version": row.get("release_version"),
            }
            for row in peers_result.rows
        ],
        "totalNodes": 1 + peers_result.row_count,
    }


NO_PARAMS = ParamSet()

TOOLS: Dict[str, ToolSpec] = {
    "cassandra_query": ToolSpec("Execute a CQL query", QUERY, query),
    "cassandra_list_keyspaces": ToolSpec("List all keyspaces", NO_PARAMS, list_keyspaces),
    "cassandra_list_tables": ToolSpec("List all tables in a keyspace", LIST_TABLES, list_tables),
    "cassandra_describe_table": ToolSpec("Get table schema information", DESCRIBE_TABLE, describe_table),
    "cassandra_insert": ToolSpec("Insert a row into a table", INSERT, insert),
    "cassandra_update": ToolSpec("Update rows in a table", UPDATE, update),
    "cassandra_delete": ToolSpec("Delete rows from a table", DELETE, delete),
    "cassandra_create_keyspace": ToolSpec("Create a new keyspace", CREATE_KEYSPACE, create_keyspace),
    "cassandra_create_table": ToolSpec("Create a new table", CREATE_TABLE, create_table),
    "cassandra_drop_table": ToolSpec("Drop a table", DROP_TABLE, drop_table),
    "cassandra_batch": ToolSpec("Execute multiple statements in a batch", BATCH, batch),
    "cassandra_cluster_info": ToolSpec("Get cluster information", NO_PARAMS, cluster_info),
}
