"""CQL statement builders for Cassandra.

Keyspace, table and column identifiers are interpolated into the statement
text because CQL cannot bind them; values always go through positional
``?`` placeholders. Column order follows the key order of the decoded JSON
object, and the bound values follow the same order.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from polydb_mcp.models.error_types import TranslationError

SIMPLE_STRATEGY = "SimpleStrategy"
NETWORK_TOPOLOGY_STRATEGY = "NetworkTopologyStrategy"


@dataclass
class Statement:
    """A CQL statement together with its bound values."""

    query: str
    values: List[Any] = field(default_factory=list)


@dataclass
class BatchEntry:
    """One statement of a batch."""

    query: str
    params: Optional[List[Any]] = None


def qualified(keyspace: str, table: str) -> str:
    return f"{keyspace}.{table}"


def _require_object(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise TranslationError(f"{what} must be a JSON object")
    return data


def _assignments(data: Mapping[str, Any]) -> List[str]:
    return [f"{column} = ?" for column in data]


def build_insert(keyspace: str, table: str, data: Mapping[str, Any], ttl: Optional[int] = None) -> Statement:
    """INSERT INTO ks.table (c1, c2) VALUES (?, ?) [USING TTL n]"""
    data = _require_object(data, "Data")
    columns = list(data.keys())
    placeholders = ", ".join("?" for _ in columns)
    query = f"INSERT INTO {qualified(keyspace, table)} ({', '.join(columns)}) VALUES ({placeholders})"
    if ttl is not None:
        query += f" USING TTL {int(ttl)}"
    return Statement(query, [data[c] for c in columns])


def build_update(keyspace: str, table: str, set_values: Mapping[str, Any],
                 where: Mapping[str, Any]) -> Statement:
    """UPDATE ks.table SET a = ?, b = ? WHERE k = ? AND j = ?"""
    set_values = _require_object(set_values, "Set values")
    where = _require_object(where, "Where conditions")
    query = (
        f"UPDATE {qualified(keyspace, table)} "
        f"SET {', '.join(_assignments(set_values))} "
        f"WHERE {' AND '.join(_assignments(where))}"
    )
    return Statement(query, list(set_values.values()) + list(where.values()))


def build_delete(keyspace: str, table: str, where: Mapping[str, Any]) -> Statement:
    """DELETE FROM ks.table WHERE k = ? AND j = ?"""
    where = _require_object(where, "Where conditions")
    query = f"DELETE FROM {qualified(keyspace, table)} WHERE {' AND '.join(_assignments(where))}"
    return Statement(query, list(where.values()))


def _simple_replication(replication_factor: int, datacenter: str) -> str:
    return f"{{'class': '{SIMPLE_STRATEGY}', 'replication_factor': {replication_factor}}}"


def _network_replication(replication_factor: int, datacenter: str) -> str:
    return f"{{'class': '{NETWORK_TOPOLOGY_STRATEGY}', '{datacenter}': {replication_factor}}}"


REPLICATION_BUILDERS: Dict[str, Callable[[int, str], str]] = {
    SIMPLE_STRATEGY: _simple_replication,
    NETWORK_TOPOLOGY_STRATEGY: _network_replication,
}


def build_replication(strategy: str, replication_factor: int, datacenter: str) -> str:
    """Replication map literal.

    Any strategy other than SimpleStrategy is treated as
    NetworkTopologyStrategy on the local datacenter.
    """
    builder = REPLICATION_BUILDERS.get(strategy, _network_replication)
    return builder(replication_factor, datacenter)


def build_create_keyspace(name: str, replication_factor: int = 1, strategy: Optional[str] = None,
                          datacenter: str = "datacenter1") -> Statement:
    """CREATE KEYSPACE IF NOT EXISTS name WITH replication = {...}"""
    strategy = strategy or SIMPLE_STRATEGY
    replication = build_replication(strategy, replication_factor, datacenter)
    return Statement(f"CREATE KEYSPACE IF NOT EXISTS {name} WITH replication = {replication}")


def primary_key_clause(primary_key: str) -> str:
    """Composite keys come as a JSON array; anything else is used verbatim."""
    try:
        parsed = json.loads(primary_key)
    except (TypeError, ValueError):
        return primary_key
    if not isinstance(parsed, list):
        return primary_key
    return f"({', '.join(str(part) for part in parsed)})"


def build_create_table(keyspace: str, table: str, columns: Mapping[str, str], primary_key: str) -> Statement:
    """CREATE TABLE IF NOT EXISTS ks.table (col type, ..., PRIMARY KEY (pk))"""
    columns = _require_object(columns, "Columns")
    column_defs = ", ".join(f"{name} {col_type}" for name, col_type in columns.items())
    pk = primary_key_clause(primary_key)
    return Statement(
        f"CREATE TABLE IF NOT EXISTS {qualified(keyspace, table)} ({column_defs}, PRIMARY KEY ({pk}))"
    )


def build_drop_table(keyspace: str, table: str) -> Statement:
    return Statement(f"DROP TABLE IF EXISTS {qualified(keyspace, table)}")


def build_batch(statements: Sequence[Any]) -> List[BatchEntry]:
    """Turn a decoded statements array into batch entries.

    Each item is either a CQL string or an object with ``query`` and
    optional ``params``.
    """
    if not isinstance(statements, list):
        raise TranslationError("Statements must be a JSON array")

    entries = []
    for stmt in statements:
        if isinstance(stmt, str):
            entries.append(BatchEntry(stmt))
        elif isinstance(stmt, Mapping) and stmt.get("query"):
            entries.append(BatchEntry(stmt["query"], stmt.get("params")))
        else:
            raise TranslationError(f"Invalid batch statement: {stmt!r}")
    return entries
