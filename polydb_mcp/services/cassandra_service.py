"""Cassandra service backed by the DataStax cassandra-driver."""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Sequence

from cassandra.query import BatchStatement, SimpleStatement, dict_factory

from polydb_mcp.lib.logging_config import get_logger, log_backend_query, log_error_with_context
from polydb_mcp.lib.normalize import to_jsonable
from polydb_mcp.lib.query.cql import BatchEntry
from polydb_mcp.models.config import CassandraConfig
from polydb_mcp.models.error_types import BackendError, ConnectionError, MCPError, MissingParameterError
from polydb_mcp.services.base import BackendService
from polydb_mcp.services.client_handle import ClientHandle

logger = get_logger(__name__, {'backend': 'cassandra'})

PROBE_QUERY = "SELECT release_version FROM system.local"


class CassandraConnection(NamedTuple):
    """A cluster object together with its connected session."""

    cluster: Any
    session: Any


@dataclass
class CqlResult:
    """Materialized first page of a CQL result."""

    rows: List[Dict[str, Any]] = field(default_factory=list)
    columns: List[Dict[str, str]] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)


def _column_type_name(col_type: Any) -> str:
    if hasattr(col_type, 'cql_parameterized_type'):
        return col_type.cql_parameterized_type()
    return str(col_type)


def create_cluster_session(config: CassandraConfig) -> CassandraConnection:
    """Build a cluster from configuration and open a session (handshake)."""
    from cassandra.auth import PlainTextAuthProvider
    from cassandra.cluster import Cluster
    from cassandra.policies import DCAwareRoundRobinPolicy

    options: Dict[str, Any] = {
        'contact_points': list(config.contact_points),
        'load_balancing_policy': DCAwareRoundRobinPolicy(local_dc=config.local_datacenter),
    }
    if config.has_credentials:
        options['auth_provider'] = PlainTextAuthProvider(config.username, config.password)

    cluster = Cluster(**options)
    try:
        session = cluster.connect(config.keyspace or None)
    except Exception:
        cluster.shutdown()
        raise
    session.row_factory = dict_factory
    return CassandraConnection(cluster, session)


class CassandraService(BackendService):
    """Service for Apache Cassandra.

    The session is created (and the cluster handshake performed) on first
    use. Statements with bound values are prepared so that ``?`` placeholders
    work for both built and caller-supplied CQL.
    """

    name = "cassandra"
    description = "Apache Cassandra distributed NoSQL database"
    config_class = CassandraConfig

    def __init__(self, config: Optional[CassandraConfig] = None, config_loader=None,
                 session_factory: Optional[Callable[[CassandraConfig], CassandraConnection]] = None):
        """Initialize the service.

        Args:
            config: Pre-resolved configuration (resolved from env when omitted)
            config_loader: Alternative configuration loader
            session_factory: Builds a CassandraConnection from configuration;
                defaults to ``create_cluster_session``
        """
        super().__init__(config, config_loader)
        self._session_factory = session_factory or create_cluster_session
        self._handle = ClientHandle(self.name, lambda: self._session_factory(self.config), self._close)

    @staticmethod
    def _close(connection: CassandraConnection) -> None:
        connection.cluster.shutdown()

    def resolve_keyspace(self, keyspace: Optional[str]) -> str:
        """Use the given keyspace, falling back to the configured default."""
        ks = keyspace or self.config.keyspace
        if not ks:
            raise MissingParameterError("keyspace", "Keyspace required")
        return ks

    async def _session(self):
        try:
            connection = await self._handle.get()
        except MCPError:
            raise
        except Exception as e:
            log_error_with_context(e, {'contact_points': self.config.contact_points}, logger)
            raise ConnectionError(f"Failed to connect to Cassandra: {e}") from e
        return connection.session

    async def _run(self, func: Callable[[], Any], context: Dict[str, Any]) -> Any:
        try:
            return await asyncio.to_thread(func)
        except MCPError:
            raise
        except Exception as e:
            log_error_with_context(e, context, logger)
            raise BackendError(self.name, f"Cassandra error: {e}") from e

    async def execute(self, query: str, params: Optional[Sequence[Any]] = None,
                      keyspace: Optional[str] = None, prepare: bool = False) -> CqlResult:
        """Execute one CQL statement and materialize its first page.

        Args:
            query: CQL text with ``?`` placeholders for bound values
            params: Values bound positionally to the placeholders
            keyspace: Keyspace the statement runs against, if not qualified
            prepare: Prepare the statement even without bound values

        Returns:
            CqlResult with JSON-safe rows and column metadata
        """
        log_backend_query(logger, self.name, query, params)
        session = await self._session()

        def run():
            if params or prepare:
                statement = session.prepare(query, keyspace=keyspace)
                return session.execute(statement, list(params or []))
            return session.execute(SimpleStatement(query, keyspace=keyspace))

        result_set = await self._run(run, {'query': query[:100], 'params': params})
        return self._materialize(result_set)

    async def batch(self, entries: Sequence[BatchEntry], keyspace: Optional[str] = None) -> None:
        """Execute statements as one logged batch."""
        session = await self._session()

        def run():
            batch = BatchStatement()
            for entry in entries:
                log_backend_query(logger, self.name, entry.query, entry.params)
                if entry.params:
                    batch.add(session.prepare(entry.query, keyspace=keyspace), list(entry.params))
                else:
                    batch.add(SimpleStatement(entry.query, keyspace=keyspace))
            return session.execute(batch)

        await self._run(run, {'statements': len(entries), 'keyspace': keyspace})

    @staticmethod
    def _materialize(result_set: Any) -> CqlResult:
        if result_set is None:
            return CqlResult()

        rows = [to_jsonable(dict(row)) for row in (result_set.current_rows or [])]
        names = result_set.column_names or []
        types = result_set.column_types or []
        columns = [
            {"name": name, "type": _column_type_name(col_type)}
            for name, col_type in zip(names, types)
        ]
        return CqlResult(rows=rows, columns=columns)

    async def connect(self) -> bool:
        await self._session()
        return True

    async def disconnect(self) -> None:
        await self._handle.close()

    async def is_connected(self) -> bool:
        try:
            await self.execute(PROBE_QUERY)
            return True
        except Exception as e:
            logger.debug(f"Cassandra probe failed: {e}")
            return False
