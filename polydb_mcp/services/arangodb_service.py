"""ArangoDB service backed by the python-arango driver."""

import asyncio
from typing import Any, Callable, NamedTuple, Optional, TypeVar

from arango import ArangoClient
from arango.database import StandardDatabase
from arango.exceptions import ArangoError
from requests.exceptions import RequestException

from polydb_mcp.lib.logging_config import get_logger, log_error_with_context
from polydb_mcp.models.config import ArangoConfig
from polydb_mcp.models.error_types import BackendError, ConnectionError, MCPError
from polydb_mcp.services.base import BackendService
from polydb_mcp.services.client_handle import ClientHandle

logger = get_logger(__name__, {'backend': 'arangodb'})

T = TypeVar('T')

SYSTEM_DATABASE = "_system"


class ArangoConnection(NamedTuple):
    """A driver client together with the database it is bound to."""

    client: ArangoClient
    db: StandardDatabase


def error_message(error: Exception) -> str:
    """Prefer the server's own error message over the driver's summary."""
    return getattr(error, "error_message", None) or str(error)


class ArangoDBService(BackendService):
    """Service for ArangoDB.

    Keeps two handles: one for the configured database and one for
    ``_system``, which database-level operations require. Driver calls are
    blocking and run in worker threads.
    """

    name = "arangodb"
    description = "ArangoDB multi-model database (document, graph, key-value)"
    config_class = ArangoConfig

    def __init__(self, config: Optional[ArangoConfig] = None, config_loader=None,
                 client_factory: Optional[Callable[[str], Any]] = None):
        """Initialize the service.

        Args:
            config: Pre-resolved configuration (resolved from env when omitted)
            config_loader: Alternative configuration loader
            client_factory: Builds a driver client from a hosts URL;
                defaults to ``ArangoClient``
        """
        super().__init__(config, config_loader)
        self._client_factory = client_factory or (lambda hosts: ArangoClient(hosts=hosts))
        self._db = ClientHandle(self.name, lambda: self._open(self.config.database), self._close)
        self._system_db = ClientHandle(f"{self.name}-system", lambda: self._open(SYSTEM_DATABASE), self._close)

    def _open(self, database: str) -> ArangoConnection:
        logger.info(f"Opening ArangoDB database '{database}' at {self.config.url}")
        client = self._client_factory(self.config.url)
        db = client.db(database, username=self.config.username, password=self.config.password)
        return ArangoConnection(client, db)

    @staticmethod
    def _close(connection: ArangoConnection) -> None:
        connection.client.close()

    async def execute(self, operation: Callable[[StandardDatabase], T], system: bool = False) -> T:
        """Run a driver operation against the database in a worker thread.

        Args:
            operation: Callable receiving the driver database object
            system: Run against ``_system`` instead of the configured database

        Raises:
            BackendError: If the driver or server reports an error
        """
        handle = self._system_db if system else self._db
        connection = await handle.get()
        try:
            return await asyncio.to_thread(operation, connection.db)
        except MCPError:
            raise
        except (ArangoError, RequestException) as e:
            log_error_with_context(e, {'backend': self.name, 'system': system}, logger)
            raise BackendError(self.name, f"ArangoDB error: {error_message(e)}") from e

    async def connect(self) -> bool:
        try:
            await self.execute(lambda db: db.version())
        except BackendError as e:
            raise ConnectionError(f"Failed to connect to ArangoDB: {e.message}") from e
        return True

    async def disconnect(self) -> None:
        await self._db.close()
        await self._system_db.close()

    async def is_connected(self) -> bool:
        try:
            await self.execute(lambda db: db.version())
            return True
        except Exception as e:
            logger.debug(f"ArangoDB probe failed: {e}")
            return False
