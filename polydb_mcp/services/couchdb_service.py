"""CouchDB service over the HTTP REST API."""

from typing import Any, Optional

from polydb_mcp.lib.logging_config import get_logger
from polydb_mcp.lib.query.couch import CouchRequest
from polydb_mcp.models.config import CouchDBConfig
from polydb_mcp.models.error_types import BackendError, MCPError, MissingParameterError
from polydb_mcp.services.http_transport import HttpBackendService, decode_body

logger = get_logger(__name__, {'backend': 'couchdb'})

JSON_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class CouchDBService(HttpBackendService):
    """Service for Apache CouchDB."""

    name = "couchdb"
    description = "Apache CouchDB document database"
    config_class = CouchDBConfig

    def resolve_database(self, database: Optional[str]) -> str:
        """Use the given database, falling back to the configured default."""
        db = database or self.config.database
        if not db:
            raise MissingParameterError("database", "Database name required")
        return db

    async def request(self, path: str, method: str = "GET", body: Any = None) -> Any:
        """Send a request to the CouchDB server.

        Args:
            path: Path including query string, starting with '/'
            method: HTTP method
            body: JSON-serializable request body

        Returns:
            Decoded JSON body, or the raw text if it is not JSON

        Raises:
            BackendError: On transport failure or non-2xx status, carrying
                CouchDB's ``reason``/``error`` text when present
        """
        url = f"{self.config.url}{path}"
        kwargs = {"headers": JSON_HEADERS}
        if body is not None:
            kwargs["json"] = body

        response = await self.send(method, url, "CouchDB error", **kwargs)
        data = decode_body(response)

        if not response.is_success:
            error = None
            if isinstance(data, dict):
                error = data.get("reason") or data.get("error")
            error = error or response.text or response.reason_phrase
            logger.warning(f"CouchDB {method} {path} failed with {response.status_code}: {error}")
            raise BackendError(self.name, f"CouchDB error: {error}", status_code=response.status_code)

        return data

    async def execute(self, request: CouchRequest) -> Any:
        return await self.request(request.path, request.method, request.body)

    async def is_connected(self) -> bool:
        try:
            await self.request("/")
            self.connected = True
            return True
        except MCPError as e:
            logger.debug(f"CouchDB probe failed: {e}")
            self.connected = False
            return False
        except Exception as e:
            logger.debug(f"CouchDB probe failed unexpectedly: {e}")
            self.connected = False
            return False
