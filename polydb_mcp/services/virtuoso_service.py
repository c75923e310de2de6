"""Virtuoso service over the SPARQL 1.1 protocol."""

from typing import Any

from polydb_mcp.lib.logging_config import get_logger, log_backend_query
from polydb_mcp.lib.query.sparql import ASK_PROBE, SPARQL_RESULTS_JSON
from polydb_mcp.models.config import VirtuosoConfig
from polydb_mcp.models.error_types import BackendError, MCPError
from polydb_mcp.services.http_transport import HttpBackendService

logger = get_logger(__name__, {'backend': 'virtuoso'})

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class VirtuosoService(HttpBackendService):
    """Service for OpenLink Virtuoso SPARQL endpoints."""

    name = "virtuoso"
    description = "OpenLink Virtuoso RDF triplestore and SPARQL endpoint"
    config_class = VirtuosoConfig

    async def query(self, query: str, accept: str = SPARQL_RESULTS_JSON) -> Any:
        """Run a SPARQL query against the query endpoint.

        Args:
            query: SPARQL query text
            accept: Media type to negotiate

        Returns:
            Decoded JSON when the response content type is JSON, else text
        """
        log_backend_query(logger, self.name, query)
        form = {"query": query}
        if self.config.default_graph:
            form["default-graph-uri"] = self.config.default_graph

        response = await self.send(
            "POST", self.config.endpoint, "SPARQL error",
            data=form,
            headers={"Content-Type": FORM_CONTENT_TYPE, "Accept": accept},
        )
        if not response.is_success:
            raise BackendError(
                self.name, f"SPARQL error: {response.status_code} {response.text}",
                status_code=response.status_code
            )

        content_type = response.headers.get("content-type", "")
        if "json" in content_type:
            return response.json()
        return response.text

    async def update(self, query: str) -> str:
        """Run a SPARQL update against the update endpoint and return its text."""
        log_backend_query(logger, self.name, query)
        response = await self.send(
            "POST", self.config.update_endpoint, "SPARQL Update error",
            data={"query": query},
            headers={"Content-Type": FORM_CONTENT_TYPE},
        )
        if not response.is_success:
            raise BackendError(
                self.name, f"SPARQL Update error: {response.status_code} {response.text}",
                status_code=response.status_code
            )
        return response.text

    async def is_connected(self) -> bool:
        try:
            await self.query(ASK_PROBE)
            self.connected = True
            return True
        except MCPError as e:
            logger.debug(f"Virtuoso probe failed: {e}")
            self.connected = False
            return False
        except Exception as e:
            logger.debug(f"Virtuoso probe failed unexpectedly: {e}")
            self.connected = False
            return False
