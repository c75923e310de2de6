"""Backend adapters and the registry that dispatches tool calls to them."""

import asyncio
from typing import Any, Dict, Iterable, List, Mapping, Optional

from polydb_mcp.lib.logging_config import get_logger, log_error_with_context
from polydb_mcp.lib.tools import arangodb, cassandra, couchdb, virtuoso
from polydb_mcp.models.error_types import MCPError, UnknownToolError
from polydb_mcp.models.tool_descriptor import ToolDescriptor, ToolSpec
from polydb_mcp.services.arangodb_service import ArangoDBService
from polydb_mcp.services.base import BackendService
from polydb_mcp.services.cassandra_service import CassandraService
from polydb_mcp.services.couchdb_service import CouchDBService
from polydb_mcp.services.virtuoso_service import VirtuosoService

logger = get_logger(__name__)

# Backend name -> (service class, tool table)
BACKENDS = {
    "arangodb": (ArangoDBService, arangodb.TOOLS),
    "cassandra": (CassandraService, cassandra.TOOLS),
    "couchdb": (CouchDBService, couchdb.TOOLS),
    "virtuoso": (VirtuosoService, virtuoso.TOOLS),
}


class BackendAdapter:
    """One backend: its service, lifecycle operations and bound tools."""

    def __init__(self, service: BackendService, tool_specs: Mapping[str, ToolSpec]):
        self.service = service
        self.tools: Dict[str, ToolDescriptor] = {
            name: spec.bind(name, service) for name, spec in tool_specs.items()
        }

    @property
    def name(self) -> str:
        return self.service.name

    @property
    def description(self) -> str:
        return self.service.description

    async def connect(self) -> bool:
        return await self.service.connect()

    async def disconnect(self) -> None:
        await self.service.disconnect()

    async def is_connected(self) -> bool:
        return await self.service.is_connected()


class AdapterRegistry:
    """Composes adapters and routes tool calls by name.

    Tool names must be unique across all registered adapters.
    """

    def __init__(self, adapters: Iterable[BackendAdapter] = ()):
        self.adapters: Dict[str, BackendAdapter] = {}
        self._tools: Dict[str, ToolDescriptor] = {}
        for adapter in adapters:
            self.register(adapter)

    def register(self, adapter: BackendAdapter) -> None:
        if adapter.name in self.adapters:
            raise ValueError(f"Backend already registered: {adapter.name}")
        duplicates = sorted(set(adapter.tools) & set(self._tools))
        if duplicates:
            raise ValueError(f"Duplicate tool names: {', '.join(duplicates)}")
        self.adapters[adapter.name] = adapter
        self._tools.update(adapter.tools)
        logger.info(f"Registered backend {adapter.name} with {len(adapter.tools)} tools")

    @property
    def tools(self) -> Dict[str, ToolDescriptor]:
        return dict(self._tools)

    def get_tool(self, name: str) -> ToolDescriptor:
        try:
            return self._tools[name]
        except KeyError:
            raise UnknownToolError(name) from None

    async def call_tool(self, name: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """Invoke a tool by name.

        Raises:
            UnknownToolError: If no adapter provides the tool
            MCPError: Whatever the tool handler raises
        """
        tool = self.get_tool(name)
        logger.debug(f"Calling tool {name} on {tool.backend}")
        try:
            return await tool(params or {})
        except MCPError as e:
            log_error_with_context(e, {'tool': name, 'backend': tool.backend}, logger)
            raise

    async def connect_all(self) -> Dict[str, bool]:
        """Connect every adapter; a failing backend is reported, not raised."""
        async def _connect(adapter: BackendAdapter) -> bool:
            try:
                return await adapter.connect()
            except MCPError as e:
                logger.warning(f"Backend {adapter.name} unavailable at startup: {e}")
                return False

        names = list(self.adapters)
        results = await asyncio.gather(*(_connect(self.adapters[n]) for n in names))
        return dict(zip(names, results))

    async def health(self) -> Dict[str, bool]:
        """Probe every backend concurrently."""
        names = list(self.adapters)
        results = await asyncio.gather(*(self.adapters[n].is_connected() for n in names))
        return dict(zip(names, results))

    async def disconnect_all(self) -> None:
        for adapter in self.adapters.values():
            try:
                await adapter.disconnect()
            except Exception as e:
                logger.error(f"Error disconnecting {adapter.name}: {e}")


def create_default_registry(backends: Optional[List[str]] = None) -> AdapterRegistry:
    """Build a registry for the named backends (all four by default).

    Raises:
        ValueError: If a backend name is not known
    """
    names = backends or list(BACKENDS)
    unknown = [n for n in names if n not in BACKENDS]
    if unknown:
        raise ValueError(f"Unknown backends: {', '.join(unknown)}. Choose from: {', '.join(BACKENDS)}")

    adapters = []
    for name in names:
        service_class, tool_specs = BACKENDS[name]
        adapters.append(BackendAdapter(service_class(), tool_specs))
    return AdapterRegistry(adapters)
