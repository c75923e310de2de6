"""Health monitoring API service."""

import contextlib
from datetime import datetime
from typing import Any, Dict, Optional

import uvicorn
from fastapi import FastAPI, HTTPException

from polydb_mcp import __version__
from polydb_mcp.lib.logging_config import get_logger

logger = get_logger(__name__)


class HealthAPI:
    """Health monitoring API service served alongside the MCP server."""

    def __init__(self, registry, host: str = "0.0.0.0", port: int = 8080):
        """Initialize health API service.

        Args:
            registry: AdapterRegistry whose backends are probed
            host: Host to bind the health API to
            port: Port to bind the health API to
        """
        self.registry = registry
        self.host = host
        self.port = port
        self.app = FastAPI(title="PolyDB MCP Health API", version=__version__)
        self.start_time = datetime.now()
        self._server: Optional[uvicorn.Server] = None
        self._stop_requested = False

        self._setup_routes()

    def _setup_routes(self):
        """Set up FastAPI routes for health monitoring."""

        @self.app.get("/health")
        async def health_check() -> Dict[str, Any]:
            """Overall system health status."""
            backends = await self.registry.health()
            uptime = (datetime.now() - self.start_time).total_seconds()
            return {
                "status": "healthy" if all(backends.values()) else "degraded",
                "backends": backends,
                "timestamp": datetime.now().isoformat(),
                "uptime_seconds": uptime,
                "version": __version__,
            }

        @self.app.get("/health/live")
        async def liveness_check() -> Dict[str, Any]:
            """Liveness probe for container orchestration."""
            return {
                "alive": True,
                "timestamp": datetime.now().isoformat()
            }

        @self.app.get("/health/ready")
        async def readiness_check() -> Dict[str, Any]:
            """Readiness probe for container orchestration."""
            backends = await self.registry.health()
            down = [name for name, ok in backends.items() if not ok]
            if down:
                raise HTTPException(
                    status_code=503,
                    detail=f"Service not ready: {', '.join(down)} unavailable"
                )
            return {
                "ready": True,
                "timestamp": datetime.now().isoformat()
            }

        @self.app.get("/health/{backend}")
        async def backend_health(backend: str) -> Dict[str, Any]:
            """Connection status of a single backend."""
            adapter = self.registry.adapters.get(backend)
            if adapter is None:
                raise HTTPException(status_code=404, detail=f"Unknown backend: {backend}")
            connected = await adapter.is_connected()
            return {
                "backend": backend,
                "description": adapter.description,
                "status": "healthy" if connected else "unhealthy",
                "tools": len(adapter.tools),
                "timestamp": datetime.now().isoformat()
            }

        @self.app.get("/tools")
        async def list_tools() -> Dict[str, Any]:
            """All registered tools with their parameters."""
            tools = [tool.model_dump() for tool in self.registry.tools.values()]
            return {"count": len(tools), "tools": tools}

    async def serve(self):
        """Serve the health API on the running event loop until ``stop()``.

        Runs beside the MCP server so both share the same registry and the
        same backend clients.
        """
        if self._stop_requested:
            return

        logger.info(f"Starting Health API on {self.host}:{self.port}")

        config = uvicorn.Config(
            self.app,
            host=self.host,
            port=self.port,
            log_level="info",
            # Route uvicorn logs through our stderr handlers; stdout carries MCP
            log_config=None
        )
        self._server = EmbeddedServer(config)
        try:
            await self._server.serve()
        except SystemExit as e:
            # uvicorn exits when it cannot bind the port
            logger.error(f"Health API failed to start on {self.host}:{self.port} (exit code {e.code})")

    def stop(self):
        """Ask the health API to shut down, or not to start if it has not yet."""
        self._stop_requested = True
        if self._server is not None:
            self._server.should_exit = True


class EmbeddedServer(uvicorn.Server):
    """uvicorn server that leaves signal handling to the host process."""

    def install_signal_handlers(self):
        pass

    @contextlib.contextmanager
    def capture_signals(self):
        yield
