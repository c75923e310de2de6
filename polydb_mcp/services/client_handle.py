"""Lazily created, process-wide client handle for one backend."""

import asyncio
import inspect
from typing import Any, Callable, Generic, Optional, TypeVar

from polydb_mcp.lib.logging_config import get_logger

T = TypeVar('T')


async def _maybe_await(func: Callable[..., Any], *args) -> Any:
    """Run a factory or closer; plain callables run in a worker thread."""
    if inspect.iscoroutinefunction(func):
        return await func(*args)
    result = await asyncio.to_thread(func, *args)
    if inspect.isawaitable(result):
        return await result
    return result


class ClientHandle(Generic[T]):
    """Owns at most one live client for a backend.

    The client is built on the first ``get()`` and shared by every caller
    afterwards. Construction is single-flight: concurrent first callers wait
    on the same lock and receive the same instance. ``close()`` tears the
    client down and the next ``get()`` builds a fresh one.
    """

    def __init__(self, name: str, factory: Callable[[], Any],
                 closer: Optional[Callable[[T], Any]] = None):
        """Initialize the handle.

        Args:
            name: Backend name, used in log messages
            factory: Builds the client; may be sync (blocking) or async
            closer: Releases a client; may be sync (blocking) or async
        """
        self.name = name
        self._logger = get_logger(__name__, {'backend': name})
        self._factory = factory
        self._closer = closer
        self._client: Optional[T] = None
        self._lock = asyncio.Lock()
        self.created_count = 0

    @property
    def is_open(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> Optional[T]:
        return self._client

    async def get(self) -> T:
        """Return the live client, creating it on first use."""
        if self._client is not None:
            return self._client

        async with self._lock:
            if self._client is None:
                self._logger.debug(f"Creating {self.name} client")
                self._client = await _maybe_await(self._factory)
                self.created_count += 1
                self._logger.info(f"{self.name} client created")
            return self._client

    async def close(self) -> None:
        """Release the live client, if any. Safe to call repeatedly."""
        async with self._lock:
            client, self._client = self._client, None
            if client is None:
                return
            if self._closer is not None:
                await _maybe_await(self._closer, client)
            self._logger.info(f"{self.name} client closed")
