"""Shared HTTP plumbing for REST-backed services (CouchDB, Virtuoso)."""

import json
from typing import Any, Optional, Tuple

import httpx

from polydb_mcp.lib.logging_config import get_logger, log_error_with_context
from polydb_mcp.models.error_types import BackendError
from polydb_mcp.services.base import BackendService
from polydb_mcp.services.client_handle import ClientHandle

logger = get_logger(__name__)


def decode_body(response: httpx.Response) -> Any:
    """Decode a response body as JSON, falling back to the raw text."""
    text = response.text
    try:
        return json.loads(text)
    except ValueError:
        return text


class HttpBackendService(BackendService):
    """Backend reached over HTTP through one shared ``httpx.AsyncClient``.

    ``connect()`` only creates the client and flips the ``connected`` flag;
    reachability is checked lazily by each request or by ``is_connected()``.
    """

    def __init__(self, config=None, config_loader=None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """Initialize the service.

        Args:
            config: Pre-resolved configuration (resolved from env when omitted)
            config_loader: Alternative configuration loader
            transport: Optional httpx transport, e.g. ``httpx.MockTransport``
        """
        super().__init__(config, config_loader)
        self._transport = transport
        self._handle = ClientHandle(self.name, self._create_client, self._close_client)
        self.connected = False

    def auth(self) -> Optional[Tuple[str, str]]:
        """Basic auth credentials, sent only when both parts are configured."""
        if self.config.has_credentials:
            return (self.config.username, self.config.password)
        return None

    async def _create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(auth=self.auth(), transport=self._transport)

    async def _close_client(self, client: httpx.AsyncClient) -> None:
        await client.aclose()

    async def connect(self) -> bool:
        await self._handle.get()
        self.connected = True
        return True

    async def disconnect(self) -> None:
        await self._handle.close()
        self.connected = False

    async def send(self, method: str, url: str, error_prefix: str, **kwargs) -> httpx.Response:
        """Send one request, mapping transport failures to ``BackendError``.

        Args:
            method: HTTP method
            url: Absolute request URL
            error_prefix: Prefix for error messages, e.g. "CouchDB error"
            **kwargs: Passed through to ``httpx.AsyncClient.request``

        Returns:
            The response, whatever its status code
        """
        client = await self._handle.get()
        logger.debug(f"{self.name} request: {method} {url}")
        try:
            return await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            log_error_with_context(e, {'backend': self.name, 'method': method, 'url': url}, logger)
            raise BackendError(self.name, f"{error_prefix}: {e}") from e
