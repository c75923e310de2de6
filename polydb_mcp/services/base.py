"""Lifecycle contract shared by every backend service."""

from abc import ABC, abstractmethod
from typing import Callable, Generic, Optional, TypeVar

from polydb_mcp.lib.logging_config import get_logger
from polydb_mcp.models.config import BackendConfig

logger = get_logger(__name__)

C = TypeVar('C', bound=BackendConfig)


class BackendService(ABC, Generic[C]):
    """Base class for backend services.

    Subclasses set ``name``, ``description`` and ``config_class`` and
    implement the three lifecycle operations. Configuration is resolved on
    first access and kept for the lifetime of the service.
    """

    name: str = ''
    description: str = ''
    config_class: type = BackendConfig

    def __init__(self, config: Optional[C] = None,
                 config_loader: Optional[Callable[[], C]] = None):
        self._config = config
        self._config_loader = config_loader

    @property
    def config(self) -> C:
        if self._config is None:
            loader = self._config_loader or self.config_class.from_env
            self._config = loader()
            logger.debug(f"Resolved {self.name} configuration")
        return self._config

    @abstractmethod
    async def connect(self) -> bool:
        """Make sure a usable client exists."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Release the client. Idempotent."""

    @abstractmethod
    async def is_connected(self) -> bool:
        """Probe the backend; never raises."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
