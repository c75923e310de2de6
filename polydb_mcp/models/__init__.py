"""Data models for the polydb MCP gateway."""

from .config import ArangoConfig, CassandraConfig, CouchDBConfig, VirtuosoConfig
from .error_types import (
    MCPError,
    MissingParameterError,
    InvalidParameterError,
    TranslationError,
    BackendError,
    UnknownToolError,
    ConnectionError
)

__all__ = [
    'ArangoConfig',
    'CassandraConfig',
    'CouchDBConfig',
    'VirtuosoConfig',
    'MCPError',
    'MissingParameterError',
    'InvalidParameterError',
    'TranslationError',
    'BackendError',
    'UnknownToolError',
    'ConnectionError'
]
