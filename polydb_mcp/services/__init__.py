"""Backend services for the polydb MCP gateway."""

from .arangodb_service import ArangoDBService
from .cassandra_service import CassandraService
from .couchdb_service import CouchDBService
from .virtuoso_service import VirtuosoService
from .health_api import HealthAPI

__all__ = [
    'ArangoDBService',
    'CassandraService',
    'CouchDBService',
    'VirtuosoService',
    'HealthAPI'
]
