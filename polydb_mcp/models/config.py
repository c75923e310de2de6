"""Backend configuration loader.

Each backend reads its settings once, on first use, from (in priority order)
environment variables, an optional YAML file and built-in defaults. The
resulting configuration objects are immutable.
"""

import os
import yaml
from pathlib import Path
from typing import Any, ClassVar, Dict, Optional, Tuple
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

from polydb_mcp.lib.logging_config import get_logger

logger = get_logger(__name__)

_yaml_cache: Optional[Dict[str, Any]] = None


def _load_yaml_config() -> Dict[str, Any]:
    """Load backend sections from the YAML configuration file, if any."""
    global _yaml_cache
    if _yaml_cache is not None:
        return _yaml_cache

    possible_paths = [
        os.getenv('POLYDB_CONFIG'),
        'config/backends.yaml',
        Path(__file__).parent.parent.parent / 'config' / 'backends.yaml'
    ]

    for path in possible_paths:
        if not path:
            continue
        try:
            with open(path, 'r') as f:
                config_data = yaml.safe_load(f) or {}
            _yaml_cache = config_data.get('backends', {}) or {}
            logger.info(f"Loaded backend configuration from {path}")
            return _yaml_cache
        except (FileNotFoundError, yaml.YAMLError):
            continue

    _yaml_cache = {}
    return _yaml_cache


def reset_config_cache() -> None:
    """Forget the cached YAML file contents."""
    global _yaml_cache
    _yaml_cache = None


class BackendConfig(BaseModel):
    """Base class for immutable backend settings.

    Subclasses map each field to an environment variable through ``ENV_VARS``.
    """

    model_config = ConfigDict(frozen=True)

    SECTION: ClassVar[str] = ''
    ENV_VARS: ClassVar[Dict[str, str]] = {}

    @classmethod
    def from_env(cls, overrides: Optional[Dict[str, Any]] = None):
        """Resolve configuration from environment, YAML file and defaults."""
        load_dotenv()

        values: Dict[str, Any] = {}
        section = _load_yaml_config().get(cls.SECTION, {}) or {}
        for field_name in cls.model_fields:
            if field_name in section:
                values[field_name] = section[field_name]

        for field_name, env_var in cls.ENV_VARS.items():
            # An empty variable counts as unset
            env_value = os.getenv(env_var)
            if env_value:
                values[field_name] = env_value

        if overrides:
            values.update(overrides)

        return cls(**cls._prepare(values))

    @classmethod
    def _prepare(cls, values: Dict[str, Any]) -> Dict[str, Any]:
        return values

    @property
    def has_credentials(self) -> bool:
        return bool(getattr(self, 'username', '') and getattr(self, 'password', ''))


class ArangoConfig(BackendConfig):
    """ArangoDB connection settings."""

    SECTION: ClassVar[str] = 'arangodb'
    ENV_VARS: ClassVar[Dict[str, str]] = {
        'url': 'ARANGO_URL',
        'database': 'ARANGO_DATABASE',
        'username': 'ARANGO_USERNAME',
        'password': 'ARANGO_PASSWORD',
    }

    url: str = 'http://localhost:8529'
    database: str = '_system'
    username: str = 'root'
    password: str = ''


class CassandraConfig(BackendConfig):
    """Cassandra cluster settings."""

    SECTION: ClassVar[str] = 'cassandra'
    ENV_VARS: ClassVar[Dict[str, str]] = {
        'contact_points': 'CASSANDRA_CONTACT_POINTS',
        'local_datacenter': 'CASSANDRA_DATACENTER',
        'keyspace': 'CASSANDRA_KEYSPACE',
        'username': 'CASSANDRA_USERNAME',
        'password': 'CASSANDRA_PASSWORD',
    }

    contact_points: Tuple[str, ...] = ('localhost',)
    local_datacenter: str = 'datacenter1'
    keyspace: str = ''
    username: str = ''
    password: str = ''

    @classmethod
    def _prepare(cls, values: Dict[str, Any]) -> Dict[str, Any]:
        points = values.get('contact_points')
        if isinstance(points, str):
            values['contact_points'] = tuple(p.strip() for p in points.split(',') if p.strip())
        elif isinstance(points, list):
            values['contact_points'] = tuple(points)
        if values.get('contact_points') == ():
            values.pop('contact_points')
        return values


class CouchDBConfig(BackendConfig):
    """CouchDB server settings."""

    SECTION: ClassVar[str] = 'couchdb'
    ENV_VARS: ClassVar[Dict[str, str]] = {
        'url': 'COUCHDB_URL',
        'username': 'COUCHDB_USERNAME',
        'password': 'COUCHDB_PASSWORD',
        'database': 'COUCHDB_DATABASE',
    }

    url: str = 'http://localhost:5984'
    username: str = ''
    password: str = ''
    database: str = ''


class VirtuosoConfig(BackendConfig):
    """Virtuoso SPARQL endpoint settings."""

    SECTION: ClassVar[str] = 'virtuoso'
    ENV_VARS: ClassVar[Dict[str, str]] = {
        'endpoint': 'VIRTUOSO_ENDPOINT',
        'update_endpoint': 'VIRTUOSO_UPDATE_ENDPOINT',
        'username': 'VIRTUOSO_USERNAME',
        'password': 'VIRTUOSO_PASSWORD',
        'default_graph': 'VIRTUOSO_DEFAULT_GRAPH',
    }

    endpoint: str = 'http://localhost:8890/sparql'
    update_endpoint: str = 'http://localhost:8890/sparql-auth'
    username: str = ''
    password: str = ''
    default_graph: str = ''
