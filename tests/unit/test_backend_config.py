"""Unit tests for backend configuration."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from polydb_mcp.models import config as config_module
from polydb_mcp.models.config import (
    ArangoConfig,
    CassandraConfig,
    CouchDBConfig,
    VirtuosoConfig,
    reset_config_cache,
)


@pytest.fixture(autouse=True)
def no_yaml_file(tmp_path, monkeypatch):
    """Point the YAML lookup at an empty directory and clear the cache."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv('POLYDB_CONFIG', str(tmp_path / 'missing.yaml'))
    monkeypatch.setattr(config_module, 'Path', lambda *_: tmp_path / 'nowhere' / 'x' / 'y')
    reset_config_cache()
    yield
    reset_config_cache()


class TestDefaults:
    """Defaults apply when neither environment nor YAML set a value."""

    @patch.dict(os.environ, {}, clear=True)
    @patch('polydb_mcp.models.config.load_dotenv')
    def test_arango_defaults(self, mock_load_dotenv):
        config = ArangoConfig.from_env()

        assert config.url == 'http://localhost:8529'
        assert config.database == '_system'
        assert config.username == 'root'
        assert config.password == ''
        mock_load_dotenv.assert_called_once()

    @patch.dict(os.environ, {}, clear=True)
    @patch('polydb_mcp.models.config.load_dotenv')
    def test_cassandra_defaults(self, mock_load_dotenv):
        config = CassandraConfig.from_env()

        assert config.contact_points == ('localhost',)
        assert config.local_datacenter == 'datacenter1'
        assert config.keyspace == ''
        assert not config.has_credentials

    @patch.dict(os.environ, {}, clear=True)
    @patch('polydb_mcp.models.config.load_dotenv')
    def test_couchdb_and_virtuoso_defaults(self, mock_load_dotenv):
        couch = CouchDBConfig.from_env()
        virtuoso = VirtuosoConfig.from_env()

        assert couch.url == 'http://localhost:5984'
        assert couch.database == ''
        assert virtuoso.endpoint == 'http://localhost:8890/sparql'
        assert virtuoso.update_endpoint == 'http://localhost:8890/sparql-auth'
        assert virtuoso.default_graph == ''


class TestEnvironment:
    """Environment variables override defaults."""

    @patch.dict(os.environ, {
        'CASSANDRA_CONTACT_POINTS': 'node1, node2,node3',
        'CASSANDRA_DATACENTER': 'dc-east',
        'CASSANDRA_KEYSPACE': 'shop',
        'CASSANDRA_USERNAME': 'cass',
        'CASSANDRA_PASSWORD': 'secret',
    }, clear=True)
    @patch('polydb_mcp.models.config.load_dotenv')
    def test_cassandra_contact_points_split(self, mock_load_dotenv):
        config = CassandraConfig.from_env()

        assert config.contact_points == ('node1', 'node2', 'node3')
        assert config.local_datacenter == 'dc-east'
        assert config.keyspace == 'shop'
        assert config.has_credentials

    @patch.dict(os.environ, {
        'COUCHDB_URL': 'http://couch:5984',
        'COUCHDB_USERNAME': 'admin',
    }, clear=True)
    @patch('polydb_mcp.models.config.load_dotenv')
    def test_credentials_need_both_parts(self, mock_load_dotenv):
        config = CouchDBConfig.from_env()

        assert config.url == 'http://couch:5984'
        assert config.username == 'admin'
        assert not config.has_credentials

    @patch.dict(os.environ, {
        'ARANGO_URL': '',
        'ARANGO_USERNAME': '',
        'CASSANDRA_CONTACT_POINTS': ' , ',
        'VIRTUOSO_ENDPOINT': '',
    }, clear=True)
    @patch('polydb_mcp.models.config.load_dotenv')
    def test_empty_variables_fall_back_to_defaults(self, mock_load_dotenv):
        assert ArangoConfig.from_env().url == 'http://localhost:8529'
        assert ArangoConfig.from_env().username == 'root'
        assert CassandraConfig.from_env().contact_points == ('localhost',)
        assert VirtuosoConfig.from_env().endpoint == 'http://localhost:8890/sparql'

    @patch.dict(os.environ, {'ARANGO_DATABASE': 'from_env'}, clear=True)
    @patch('polydb_mcp.models.config.load_dotenv')
    def test_overrides_win(self, mock_load_dotenv):
        config = ArangoConfig.from_env({'database': 'explicit'})

        assert config.database == 'explicit'


class TestYamlFile:
    """YAML file sits between environment and defaults."""

    def write_yaml(self, tmp_path, text):
        path = tmp_path / 'backends.yaml'
        path.write_text(text)
        return str(path)

    @patch('polydb_mcp.models.config.load_dotenv')
    def test_yaml_section_used(self, mock_load_dotenv, tmp_path):
        path = self.write_yaml(tmp_path, """
backends:
  virtuoso:
    endpoint: http://rdf:8890/sparql
    default_graph: http://example.org/g
""")
        with patch.dict(os.environ, {'POLYDB_CONFIG': path}, clear=True):
            config = VirtuosoConfig.from_env()

        assert config.endpoint == 'http://rdf:8890/sparql'
        assert config.default_graph == 'http://example.org/g'
        assert config.update_endpoint == 'http://localhost:8890/sparql-auth'

    @patch('polydb_mcp.models.config.load_dotenv')
    def test_environment_beats_yaml(self, mock_load_dotenv, tmp_path):
        path = self.write_yaml(tmp_path, """
backends:
  cassandra:
    contact_points: [a, b]
    keyspace: yaml_ks
""")
        with patch.dict(os.environ, {'POLYDB_CONFIG': path, 'CASSANDRA_KEYSPACE': 'env_ks'}, clear=True):
            config = CassandraConfig.from_env()

        assert config.contact_points == ('a', 'b')
        assert config.keyspace == 'env_ks'


@patch.dict(os.environ, {}, clear=True)
@patch('polydb_mcp.models.config.load_dotenv')
def test_config_is_immutable(mock_load_dotenv):
    config = CouchDBConfig.from_env()

    with pytest.raises(ValidationError):
        config.url = 'http://elsewhere'
