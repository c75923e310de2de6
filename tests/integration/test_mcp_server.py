"""Integration tests for the MCP server wiring."""

import json
from unittest.mock import AsyncMock, MagicMock, Mock, patch

import mcp.types as types
import pytest

from polydb_mcp.cli.mcp_server import build_parser, create_server, main, parse_backends, serve
from polydb_mcp.lib.params import Param, ParamSet
from polydb_mcp.lib.registry import AdapterRegistry, BackendAdapter
from polydb_mcp.models.tool_descriptor import ToolSpec
from polydb_mcp.services.cassandra_service import CassandraConnection
from polydb_mcp.services.health_api import HealthAPI


async def lookup(service, params):
    args = ParamSet(Param("id", "Document ID", required="Document ID required")).parse(params)
    return {"id": args["id"], "backend": service.name}


@pytest.fixture
def server():
    service = Mock()
    service.name = "couchdb"
    service.description = "CouchDB"
    spec = ToolSpec("Look up a document", ParamSet(Param("id", "Document ID")), lookup)
    registry = AdapterRegistry([BackendAdapter(service, {"couchdb_lookup": spec})])
    return create_server(registry)


async def call_tool(server, name, arguments):
    request = types.CallToolRequest(
        method="tools/call",
        params=types.CallToolRequestParams(name=name, arguments=arguments),
    )
    result = await server.request_handlers[types.CallToolRequest](request)
    return result.root


class TestMCPServer:

    @pytest.mark.asyncio
    async def test_list_tools(self, server):
        result = await server.request_handlers[types.ListToolsRequest](
            types.ListToolsRequest(method="tools/list")
        )
        tools = result.root.tools

        assert [tool.name for tool in tools] == ["couchdb_lookup"]
        assert tools[0].inputSchema == {
            "type": "object",
            "properties": {"id": {"type": "string", "description": "Document ID"}},
        }

    @pytest.mark.asyncio
    async def test_call_tool_returns_json_text(self, server):
        result = await call_tool(server, "couchdb_lookup", {"id": "a"})

        assert not result.isError
        assert json.loads(result.content[0].text) == {"id": "a", "backend": "couchdb"}

    @pytest.mark.asyncio
    async def test_tool_error_carries_message(self, server):
        result = await call_tool(server, "couchdb_lookup", {})

        assert result.isError
        assert "Document ID required" in result.content[0].text

    @pytest.mark.asyncio
    async def test_unknown_tool(self, server):
        result = await call_tool(server, "couchdb_missing", {})

        assert result.isError
        assert "Unknown tool: couchdb_missing" in result.content[0].text


class TestCommandLine:

    def test_parse_backends(self):
        assert parse_backends(None) is None
        assert parse_backends("couchdb, virtuoso,") == ["couchdb", "virtuoso"]

    def test_defaults(self):
        args = build_parser().parse_args([])

        assert args.health_port == 8080
        assert args.no_health_api is False
        assert args.backends is None

    def test_flags(self):
        args = build_parser().parse_args(["--backends", "cassandra", "--health-port", "9000", "--no-health-api"])

        assert args.backends == "cassandra"
        assert args.health_port == 9000
        assert args.no_health_api is True


def run_main(argv, serve_impl):
    with patch("polydb_mcp.cli.mcp_server.serve", new=serve_impl), \
            patch("polydb_mcp.cli.mcp_server.setup_logging"), \
            patch("polydb_mcp.cli.mcp_server.signal.signal"):
        main(argv)


class TestMain:

    def test_health_api_shares_server_registry(self):
        registry = Mock()
        serve_mock = AsyncMock()

        with patch("polydb_mcp.cli.mcp_server.create_default_registry", return_value=registry) as factory:
            run_main(["--backends", "cassandra", "--health-port", "9001"], serve_mock)

        factory.assert_called_once_with(["cassandra"])
        served_registry, health_api = serve_mock.call_args.args
        assert served_registry is registry
        assert health_api.registry is registry
        assert health_api.port == 9001

    def test_no_health_api(self):
        serve_mock = AsyncMock()

        with patch("polydb_mcp.cli.mcp_server.create_default_registry", return_value=Mock()):
            run_main(["--no-health-api"], serve_mock)

        assert serve_mock.call_args.args[1] is None

    def test_one_cassandra_session_for_server_and_health(self):
        sessions = []

        def open_session(config):
            sessions.append(config)
            return CassandraConnection(Mock(), Mock())

        async def fake_serve(registry, health_api):
            await registry.connect_all()
            await health_api.registry.health()
            assert health_api.registry.adapters["cassandra"] is registry.adapters["cassandra"]
            await registry.disconnect_all()

        with patch("polydb_mcp.services.cassandra_service.create_cluster_session", side_effect=open_session):
            run_main(["--backends", "cassandra"], fake_serve)

        assert len(sessions) == 1


class TestServe:

    @pytest.mark.asyncio
    async def test_health_api_stopped_and_backends_disconnected(self):
        registry = Mock()
        registry.tools = {}
        registry.connect_all = AsyncMock(return_value={})
        registry.disconnect_all = AsyncMock()
        health_api = Mock()
        health_api.serve = AsyncMock()

        stdio = MagicMock()
        stdio.return_value.__aenter__.return_value = (Mock(), Mock())

        with patch("polydb_mcp.cli.mcp_server.stdio_server", stdio), \
                patch("polydb_mcp.cli.mcp_server.Server.run", new=AsyncMock()):
            await serve(registry, health_api)

        health_api.serve.assert_awaited_once()
        health_api.stop.assert_called_once()
        registry.disconnect_all.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_health_api_stop_before_start(self):
        health_api = HealthAPI(Mock(), port=0)

        health_api.stop()
        await health_api.serve()

        assert health_api._server is None
