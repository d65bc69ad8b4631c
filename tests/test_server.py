# test_server.py
import asyncio

import pytest
from fastapi.testclient import TestClient
from mcp import types

from xano_mcp.mcp.models import (
    EmbeddedResource,
    ImageContent,
    TextResourceContents,
    ToolCallResult,
    TextContent,
)
from xano_mcp.mcp.server import MCPServer
from xano_mcp.mcp.stdio import ToolInvocationFailed, build_server, to_sdk_result, to_sdk_tool


@pytest.fixture
def http_client(registry):
    return TestClient(MCPServer(registry).app)


class TestHttpTransport:
    """HTTP 传输测试类"""

    def test_list_tools(self, http_client):
        response = http_client.get("/tools")

        assert response.status_code == 200
        names = [tool["name"] for tool in response.json()]
        assert "list-tables" in names
        assert all("inputSchema" in tool for tool in response.json())

    def test_call_tool(self, http_client, fake_session):
        fake_session.reply(200, [{"id": 1, "name": "users"}])

        response = http_client.post("/tools/list-tables", json={})

        assert response.status_code == 200
        body = response.json()
        assert body["isError"] is False
        assert "## users" in body["content"][0]["text"]

    def test_tool_failure_is_still_200(self, http_client, fake_session):
        """测试工具失败不会变成 HTTP 错误"""
        fake_session.reply(503, raw="maintenance")

        response = http_client.post("/tools/list-tables", json={})

        assert response.status_code == 200
        assert response.json()["isError"] is True
        assert "maintenance" in response.json()["content"][0]["text"]

    def test_unknown_tool(self, http_client):
        response = http_client.post("/tools/nope", json={})

        assert response.status_code == 200
        assert response.json()["content"][0]["text"] == "Tool not found: nope"

    def test_missing_body_means_no_arguments(self, http_client, fake_session):
        fake_session.reply(200, [])

        response = http_client.post("/tools/list-workspaces")

        assert response.json()["isError"] is False


class TestWebSocketTransport:
    """WebSocket JSON-RPC 测试类"""

    def test_tools_list(self, http_client):
        with http_client.websocket_connect("/ws") as ws:
            ws.send_json({"jsonrpc": "2.0", "id": 1, "method": "tools/list"})
            response = ws.receive_json()

        assert response["id"] == 1
        assert len(response["result"]["tools"]) == 39

    def test_tools_call(self, http_client, fake_session):
        fake_session.reply(200, {"id": 4, "name": "users"})

        with http_client.websocket_connect("/ws") as ws:
            ws.send_json({
                "jsonrpc": "2.0", "id": "a", "method": "tools/call",
                "params": {"name": "get-table-details", "arguments": {"table_id": "4"}},
            })
            response = ws.receive_json()

        assert response["id"] == "a"
        assert response["result"]["isError"] is False
        assert "# Table: users" in response["result"]["content"][0]["text"]

    def test_unknown_method(self, http_client):
        with http_client.websocket_connect("/ws") as ws:
            ws.send_json({"jsonrpc": "2.0", "id": 2, "method": "resources/list"})
            response = ws.receive_json()

        assert response["error"]["code"] == -32601

    def test_invalid_call_params(self, http_client):
        with http_client.websocket_connect("/ws") as ws:
            ws.send_json({"jsonrpc": "2.0", "id": 3, "method": "tools/call", "params": {}})
            response = ws.receive_json()

        assert response["error"]["code"] == -32602

    def test_notifications_get_no_reply(self, registry):
        server = MCPServer(registry)

        assert asyncio.run(server.handle_rpc({"jsonrpc": "2.0", "method": "notifications/initialized"})) is None


class TestStdioTransport:
    """MCP SDK 适配测试"""

    def test_tool_conversion(self, registry):
        schema = registry.get_tool("create-table").schema

        tool = to_sdk_tool(schema)

        assert isinstance(tool, types.Tool)
        assert tool.name == "create-table"
        assert tool.inputSchema == schema.inputSchema

    def test_content_conversion(self):
        result = ToolCallResult(content=[
            TextContent(text="hello"),
            ImageContent(data="aGk=", mimeType="image/png"),
            EmbeddedResource(resource=TextResourceContents(
                uri="https://example.com/spec.json", text="{}", mimeType="application/json",
            )),
        ])

        blocks = to_sdk_result(result)

        assert isinstance(blocks[0], types.TextContent)
        assert isinstance(blocks[1], types.ImageContent)
        assert isinstance(blocks[2], types.EmbeddedResource)
        assert str(blocks[2].resource.uri) == "https://example.com/spec.json"

    def test_error_result_raises_for_sdk(self):
        with pytest.raises(ToolInvocationFailed, match="Tool not found: x"):
            to_sdk_result(ToolCallResult.error("Tool not found: x"))

    def test_build_server(self, registry):
        server = build_server(registry)

        assert server.name == "xano-mcp"
        assert types.ListToolsRequest in server.request_handlers
        assert types.CallToolRequest in server.request_handlers


def test_app_factory(xano_settings):
    """测试 ASGI 工厂组装出完整应用"""
    from app.main import create_app
    from xano_mcp.configs.settings import Settings

    http = TestClient(create_app(Settings(xano=xano_settings)))

    assert http.get("/").json()["tools_endpoint"] == "/tools"
    assert len(http.get("/tools").json()) == 39
