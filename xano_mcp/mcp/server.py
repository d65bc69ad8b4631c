"""
MCP HTTP 服务器 - HTTP 与 WebSocket 两种接入方式
"""
import logging
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import Body, FastAPI, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from xano_mcp.configs.settings import ServerConfig
from xano_mcp.mcp.models import ToolCallRequest
from xano_mcp.mcp.registry import ToolRegistry

logger = logging.getLogger(__name__)

# JSON-RPC 错误码
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602

PROTOCOL_VERSION = "2024-11-05"


def rpc_result(request_id: Any, result: Dict[str, Any]) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def rpc_error(request_id: Any, code: int, message: str) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}}


class MCPServer:
    """MCP服务器核心，所有调用都委托给同一个注册表"""

    def __init__(self, registry: ToolRegistry, config: Optional[ServerConfig] = None, lifespan=None):
        self.registry = registry
        self.config = config or ServerConfig(transport="http")
        self.host = self.config.host
        self.port = self.config.port
        self.app = FastAPI(title="Xano MCP Server", version=self.config.version, lifespan=lifespan)
        self._setup_routes()

    def _setup_routes(self):
        """设置HTTP和WebSocket路由"""

        # HTTP 接口
        @self.app.get("/tools")
        async def list_tools() -> List[Dict[str, Any]]:
            """列出所有可用工具"""
            return [tool.model_dump() for tool in self.registry.list_tools()]

        @self.app.post("/tools/{tool_name}")
        async def call_tool(tool_name: str, arguments: Optional[Dict[str, Any]] = Body(default=None)) -> Dict[str, Any]:
            """调用工具 (HTTP模式)，失败也以 isError 结果返回 200"""
            result = await self.registry.invoke(tool_name, arguments)
            return result.model_dump(exclude_none=True)

        # WebSocket 接口 (JSON-RPC)
        @self.app.websocket("/ws")
        async def websocket_endpoint(websocket: WebSocket):
            await websocket.accept()
            try:
                while True:
                    try:
                        message = await websocket.receive_json()
                    except ValueError:
                        await websocket.send_json(rpc_error(None, PARSE_ERROR, "Parse error"))
                        continue

                    response = await self.handle_rpc(message)
                    if response is not None:
                        await websocket.send_json(response)
            except WebSocketDisconnect:
                logger.info("WebSocket 连接断开")

    async def handle_rpc(self, message: Any) -> Optional[Dict[str, Any]]:
        """处理一条 JSON-RPC 消息；通知（无 id）不回复"""
        if not isinstance(message, dict) or not isinstance(message.get("method"), str):
            request_id = message.get("id") if isinstance(message, dict) else None
            return rpc_error(request_id, INVALID_REQUEST, "Invalid Request")

        method = message["method"]
        request_id = message.get("id")
        if "id" not in message:
            logger.debug(f"收到通知: {method}")
            return None

        if method == "initialize":
            return rpc_result(request_id, {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {"tools": {}},
                "serverInfo": {"name": self.config.name, "version": self.config.version},
            })

        if method == "ping":
            return rpc_result(request_id, {})

        if method == "tools/list":
            tools = [t.model_dump() for t in self.registry.list_tools()]
            return rpc_result(request_id, {"tools": tools})

        if method == "tools/call":
            try:
                request = ToolCallRequest.model_validate(message.get("params") or {})
            except ValidationError as e:
                return rpc_error(request_id, INVALID_PARAMS, f"Invalid params: {e.errors()[0]['msg']}")
            result = await self.registry.invoke(request.name, request.arguments)
            return rpc_result(request_id, result.model_dump(exclude_none=True))

        return rpc_error(request_id, METHOD_NOT_FOUND, f"Method not found: {method}")

    def run(self, debug: bool = False):
        """运行服务器"""
        logger.info(f"启动 MCP 服务器: http://{self.host}:{self.port}")
        logger.info(f"工具数量: {len(self.registry)}")

        uvicorn.run(
            self.app,
            host=self.host,
            port=self.port,
            log_level="debug" if debug else "info"
        )
