# app/main.py
from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI

from xano_mcp.configs.settings import Settings
from xano_mcp.gateways.xano_client import XanoClient
from xano_mcp.mcp.server import MCPServer
from xano_mcp.tools import build_registry

logger = logging.getLogger(__name__)


def create_server(settings: Optional[Settings] = None) -> MCPServer:
    """
    组装 HTTP 服务器：配置 -> 客户端 -> 注册表 -> FastAPI 应用

    配置缺失时抛出 ConfigurationError，不会注册任何工具
    """
    settings = settings or Settings.from_env()
    client = XanoClient(settings.xano)
    registry = build_registry(client)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"已注册 {len(registry)} 个工具")
        yield
        # 关闭时：释放 HTTP 会话
        logger.info("应用关闭，清理资源...")
        await client.close()

    server = MCPServer(registry, settings.server, lifespan=lifespan)

    @server.app.get("/")
    async def root():
        return {"message": "Xano MCP 服务已运行", "tools_endpoint": "/tools", "ws_endpoint": "/ws"}

    return server


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """ASGI 工厂：uvicorn --factory app.main:create_app"""
    return create_server(settings).app
