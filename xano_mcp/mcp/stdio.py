"""
stdio 传输：基于 MCP SDK 的低层 Server

stdout 是协议通道，日志只能写 stderr
"""
import logging
from typing import Any, Dict, List, Optional, Union

from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from xano_mcp.configs.settings import ServerConfig
from xano_mcp.mcp.models import ContentBlock, EmbeddedResource, ImageContent, ToolCallResult, ToolSchema
from xano_mcp.mcp.registry import ToolRegistry

logger = logging.getLogger(__name__)

SdkContent = Union[types.TextContent, types.ImageContent, types.EmbeddedResource]


class ToolInvocationFailed(Exception):
    """把 isError 结果交给 SDK，由 SDK 生成 isError=true 的 CallToolResult"""


def to_sdk_tool(schema: ToolSchema) -> types.Tool:
    return types.Tool(name=schema.name, description=schema.description, inputSchema=schema.inputSchema)


def to_sdk_content(block: ContentBlock) -> SdkContent:
    data = block.model_dump(exclude_none=True)
    if isinstance(block, EmbeddedResource):
        return types.EmbeddedResource.model_validate(data)
    if isinstance(block, ImageContent):
        return types.ImageContent.model_validate(data)
    return types.TextContent.model_validate(data)


def to_sdk_result(result: ToolCallResult) -> List[SdkContent]:
    """成功结果转换为 SDK 内容块；错误结果抛出 ToolInvocationFailed"""
    if result.isError:
        raise ToolInvocationFailed(result.text_content)
    return [to_sdk_content(block) for block in result.content]


def build_server(registry: ToolRegistry, config: Optional[ServerConfig] = None) -> Server:
    """构造 MCP Server，工具列表与调用都委托给注册表"""
    config = config or ServerConfig()
    server = Server(config.name, version=config.version, instructions=config.description)

    @server.list_tools()
    async def list_tools() -> List[types.Tool]:
        return [to_sdk_tool(schema) for schema in registry.list_tools()]

    # 参数只由注册表校验一次
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: Optional[Dict[str, Any]]) -> List[SdkContent]:
        result = await registry.invoke(name, arguments)
        return to_sdk_result(result)

    return server


async def serve_stdio(registry: ToolRegistry, config: Optional[ServerConfig] = None):
    """在 stdin/stdout 上运行服务，直到客户端断开"""
    server = build_server(registry, config)
    logger.info(f"启动 stdio MCP 服务器，工具数量: {len(registry)}")
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())
    logger.info("stdio MCP 服务器已退出")
