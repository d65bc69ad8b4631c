#!/usr/bin/env python3
"""
Xano MCP 服务器主运行文件
"""
import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from xano_mcp import __version__
from xano_mcp.configs.settings import ConfigurationError, ServerConfig, Settings, load_environment
from xano_mcp.gateways.xano_client import XanoClient
from xano_mcp.mcp.registry import ToolRegistry
from xano_mcp.mcp.stdio import serve_stdio
from xano_mcp.tools import build_registry
from xano_mcp.utils.logs import logger, setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Xano MCP Server - 通过 MCP 协议管理 Xano 工作区",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
使用示例:
  %(prog)s
  %(prog)s --transport http --port 8080
  %(prog)s --env-file ./xano.env --list-tools
        """
    )

    parser.add_argument("--transport", choices=["stdio", "http"], default="stdio",
                        help="传输方式（默认：stdio）")
    parser.add_argument("--host", type=str, default=None,
                        help="HTTP 监听地址（默认：XANO_MCP_HOST 或 127.0.0.1）")
    parser.add_argument("--port", type=int, default=None,
                        help="HTTP 监听端口（默认：XANO_MCP_PORT 或 8000）")
    parser.add_argument("--env-file", type=str, default=None,
                        help="环境变量文件路径（默认：当前目录下的 .env）")
    parser.add_argument("--list-tools", action="store_true",
                        help="列出所有工具并退出")
    parser.add_argument("--verbose", action="store_true",
                        help="显示详细日志")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def list_tools(registry: ToolRegistry):
    """打印工具名称与说明"""
    for schema in registry.list_tools():
        print(f"{schema.name}: {schema.description}")


async def run_stdio(client: XanoClient, registry: ToolRegistry, config: ServerConfig):
    try:
        await serve_stdio(registry, config)
    finally:
        await client.close()


def main(argv: Optional[List[str]] = None) -> int:
    """主函数，返回进程退出码"""
    args = build_parser().parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)
    load_environment(args.env_file)

    # 配置不完整时拒绝启动，此时还没有注册任何工具
    try:
        settings = Settings.from_env()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    settings.server.transport = args.transport
    if args.host:
        settings.server.host = args.host
    if args.port:
        settings.server.port = args.port

    logger.info(f"启动 {settings.server.name} v{settings.server.version}")
    logger.info(f"Xano 工作区: {settings.xano.workspace_id} ({settings.xano.api_base})")

    if args.list_tools:
        list_tools(build_registry(XanoClient(settings.xano)))
        return 0

    if args.transport == "http":
        # 延迟导入，stdio 模式不需要加载 FastAPI 应用
        from app.main import create_server
        create_server(settings).run(debug=args.verbose)
        return 0

    client = XanoClient(settings.xano)
    registry = build_registry(client)
    try:
        asyncio.run(run_stdio(client, registry, settings.server))
    except KeyboardInterrupt:
        logger.info("已中断")
    return 0


if __name__ == "__main__":
    sys.exit(main())
