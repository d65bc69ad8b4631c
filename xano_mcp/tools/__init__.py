"""
Xano 管理工具集合

每个模块提供 get_tools(client)，这里按固定顺序汇总
"""
from typing import List

from xano_mcp.gateways.xano_client import XanoClient
from xano_mcp.mcp.registry import RegisteredTool, ToolRegistry
from xano_mcp.tools import (
    api_endpoints,
    api_groups,
    branches,
    columns,
    functions,
    tables,
    tasks,
    workspaces,
)

TOOL_MODULES = (workspaces, tables, columns, api_groups, api_endpoints, functions, tasks, branches)


def get_tools(client: XanoClient) -> List[RegisteredTool]:
    tools: List[RegisteredTool] = []
    for module in TOOL_MODULES:
        tools.extend(module.get_tools(client))
    return tools


def build_registry(client: XanoClient) -> ToolRegistry:
    """创建注册表并注册全部工具，两种传输共用同一个实例"""
    registry = ToolRegistry()
    registry.register_toolkit(lambda: get_tools(client))
    return registry
