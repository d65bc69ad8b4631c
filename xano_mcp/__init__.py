"""
xano-mcp: Xano 管理 API 的 MCP 工具服务
"""

__version__ = "1.0.0"
