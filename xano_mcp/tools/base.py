"""
工具包基类与共享参数模型
"""
import logging
from typing import Any, Callable, Dict, List, Optional

from pydantic import Field

from xano_mcp.gateways.xano_client import XanoClient, XanoRequestError
from xano_mcp.mcp.models import HttpMethod, SortField, SortOrder, ToolCallResult, ToolInput
from xano_mcp.mcp.registry import RegisteredTool

logger = logging.getLogger(__name__)


class NoInput(ToolInput):
    """无参数工具"""


class ListInput(ToolInput):
    """分页/搜索/排序参数，全部可选"""
    page: Optional[int] = Field(default=None, ge=1, description="Page number for pagination")
    per_page: Optional[int] = Field(default=None, ge=1, description="Number of items per page")
    search: Optional[str] = Field(default=None, description="Search term to filter results")
    sort: Optional[SortField] = Field(default=None, description="Field to sort by")
    order: Optional[SortOrder] = Field(default=None, description="Sort order")

    def query(self) -> Dict[str, Any]:
        return self.to_body("page", "per_page", "search", "sort", "order")


class XanoToolkit:
    """工具包基类：持有客户端，子类在 get_tools() 中声明工具"""

    def __init__(self, client: XanoClient):
        self.client = client

    def get_tools(self) -> List[RegisteredTool]:
        raise NotImplementedError

    async def update_then_fetch(
            self,
            path: str,
            body: Dict[str, Any],
            kind: str,
            ident: Any,
            render: Callable[[Dict[str, Any]], str],
    ) -> ToolCallResult:
        """
        PUT 更新后再 GET 最新详情

        第二步失败时明确说明更新已生效，只是无法读取最新状态
        """
        await self.client.request(path, HttpMethod.PUT, body)
        logger.info(f"[Tool] Updated {kind} {ident}")
        try:
            updated = await self.client.request(path)
        except XanoRequestError as e:
            logger.error(f"[Tool] {kind} {ident} updated but refresh failed: {e}")
            return ToolCallResult.error(
                f"The {kind} (ID: {ident}) was updated successfully, "
                f"but fetching the updated details failed: {e}"
            )
        return ToolCallResult.text(render(updated or {}))

    async def fetch_then_delete(self, path: str, kind: str, ident: Any) -> ToolCallResult:
        """先读取详情确认删除对象，再 DELETE"""
        try:
            details = await self.client.request(path)
        except XanoRequestError as e:
            return ToolCallResult.error(
                f"Nothing was deleted: could not look up {kind} (ID: {ident}): {e}"
            )

        await self.client.request(path, HttpMethod.DELETE)
        name = details.get("name") if isinstance(details, dict) else None
        logger.info(f"[Tool] Deleted {kind} {ident}")
        if name:
            return ToolCallResult.text(f'Successfully deleted {kind} "{name}" (ID: {ident})')
        return ToolCallResult.text(f"Successfully deleted {kind} (ID: {ident})")
