import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from pydantic import Field

from xano_mcp.gateways.xano_client import XanoClient
from xano_mcp.mcp.models import ToolCallResult, ToolInput
from xano_mcp.mcp.registry import RegisteredTool, define_tool
from xano_mcp.tools.base import NoInput, XanoToolkit
from xano_mcp.tools.formatting import field_line, items_of, render_sections

logger = logging.getLogger(__name__)

LIST_WORKSPACES_DESCRIPTION = "List all available workspaces"
GET_WORKSPACE_DESCRIPTION = "Get details for a specific workspace"


class WorkspaceDetailsInput(ToolInput):
    workspace_id: Optional[str] = Field(
        default=None,
        description="ID of the workspace to get details for. If not provided, uses the configured workspace.",
    )


def _workspace_section(workspace: Dict[str, Any]) -> str:
    return (
        f"## {workspace.get('name')}\n"
        f"**ID**: {workspace.get('id')}\n"
        + field_line("Description", workspace.get("description"), "No description")
        + field_line("Branch", workspace.get("branch"))
    )


class WorkspaceTools(XanoToolkit):
    """工作区工具"""

    async def list_workspaces(self, args: NoInput) -> ToolCallResult:
        logger.info("[Tool] Executing list-workspaces")
        workspaces = items_of(await self.client.request("/workspace"))
        logger.info(f"[Tool] Listed {len(workspaces)} workspaces")
        return ToolCallResult.text(
            render_sections("Available Workspaces", [_workspace_section(w) for w in workspaces])
        )

    async def get_workspace_details(self, args: WorkspaceDetailsInput) -> ToolCallResult:
        workspace_id = args.workspace_id or str(self.client.settings.workspace_id)
        logger.info(f"[Tool] Executing get-workspace-details for workspace ID: {workspace_id}")
        workspace = await self.client.request(f"/workspace/{quote(workspace_id, safe='')}") or {}
        return ToolCallResult.text(
            f"# Workspace: {workspace.get('name')}\n\n"
            f"**ID**: {workspace.get('id')}\n"
            + field_line("Description", workspace.get("description"), "No description")
            + field_line("Branch", workspace.get("branch"))
        )

    def get_tools(self) -> List[RegisteredTool]:
        return [
            define_tool("list-workspaces", LIST_WORKSPACES_DESCRIPTION, NoInput, self.list_workspaces),
            define_tool("get-workspace-details", GET_WORKSPACE_DESCRIPTION,
                        WorkspaceDetailsInput, self.get_workspace_details),
        ]


def get_tools(client: XanoClient) -> List[RegisteredTool]:
    return WorkspaceTools(client).get_tools()
