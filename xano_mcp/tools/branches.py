import logging
from typing import Any, Dict, List, Optional

from pydantic import Field

from xano_mcp.gateways.xano_client import XanoClient
from xano_mcp.mcp.models import HttpMethod, ToolCallResult, ToolInput
from xano_mcp.mcp.registry import RegisteredTool, define_tool
from xano_mcp.tools.base import NoInput, XanoToolkit
from xano_mcp.tools.formatting import field_line, items_of, render_sections, time_line

logger = logging.getLogger(__name__)


class BranchIdInput(ToolInput):
    branch_id: str = Field(description="ID of the branch")


class CreateBranchInput(ToolInput):
    name: str = Field(description="Name of the branch")
    description: Optional[str] = Field(default=None, description="Description of the branch")


class UpdateBranchInput(BranchIdInput):
    name: str = Field(description="Updated name of the branch")
    description: Optional[str] = Field(default=None, description="Updated description of the branch")


def _branch_details(title: str, branch: Dict[str, Any]) -> str:
    return (
        f"# {title}\n\n"
        f"**Name**: {branch.get('name')}\n"
        f"**ID**: {branch.get('id')}\n"
        + field_line("Description", branch.get("description"), "No description")
        + time_line("Created", branch.get("created_at"))
        + time_line("Updated", branch.get("updated_at"))
    )


class BranchTools(XanoToolkit):
    """分支工具"""

    async def list_branches(self, args: NoInput) -> ToolCallResult:
        logger.info("[Tool] Executing list-branches")
        branches = items_of(await self.client.request(self.client.workspace_path("branch")))
        sections = [
            f"## {b.get('name')}\n**ID**: {b.get('id')}\n"
            + field_line("Description", b.get("description"), "No description")
            for b in branches
        ]
        return ToolCallResult.text(render_sections("Workspace Branches", sections))

    async def get_branch_details(self, args: BranchIdInput) -> ToolCallResult:
        logger.info(f"[Tool] Executing get-branch-details for branch ID: {args.branch_id}")
        branch = await self.client.request(self.client.workspace_path("branch", args.branch_id)) or {}
        return ToolCallResult.text(_branch_details(f"Branch: {branch.get('name')}", branch))

    async def create_branch(self, args: CreateBranchInput) -> ToolCallResult:
        logger.info(f"[Tool] Executing create-branch for name: {args.name}")
        branch = await self.client.request(
            self.client.workspace_path("branch"), HttpMethod.POST, args.to_body()
        ) or {}
        logger.info(f"[Tool] Created branch with ID: {branch.get('id')}")
        return ToolCallResult.text(_branch_details("Branch Created", branch))

    async def update_branch(self, args: UpdateBranchInput) -> ToolCallResult:
        logger.info(f"[Tool] Executing update-branch for branch ID: {args.branch_id}")
        return await self.update_then_fetch(
            self.client.workspace_path("branch", args.branch_id),
            args.to_body("name", "description"),
            "branch",
            args.branch_id,
            lambda branch: _branch_details("Branch Updated", branch),
        )

    async def delete_branch(self, args: BranchIdInput) -> ToolCallResult:
        logger.info(f"[Tool] Executing delete-branch for branch ID: {args.branch_id}")
        return await self.fetch_then_delete(
            self.client.workspace_path("branch", args.branch_id), "branch", args.branch_id
        )

    def get_tools(self) -> List[RegisteredTool]:
        return [
            define_tool("list-branches", "List all branches in the workspace",
                        NoInput, self.list_branches),
            define_tool("get-branch-details", "Get details for a specific branch",
                        BranchIdInput, self.get_branch_details),
            define_tool("create-branch", "Create a new branch in the workspace",
                        CreateBranchInput, self.create_branch),
            define_tool("update-branch", "Update an existing branch",
                        UpdateBranchInput, self.update_branch),
            define_tool("delete-branch", "Delete a branch from the workspace",
                        BranchIdInput, self.delete_branch),
        ]


def get_tools(client: XanoClient) -> List[RegisteredTool]:
    return BranchTools(client).get_tools()
