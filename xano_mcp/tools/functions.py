import logging
from typing import Any, Dict, List, Optional

from pydantic import Field

from xano_mcp.gateways.xano_client import XanoClient
from xano_mcp.mcp.models import HttpMethod, ToolCallResult, ToolInput
from xano_mcp.mcp.registry import RegisteredTool, define_tool
from xano_mcp.tools.base import NoInput, XanoToolkit
from xano_mcp.tools.formatting import field_line, items_of, render_sections, time_line

logger = logging.getLogger(__name__)


class FunctionIdInput(ToolInput):
    function_id: str = Field(description="ID of the function")


class CreateFunctionInput(ToolInput):
    name: str = Field(description="Name of the function")
    description: str = Field(description="Description of the function")
    docs: Optional[str] = Field(default=None, description="Documentation for the function")
    branch: Optional[str] = Field(default=None, description="Branch name for the function")


class UpdateFunctionInput(FunctionIdInput):
    name: str = Field(description="Updated name of the function")
    description: str = Field(description="Updated description of the function")
    docs: Optional[str] = Field(default=None, description="Updated documentation for the function")


def _function_section(fn: Dict[str, Any]) -> str:
    return (
        f"## {fn.get('name')}\n"
        f"**ID**: {fn.get('id')}\n"
        + field_line("Description", fn.get("description"), "No description")
        + time_line("Created", fn.get("created_at"))
        + time_line("Updated", fn.get("updated_at"))
        + field_line("Branch", fn.get("branch"))
    )


def _function_details(title: str, fn: Dict[str, Any]) -> str:
    return (
        f"# {title}\n\n"
        f"**Name**: {fn.get('name')}\n"
        f"**ID**: {fn.get('id')}\n"
        + field_line("Description", fn.get("description"), "No description")
        + field_line("Documentation", fn.get("docs"))
        + field_line("Branch", fn.get("branch"))
        + time_line("Created", fn.get("created_at"))
        + time_line("Updated", fn.get("updated_at"))
    )


class FunctionTools(XanoToolkit):
    """函数工具"""

    async def list_functions(self, args: NoInput) -> ToolCallResult:
        logger.info("[Tool] Executing list-functions")
        functions = items_of(await self.client.request(self.client.workspace_path("function")))
        logger.info(f"[Tool] Listed {len(functions)} functions")
        return ToolCallResult.text(
            render_sections("Workspace Functions", [_function_section(f) for f in functions])
        )

    async def get_function_details(self, args: FunctionIdInput) -> ToolCallResult:
        logger.info(f"[Tool] Executing get-function-details for function ID: {args.function_id}")
        fn = await self.client.request(self.client.workspace_path("function", args.function_id)) or {}
        return ToolCallResult.text(_function_details(f"Function: {fn.get('name')}", fn))

    async def create_function(self, args: CreateFunctionInput) -> ToolCallResult:
        logger.info(f"[Tool] Executing create-function for name: {args.name}")
        fn = await self.client.request(
            self.client.workspace_path("function"), HttpMethod.POST, args.to_body()
        ) or {}
        logger.info(f"[Tool] Created function with ID: {fn.get('id')}")
        return ToolCallResult.text(_function_details("Function Created", fn))

    async def update_function(self, args: UpdateFunctionInput) -> ToolCallResult:
        logger.info(f"[Tool] Executing update-function for function ID: {args.function_id}")
        return await self.update_then_fetch(
            self.client.workspace_path("function", args.function_id),
            args.to_body("name", "description", "docs"),
            "function",
            args.function_id,
            lambda fn: _function_details("Function Updated", fn),
        )

    async def delete_function(self, args: FunctionIdInput) -> ToolCallResult:
        logger.info(f"[Tool] Executing delete-function for function ID: {args.function_id}")
        return await self.fetch_then_delete(
            self.client.workspace_path("function", args.function_id), "function", args.function_id
        )

    def get_tools(self) -> List[RegisteredTool]:
        return [
            define_tool("list-functions", "List all functions in the workspace",
                        NoInput, self.list_functions),
            define_tool("get-function-details", "Get details for a specific function",
                        FunctionIdInput, self.get_function_details),
            define_tool("create-function", "Create a new function in the workspace",
                        CreateFunctionInput, self.create_function),
            define_tool("update-function", "Update an existing function",
                        UpdateFunctionInput, self.update_function),
            define_tool("delete-function", "Delete a function from the workspace",
                        FunctionIdInput, self.delete_function),
        ]


def get_tools(client: XanoClient) -> List[RegisteredTool]:
    return FunctionTools(client).get_tools()
