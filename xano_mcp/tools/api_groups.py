"""
API 分组工具，包括获取分组的 Swagger 文档
"""
import json
import logging
from typing import Any, Dict, List, Optional

from pydantic import Field

from xano_mcp.gateways.xano_client import XanoClient
from xano_mcp.mcp.models import (
    EmbeddedResource,
    HttpMethod,
    OutputFormat,
    TextContent,
    TextResourceContents,
    ToolCallResult,
    ToolInput,
)
from xano_mcp.mcp.registry import RegisteredTool, define_tool
from xano_mcp.tools.base import ListInput, XanoToolkit
from xano_mcp.tools.formatting import (
    field_line,
    items_of,
    page_line,
    render_sections,
    swagger_to_markdown,
    time_line,
    yes_no,
)

logger = logging.getLogger(__name__)


class ApiGroupIdInput(ToolInput):
    apigroup_id: str = Field(description="ID of the API group")


class CreateApiGroupInput(ToolInput):
    name: str = Field(description="Name of the API group")
    description: str = Field(description="Description of the API group")
    swagger: bool = Field(description="Whether to enable Swagger documentation")
    docs: Optional[str] = Field(default=None, description="Documentation for the API group")
    tag: Optional[List[str]] = Field(default=None, description="Tags to associate with the API group")
    branch: Optional[str] = Field(default=None, description="Branch name for the API group")


class UpdateApiGroupInput(ApiGroupIdInput):
    name: str = Field(description="Updated name of the API group")
    description: str = Field(description="Updated description of the API group")
    swagger: bool = Field(description="Whether to enable Swagger documentation")
    docs: Optional[str] = Field(default=None, description="Updated documentation for the API group")
    tag: Optional[List[str]] = Field(default=None, description="Updated tags to associate with the API group")
    branch: Optional[str] = Field(default=None, description="Updated branch name for the API group")


class ApiSpecificationInput(ApiGroupIdInput):
    format: OutputFormat = Field(
        default=OutputFormat.MARKDOWN,
        description="Output format: 'markdown' for concise documentation or 'json' for full specification",
    )


def _group_body(group: Dict[str, Any]) -> str:
    text = (
        f"**ID**: {group.get('id')}\n"
        + field_line("Description", group.get("description"), "No description")
        + field_line("Documentation", group.get("docs"))
        + f"**Swagger Documentation**: {'Enabled' if group.get('swagger') else 'Disabled'}\n"
        + time_line("Created", group.get("created_at"))
        + time_line("Updated", group.get("updated_at"))
        + field_line("GUID", group.get("guid"))
        + field_line("Canonical", group.get("canonical"))
        + field_line("Branch", group.get("branch"))
        + field_line("Tags", group.get("tag"))
    )
    documentation = group.get("documentation")
    if documentation:
        text += (
            f"\n**Documentation Link**: {documentation.get('link')}\n"
            f"**Documentation Token Required**: {yes_no(documentation.get('require_token'))}\n"
        )
    return text


def _group_details(title: str, group: Dict[str, Any]) -> str:
    return f"# {title}\n\n**Name**: {group.get('name')}\n" + _group_body(group)


class ApiGroupTools(XanoToolkit):
    """API 分组工具"""

    async def list_api_groups(self, args: ListInput) -> ToolCallResult:
        logger.info("[Tool] Executing list-api-groups")
        response = await self.client.request(self.client.workspace_path("apigroup"), params=args.query())
        groups = items_of(response)
        logger.info(f"[Tool] Listed {len(groups)} API groups")
        sections = [
            f"## {g.get('name')}\n**ID**: {g.get('id')}\n"
            + field_line("Description", g.get("description"), "No description")
            + time_line("Created", g.get("created_at"))
            + time_line("Updated", g.get("updated_at"))
            + field_line("GUID", g.get("guid"))
            for g in groups
        ]
        header = page_line(response) if isinstance(response, dict) else ""
        return ToolCallResult.text(render_sections("Xano API Groups", sections, header))

    async def get_api_group_details(self, args: ApiGroupIdInput) -> ToolCallResult:
        logger.info(f"[Tool] Executing get-api-group-details for API group ID: {args.apigroup_id}")
        group = await self.client.request(self.client.workspace_path("apigroup", args.apigroup_id)) or {}
        return ToolCallResult.text(f"# API Group: {group.get('name')}\n\n" + _group_body(group))

    async def create_api_group(self, args: CreateApiGroupInput) -> ToolCallResult:
        logger.info(f"[Tool] Executing create-api-group for name: {args.name}")
        group = await self.client.request(
            self.client.workspace_path("apigroup"), HttpMethod.POST, args.to_body()
        ) or {}
        logger.info(f'[Tool] Created API group "{args.name}" with ID: {group.get("id")}')
        return ToolCallResult.text(_group_details("API Group Created", group))

    async def update_api_group(self, args: UpdateApiGroupInput) -> ToolCallResult:
        logger.info(f"[Tool] Executing update-api-group for API group ID: {args.apigroup_id}")
        return await self.update_then_fetch(
            self.client.workspace_path("apigroup", args.apigroup_id),
            args.to_body("name", "description", "swagger", "docs", "tag", "branch"),
            "API group",
            args.apigroup_id,
            lambda group: _group_details("API Group Updated", group),
        )

    async def delete_api_group(self, args: ApiGroupIdInput) -> ToolCallResult:
        logger.info(f"[Tool] Executing delete-api-group for API group ID: {args.apigroup_id}")
        return await self.fetch_then_delete(
            self.client.workspace_path("apigroup", args.apigroup_id), "API group", args.apigroup_id
        )

    async def get_api_specification(self, args: ApiSpecificationInput) -> ToolCallResult:
        """
        读取分组详情拿到 Swagger 链接，再下载文档

        markdown 格式压缩为简洁文档；json 格式以内嵌资源返回完整文档
        """
        logger.info(f"[Tool] Executing get-api-specification for API group ID: {args.apigroup_id} "
                    f"with format: {args.format.value}")
        group = await self.client.request(self.client.workspace_path("apigroup", args.apigroup_id)) or {}
        link = (group.get("documentation") or {}).get("link")
        if not group.get("swagger") or not link:
            return ToolCallResult.error(
                f"API group (ID: {args.apigroup_id}) does not have Swagger documentation available."
            )

        logger.info(f"[Tool] Found Swagger spec link: {link}")
        swagger_spec = await self.client.fetch_json(link)
        name = group.get("name") or args.apigroup_id

        if args.format is OutputFormat.JSON:
            resource = TextResourceContents(
                uri=link,
                text=json.dumps(swagger_spec, indent=2, ensure_ascii=False),
                mimeType="application/json",
            )
            return ToolCallResult(content=[
                TextContent(text=f"# {name} API Specification (Full JSON)"),
                EmbeddedResource(resource=resource),
            ])

        if not isinstance(swagger_spec, dict):
            return ToolCallResult.error(f"Swagger document at {link} is not a JSON object")
        return ToolCallResult.text(swagger_to_markdown(swagger_spec, name))

    def get_tools(self) -> List[RegisteredTool]:
        return [
            define_tool("list-api-groups", "Browse all API groups in the Xano workspace",
                        ListInput, self.list_api_groups),
            define_tool("get-api-group-details", "Get details for a specific API group",
                        ApiGroupIdInput, self.get_api_group_details),
            define_tool("create-api-group", "Create a new API group in the Xano workspace",
                        CreateApiGroupInput, self.create_api_group),
            define_tool("update-api-group", "Update an existing API group",
                        UpdateApiGroupInput, self.update_api_group),
            define_tool("delete-api-group", "Delete an API group from the workspace",
                        ApiGroupIdInput, self.delete_api_group),
            define_tool("get-api-specification",
                        "Get and convert Swagger specification for an API group to a minified markdown format",
                        ApiSpecificationInput, self.get_api_specification),
        ]


def get_tools(client: XanoClient) -> List[RegisteredTool]:
    return ApiGroupTools(client).get_tools()
