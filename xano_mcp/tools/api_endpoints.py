import logging
from typing import Any, Dict, List, Optional

from pydantic import Field

from xano_mcp.gateways.xano_client import XanoClient
from xano_mcp.mcp.models import ApiVerb, HttpMethod, ToolCallResult, ToolInput
from xano_mcp.mcp.registry import RegisteredTool, define_tool
from xano_mcp.tools.base import ListInput, XanoToolkit
from xano_mcp.tools.formatting import field_line, items_of, page_line, render_sections, time_line

logger = logging.getLogger(__name__)


class CacheConfig(ToolInput):
    """端点缓存配置"""
    active: bool = Field(description="Whether caching is active")
    ttl: Optional[int] = Field(default=None, ge=0, description="Cache time-to-live in seconds (default: 3600)")
    input: Optional[bool] = Field(default=None, description="Whether to include request input in cache key")
    auth: Optional[bool] = Field(default=None, description="Whether to include auth in cache key")
    datasource: Optional[bool] = Field(default=None, description="Whether to include datasource in cache key")
    ip: Optional[bool] = Field(default=None, description="Whether to include IP address in cache key")
    headers: Optional[List[str]] = Field(default=None, description="Headers to include in cache key")


class ListApisInput(ListInput):
    apigroup_id: str = Field(description="ID of the API group to browse")


class ApiIdInput(ToolInput):
    apigroup_id: str = Field(description="ID of the API group containing the API")
    api_id: str = Field(description="ID of the API")


class CreateApiInput(ToolInput):
    apigroup_id: str = Field(description="ID of the API group to add the API to")
    name: str = Field(description="Name of the API")
    description: str = Field(description="Description of the API")
    docs: Optional[str] = Field(default=None, description="Documentation for the API")
    verb: ApiVerb = Field(description="HTTP verb for the API")
    tag: Optional[List[str]] = Field(default=None, description="Tags to associate with the API")


class UpdateApiInput(ApiIdInput):
    name: str = Field(description="Updated name of the API")
    description: str = Field(description="Updated description of the API")
    docs: Optional[str] = Field(default=None, description="Updated documentation for the API")
    verb: ApiVerb = Field(description="Updated HTTP verb for the API")
    tag: Optional[List[str]] = Field(default=None, description="Updated tags to associate with the API")
    cache: Optional[CacheConfig] = Field(default=None, description="Cache configuration for the API")


def _cache_line(api: Dict[str, Any]) -> str:
    cache = api.get("cache") or {}
    if cache.get("active"):
        return f"**Cache**: Active (TTL: {cache.get('ttl')}s)\n"
    return "**Cache**: Inactive\n"


def _api_body(apigroup_id: str, api: Dict[str, Any]) -> str:
    return (
        f"**ID**: {api.get('id')}\n"
        f"**API Group ID**: {apigroup_id}\n"
        f"**Verb**: {api.get('verb')}\n"
        + field_line("Description", api.get("description"), "No description")
        + field_line("Documentation", api.get("docs"))
        + time_line("Created", api.get("created_at"))
        + time_line("Updated", api.get("updated_at"))
        + field_line("GUID", api.get("guid"))
        + field_line("Tags", api.get("tag"))
    )


class ApiEndpointTools(XanoToolkit):
    """API 端点工具，所有路径都挂在某个 API 分组之下"""

    def _api_path(self, apigroup_id: str, *parts: str) -> str:
        return self.client.workspace_path("apigroup", apigroup_id, "api", *parts)

    async def list_apis(self, args: ListApisInput) -> ToolCallResult:
        logger.info(f"[Tool] Executing list-apis for API group ID: {args.apigroup_id}")
        response = await self.client.request(self._api_path(args.apigroup_id), params=args.query())
        apis = items_of(response)
        logger.info(f"[Tool] Listed {len(apis)} APIs for API group ID: {args.apigroup_id}")
        sections = [
            f"## {a.get('name')}\n**ID**: {a.get('id')}\n**Verb**: {a.get('verb')}\n"
            + field_line("Description", a.get("description"), "No description")
            + field_line("Documentation", a.get("docs"))
            + time_line("Created", a.get("created_at"))
            + time_line("Updated", a.get("updated_at"))
            + field_line("GUID", a.get("guid"))
            + field_line("Tags", a.get("tag"))
            for a in apis
        ]
        header = page_line(response) if isinstance(response, dict) else ""
        return ToolCallResult.text(
            render_sections(f"APIs in API Group ID: {args.apigroup_id}", sections, header)
        )

    async def get_api_details(self, args: ApiIdInput) -> ToolCallResult:
        logger.info(f"[Tool] Executing get-api-details for API ID: {args.api_id} "
                    f"in API group: {args.apigroup_id}")
        api = await self.client.request(self._api_path(args.apigroup_id, args.api_id)) or {}
        return ToolCallResult.text(
            f"# API Details: {api.get('name')}\n\n" + _api_body(args.apigroup_id, api) + _cache_line(api)
        )

    async def create_api(self, args: CreateApiInput) -> ToolCallResult:
        logger.info(f"[Tool] Executing create-api for API group ID: {args.apigroup_id}")
        api = await self.client.request(
            self._api_path(args.apigroup_id),
            HttpMethod.POST,
            args.to_body("name", "description", "docs", "verb", "tag"),
        ) or {}
        logger.info(f'[Tool] Added API "{args.name}" with ID: {api.get("id")} '
                    f"to API group ID: {args.apigroup_id}")
        return ToolCallResult.text(
            f"# API Added\n\n**Name**: {api.get('name')}\n" + _api_body(args.apigroup_id, api)
        )

    async def update_api(self, args: UpdateApiInput) -> ToolCallResult:
        logger.info(f"[Tool] Executing update-api for API ID: {args.api_id}")
        return await self.update_then_fetch(
            self._api_path(args.apigroup_id, args.api_id),
            args.to_body("name", "description", "docs", "verb", "tag", "cache"),
            "API",
            args.api_id,
            lambda api: (
                f"# API Updated\n\n**Name**: {api.get('name')}\n"
                + _api_body(args.apigroup_id, api)
                + _cache_line(api)
            ),
        )

    async def delete_api(self, args: ApiIdInput) -> ToolCallResult:
        logger.info(f"[Tool] Executing delete-api for API ID: {args.api_id} in API group: {args.apigroup_id}")
        return await self.fetch_then_delete(
            self._api_path(args.apigroup_id, args.api_id), "API", args.api_id
        )

    def get_tools(self) -> List[RegisteredTool]:
        return [
            define_tool("list-apis", "Browse APIs in a specific API group",
                        ListApisInput, self.list_apis),
            define_tool("get-api-details", "Get details for a specific API",
                        ApiIdInput, self.get_api_details),
            define_tool("create-api", "Add a new API to an API group",
                        CreateApiInput, self.create_api),
            define_tool("update-api", "Update an existing API, including its cache configuration",
                        UpdateApiInput, self.update_api),
            define_tool("delete-api", "Delete an API from an API group",
                        ApiIdInput, self.delete_api),
        ]


def get_tools(client: XanoClient) -> List[RegisteredTool]:
    return ApiEndpointTools(client).get_tools()
