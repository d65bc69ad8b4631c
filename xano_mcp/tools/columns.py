import logging
from typing import Any, Dict, List, Optional

from pydantic import Field

from xano_mcp.gateways.xano_client import XanoClient
from xano_mcp.mcp.models import AccessLevel, FieldStyle, FieldType, HttpMethod, ToolCallResult, ToolInput
from xano_mcp.mcp.registry import RegisteredTool, define_tool
from xano_mcp.tools.base import XanoToolkit

logger = logging.getLogger(__name__)


class ColumnInput(ToolInput):
    table_id: str = Field(description="ID of the table containing the column")


class AddColumnInput(ToolInput):
    table_id: str = Field(description="ID of the table to add the column to")
    name: str = Field(description="Name of the new column")
    type: FieldType = Field(description="Data type of the new column")
    description: Optional[str] = Field(default=None, description="Description of the new column")
    nullable: bool = Field(default=False, description="Whether the field can be null")
    required: bool = Field(default=False, description="Whether the field is required")
    access: AccessLevel = Field(default=AccessLevel.PUBLIC, description="Access level for the field")
    style: FieldStyle = Field(default=FieldStyle.SINGLE,
                              description="Whether the field is a single value or a list")
    default_value: Optional[str] = Field(default=None, description="Default value for the field")
    config: Optional[Dict[str, Any]] = Field(default=None, description="Additional configuration for the column")


class RenameColumnInput(ColumnInput):
    old_name: str = Field(description="Current name of the column")
    new_name: str = Field(description="New name for the column")


class DeleteColumnInput(ColumnInput):
    column_name: str = Field(description="Name of the column to delete")


class UpdateColumnInput(ColumnInput):
    column_name: str = Field(description="Name of the column to update")
    description: Optional[str] = Field(default=None, description="Updated description of the column")
    nullable: Optional[bool] = Field(default=None, description="Whether the field can be null")
    required: Optional[bool] = Field(default=None, description="Whether the field is required")
    access: Optional[AccessLevel] = Field(default=None, description="Updated access level for the field")
    style: Optional[FieldStyle] = Field(default=None,
                                        description="Whether the field is a single value or a list")
    default_value: Optional[str] = Field(default=None, description="Updated default value for the field")
    config: Optional[Dict[str, Any]] = Field(default=None, description="Updated configuration for the column")


def column_body(args: ToolInput, *fields: str) -> Dict[str, Any]:
    """导出列属性，default_value 在请求体中叫 default"""
    body = args.to_body(*fields)
    if "default_value" in body:
        body["default"] = body.pop("default_value")
    return body


class ColumnTools(XanoToolkit):
    """表字段工具"""

    async def add_column(self, args: AddColumnInput) -> ToolCallResult:
        logger.info(f"[Tool] Executing add-column for table ID: {args.table_id}")
        body = column_body(args, "name", "description", "nullable", "required",
                           "access", "style", "default_value", "config")
        await self.client.request(
            self.client.workspace_path("table", args.table_id, "schema", "type", args.type.value),
            HttpMethod.POST,
            body,
        )
        message = f'Successfully added column "{args.name}" of type "{args.type.value}" to table ID: {args.table_id}'
        logger.info(f"[Tool] {message}")
        return ToolCallResult.text(message)

    async def rename_column(self, args: RenameColumnInput) -> ToolCallResult:
        logger.info(f"[Tool] Executing rename-column for table ID: {args.table_id}")
        await self.client.request(
            self.client.workspace_path("table", args.table_id, "schema", "rename"),
            HttpMethod.POST,
            args.to_body("old_name", "new_name"),
        )
        message = (f'Successfully renamed column from "{args.old_name}" to "{args.new_name}" '
                   f"in table ID: {args.table_id}")
        logger.info(f"[Tool] {message}")
        return ToolCallResult.text(message)

    async def update_column(self, args: UpdateColumnInput) -> ToolCallResult:
        logger.info(f'[Tool] Executing update-column for column "{args.column_name}" '
                    f"in table ID: {args.table_id}")
        # 只发送调用方给出的属性
        body = column_body(args, "description", "nullable", "required", "access",
                           "style", "default_value", "config")
        await self.client.request(
            self.client.workspace_path("table", args.table_id, "schema", args.column_name),
            HttpMethod.PUT,
            body,
        )
        message = f'Successfully updated column "{args.column_name}" in table ID: {args.table_id}'
        logger.info(f"[Tool] {message}")
        return ToolCallResult.text(message)

    async def delete_column(self, args: DeleteColumnInput) -> ToolCallResult:
        logger.info(f"[Tool] Executing delete-column for table ID: {args.table_id}")
        await self.client.request(
            self.client.workspace_path("table", args.table_id, "schema", args.column_name),
            HttpMethod.DELETE,
        )
        message = f'Successfully deleted column "{args.column_name}" from table ID: {args.table_id}'
        logger.info(f"[Tool] {message}")
        return ToolCallResult.text(message)

    def get_tools(self) -> List[RegisteredTool]:
        return [
            define_tool("add-column", "Add a new column to an existing table",
                        AddColumnInput, self.add_column),
            define_tool("rename-column", "Rename a column in an existing table",
                        RenameColumnInput, self.rename_column),
            define_tool("update-column", "Update a column in an existing table",
                        UpdateColumnInput, self.update_column),
            define_tool("delete-column", "Delete a column from an existing table",
                        DeleteColumnInput, self.delete_column),
        ]


def get_tools(client: XanoClient) -> List[RegisteredTool]:
    return ColumnTools(client).get_tools()
