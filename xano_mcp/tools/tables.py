"""
数据表工具：表的增删改查与表结构维护
"""
import logging
from typing import Any, Dict, List, Optional

from pydantic import Field, model_validator

from xano_mcp.gateways.xano_client import XanoClient, XanoRequestError
from xano_mcp.mcp.models import (
    AccessLevel,
    FieldStyle,
    FieldType,
    HttpMethod,
    OutputFormat,
    SchemaOperation,
    ToolCallResult,
    ToolInput,
)
from xano_mcp.mcp.registry import RegisteredTool, define_tool
from xano_mcp.tools.base import NoInput, XanoToolkit
from xano_mcp.tools.formatting import (
    field_line,
    items_of,
    json_block,
    render_sections,
    schema_to_markdown,
    time_line,
)

logger = logging.getLogger(__name__)

SCHEMA_DESCRIPTION = (
    "Schema configuration for the table. For foreign key relationships, use type 'int' "
    "with tableref_id. Example: {\"name\": \"contact_id\", \"type\": \"int\", "
    "\"description\": \"Reference to contact table\", \"tableref_id\": \"100\"}"
)


# ============ 表结构模型 ============
class FieldValidators(ToolInput):
    """字段校验规则"""
    lower: Optional[bool] = None
    max: Optional[float] = None
    maxLength: Optional[int] = None
    min: Optional[float] = None
    minLength: Optional[int] = None
    pattern: Optional[str] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    trim: Optional[bool] = None


class SchemaField(ToolInput):
    """表结构中的一个字段"""
    name: str = Field(description="Name of the schema element")
    type: FieldType = Field(description="Type of the schema element")
    description: Optional[str] = Field(default=None, description="Description of the schema element")
    nullable: bool = Field(default=False, description="Whether the field can be null")
    required: bool = Field(default=False, description="Whether the field is required")
    access: AccessLevel = Field(default=AccessLevel.PUBLIC, description="Access level for the field")
    style: FieldStyle = Field(default=FieldStyle.SINGLE,
                              description="Whether the field is a single value or a list")
    default: Optional[str] = Field(default=None, description="Default value for the field")
    config: Optional[Dict[str, Any]] = Field(
        default=None, description="Additional configuration for specific field types"
    )
    validators: Optional[FieldValidators] = Field(default=None, description="Validation rules for the field")
    children: Optional[List[Any]] = Field(default=None, description="Nested fields for object types")
    tableref_id: Optional[str] = Field(
        default=None, description="ID of the referenced table (only valid when type is 'int')"
    )
    values: Optional[List[str]] = Field(default=None, description="Array of allowed values (only for enum type)")

    @model_validator(mode="after")
    def _foreign_key_must_be_int(self) -> "SchemaField":
        if self.tableref_id and self.type is not FieldType.INT:
            raise ValueError(
                f'Field "{self.name}" has tableref_id but type is not "int". '
                f'Foreign key fields must be of type "int".'
            )
        return self


class RenameSpec(ToolInput):
    old_name: str = Field(description="Current name of the column")
    new_name: str = Field(description="New name for the column")


# ============ 工具参数 ============
class TableIdInput(ToolInput):
    table_id: str = Field(description="ID of the table")


class GetTableSchemaInput(TableIdInput):
    format: OutputFormat = Field(
        default=OutputFormat.MARKDOWN,
        description="Output format: 'markdown' for readable documentation or 'json' for complete schema",
    )


class CreateTableInput(ToolInput):
    name: str = Field(description="Name of the table")
    description: Optional[str] = Field(default=None, description="Description of the table")
    table_schema: Optional[List[SchemaField]] = Field(
        default=None, alias="schema", description=SCHEMA_DESCRIPTION
    )


class UpdateTableInput(TableIdInput):
    name: str = Field(description="Updated name of the table")
    description: Optional[str] = Field(default=None, description="Updated description of the table")
    tags: Optional[List[str]] = Field(default=None, description="Updated tags for the table")


class UpdateTableSchemaInput(TableIdInput):
    operation: SchemaOperation = Field(description="Type of schema operation to perform")
    table_schema: Optional[List[SchemaField]] = Field(
        default=None, alias="schema",
        description="Full schema specification (required for 'update' operation)",
    )
    column: Optional[SchemaField] = Field(
        default=None, description="Column specification (required for 'add_column' operation)"
    )
    rename: Optional[RenameSpec] = Field(
        default=None, description="Rename specification (required for 'rename_column' operation)"
    )
    column_name: Optional[str] = Field(
        default=None, description="Name of the column to remove (required for 'remove_column' operation)"
    )

    @model_validator(mode="after")
    def _operation_argument_present(self) -> "UpdateTableSchemaInput":
        required = {
            SchemaOperation.UPDATE: ("schema", self.table_schema),
            SchemaOperation.ADD_COLUMN: ("column", self.column),
            SchemaOperation.RENAME_COLUMN: ("rename", self.rename),
            SchemaOperation.REMOVE_COLUMN: ("column_name", self.column_name),
        }
        name, value = required[self.operation]
        if not value:
            raise ValueError(f"'{name}' must be provided for '{self.operation.value}' operation")
        return self


def schema_payload(fields: List[SchemaField]) -> List[Dict[str, Any]]:
    return [f.to_body() for f in fields]


def _table_section(table: Dict[str, Any]) -> str:
    return (
        f"**ID**: {table.get('id')}\n"
        + field_line("Description", table.get("description"), "No description")
        + time_line("Created", table.get("created_at"))
        + time_line("Updated", table.get("updated_at"))
        + field_line("Tags", table.get("tags"))
    )


class TableTools(XanoToolkit):
    """数据表工具"""

    async def list_tables(self, args: NoInput) -> ToolCallResult:
        logger.info("[Tool] Executing list-tables")
        tables = items_of(await self.client.request(self.client.workspace_path("table")))
        logger.info(f"[Tool] Listed {len(tables)} tables")
        sections = [f"## {t.get('name')}\n" + _table_section(t) for t in tables]
        return ToolCallResult.text(render_sections("Xano Database Tables", sections))

    async def get_table_details(self, args: TableIdInput) -> ToolCallResult:
        logger.info(f"[Tool] Executing get-table-details for table ID: {args.table_id}")
        table = await self.client.request(self.client.workspace_path("table", args.table_id)) or {}
        return ToolCallResult.text(f"# Table: {table.get('name')}\n\n" + _table_section(table))

    async def get_table_schema(self, args: GetTableSchemaInput) -> ToolCallResult:
        logger.info(f"[Tool] Executing get-table-schema for table ID: {args.table_id} ({args.format.value})")
        schema = await self.client.request(self.client.workspace_path("table", args.table_id, "schema"))
        if args.format is OutputFormat.JSON:
            return ToolCallResult.text(f"# Table Schema (Full JSON)\n\n{json_block(schema)}")
        return ToolCallResult.text(schema_to_markdown(args.table_id, schema))

    async def create_table(self, args: CreateTableInput) -> ToolCallResult:
        """
        两步创建：先建表，再写入表结构

        第二步失败时返回错误，但明确给出已创建的表 ID，由调用方决定重试还是清理
        """
        logger.info(f"[Tool] Executing create-table for table: {args.name}")
        created = await self.client.request(
            self.client.workspace_path("table"), HttpMethod.POST, args.to_body("name", "description")
        )
        table_id = created.get("id") if isinstance(created, dict) else None
        if table_id is None:
            logger.error(f"[Tool] create-table response carried no table ID: {created!r}")
            return ToolCallResult.error(
                f'Table "{args.name}" may have been created, but the response did not include '
                f"its ID, so no schema was added. Check the table list before retrying."
            )
        logger.info(f"[Tool] Table created with ID: {table_id}")

        if not args.table_schema:
            return ToolCallResult.text(f'Successfully created table "{args.name}" with ID: {table_id}.')

        try:
            await self.client.request(
                self.client.workspace_path("table", table_id, "schema"),
                HttpMethod.PUT,
                {"schema": schema_payload(args.table_schema)},
            )
        except XanoRequestError as e:
            logger.error(f"[Tool] Table {table_id} created but schema update failed: {e}")
            return ToolCallResult.error(
                f'Table "{args.name}" was created with ID {table_id}, '
                f"but adding the schema failed: {e}"
            )

        logger.info(f"[Tool] Schema added to table ID: {table_id}")
        return ToolCallResult.text(
            f'Successfully created table "{args.name}" with ID: {table_id} and added the specified schema.'
        )

    async def update_table(self, args: UpdateTableInput) -> ToolCallResult:
        logger.info(f"[Tool] Executing update-table for table ID: {args.table_id}")
        return await self.update_then_fetch(
            self.client.workspace_path("table", args.table_id),
            args.to_body("name", "description", "tags"),
            "table",
            args.table_id,
            lambda table: f"# Table Updated\n\n**Name**: {table.get('name')}\n" + _table_section(table),
        )

    async def delete_table(self, args: TableIdInput) -> ToolCallResult:
        logger.info(f"[Tool] Executing delete-table for table ID: {args.table_id}")
        await self.client.request(self.client.workspace_path("table", args.table_id), HttpMethod.DELETE)
        return ToolCallResult.text(f"Successfully deleted table with ID: {args.table_id}")

    async def update_table_schema(self, args: UpdateTableSchemaInput) -> ToolCallResult:
        logger.info(f"[Tool] Executing update-table-schema for table ID: {args.table_id}, "
                    f"operation: {args.operation.value}")
        path = self.client.workspace_path("table", args.table_id, "schema")

        if args.operation is SchemaOperation.UPDATE:
            await self.client.request(path, HttpMethod.PUT, {"schema": schema_payload(args.table_schema)})
            message = f"Successfully updated the entire schema for table ID: {args.table_id}"
        elif args.operation is SchemaOperation.ADD_COLUMN:
            column = args.column
            await self.client.request(
                self.client.workspace_path("table", args.table_id, "schema", "type", column.type.value),
                HttpMethod.POST,
                column.to_body(),
            )
            message = (f"Successfully added column '{column.name}' of type '{column.type.value}' "
                       f"to table ID: {args.table_id}")
        elif args.operation is SchemaOperation.RENAME_COLUMN:
            await self.client.request(f"{path}/rename", HttpMethod.POST, args.rename.to_body())
            message = (f"Successfully renamed column from '{args.rename.old_name}' to "
                       f"'{args.rename.new_name}' in table ID: {args.table_id}")
        else:
            await self.client.request(
                self.client.workspace_path("table", args.table_id, "schema", args.column_name),
                HttpMethod.DELETE,
            )
            message = f"Successfully removed column '{args.column_name}' from table ID: {args.table_id}"

        logger.info(f"[Tool] {message}")
        return ToolCallResult.text(message)

    def get_tools(self) -> List[RegisteredTool]:
        return [
            define_tool("list-tables", "Browse all tables in the Xano workspace",
                        NoInput, self.list_tables),
            define_tool("get-table-details", "Get details for a specific table",
                        TableIdInput, self.get_table_details),
            define_tool("get-table-schema", "Browse the schema of a table",
                        GetTableSchemaInput, self.get_table_schema),
            define_tool("create-table", "Add a new table to the Xano database",
                        CreateTableInput, self.create_table),
            define_tool("update-table", "Update a table's name, description and tags",
                        UpdateTableInput, self.update_table),
            define_tool("delete-table", "Delete a table from the Xano workspace",
                        TableIdInput, self.delete_table),
            define_tool("update-table-schema",
                        "Edit a table's schema: replace it, add a column, rename a column or remove a column",
                        UpdateTableSchemaInput, self.update_table_schema),
        ]


def get_tools(client: XanoClient) -> List[RegisteredTool]:
    return TableTools(client).get_tools()
