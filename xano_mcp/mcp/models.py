"""
MCP 核心数据模型
"""
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ============ 协议模型 (MCP规范) ============
class ToolSchema(BaseModel):
    """MCP工具定义"""
    name: str
    description: str
    inputSchema: Dict[str, Any]


class ToolCallRequest(BaseModel):
    """工具调用请求"""
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ImageContent(BaseModel):
    """图片内容，data 为 base64 编码"""
    type: Literal["image"] = "image"
    data: str
    mimeType: str


class TextResourceContents(BaseModel):
    uri: str
    text: str
    mimeType: Optional[str] = None


class BlobResourceContents(BaseModel):
    uri: str
    blob: str
    mimeType: Optional[str] = None


class EmbeddedResource(BaseModel):
    type: Literal["resource"] = "resource"
    resource: Union[TextResourceContents, BlobResourceContents]


ContentBlock = Union[TextContent, ImageContent, EmbeddedResource]


class ToolCallResult(BaseModel):
    """工具调用结果"""
    content: List[ContentBlock] = Field(default_factory=list)
    isError: bool = False

    @model_validator(mode="after")
    def _error_needs_diagnostic(self) -> "ToolCallResult":
        # 错误结果至少要有一段可读的诊断文本
        if self.isError and not any(
            isinstance(block, TextContent) and block.text.strip()
            for block in self.content
        ):
            raise ValueError("error results must carry a non-empty text block")
        return self

    @classmethod
    def text(cls, *texts: str) -> "ToolCallResult":
        return cls(content=[TextContent(text=t) for t in texts])

    @classmethod
    def error(cls, message: str) -> "ToolCallResult":
        return cls(content=[TextContent(text=message or "Unknown error")], isError=True)

    @property
    def text_content(self) -> str:
        """所有文本块拼接，便于日志与测试"""
        return "\n".join(b.text for b in self.content if isinstance(b, TextContent))


class ToolInput(BaseModel):
    """所有工具参数模型的基类"""
    model_config = ConfigDict(extra="ignore")

    def to_body(self, *fields: str) -> Dict[str, Any]:
        """
        导出请求体：值为 None 的可选字段直接省略，不以 null 发送

        Args:
            fields: 只导出这些字段，为空时导出全部
        """
        include = set(fields) if fields else None
        return self.model_dump(mode="json", include=include, exclude_none=True)


# ============ 共享枚举 ============
class HttpMethod(str, Enum):
    """调度器支持的 HTTP 方法"""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class ApiVerb(str, Enum):
    """Xano API 端点可声明的 HTTP 方法"""
    GET = "GET"
    POST = "POST"
    DELETE = "DELETE"
    PUT = "PUT"
    PATCH = "PATCH"
    HEAD = "HEAD"


class FieldType(str, Enum):
    """Xano 表字段类型"""
    ATTACHMENT = "attachment"
    AUDIO = "audio"
    BOOL = "bool"
    DATE = "date"
    DECIMAL = "decimal"
    EMAIL = "email"
    ENUM = "enum"
    GEO_LINESTRING = "geo_linestring"
    GEO_MULTILINESTRING = "geo_multilinestring"
    GEO_MULTIPOINT = "geo_multipoint"
    GEO_MULTIPOLYGON = "geo_multipolygon"
    GEO_POINT = "geo_point"
    GEO_POLYGON = "geo_polygon"
    IMAGE = "image"
    INT = "int"
    JSON = "json"
    OBJECT = "object"
    PASSWORD = "password"
    TABLEREFUUID = "tablerefuuid"
    TEXT = "text"
    TIMESTAMP = "timestamp"
    UUID = "uuid"
    VECTOR = "vector"
    VIDEO = "video"


class AccessLevel(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    INTERNAL = "internal"


class FieldStyle(str, Enum):
    SINGLE = "single"
    LIST = "list"


class SortField(str, Enum):
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    NAME = "name"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class OutputFormat(str, Enum):
    """输出格式：markdown 便于阅读，json 保留完整结构"""
    MARKDOWN = "markdown"
    JSON = "json"


class SchemaOperation(str, Enum):
    UPDATE = "update"
    ADD_COLUMN = "add_column"
    RENAME_COLUMN = "rename_column"
    REMOVE_COLUMN = "remove_column"
