# xano_mcp/mcp/registry.py
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Type

from pydantic import ValidationError

from xano_mcp.mcp.models import ToolCallResult, ToolInput, ToolSchema

logger = logging.getLogger(__name__)

ToolExecutor = Callable[[Any], Awaitable[ToolCallResult]]


class ToolRegistrationError(ValueError):
    """工具注册冲突（编程错误，启动时即失败）"""


@dataclass(frozen=True)
class RegisteredTool:
    """内部注册的工具实例"""
    schema: ToolSchema
    input_model: Type[ToolInput]
    executor: ToolExecutor

    @property
    def name(self) -> str:
        return self.schema.name


def define_tool(
        name: str,
        description: str,
        input_model: Type[ToolInput],
        executor: ToolExecutor,
) -> RegisteredTool:
    """由参数模型生成 inputSchema 并构造工具定义"""
    schema = ToolSchema(
        name=name,
        description=description,
        inputSchema=input_model.model_json_schema(),
    )
    return RegisteredTool(schema=schema, input_model=input_model, executor=executor)


def format_validation_error(tool_name: str, error: ValidationError) -> str:
    """把 pydantic 校验错误整理成逐个参数的说明"""
    lines = [f"Invalid arguments for tool '{tool_name}':"]
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "arguments"
        lines.append(f"- {location}: {item['msg']}")
    return "\n".join(lines)


class ToolRegistry:
    """名称 -> 工具定义 的映射，注册完成后只读"""

    def __init__(self):
        self._tools: Dict[str, RegisteredTool] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def register_tool(self, tool: RegisteredTool):
        """注册一个工具，重名直接报错而不是覆盖"""
        if tool.name in self._tools:
            raise ToolRegistrationError(f"Tool already registered: {tool.name}")
        self._tools[tool.name] = tool
        logger.debug(f"工具注册成功: {tool.name}")

    def register(
            self,
            name: str,
            description: str,
            input_model: Type[ToolInput],
            executor: ToolExecutor,
    ) -> RegisteredTool:
        tool = define_tool(name, description, input_model, executor)
        self.register_tool(tool)
        return tool

    def register_toolkit(self, get_tools: Callable[[], Iterable[RegisteredTool]]):
        """注册一个工具包：约定为返回工具定义列表的 `get_tools()`"""
        tools = list(get_tools())
        for tool in tools:
            self.register_tool(tool)
        logger.info(f"工具包注册成功: {len(tools)} 个工具")

    def get_tool(self, name: str) -> Optional[RegisteredTool]:
        return self._tools.get(name)

    def list_tools(self) -> List[ToolSchema]:
        return [tool.schema for tool in self._tools.values()]

    async def invoke(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> ToolCallResult:
        """
        执行工具

        查找 -> 参数校验 -> 调用执行器；任何失败都转换为 isError 结果，
        不向调用方抛出异常（取消除外）
        """
        tool = self._tools.get(name)
        if tool is None:
            logger.warning(f"工具不存在: {name}")
            return ToolCallResult.error(f"Tool not found: {name}")

        if arguments is None:
            arguments = {}
        if not isinstance(arguments, Mapping):
            return ToolCallResult.error(
                f"Invalid arguments for tool '{name}': expected an object, "
                f"got {type(arguments).__name__}"
            )

        try:
            validated = tool.input_model.model_validate(dict(arguments))
        except ValidationError as e:
            message = format_validation_error(name, e)
            logger.info(f"参数校验失败 {name}: {message}")
            return ToolCallResult.error(message)

        logger.info(f"执行工具: {name}, 参数: {validated.to_body()}")
        try:
            result = await tool.executor(validated)
        except Exception as e:
            logger.exception(f"工具调用失败 {name}: {e}")
            return ToolCallResult.error(f"Error executing {name}: {str(e) or type(e).__name__}")

        if not isinstance(result, ToolCallResult):
            logger.error(f"工具 {name} 返回了非法结果类型: {type(result).__name__}")
            return ToolCallResult.error(
                f"Error executing {name}: handler returned {type(result).__name__}"
            )
        return result
