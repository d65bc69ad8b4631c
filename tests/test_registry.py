# test_registry.py
import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import Field

from xano_mcp.mcp.models import SortOrder, ToolCallResult, ToolInput
from xano_mcp.mcp.registry import ToolRegistrationError, ToolRegistry, define_tool


class EchoInput(ToolInput):
    id: str = Field(description="Identifier to echo")


class OrderInput(ToolInput):
    order: SortOrder = Field(description="Sort order")


def make_echo_tool(dispatcher):
    """注册 echo-id：把 id 拼到路径上交给调度器，再把调度器的回显作为结果"""

    async def echo(args: EchoInput) -> ToolCallResult:
        echoed = await dispatcher.request(f"/echo/{args.id}")
        return ToolCallResult.text(f"echo: {echoed}")

    return echo


@pytest.fixture
def dispatcher():
    fake = MagicMock()
    fake.request = AsyncMock(side_effect=lambda path, *args, **kwargs: path)
    return fake


@pytest.fixture
def echo_registry(dispatcher):
    registry = ToolRegistry()
    registry.register("echo-id", "Echo an identifier", EchoInput, make_echo_tool(dispatcher))
    return registry


class TestToolRegistry:
    """工具注册表测试类"""

    def test_echo_id_end_to_end(self, echo_registry, dispatcher):
        """测试合法参数经过调度器后回显"""
        result = asyncio.run(echo_registry.invoke("echo-id", {"id": "abc"}))

        assert result.isError is False
        assert "abc" in result.content[0].text
        assert dispatcher.request.await_count == 1

    def test_missing_required_argument_makes_no_call(self, echo_registry, dispatcher):
        """测试缺少必需参数时不发请求"""
        result = asyncio.run(echo_registry.invoke("echo-id", {}))

        assert result.isError is True
        assert "id" in result.text_content
        assert "Invalid arguments for tool 'echo-id'" in result.text_content
        assert dispatcher.request.await_count == 0

    def test_enum_value_outside_set_is_rejected(self, dispatcher):
        executor = AsyncMock(return_value=ToolCallResult.text("ok"))
        registry = ToolRegistry()
        registry.register("sorted", "Sorted listing", OrderInput, executor)

        result = asyncio.run(registry.invoke("sorted", {"order": "sideways"}))

        assert result.isError is True
        assert "order" in result.text_content
        executor.assert_not_awaited()

    def test_unknown_tool(self, echo_registry):
        result = asyncio.run(echo_registry.invoke("no-such-tool", {}))

        assert result.isError is True
        assert result.text_content == "Tool not found: no-such-tool"

    def test_non_mapping_arguments(self, echo_registry, dispatcher):
        result = asyncio.run(echo_registry.invoke("echo-id", ["abc"]))

        assert result.isError is True
        assert "expected an object" in result.text_content
        assert dispatcher.request.await_count == 0

    def test_executor_exception_becomes_error_result(self):
        """测试执行器抛出的异常被转换为错误结果"""
        registry = ToolRegistry()
        registry.register("boom", "Always fails", EchoInput,
                          AsyncMock(side_effect=RuntimeError("remote exploded")))

        result = asyncio.run(registry.invoke("boom", {"id": "1"}))

        assert result.isError is True
        assert result.text_content == "Error executing boom: remote exploded"

    def test_exception_without_message_uses_type_name(self):
        registry = ToolRegistry()
        registry.register("boom", "Always fails", EchoInput, AsyncMock(side_effect=KeyError()))

        result = asyncio.run(registry.invoke("boom", {"id": "1"}))

        assert result.text_content == "Error executing boom: KeyError"

    def test_wrong_return_type_is_an_error(self):
        registry = ToolRegistry()
        registry.register("bad", "Returns a string", EchoInput, AsyncMock(return_value="plain text"))

        result = asyncio.run(registry.invoke("bad", {"id": "1"}))

        assert result.isError is True
        assert "str" in result.text_content

    def test_cancellation_propagates(self):
        registry = ToolRegistry()
        registry.register("slow", "Cancelled", EchoInput, AsyncMock(side_effect=asyncio.CancelledError()))

        with pytest.raises(asyncio.CancelledError):
            asyncio.run(registry.invoke("slow", {"id": "1"}))

    def test_duplicate_registration_is_rejected(self, echo_registry, dispatcher):
        """测试重名注册报错，且第一个工具仍然可用"""
        other = AsyncMock(return_value=ToolCallResult.text("second"))

        with pytest.raises(ToolRegistrationError, match="echo-id"):
            echo_registry.register("echo-id", "Impostor", EchoInput, other)

        result = asyncio.run(echo_registry.invoke("echo-id", {"id": "abc"}))
        assert "abc" in result.text_content
        other.assert_not_awaited()
        assert len(echo_registry) == 1

    def test_list_tools_keeps_registration_order(self):
        registry = ToolRegistry()
        executor = AsyncMock(return_value=ToolCallResult.text("ok"))
        registry.register_toolkit(lambda: [
            define_tool("b-tool", "B", EchoInput, executor),
            define_tool("a-tool", "A", EchoInput, executor),
        ])

        assert [s.name for s in registry.list_tools()] == ["b-tool", "a-tool"]
        assert "a-tool" in registry
        assert registry.get_tool("missing") is None

    def test_input_schema_comes_from_model(self, echo_registry):
        schema = echo_registry.get_tool("echo-id").schema.inputSchema

        assert schema["required"] == ["id"]
        assert schema["properties"]["id"]["type"] == "string"
        assert schema["properties"]["id"]["description"] == "Identifier to echo"


class TestToolCallResult:
    """结果信封测试"""

    def test_error_requires_text(self):
        with pytest.raises(ValueError):
            ToolCallResult(content=[], isError=True)

    def test_empty_error_message_falls_back(self):
        assert ToolCallResult.error("").text_content == "Unknown error"

    def test_text_blocks(self):
        result = ToolCallResult.text("one", "two")

        assert [b.type for b in result.content] == ["text", "text"]
        assert result.text_content == "one\ntwo"
