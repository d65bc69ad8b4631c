# conftest.py
import json
import os
import sys

import pytest

# 添加项目根目录到Python路径
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from xano_mcp.configs.settings import XanoSettings
from xano_mcp.gateways.xano_client import XanoClient
from xano_mcp.tools import build_registry

API_BASE = "https://x8ki-letl-twmt.n7.xano.io/api:meta"
WORKSPACE_ID = 5


class FakeResponse:
    """模拟 aiohttp 响应（同时充当 async with 上下文）"""

    def __init__(self, status, payload):
        self.status = status
        self._payload = payload if isinstance(payload, bytes) else payload.encode("utf-8")

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    async def read(self):
        return self._payload


class FailingRequest:
    """进入上下文时抛出异常，模拟连接失败/超时"""

    def __init__(self, error):
        self.error = error

    async def __aenter__(self):
        raise self.error

    async def __aexit__(self, *exc_info):
        return False


class FakeSession:
    """按顺序返回预设响应，并记录每一次请求"""

    def __init__(self):
        self.replies = []
        self.calls = []
        self.closed = False

    def reply(self, status=200, body=None, raw=None):
        """追加一个响应：body 会序列化为 JSON，raw 原样返回（str 或 bytes）"""
        text = raw if raw is not None else ("" if body is None else json.dumps(body))
        self.replies.append((status, text))
        return self

    def fail(self, error):
        self.replies.append(error)
        return self

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        if not self.replies:
            raise AssertionError(f"unexpected request: {method} {url}")
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            return FailingRequest(reply)
        return FakeResponse(*reply)

    def body(self, index):
        """第 index 次请求的 JSON 请求体"""
        data = self.calls[index].get("data")
        return None if data is None else json.loads(data)

    async def close(self):
        self.closed = True


@pytest.fixture
def xano_settings():
    return XanoSettings(api_key="test-key", workspace_id=WORKSPACE_ID, api_base=API_BASE)


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def client(xano_settings, fake_session):
    """注入假会话的客户端"""
    return XanoClient(xano_settings, session=fake_session)


@pytest.fixture
def registry(client):
    """注册了全部工具的注册表"""
    return build_registry(client)


@pytest.fixture
def xano_env():
    """一套完整的环境变量"""
    return {
        "XANO_API_KEY": "test-key",
        "XANO_WORKSPACE": str(WORKSPACE_ID),
        "XANO_API_BASE": API_BASE,
    }


@pytest.fixture(autouse=True)
def setup_test_environment():
    """自动为每个测试设置环境"""
    # 保存原始环境
    original_env = os.environ.copy()

    yield

    # 恢复原始环境
    os.environ.clear()
    os.environ.update(original_env)


def pytest_configure(config):
    """Pytest配置钩子"""
    config.addinivalue_line(
        "markers", "unit: 标记测试为单元测试"
    )
