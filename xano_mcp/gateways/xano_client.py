"""
Xano 管理 API 调度器

每次调用只发一次请求：不重试、不缓存，结果要么是解码后的 JSON，
要么是带状态码/原因的 XanoRequestError
"""
import asyncio
import json
import logging
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import quote

import aiohttp

from xano_mcp.configs.settings import XanoSettings
from xano_mcp.mcp.models import HttpMethod

logger = logging.getLogger(__name__)

# 只有这两种方法携带请求体
_BODY_METHODS = {HttpMethod.POST, HttpMethod.PUT}


class XanoRequestError(Exception):
    """远程调用失败的基类"""


class XanoAPIError(XanoRequestError):
    """HTTP 状态码不在 2xx 范围"""

    def __init__(self, status: int, body: str):
        self.status = status
        self.body = body
        super().__init__(f"Xano API error (HTTP {status}): {body}")


class XanoTransportError(XanoRequestError):
    """连接失败、超时、DNS 等传输层错误"""


class XanoDecodeError(XanoRequestError):
    """成功响应但响应体不是合法 JSON"""


def _query_value(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class XanoClient:
    """Xano REST API 客户端"""

    def __init__(self, settings: XanoSettings, session: Optional[aiohttp.ClientSession] = None):
        self.settings = settings
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "XanoClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def connect(self) -> aiohttp.ClientSession:
        """按需创建会话"""
        if self.session is None:
            self.session = aiohttp.ClientSession()
            self._owns_session = True
        return self.session

    async def close(self):
        """关闭自己创建的会话，外部注入的会话由调用方负责"""
        if self.session is not None and self._owns_session:
            await self.session.close()
            self.session = None

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.settings.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "X-Workspace": str(self.settings.workspace_id),
        }

    def workspace_path(self, *parts: Union[str, int]) -> str:
        """拼接 /workspace/{id}/... 路径，每段都做 URL 转义"""
        segments = [str(self.settings.workspace_id)] + [quote(str(part), safe="") for part in parts]
        return "/workspace/" + "/".join(segments)

    async def request(
            self,
            endpoint: str,
            method: Union[HttpMethod, str] = HttpMethod.GET,
            body: Any = None,
            params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """
        调用 Xano API

        Args:
            endpoint: 已插值的相对路径，直接拼接到 base URL 之后
            method: GET / POST / PUT / DELETE
            body: POST/PUT 时序列化为 JSON 发送，其它方法忽略
            params: 查询参数，值为 None 的项不发送

        Returns:
            解码后的 JSON 值，空响应体返回 None

        Raises:
            XanoAPIError, XanoTransportError, XanoDecodeError
        """
        method = HttpMethod(method)
        url = f"{self.settings.api_base}{endpoint}"

        if body is not None and method not in _BODY_METHODS:
            logger.debug(f"Ignoring request body for {method.value} {endpoint}")
            body = None

        query = None
        if params:
            query = {k: _query_value(v) for k, v in params.items() if v is not None} or None

        logger.info(f"[API] {method.value} {endpoint}")
        if body is not None:
            logger.debug(f"[API] Request body: {json.dumps(body, ensure_ascii=False)}")

        try:
            data = await self._send(method.value, url, headers=self.headers, body=body, params=query)
        except XanoRequestError as e:
            logger.error(f"[API] {method.value} {endpoint} failed: {e}")
            raise

        logger.info(f"[API] {method.value} {endpoint} succeeded")
        return data

    async def fetch_json(self, url: str) -> Any:
        """GET 一个绝对地址（例如 Swagger 文档链接），不附带认证头"""
        logger.info(f"[API] GET {url}")
        try:
            data = await self._send("GET", url, headers={"Accept": "application/json"})
        except XanoRequestError as e:
            logger.error(f"[API] GET {url} failed: {e}")
            raise
        logger.info(f"[API] GET {url} succeeded")
        return data

    async def _send(
            self,
            method: str,
            url: str,
            headers: Dict[str, str],
            body: Any = None,
            params: Optional[Dict[str, str]] = None,
    ) -> Any:
        session = await self.connect()
        kwargs: Dict[str, Any] = {
            "headers": headers,
            "timeout": aiohttp.ClientTimeout(total=self.settings.request_timeout),
        }
        if body is not None:
            kwargs["data"] = json.dumps(body)
        if params:
            kwargs["params"] = params

        try:
            async with session.request(method, url, **kwargs) as response:
                status = response.status
                raw = await response.read()
        except asyncio.TimeoutError:
            raise XanoTransportError(
                f"Request to {url} timed out after {self.settings.request_timeout}s"
            )
        except (aiohttp.ClientError, OSError) as e:
            raise XanoTransportError(f"Request to {url} failed: {e}") from e

        if not 200 <= status < 300:
            raise XanoAPIError(status, raw.decode("utf-8", errors="replace"))

        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise XanoDecodeError(f"Response from {url} is not valid UTF-8: {e}") from e

        if not text.strip():
            return None

        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise XanoDecodeError(
                f"Invalid JSON in response from {url}: {e.msg} at position {e.pos}"
            ) from e
