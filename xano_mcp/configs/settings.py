"""
xano-mcp 配置管理
只处理进程级、启动后不可变的配置
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from xano_mcp import __version__
from xano_mcp.utils.logs import logger

REQUIRED_ENV_VARS = ("XANO_API_KEY", "XANO_WORKSPACE", "XANO_API_BASE")
DEFAULT_REQUEST_TIMEOUT = 30.0


class ConfigurationError(Exception):
    """启动配置缺失或非法，进程必须拒绝启动"""


def load_environment(env_path: Optional[str] = None) -> bool:
    """
    加载 .env 文件到系统环境变量

    Args:
        env_path: 环境变量文件路径，为None时使用当前目录下的 .env

    Returns:
        是否找到并加载了文件
    """
    path = Path(env_path) if env_path else Path.cwd() / ".env"
    if path.exists():
        load_dotenv(path)
        logger.info(f"已加载环境变量文件: {path}")
        return True

    if env_path:
        logger.warning(f"环境变量文件未找到: {path}，将使用系统环境变量")
    return False


@dataclass(frozen=True)
class XanoSettings:
    """Xano 调用凭证"""
    api_key: str
    workspace_id: int
    api_base: str
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def __post_init__(self):
        # 统一去掉末尾的斜杠，endpoint 总是以 / 开头
        object.__setattr__(self, "api_base", self.api_base.rstrip("/"))

    def __repr__(self) -> str:
        return (
            f"XanoSettings(api_key='***', workspace_id={self.workspace_id}, "
            f"api_base={self.api_base!r}, request_timeout={self.request_timeout})"
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "XanoSettings":
        """从环境变量创建配置，任何必需变量缺失都直接失败"""
        env = os.environ if environ is None else environ

        missing = [name for name in REQUIRED_ENV_VARS if not env.get(name)]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

        try:
            workspace_id = int(env["XANO_WORKSPACE"])
        except ValueError:
            raise ConfigurationError(
                f"XANO_WORKSPACE must be an integer, got {env['XANO_WORKSPACE']!r}"
            )

        timeout_raw = env.get("XANO_REQUEST_TIMEOUT")
        request_timeout = DEFAULT_REQUEST_TIMEOUT
        if timeout_raw:
            try:
                request_timeout = float(timeout_raw)
            except ValueError:
                raise ConfigurationError(
                    f"XANO_REQUEST_TIMEOUT must be a number, got {timeout_raw!r}"
                )
            if request_timeout <= 0:
                raise ConfigurationError("XANO_REQUEST_TIMEOUT must be positive")

        return cls(
            api_key=env["XANO_API_KEY"],
            workspace_id=workspace_id,
            api_base=env["XANO_API_BASE"],
            request_timeout=request_timeout,
        )


@dataclass
class ServerConfig:
    """MCP服务配置"""
    name: str = "xano-mcp"
    version: str = __version__
    description: str = "MCP server for interacting with Xano database and APIs"
    host: str = "127.0.0.1"
    port: int = 8000
    transport: str = "stdio"  # stdio, http

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServerConfig":
        env = os.environ if environ is None else environ
        config = cls()
        if env.get("XANO_MCP_HOST"):
            config.host = env["XANO_MCP_HOST"]
        if env.get("XANO_MCP_PORT"):
            try:
                config.port = int(env["XANO_MCP_PORT"])
            except ValueError:
                raise ConfigurationError(
                    f"XANO_MCP_PORT must be an integer, got {env['XANO_MCP_PORT']!r}"
                )
        return config


@dataclass
class Settings:
    """全局配置"""
    xano: XanoSettings
    server: ServerConfig = field(default_factory=ServerConfig)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        return cls(
            xano=XanoSettings.from_env(environ),
            server=ServerConfig.from_env(environ),
        )
