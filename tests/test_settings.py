# test_settings.py
import os
import tempfile

import pytest

from xano_mcp.configs.settings import (
    ConfigurationError,
    ServerConfig,
    Settings,
    XanoSettings,
    load_environment,
)

from conftest import API_BASE


class TestXanoSettings:
    """配置加载测试类"""

    def test_from_env(self, xano_env):
        settings = XanoSettings.from_env(xano_env)

        assert settings.api_key == "test-key"
        assert settings.workspace_id == 5
        assert settings.api_base == API_BASE
        assert settings.request_timeout == 30.0

    def test_missing_variables_are_all_named(self):
        """测试缺失的变量全部列出"""
        with pytest.raises(ConfigurationError) as exc_info:
            XanoSettings.from_env({"XANO_WORKSPACE": "5"})

        message = str(exc_info.value)
        assert "XANO_API_KEY" in message
        assert "XANO_API_BASE" in message
        assert "XANO_WORKSPACE" not in message

    def test_workspace_must_be_integer(self, xano_env):
        xano_env["XANO_WORKSPACE"] = "main"

        with pytest.raises(ConfigurationError, match="XANO_WORKSPACE"):
            XanoSettings.from_env(xano_env)

    def test_timeout_override(self, xano_env):
        xano_env["XANO_REQUEST_TIMEOUT"] = "12.5"

        assert XanoSettings.from_env(xano_env).request_timeout == 12.5

    @pytest.mark.parametrize("value", ["soon", "0", "-3"])
    def test_bad_timeout(self, xano_env, value):
        xano_env["XANO_REQUEST_TIMEOUT"] = value

        with pytest.raises(ConfigurationError, match="XANO_REQUEST_TIMEOUT"):
            XanoSettings.from_env(xano_env)

    def test_repr_masks_api_key(self, xano_settings):
        assert "test-key" not in repr(xano_settings)

    def test_settings_are_read_only(self, xano_settings):
        with pytest.raises(Exception):
            xano_settings.workspace_id = 7


class TestServerConfig:

    def test_defaults(self):
        config = ServerConfig.from_env({})

        assert config.name == "xano-mcp"
        assert config.host == "127.0.0.1"
        assert config.port == 8000
        assert config.transport == "stdio"

    def test_host_and_port_from_env(self):
        config = ServerConfig.from_env({"XANO_MCP_HOST": "0.0.0.0", "XANO_MCP_PORT": "9100"})

        assert config.host == "0.0.0.0"
        assert config.port == 9100

    def test_bad_port(self):
        with pytest.raises(ConfigurationError):
            ServerConfig.from_env({"XANO_MCP_PORT": "http"})


def test_settings_combine_both_sections(xano_env):
    settings = Settings.from_env(xano_env)

    assert settings.xano.workspace_id == 5
    assert settings.server.port == 8000


def test_load_environment_from_file():
    """测试 .env 文件加载到进程环境"""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".env", delete=False) as f:
        f.write("XANO_API_KEY=from-file\nXANO_WORKSPACE=9\nXANO_API_BASE=https://example.xano.io/api:meta\n")
        temp_path = f.name

    try:
        for name in ("XANO_API_KEY", "XANO_WORKSPACE", "XANO_API_BASE"):
            os.environ.pop(name, None)

        assert load_environment(temp_path) is True
        assert XanoSettings.from_env().workspace_id == 9
    finally:
        os.unlink(temp_path)


def test_load_environment_missing_file():
    assert load_environment("/nonexistent/xano.env") is False
