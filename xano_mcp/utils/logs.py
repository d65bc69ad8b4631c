"""
日志配置

stdio 传输模式下 stdout 是 MCP 协议通道，所有日志只能写到 stderr
"""
import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"

logger = logging.getLogger("xano_mcp")


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """配置根日志器，重复调用只调整级别"""
    root = logging.getLogger()
    if not any(getattr(h, "_xano_mcp", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        handler._xano_mcp = True
        root.addHandler(handler)
    root.setLevel(level)
    return logger
