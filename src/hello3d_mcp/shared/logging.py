from __future__ import annotations

import logging
import sys
from typing import Optional

from .config import LoggingConfig

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"

# Per-request chatter from the servers we embed; shown only at DEBUG.
CHATTY_LOGGERS = ("uvicorn.access", "uvicorn.error", "websockets", "httpx", "mcp.server")


def _handler(config: LoggingConfig) -> logging.Handler:
    # stdout carries JSON-RPC in stdio mode.
    if config.file:
        return logging.FileHandler(config.file, encoding="utf-8")
    return logging.StreamHandler(sys.stderr)


def configure_logging(config: LoggingConfig) -> None:
    level = getattr(logging, config.level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=[_handler(config)], force=True)

    # uvicorn runs with log_config=None, so its loggers reach ours through propagation.
    chatty_level = level if level <= logging.DEBUG else max(level, logging.WARNING)
    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(chatty_level)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name if name else "hello3d_mcp")
