from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping

logger = logging.getLogger(__name__)

TRANSPORTS = ("auto", "stdio", "http")


@dataclass(frozen=True)
class ServerConfig:
    host: str = "localhost"
    mcp_port: int = 3000
    ws_port: int = 3001
    browser_url: str = "http://localhost:5173"
    transport: str = "auto"
    static_dir: str = "dist"


@dataclass(frozen=True)
class BridgeConfig:
    state_query_timeout_ms: int = 2000
    broadcast_fallback: bool = True


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    file: str | None = None


@dataclass(frozen=True)
class AppConfig:
    server: ServerConfig = field(default_factory=ServerConfig)
    bridge: BridgeConfig = field(default_factory=BridgeConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _load_json(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def _int_setting(raw: Any, fallback: int, name: str) -> int:
    if raw is None:
        return fallback
    try:
        return int(raw)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid %s=%r, using %s", name, raw, fallback)
        return fallback


def _apply_file(config: AppConfig, raw: Mapping[str, Any]) -> AppConfig:
    server_raw = raw.get("server", {})
    bridge_raw = raw.get("bridge", {})
    logging_raw = raw.get("logging", {})
    server = config.server
    bridge = config.bridge
    return AppConfig(
        server=ServerConfig(
            host=str(server_raw.get("host", server.host)),
            mcp_port=_int_setting(server_raw.get("mcp_port"), server.mcp_port, "server.mcp_port"),
            ws_port=_int_setting(server_raw.get("ws_port"), server.ws_port, "server.ws_port"),
            browser_url=str(server_raw.get("browser_url", server.browser_url)),
            transport=str(server_raw.get("transport", server.transport)),
            static_dir=str(server_raw.get("static_dir", server.static_dir)),
        ),
        bridge=BridgeConfig(
            state_query_timeout_ms=_int_setting(
                bridge_raw.get("state_query_timeout_ms"),
                bridge.state_query_timeout_ms,
                "bridge.state_query_timeout_ms",
            ),
            broadcast_fallback=bool(bridge_raw.get("broadcast_fallback", bridge.broadcast_fallback)),
        ),
        logging=LoggingConfig(
            level=str(logging_raw.get("level", config.logging.level)),
            file=logging_raw.get("file", config.logging.file),
        ),
    )


def _apply_env(config: AppConfig, env: Mapping[str, str]) -> AppConfig:
    server = config.server
    server = replace(
        server,
        host=env.get("HELLO3D_HOST", server.host),
        mcp_port=_int_setting(env.get("MCP_PORT"), server.mcp_port, "MCP_PORT"),
        ws_port=_int_setting(env.get("WS_PORT"), server.ws_port, "WS_PORT"),
        browser_url=env.get("BROWSER_URL") or server.browser_url,
        transport=env.get("HELLO3D_TRANSPORT", server.transport),
    )
    bridge = replace(
        config.bridge,
        state_query_timeout_ms=_int_setting(
            env.get("HELLO3D_STATE_TIMEOUT_MS"),
            config.bridge.state_query_timeout_ms,
            "HELLO3D_STATE_TIMEOUT_MS",
        ),
    )
    logging_config = replace(
        config.logging,
        level=env.get("HELLO3D_LOG_LEVEL", config.logging.level),
        file=env.get("HELLO3D_LOG_FILE", config.logging.file),
    )
    return AppConfig(server=server, bridge=bridge, logging=logging_config)


def load_config(env: Mapping[str, str] | None = None) -> AppConfig:
    """Build the configuration from defaults, the optional JSON file and the environment.

    The JSON file is named by ``HELLO3D_CONFIG``; a missing file is ignored.
    Command-line overrides are applied afterwards by the caller.
    """
    env = os.environ if env is None else env
    config = AppConfig()

    config_path = env.get("HELLO3D_CONFIG")
    if config_path:
        path = Path(config_path)
        if path.exists():
            config = _apply_file(config, _load_json(path))
        else:
            logger.warning("Config file %s not found, using defaults", path)

    config = _apply_env(config, env)
    if config.server.transport not in TRANSPORTS:
        logger.warning("Unknown transport %r, falling back to auto", config.server.transport)
        config = replace(config, server=replace(config.server, transport="auto"))
    return config
