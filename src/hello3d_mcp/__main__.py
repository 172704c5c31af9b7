from __future__ import annotations

import argparse
import asyncio
import os
import sys
from dataclasses import replace

from dotenv import load_dotenv

from .shared.config import TRANSPORTS, AppConfig, load_config
from .shared.logging import configure_logging, get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hello3d-mcp", description="MCP server for the hello3d browser scene")
    parser.add_argument("--browser-url", "-u", help="URL of the 3D browser app (default: BROWSER_URL or localhost:5173)")
    parser.add_argument("--transport", choices=TRANSPORTS, help="stdio, http, or auto (stdio when stdin is not a TTY)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log at DEBUG level")
    parser.add_argument("--config", help="JSON config file (overrides HELLO3D_CONFIG)")
    return parser


def resolve_config(argv: list[str] | None = None) -> AppConfig:
    args = build_parser().parse_args(argv)
    env = dict(os.environ)
    if args.config:
        env["HELLO3D_CONFIG"] = args.config
    config = load_config(env)

    server = config.server
    if args.browser_url:
        server = replace(server, browser_url=args.browser_url)
    if args.transport:
        server = replace(server, transport=args.transport)
    logging_config = replace(config.logging, level="DEBUG") if args.verbose else config.logging
    return replace(config, server=server, logging=logging_config)


def select_transport(requested: str, stdin_is_tty: bool) -> str:
    if requested in ("stdio", "http"):
        return requested
    # Spawned by an MCP host, stdin is a pipe.
    return "http" if stdin_is_tty else "stdio"


def main(argv: list[str] | None = None) -> None:
    load_dotenv()
    config = resolve_config(argv)
    configure_logging(config.logging)

    from .server import run_http, run_stdio

    transport = select_transport(config.server.transport, sys.stdin.isatty())
    runner = run_stdio if transport == "stdio" else run_http
    try:
        asyncio.run(runner(config))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")


if __name__ == "__main__":
    main()
