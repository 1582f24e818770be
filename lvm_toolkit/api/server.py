"""
Uvicorn server entrypoint for LVM Toolkit API.
"""

from __future__ import annotations

import argparse

import uvicorn

from lvm_toolkit.cli.lib.config import configure_logging, load_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lvm-toolkit-api", description="LVM Toolkit REST API server")
    parser.add_argument("--host", default=None, help="Bind host (default: from config or 127.0.0.1)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (default: from config or 8080)")
    parser.add_argument("--log-level", default=None, help="Log level (default: from config or INFO)")
    return parser


def main(argv: list[str] | None = None) -> int:
    cfg = load_config()
    args = build_parser().parse_args(argv)
    host = args.host or cfg.api_host
    port = args.port or cfg.api_port
    log_level = (args.log_level or cfg.log_level).upper()
    configure_logging(log_level)
    uvicorn.run("lvm_toolkit.api.main:app", host=host, port=port, log_level=log_level.lower())
    return 0
