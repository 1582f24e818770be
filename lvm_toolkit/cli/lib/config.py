"""
Configuration loader for LVM Toolkit.

Host-specific settings (listen address, log level, command deadline) live in
an INI file instead of code. LVM object names are never configured here; they
always come from the tool arguments.
"""

from __future__ import annotations

import configparser
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


DEFAULT_CONFIG_PATH = Path("/etc/lvm-toolkit/lvm-toolkit.conf")
CONFIG_SECTION = "toolkit"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ToolkitConfig:
    api_host: str = "127.0.0.1"
    api_port: int = 8080
    log_level: str = "INFO"
    command_timeout: Optional[float] = None  # seconds; None waits forever


def config_path() -> Path:
    env = os.environ.get("LVM_TOOLKIT_CONFIG_PATH")
    if env:
        return Path(env)
    return DEFAULT_CONFIG_PATH


def _read_ini(path: Path) -> configparser.ConfigParser:
    parser = configparser.ConfigParser()
    if path.exists():
        parser.read(path, encoding="utf-8")
    return parser


def load_config(path: Optional[Path] = None) -> ToolkitConfig:
    """
    Load config from `path`, else `LVM_TOOLKIT_CONFIG_PATH`, else
    `/etc/lvm-toolkit/lvm-toolkit.conf`.

    Missing files and unparseable values are not an error; defaults are used.
    """
    parser = _read_ini(path or config_path())
    section = parser[CONFIG_SECTION] if parser.has_section(CONFIG_SECTION) else {}

    def _get(key: str, default: str) -> str:
        if isinstance(section, dict):
            return str(section.get(key, default)).strip()
        return str(section.get(key, fallback=default)).strip()

    def _get_int(key: str, default: int) -> int:
        raw = _get(key, str(default))
        try:
            return int(raw)
        except ValueError:
            return default

    def _get_timeout() -> Optional[float]:
        raw = _get("command_timeout", "0")
        try:
            timeout = float(raw)
        except ValueError:
            return None
        return timeout if timeout > 0 else None

    log_level = _get("log_level", "INFO").upper()
    if log_level not in LOG_LEVELS:
        log_level = "INFO"

    return ToolkitConfig(
        api_host=_get("api_host", "127.0.0.1"),
        api_port=_get_int("api_port", 8080),
        log_level=log_level,
        command_timeout=_get_timeout(),
    )


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
