"""
Request correlation and shared logging state.

The request id lives in a ContextVar so concurrent requests on the same
event loop each see their own id. Level and configuration are plain
module globals shared by the whole process.

Environment Variables:
    - VOICEGEN_SETTINGS: settings file to read the logging section from
    - VOICEGEN_LOG_LEVEL: level override (1-4 or name)
    - VOICEGEN_LOG_DIR: directory for the JSONL log file
    - VOICEGEN_JSONL_FILE: JSONL filename (default voicegen.jsonl)
    - VOICEGEN_LOG_ROTATE_BYTES / VOICEGEN_LOG_ROTATE_BACKUP: rotation
"""
from __future__ import annotations

import os
from contextvars import ContextVar
from typing import Any, Dict

from .levels import LEVEL_NAMES, LogLevel

# "-" outside of any request
_request_id: ContextVar[str] = ContextVar("request_id", default="-")

_configured: bool = False
_log_config: Dict[str, Any] = {}
_current_level: LogLevel = LogLevel.NORMAL


def get_request_id() -> str:
    return _request_id.get()


def set_request_id(rid: str) -> None:
    """Bind a request id to the current context for log correlation."""
    _request_id.set(rid)


def get_level() -> LogLevel:
    return _current_level


def set_level(level: LogLevel) -> None:
    global _current_level
    _current_level = level


def get_level_name() -> str:
    return LEVEL_NAMES.get(_current_level, "NORMAL")


def is_configured() -> bool:
    return _configured


def set_configured(value: bool) -> None:
    global _configured
    _configured = value


def get_log_config() -> Dict[str, Any]:
    return _log_config


def set_log_config(config: Dict[str, Any]) -> None:
    global _log_config
    _log_config = config


def read_logging_config() -> Dict[str, Any]:
    """
    Resolve logging configuration from the settings file and environment.

    Environment variables win over the ``logging`` section of the
    settings file, which wins over built-in defaults.
    """
    from voicegen.core.config import load_settings

    cfg: Dict[str, Any] = {}

    settings_path = os.getenv("VOICEGEN_SETTINGS", "config/settings.yaml")
    settings = load_settings(settings_path)
    cfg.update(settings.raw.get("logging", {}) or {})

    if os.getenv("VOICEGEN_LOG_LEVEL"):
        cfg["level"] = os.environ["VOICEGEN_LOG_LEVEL"]
    if os.getenv("VOICEGEN_LOG_DIR"):
        cfg["log_dir"] = os.environ["VOICEGEN_LOG_DIR"]
    if os.getenv("VOICEGEN_JSONL_FILE"):
        cfg["jsonl_file"] = os.environ["VOICEGEN_JSONL_FILE"]
    for env_name, key in (
        ("VOICEGEN_LOG_ROTATE_BYTES", "rotate_max_bytes"),
        ("VOICEGEN_LOG_ROTATE_BACKUP", "rotate_backup_count"),
    ):
        value = os.getenv(env_name)
        if value and value.isdigit():
            cfg[key] = int(value)

    return cfg
