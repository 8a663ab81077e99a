"""
Configuration Management for voicegen.

This module provides centralized configuration handling with:
    - Default values (Defaults class)
    - Dataclass-based configuration objects
    - YAML file loading with environment variable overrides
    - Validation with meaningful error messages

Configuration Hierarchy (highest priority first):
    1. Environment variables (PORT, VOICEGEN_UPSTREAM_TIMEOUT, ...)
    2. YAML config file (config/settings.yaml)
    3. Defaults class values

Example settings.yaml:
    server:
      port: 3000

    upstream:
      timeout_s: 0      # 0 = wait forever

    cache:
      eviction: none

    logging:
      level: 2  # NORMAL
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List
import os
import yaml


class ConfigValidationError(Exception):
    """Raised when a configuration value is out of bounds or unsupported."""
    pass


class Defaults:
    """
    Centralized default configuration values.

    Sections:
        - Server: listen port and CORS
        - Upstream: generation service and file host contracts
        - Cache: code->URL map policy
        - Validation: request bounds
        - Logging: log level and previews
    """

    # ─────────────────────────────────────────────────────────────────────────
    # Server
    # ─────────────────────────────────────────────────────────────────────────
    SERVER_HOST = "0.0.0.0"
    SERVER_PORT = 3000
    SERVER_CORS_ORIGINS = ["*"]

    # ─────────────────────────────────────────────────────────────────────────
    # Upstream: speech generation
    # ─────────────────────────────────────────────────────────────────────────
    TTS_URL = "https://www.openai.fm/api/generate"
    TTS_ORIGIN = "https://www.openai.fm"
    TTS_REFERER = "https://www.openai.fm/"

    # ─────────────────────────────────────────────────────────────────────────
    # Upstream: file host
    # ─────────────────────────────────────────────────────────────────────────
    UPLOAD_URL = "https://tmpfiles.org/api/v1/upload"
    UPLOAD_REFERER = "https://tmpfiles.org/"
    UPLOAD_FILENAME = "voicegen.mp3"
    # Landing page prefix -> direct download prefix (must stay bit-exact)
    DOWNLOAD_PREFIX_FROM = "https://tmpfiles.org/"
    DOWNLOAD_PREFIX_TO = "https://tmpfiles.org/dl/"

    # ─────────────────────────────────────────────────────────────────────────
    # Upstream: audio proxy
    # ─────────────────────────────────────────────────────────────────────────
    PROXY_USER_AGENT = "Mozilla/5.0"
    PROXY_DEFAULT_CONTENT_TYPE = "audio/mpeg"

    UPSTREAM_TIMEOUT_S = 0.0            # 0 = no timeout

    # ─────────────────────────────────────────────────────────────────────────
    # Cache
    # ─────────────────────────────────────────────────────────────────────────
    CACHE_EVICTION = "none"
    CACHE_CODE_LENGTH = 10              # hex chars of the md5 digest

    # ─────────────────────────────────────────────────────────────────────────
    # Validation
    # ─────────────────────────────────────────────────────────────────────────
    MAX_TEXT_LENGTH = 1003

    # ─────────────────────────────────────────────────────────────────────────
    # Logging
    # ─────────────────────────────────────────────────────────────────────────
    LOGGING_TEXT_PREVIEW_CHARS = 60
    LOGGING_LEVEL = 2                   # 1=MINIMAL, 2=NORMAL, 3=VERBOSE, 4=DEBUG


# Eviction policies the cache understands. Only "none" exists today.
EVICTION_POLICIES = ("none",)


@dataclass
class ServerConfig:
    """HTTP listener settings used by the CLI --serve mode."""
    host: str = Defaults.SERVER_HOST
    port: int = Defaults.SERVER_PORT
    cors_origins: List[str] = field(default_factory=lambda: list(Defaults.SERVER_CORS_ORIGINS))


@dataclass
class UpstreamConfig:
    """
    Endpoints and headers of the external collaborators.

    timeout_s of 0 means requests run until the upstream answers or the
    connection drops.
    """
    tts_url: str = Defaults.TTS_URL
    tts_origin: str = Defaults.TTS_ORIGIN
    tts_referer: str = Defaults.TTS_REFERER
    upload_url: str = Defaults.UPLOAD_URL
    upload_referer: str = Defaults.UPLOAD_REFERER
    upload_filename: str = Defaults.UPLOAD_FILENAME
    download_prefix_from: str = Defaults.DOWNLOAD_PREFIX_FROM
    download_prefix_to: str = Defaults.DOWNLOAD_PREFIX_TO
    proxy_user_agent: str = Defaults.PROXY_USER_AGENT
    proxy_default_content_type: str = Defaults.PROXY_DEFAULT_CONTENT_TYPE
    timeout_s: float = Defaults.UPSTREAM_TIMEOUT_S


@dataclass
class CacheConfig:
    """Code -> upstream URL map policy."""
    eviction: str = Defaults.CACHE_EVICTION
    code_length: int = Defaults.CACHE_CODE_LENGTH


@dataclass
class ValidationConfig:
    """Request bounds checked before any upstream call."""
    max_text_length: int = Defaults.MAX_TEXT_LENGTH


@dataclass
class LoggingConfig:
    """
    Logging configuration.

    Log levels:
        1 = MINIMAL: Startup, shutdown, critical errors only
        2 = NORMAL: Request lifecycle, cache status (default)
        3 = VERBOSE: Per-stage timing, detailed flow
        4 = DEBUG: Internal state, full tracing
    """
    text_preview_chars: int = Defaults.LOGGING_TEXT_PREVIEW_CHARS
    level: int = Defaults.LOGGING_LEVEL


@dataclass
class ServiceConfig:
    """
    Validated configuration for the voicegen service.

    Usage:
        settings = load_settings("config/settings.yaml")
        config = ServiceConfig.from_settings(settings)
        print(config.upstream.tts_url)
    """
    server: ServerConfig = field(default_factory=ServerConfig)
    upstream: UpstreamConfig = field(default_factory=UpstreamConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "ServiceConfig":
        """
        Create ServiceConfig from Settings with validation.

        Args:
            settings: Raw Settings object loaded from YAML.

        Returns:
            Validated ServiceConfig instance.

        Raises:
            ConfigValidationError: If any value fails validation.
        """
        raw = settings.raw

        # ─────────────────────────────────────────────────────────────────────
        # Server
        # ─────────────────────────────────────────────────────────────────────
        server_raw = raw.get("server", {}) or {}
        origins = server_raw.get("cors_origins", Defaults.SERVER_CORS_ORIGINS)
        if isinstance(origins, str):
            origins = [o.strip() for o in origins.split(",") if o.strip()]
        server = ServerConfig(
            host=str(server_raw.get("host", Defaults.SERVER_HOST)),
            port=int(server_raw.get("port", Defaults.SERVER_PORT)),
            cors_origins=list(origins),
        )
        cls._validate_range("server.port", server.port, 1, 65535)

        # ─────────────────────────────────────────────────────────────────────
        # Upstream collaborators
        # ─────────────────────────────────────────────────────────────────────
        up_raw = raw.get("upstream", {}) or {}
        upstream = UpstreamConfig(
            tts_url=str(up_raw.get("tts_url", Defaults.TTS_URL)),
            tts_origin=str(up_raw.get("tts_origin", Defaults.TTS_ORIGIN)),
            tts_referer=str(up_raw.get("tts_referer", Defaults.TTS_REFERER)),
            upload_url=str(up_raw.get("upload_url", Defaults.UPLOAD_URL)),
            upload_referer=str(up_raw.get("upload_referer", Defaults.UPLOAD_REFERER)),
            upload_filename=str(up_raw.get("upload_filename", Defaults.UPLOAD_FILENAME)),
            download_prefix_from=str(up_raw.get("download_prefix_from", Defaults.DOWNLOAD_PREFIX_FROM)),
            download_prefix_to=str(up_raw.get("download_prefix_to", Defaults.DOWNLOAD_PREFIX_TO)),
            proxy_user_agent=str(up_raw.get("proxy_user_agent", Defaults.PROXY_USER_AGENT)),
            proxy_default_content_type=str(
                up_raw.get("proxy_default_content_type", Defaults.PROXY_DEFAULT_CONTENT_TYPE)
            ),
            timeout_s=float(up_raw.get("timeout_s", Defaults.UPSTREAM_TIMEOUT_S)),
        )
        cls._validate_non_negative("upstream.timeout_s", upstream.timeout_s)

        # ─────────────────────────────────────────────────────────────────────
        # Cache
        # ─────────────────────────────────────────────────────────────────────
        cache_raw = raw.get("cache", {}) or {}
        cache = CacheConfig(
            eviction=str(cache_raw.get("eviction", Defaults.CACHE_EVICTION)).lower(),
            code_length=int(cache_raw.get("code_length", Defaults.CACHE_CODE_LENGTH)),
        )
        if cache.eviction not in EVICTION_POLICIES:
            raise ConfigValidationError(
                f"cache.eviction must be one of {EVICTION_POLICIES}, got {cache.eviction!r}"
            )
        cls._validate_range("cache.code_length", cache.code_length, 1, 32)

        # ─────────────────────────────────────────────────────────────────────
        # Validation
        # ─────────────────────────────────────────────────────────────────────
        validation_raw = raw.get("validation", {}) or {}
        validation = ValidationConfig(
            max_text_length=int(validation_raw.get("max_text_length", Defaults.MAX_TEXT_LENGTH)),
        )
        cls._validate_positive("validation.max_text_length", validation.max_text_length)

        # ─────────────────────────────────────────────────────────────────────
        # Logging
        # ─────────────────────────────────────────────────────────────────────
        logging_raw = raw.get("logging", {}) or {}
        log_level_raw = logging_raw.get("level", Defaults.LOGGING_LEVEL)

        # Handle string log levels (e.g., "INFO", "DEBUG")
        if isinstance(log_level_raw, str):
            level_map = {
                "MINIMAL": 1, "1": 1,
                "NORMAL": 2, "INFO": 2, "2": 2,
                "VERBOSE": 3, "3": 3,
                "DEBUG": 4, "TRACE": 4, "4": 4,
            }
            log_level = level_map.get(log_level_raw.upper(), Defaults.LOGGING_LEVEL)
        else:
            log_level = int(log_level_raw)

        logging_cfg = LoggingConfig(
            text_preview_chars=int(logging_raw.get("text_preview_chars", Defaults.LOGGING_TEXT_PREVIEW_CHARS)),
            level=log_level,
        )
        cls._validate_non_negative("logging.text_preview_chars", logging_cfg.text_preview_chars)
        cls._validate_range("logging.level", logging_cfg.level, 1, 4)

        return cls(
            server=server,
            upstream=upstream,
            cache=cache,
            validation=validation,
            logging=logging_cfg,
        )

    @staticmethod
    def _validate_positive(name: str, value: int | float) -> None:
        if value <= 0:
            raise ConfigValidationError(f"{name} must be positive, got {value}")

    @staticmethod
    def _validate_non_negative(name: str, value: int | float) -> None:
        if value < 0:
            raise ConfigValidationError(f"{name} must be non-negative, got {value}")

    @staticmethod
    def _validate_range(name: str, value: int | float, min_val: int | float, max_val: int | float) -> None:
        if not (min_val <= value <= max_val):
            raise ConfigValidationError(f"{name} must be between {min_val} and {max_val}, got {value}")


@dataclass(frozen=True)
class Settings:
    """
    Immutable settings container loaded from YAML.

    This is the raw settings object before validation. Use
    get_service_config() to get a validated ServiceConfig.
    """
    raw: Dict[str, Any]

    def get_service_config(self) -> ServiceConfig:
        """
        Get validated ServiceConfig from these settings.

        Raises:
            ConfigValidationError: If validation fails.
        """
        return ServiceConfig.from_settings(self)


def load_settings(path: str = "config/settings.yaml", required: bool = False) -> Settings:
    """
    Load settings from a YAML configuration file.

    Environment variable overrides:
        - PORT: Override server.port
        - VOICEGEN_UPSTREAM_TIMEOUT: Override upstream.timeout_s

    Args:
        path: Path to the YAML configuration file.
        required: Raise instead of falling back to defaults when the
            file is missing.

    Returns:
        Settings object with loaded configuration.

    Raises:
        FileNotFoundError: If required and the settings file doesn't exist.
    """
    p = Path(path)
    raw: Dict[str, Any] = {}
    if p.exists():
        with p.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    elif required:
        raise FileNotFoundError(f"settings file not found: {p.resolve()}")

    port = os.getenv("PORT")
    if port:
        raw.setdefault("server", {})["port"] = int(port)

    timeout = os.getenv("VOICEGEN_UPSTREAM_TIMEOUT")
    if timeout:
        raw.setdefault("upstream", {})["timeout_s"] = float(timeout)

    return Settings(raw=raw)
