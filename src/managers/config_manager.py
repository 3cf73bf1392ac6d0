"""
Config Manager

Loads extension defaults from config.yaml and overlays environment variables.
Produces an immutable ExtensionConfig.
"""

import os
import yaml
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from models.config import ExtensionConfig
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.CONFIG)


class ConfigError(Exception):
    """Configuration is missing or invalid; the extension cannot start."""


# Built-in fallback when config.yaml is missing or unreadable
FACTORY_DEFAULTS: Dict[str, Any] = {
    "extension": {"name": "secretmanager", "api_version": "2020-01-01"},
    "lookup_server": {"host": "127.0.0.1", "port": 3000},
    "shutdown": {"deadline_ms": 1000},
    "consumer": {"queue_send_timeout_ms": 2500},
    "logging": {"level": "INFO"},
}

# Environment variable names
ENV_RUNTIME_API = "AWS_LAMBDA_RUNTIME_API"
ENV_PORT = "SECRETMANAGER_PORT"
ENV_DEADLINE_MS = "SECRETMANAGER_SHUTDOWN_DEADLINE_MS"
ENV_QUEUE_SEND_TIMEOUT_MS = "SECRETMANAGER_QUEUE_SEND_TIMEOUT_MS"
ENV_SECRET_NAME = "SECRET_NAME"
ENV_QUEUE_URL = "SQS_QUEUE_URL"
ENV_REGION = "AWS_REGION"
ENV_LOG_LEVEL = "LOG_LEVEL"


class ConfigManager:
    """
    Configuration manager for the extension

    Example:
        config = ConfigManager().load()
        config.lookup_port          # 3000 unless SECRETMANAGER_PORT is set
        config.extensions_api_url   # http://<AWS_LAMBDA_RUNTIME_API>/2020-01-01/extension
    """

    def __init__(self, config_path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None):
        """
        Initialize ConfigManager

        Args:
            config_path: Path to config.yaml (default: src/config/config.yaml)
            environ: Environment mapping (default: os.environ)
        """
        self.config_path = Path(config_path) if config_path else Path(__file__).parent.parent / "config" / "config.yaml"
        self.environ = environ if environ is not None else os.environ
        self.data: Dict[str, Any] = {}

    def load(self, require_runtime_api: bool = True) -> ExtensionConfig:
        """
        Load YAML defaults, apply environment overrides and validate.

        Args:
            require_runtime_api: False for the consumer handler, which never
                talks to the Extensions API

        Raises:
            ConfigError: required value missing or a numeric value is malformed
        """
        self.data = self._load_yaml()

        runtime_api = (self.environ.get(ENV_RUNTIME_API) or "").strip()
        if require_runtime_api and not runtime_api:
            raise ConfigError(f"{ENV_RUNTIME_API} is not set; cannot reach the Extensions API")

        extension = self.data.get("extension") or {}
        lookup = self.data.get("lookup_server") or {}
        shutdown = self.data.get("shutdown") or {}
        consumer = self.data.get("consumer") or {}
        logging_cfg = self.data.get("logging") or {}

        config = ExtensionConfig(
            runtime_api=runtime_api,
            extension_name=str(extension.get("name", "secretmanager")),
            api_version=str(extension.get("api_version", "2020-01-01")),
            lookup_host=str(lookup.get("host", "127.0.0.1")),
            lookup_port=self._int_option(ENV_PORT, lookup.get("port", 3000)),
            shutdown_deadline_ms=self._int_option(ENV_DEADLINE_MS, shutdown.get("deadline_ms", 1000)),
            queue_send_timeout_ms=self._int_option(ENV_QUEUE_SEND_TIMEOUT_MS, consumer.get("queue_send_timeout_ms", 2500)),
            secret_name=self.environ.get(ENV_SECRET_NAME) or None,
            queue_url=self.environ.get(ENV_QUEUE_URL) or None,
            aws_region=self.environ.get(ENV_REGION) or None,
            log_level=self.environ.get(ENV_LOG_LEVEL) or str(logging_cfg.get("level", "INFO")),
        )

        if not 0 < config.lookup_port < 65536:
            raise ConfigError(f"Lookup server port out of range: {config.lookup_port}")
        if config.shutdown_deadline_ms <= 0:
            raise ConfigError(f"Shutdown deadline must be positive: {config.shutdown_deadline_ms} ms")
        if config.queue_send_timeout_ms <= 0:
            raise ConfigError(f"Queue send timeout must be positive: {config.queue_send_timeout_ms} ms")

        log.info(
            "Configuration loaded",
            runtime_api=config.runtime_api,
            lookup=f"{config.lookup_host}:{config.lookup_port}",
            shutdown_deadline_ms=config.shutdown_deadline_ms,
        )
        return config

    def _load_yaml(self) -> Dict[str, Any]:
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ValueError("top-level YAML value must be a mapping")
            log.debug(f"Loaded {self.config_path.name}", keys=str(list(data.keys())))
            return data
        except Exception as ex:
            log.warn("Failed to load config.yaml, using factory defaults", error=str(ex), error_type=type(ex).__name__)
            return FACTORY_DEFAULTS

    def _int_option(self, env_name: Optional[str], default: Any) -> int:
        raw = self.environ.get(env_name) if env_name else None
        value = raw if raw not in (None, "") else default
        try:
            return int(value)
        except (TypeError, ValueError):
            source = env_name or "config.yaml"
            raise ConfigError(f"{source}: expected an integer, got {value!r}")
