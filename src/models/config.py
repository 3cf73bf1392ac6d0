"""
Extension configuration model

Immutable snapshot of every option the extension and the consumer handler
recognise. Built by ConfigManager from config.yaml defaults plus environment
overrides.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ExtensionConfig:
    runtime_api: str                          # host:port of the Extensions API (required)
    extension_name: str = "secretmanager"
    api_version: str = "2020-01-01"
    lookup_host: str = "127.0.0.1"            # loopback only
    lookup_port: int = 3000
    shutdown_deadline_ms: int = 1000
    queue_send_timeout_ms: int = 2500
    secret_name: Optional[str] = None         # consumed by the consumer handler
    queue_url: Optional[str] = None           # consumed by the consumer handler
    aws_region: Optional[str] = None
    log_level: str = "INFO"

    @property
    def extensions_api_url(self) -> str:
        return f"http://{self.runtime_api}/{self.api_version}/extension"

    @property
    def shutdown_deadline(self) -> float:
        """Shutdown deadline in seconds."""
        return self.shutdown_deadline_ms / 1000.0

    @property
    def queue_send_timeout(self) -> float:
        return self.queue_send_timeout_ms / 1000.0
