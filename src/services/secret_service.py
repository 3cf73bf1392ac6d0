"""
Secret service - resolves secret identifiers against AWS Secrets Manager

Every lookup issues exactly one GetSecretValue call; nothing is cached
between requests. The boto3 client is blocking, so calls run in a worker
thread to keep the asyncio loop (and the lifecycle long-poll) responsive.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional, Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from models.secret import SecretLookupResult
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.SECRET)


class SecretBackendError(Exception):
    """The secret backend rejected or failed a lookup."""

    def __init__(self, secret_name: str, reason: str, code: Optional[str] = None):
        self.secret_name = secret_name
        self.reason = reason
        self.code = code
        super().__init__(f"Secret lookup failed for '{secret_name}': {reason}")


class ISecretBackend(Protocol):
    """Anything that can fetch a raw GetSecretValue-shaped response."""

    def get_secret_value(self, secret_name: str) -> dict:
        ...


class SecretsManagerBackend:
    """
    boto3 Secrets Manager backend.

    The client is created lazily so importing this module never touches AWS
    credentials. Retries are disabled at the botocore level: the lookup
    service performs a single backend call per request.
    """

    def __init__(self, region_name: Optional[str] = None, client: Any = None):
        self._region_name = region_name
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = boto3.client(
                "secretsmanager",
                region_name=self._region_name,
                config=Config(retries={"max_attempts": 1, "mode": "standard"}),
            )
        return self._client

    def get_secret_value(self, secret_name: str) -> dict:
        return self.client.get_secret_value(SecretId=secret_name)


class SecretService:
    """
    Per-request secret resolution.

    A missing secret (ResourceNotFoundException, or a response with neither
    SecretString nor SecretBinary) resolves to an absent result. Any other
    backend failure raises SecretBackendError for the API layer to map to a
    5xx response.
    """

    NOT_FOUND_CODES = {"ResourceNotFoundException"}

    def __init__(self, backend: ISecretBackend):
        self.backend = backend

    async def lookup(self, secret_name: str) -> SecretLookupResult:
        log.info("Fetching secret", secret_name=secret_name)
        try:
            response = await asyncio.to_thread(self.backend.get_secret_value, secret_name)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code in self.NOT_FOUND_CODES:
                log.info("Secret not found", secret_name=secret_name)
                return SecretLookupResult.absent()
            message = e.response.get("Error", {}).get("Message") or str(e)
            log.error("Secret backend rejected lookup", secret_name=secret_name, code=code, error=message)
            raise SecretBackendError(secret_name, message, code) from e
        except BotoCoreError as e:
            log.error("Secret backend call failed", secret_name=secret_name, error=str(e))
            raise SecretBackendError(secret_name, str(e)) from e

        result = SecretLookupResult.from_backend_response(response or {})
        log.debug(
            "Secret resolved",
            secret_name=secret_name,
            kind="absent" if result.is_absent else ("binary" if result.is_binary else "string"),
        )
        return result
