"""
Consumer function handler

Runs inside the function runtime next to the extension:
1. parse the SNS notification ({"num1": .., "num2": ..})
2. resolve SECRET_NAME through the extension's lookup service
3. send {"sum", "num1", "num2", "secret"} to SQS_QUEUE_URL

The queue send is bounded by a short timeout so a stalled SQS call fails the
invocation instead of eating the function's remaining time.
"""

from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import boto3
import httpx
from botocore.config import Config

from managers.config_manager import ConfigManager
from models.config import ExtensionConfig
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.CONSUMER)

MESSAGE_GROUP_ID = "calculation-result"


class CalculationHandler:
    """
    SNS → sum → SQS pipeline.

    Both outbound clients are injectable so tests can run without network
    access (httpx.MockTransport, a fake SQS client).
    """

    def __init__(
        self,
        lookup_port: int,
        secret_name: Optional[str],
        queue_url: Optional[str],
        http_client: Optional[httpx.Client] = None,
        sqs_client: Any = None,
        queue_send_timeout: float = ExtensionConfig.queue_send_timeout_ms / 1000.0,
    ):
        self.lookup_port = lookup_port
        self.secret_name = secret_name
        self.queue_url = queue_url
        self.queue_send_timeout = queue_send_timeout
        self._http = http_client or httpx.Client(base_url=f"http://localhost:{lookup_port}")
        self._sqs = sqs_client

    @classmethod
    def from_env(
        cls,
        config_path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "CalculationHandler":
        """
        Build from the same config.yaml + environment the extension reads.

        Raises:
            ConfigError: malformed port or timeout
        """
        config = ConfigManager(config_path, environ).load(require_runtime_api=False)
        return cls(
            lookup_port=config.lookup_port,
            secret_name=config.secret_name,
            queue_url=config.queue_url,
            queue_send_timeout=config.queue_send_timeout,
        )

    @property
    def sqs(self) -> Any:
        """Lazy SQS client with retries disabled."""
        if self._sqs is None:
            self._sqs = boto3.client(
                "sqs",
                config=Config(
                    connect_timeout=self.queue_send_timeout,
                    read_timeout=self.queue_send_timeout,
                    retries={"max_attempts": 1, "mode": "standard"},
                ),
            )
        return self._sqs

    def get_secret(self) -> Optional[str]:
        response = self._http.get(f"/secret/{self.secret_name}")
        response.raise_for_status()
        data = response.json()
        return data.get("secret") if data else None

    def send_result(self, body: str) -> None:
        """
        Send one message, waiting at most queue_send_timeout for the whole call.

        botocore timeouts apply per socket operation, so the call runs in a
        worker thread and the wait on its result carries the bound.

        Raises:
            TimeoutError: the send did not finish in time
        """
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="sqs-send")
        try:
            future = executor.submit(
                self.sqs.send_message,
                QueueUrl=self.queue_url,
                MessageBody=body,
                MessageGroupId=MESSAGE_GROUP_ID,
            )
            try:
                future.result(timeout=self.queue_send_timeout)
            except FutureTimeoutError:
                raise TimeoutError("SQS operation timed out") from None
        finally:
            # A stalled send is abandoned, not awaited
            executor.shutdown(wait=False)

    def __call__(self, event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
        try:
            message = json.loads(event["Records"][0]["Sns"]["Message"])
            num1 = message["num1"]
            num2 = message["num2"]
            total = num1 + num2

            secret = self.get_secret()
            body = json.dumps({"sum": total, "num1": num1, "num2": num2, "secret": secret})

            self.send_result(body)
            log.info("Calculation result sent", sum=total)

            return {"statusCode": 200, "body": body}
        except Exception as e:
            log.error(f"Error in lambda execution: {e}", error_type=type(e).__name__)
            raise


_handler: Optional[CalculationHandler] = None


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Function runtime entry point."""
    global _handler
    if _handler is None:
        _handler = CalculationHandler.from_env()
    return _handler(event, context)
