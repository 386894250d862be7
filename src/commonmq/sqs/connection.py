"""SQS client management and the four queue primitives."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Iterator
from typing import Any

from aiobotocore.session import AioSession
from botocore.exceptions import BotoCoreError, ClientError

from ..exceptions import BackendTransportError

logger = logging.getLogger("commonmq.sqs.connection")

# Error codes SQS uses for a receipt handle whose delivery is gone
RECEIPT_GONE_CODES = frozenset(
    {
        "ReceiptHandleIsInvalid",
        "AWS.SimpleQueueService.MessageNotInflight",
        "MessageNotInflight",
    }
)

# ChangeMessageVisibility on a deleted message reports InvalidParameterValue
# with this phrase in the error message.
RECEIPT_GONE_PHRASE = "does not exist or is not available"


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


def _receipt_gone(error: ClientError) -> bool:
    code = _error_code(error)
    if code in RECEIPT_GONE_CODES:
        return True
    message = str(error.response.get("Error", {}).get("Message", ""))
    return (
        code == "InvalidParameterValue" and RECEIPT_GONE_PHRASE in message.lower()
    )


@contextlib.contextmanager
def _transport_errors() -> Iterator[None]:
    try:
        yield
    except (BotoCoreError, ClientError) as e:
        raise BackendTransportError(str(e)) from e


class SQSConnectionManager:
    """Manages a lazily created aiobotocore SQS client."""

    def __init__(
        self,
        region_name: str = "us-east-1",
        *,
        session: AioSession | None = None,
        **client_kwargs: Any,
    ) -> None:
        """Configure region and optional session/client kwargs."""
        self._region = region_name
        self._session = session or AioSession()
        self._client_kwargs = client_kwargs
        self._client: Any = None
        self._client_cm: Any = None
        self._lock = asyncio.Lock()

    async def get_client(self) -> Any:
        """Return shared SQS client; create if needed."""
        async with self._lock:
            if self._client is None:
                with _transport_errors():
                    client_cm = self._session.create_client(
                        "sqs",
                        region_name=self._region,
                        **self._client_kwargs,
                    )
                    self._client = await client_cm.__aenter__()
                self._client_cm = client_cm
        return self._client

    async def send_message(self, queue_url: str, body: str) -> str:
        """Send *body* and return the SQS MessageId."""
        client = await self.get_client()
        with _transport_errors():
            out = await client.send_message(QueueUrl=queue_url, MessageBody=body)
        return str(out["MessageId"])

    async def receive_message(
        self, queue_url: str, *, wait_time_seconds: int = 0
    ) -> dict[str, Any] | None:
        """Receive at most one message; None if the queue returned nothing."""
        client = await self.get_client()
        with _transport_errors():
            out = await client.receive_message(
                QueueUrl=queue_url,
                MaxNumberOfMessages=1,
                WaitTimeSeconds=wait_time_seconds,
                AttributeNames=["ApproximateReceiveCount"],
            )
        messages = out.get("Messages") or []
        return messages[0] if messages else None

    async def change_message_visibility(
        self, queue_url: str, receipt_handle: str, visibility_timeout: int
    ) -> int:
        """Change visibility of one delivery; 0 if the receipt is gone."""
        client = await self.get_client()
        try:
            await client.change_message_visibility(
                QueueUrl=queue_url,
                ReceiptHandle=receipt_handle,
                VisibilityTimeout=visibility_timeout,
            )
        except ClientError as e:
            if _receipt_gone(e):
                return 0
            raise BackendTransportError(str(e)) from e
        except BotoCoreError as e:
            raise BackendTransportError(str(e)) from e
        return 1

    async def delete_message(self, queue_url: str, receipt_handle: str) -> int:
        """Delete one delivery; 0 if the receipt is gone."""
        client = await self.get_client()
        try:
            await client.delete_message(
                QueueUrl=queue_url,
                ReceiptHandle=receipt_handle,
            )
        except ClientError as e:
            if _receipt_gone(e):
                return 0
            raise BackendTransportError(str(e)) from e
        except BotoCoreError as e:
            raise BackendTransportError(str(e)) from e
        return 1

    async def close(self) -> None:
        """Close the client if open."""
        async with self._lock:
            if self._client_cm is not None:
                await self._client_cm.__aexit__(None, None, None)
                self._client_cm = None
                self._client = None

    async def health_check(self, queue_url: str) -> bool:
        """Return True if the queue's attributes can be read."""
        try:
            client = await self.get_client()
            await client.get_queue_attributes(
                QueueUrl=queue_url, AttributeNames=["QueueArn"]
            )
            return True
        except Exception:  # noqa: BLE001
            logger.debug("SQS health check failed for %s", queue_url, exc_info=True)
            return False
