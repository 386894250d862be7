"""SQSClient: queue client for ``sqs://`` connection strings."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..base import QueueClient
from ..exceptions import NotFoundError
from ..message import InboundMessage
from ..receipts import ReceiptStore
from ..url import SQSDescriptor
from .connection import SQSConnectionManager

if TYPE_CHECKING:
    from ..config import QueueConfig

logger = logging.getLogger("commonmq.sqs")


class SQSClient(QueueClient[SQSDescriptor]):
    """Queue client for AWS SQS.

    SQS acknowledges deliveries by receipt handle rather than message id, so
    the handle of every message received through this instance is cached
    until the message is deleted or moved to the bad message queue. Acting on
    a message this instance never received raises MissingReceiptError.
    """

    scheme = "sqs"
    descriptor_type = SQSDescriptor

    def __init__(
        self,
        config: QueueConfig,
        *,
        connection: SQSConnectionManager | None = None,
    ) -> None:
        """Validate *config* and prepare the SQS connection.

        Args:
            config: Client configuration with ``sqs://`` urls.
            connection: Pre-built connection manager, mainly for tests.
        """
        super().__init__(config)
        self._connection = connection or SQSConnectionManager(
            self._descriptor.region,
            **config.client_options,
        )
        self._receipts = ReceiptStore()
        logger.info(
            "Initialized SQSClient for queue %s in %s",
            self.queue_address,
            self._descriptor.region,
        )

    @property
    def connection(self) -> SQSConnectionManager:
        return self._connection

    @property
    def receipts(self) -> ReceiptStore:
        return self._receipts

    async def _send_to(self, address: str, body: str) -> str:
        return await self._connection.send_message(address, body)

    async def _receive_once(self) -> InboundMessage | None:
        msg = await self._connection.receive_message(
            self.queue_address,
            wait_time_seconds=self._config.wait_time_seconds,
        )
        if msg is None:
            return None
        message_id = msg["MessageId"]
        receipt_handle = msg["ReceiptHandle"]
        await self._receipts.put(message_id, receipt_handle)
        receive_count = msg.get("Attributes", {}).get("ApproximateReceiveCount")
        return InboundMessage(
            id=message_id,
            body=msg.get("Body", ""),
            ack_token=receipt_handle,
            receive_count=int(receive_count) if receive_count else None,
        )

    async def extend_visibility_timeout(self, message_id: str, seconds: int) -> None:
        receipt_handle = await self._receipts.get(message_id)
        affected = await self._connection.change_message_visibility(
            self.queue_address, receipt_handle, seconds
        )
        if affected == 0:
            await self._receipts.discard(message_id, receipt_handle)
            raise NotFoundError(message_id)
        logger.debug("Extended visibility of %s by %ds", message_id, seconds)

    async def delete(self, message_id: str) -> None:
        receipt_handle = await self._receipts.get(message_id)
        affected = await self._connection.delete_message(
            self.queue_address, receipt_handle
        )
        # the receipt is spent either way
        await self._receipts.discard(message_id, receipt_handle)
        if affected == 0:
            raise NotFoundError(message_id)
        logger.debug("Deleted message %s from %s", message_id, self.queue_address)

    async def close(self) -> None:
        await self._connection.close()
        await self._receipts.clear()

    async def health_check(self) -> bool:
        return await self._connection.health_check(self.queue_address)
