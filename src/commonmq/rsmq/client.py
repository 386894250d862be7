"""RSMQClient: queue client for ``rsmq://`` connection strings."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..base import QueueClient
from ..exceptions import NotFoundError
from ..message import InboundMessage
from ..url import RSMQDescriptor
from .connection import RSMQConnection

if TYPE_CHECKING:
    from ..config import QueueConfig

logger = logging.getLogger("commonmq.rsmq")


class RSMQClient(QueueClient[RSMQDescriptor]):
    """Queue client for RSMQ queues on a single Redis server.

    Messages are acknowledged by id, so no receipt state is kept. The bad
    message queue must live on the same host and port as the primary queue.
    """

    scheme = "rsmq"
    descriptor_type = RSMQDescriptor

    def __init__(
        self,
        config: QueueConfig,
        *,
        connection: RSMQConnection | None = None,
    ) -> None:
        """Validate *config* and prepare the Redis connection.

        Args:
            config: Client configuration with ``rsmq://`` urls.
            connection: Pre-built connection, mainly for tests.
        """
        super().__init__(config)
        self._connection = connection or RSMQConnection(
            self._descriptor.host,
            self._descriptor.port,
            **config.client_options,
        )
        logger.info(
            "Initialized RSMQClient for queue %s on %s:%d",
            self.queue_address,
            self._descriptor.host,
            self._descriptor.port,
        )

    @property
    def connection(self) -> RSMQConnection:
        return self._connection

    async def _send_to(self, address: str, body: str) -> str:
        return await self._connection.send_message(address, body)

    async def _receive_once(self) -> InboundMessage | None:
        msg = await self._connection.receive_message(self.queue_address)
        if msg is None:
            return None
        return InboundMessage(id=msg.id, body=msg.message, receive_count=msg.rc)

    async def extend_visibility_timeout(self, message_id: str, seconds: int) -> None:
        affected = await self._connection.change_message_visibility(
            self.queue_address, message_id, seconds
        )
        if affected == 0:
            raise NotFoundError(message_id)
        logger.debug("Extended visibility of %s by %ds", message_id, seconds)

    async def delete(self, message_id: str) -> None:
        affected = await self._connection.delete_message(
            self.queue_address, message_id
        )
        if not affected:
            raise NotFoundError(message_id)
        logger.debug("Deleted message %s from %s", message_id, self.queue_address)

    async def close(self) -> None:
        await self._connection.close()

    async def health_check(self) -> bool:
        return await self._connection.health_check()
