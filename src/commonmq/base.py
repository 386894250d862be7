"""QueueClient: behaviour shared by every backend adapter."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from .exceptions import (
    DeadLetterDeleteError,
    NoDeadLetterQueueError,
    ProtocolMismatchError,
    QueueOperationError,
)
from .url import RSMQDescriptor, SQSDescriptor, split_scheme

if TYPE_CHECKING:
    from types import TracebackType

    from .config import QueueConfig
    from .message import InboundMessage

logger = logging.getLogger("commonmq.client")

DescriptorT = TypeVar("DescriptorT", RSMQDescriptor, SQSDescriptor)


class QueueClient(ABC, Generic[DescriptorT]):
    """Base adapter implementing the parts of the lifecycle that do not
    depend on the backend: the receive poll loop and the two-step
    bad message move.

    Subclasses declare ``scheme`` and ``descriptor_type`` and implement the
    backend primitives. Constructors must not open network connections, so
    a failed configuration check never leaves a live handle behind.
    """

    scheme: ClassVar[str]
    descriptor_type: ClassVar[type[Any]]

    def __init__(self, config: QueueConfig) -> None:
        self._config = config
        self._descriptor: DescriptorT = self._parse(config.queue)
        self._dead_letter_descriptor: DescriptorT | None = None
        if config.bad_message_queue:
            dead_letter = self._parse(config.bad_message_queue)
            self._descriptor.check_dead_letter_compatible(dead_letter)
            self._dead_letter_descriptor = dead_letter

    @classmethod
    def _parse(cls, url: str) -> DescriptorT:
        scheme, _ = split_scheme(url)
        if scheme != cls.scheme:
            raise ProtocolMismatchError(
                f"{cls.__name__} handles {cls.scheme}:// queues, got {scheme}://"
            )
        descriptor: DescriptorT = cls.descriptor_type.parse(url)
        return descriptor

    # ── Properties ───────────────────────────────────────────────────

    @property
    def config(self) -> QueueConfig:
        return self._config

    @property
    def descriptor(self) -> DescriptorT:
        return self._descriptor

    @property
    def dead_letter_descriptor(self) -> DescriptorT | None:
        return self._dead_letter_descriptor

    @property
    def queue_address(self) -> str:
        return self._descriptor.resolved_address

    @property
    def dead_letter_address(self) -> str | None:
        if self._dead_letter_descriptor is None:
            return None
        return self._dead_letter_descriptor.resolved_address

    # ── Backend primitives ───────────────────────────────────────────

    @abstractmethod
    async def _send_to(self, address: str, body: str) -> str:
        """Send *body* to the queue at *address* and return the new id."""

    @abstractmethod
    async def _receive_once(self) -> InboundMessage | None:
        """Make exactly one receive call; None when nothing is available."""

    @abstractmethod
    async def extend_visibility_timeout(self, message_id: str, seconds: int) -> None:
        """Hide a received message from other receivers for *seconds* more."""

    @abstractmethod
    async def delete(self, message_id: str) -> None:
        """Acknowledge a received message."""

    @abstractmethod
    async def close(self) -> None:
        """Release the backend handle."""

    @abstractmethod
    async def health_check(self) -> bool:
        """Return True if the backend is reachable."""

    # ── Lifecycle ────────────────────────────────────────────────────

    async def send(self, body: str) -> str:
        """Send *body* to the primary queue and return its id."""
        message_id = await self._send_to(self.queue_address, body)
        logger.debug("Sent message %s to %s", message_id, self.queue_address)
        return message_id

    async def receive(self) -> InboundMessage:
        """Return the next message, polling every ``poll_interval_ms`` until
        one arrives. Transport errors propagate immediately."""
        while True:
            message = await self._receive_once()
            if message is not None:
                logger.debug(
                    "Received message %s from %s", message.id, self.queue_address
                )
                return message
            await _sleep(self._config.poll_interval)

    async def bad_message(self, message_id: str, body: str) -> str:
        """Send *body* to the bad message queue, then delete *message_id*.

        The delete is only attempted after the bad message queue accepted
        the copy. If the delete fails, DeadLetterDeleteError carries the
        new id and chains the delete error.
        """
        address = self.dead_letter_address
        if address is None:
            raise NoDeadLetterQueueError(
                f"no bad message queue configured for {self._config.queue}"
            )
        dead_letter_id = await self._send_to(address, body)
        try:
            await self.delete(message_id)
        except QueueOperationError as e:
            logger.warning(
                "Message %s copied to %s as %s but delete failed: %s",
                message_id,
                address,
                dead_letter_id,
                e,
            )
            raise DeadLetterDeleteError(message_id, dead_letter_id) from e
        logger.debug(
            "Moved message %s to %s as %s", message_id, address, dead_letter_id
        )
        return dead_letter_id

    async def __aenter__(self) -> QueueClient[DescriptorT]:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()


async def _sleep(seconds: float) -> None:
    """Async sleep between polls (overridable for tests)."""
    await asyncio.sleep(seconds)
