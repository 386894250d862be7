from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .message import InboundMessage


@runtime_checkable
class IQueueClient(Protocol):
    """
    Port for the uniform message lifecycle of one queue (plus its bad message
    queue).

    Backend packages provide concrete adapters; application code depends on
    this protocol only.
    """

    async def send(self, body: str) -> str:
        """
        Send *body* to the primary queue.

        Returns:
            The backend-assigned message id.
        """
        ...

    async def receive(self) -> InboundMessage:
        """
        Wait for the next message on the primary queue.

        Does not return until a message is available or the backend fails.
        """
        ...

    async def extend_visibility_timeout(self, message_id: str, seconds: int) -> None:
        """Hide a received message from other receivers for *seconds* more."""
        ...

    async def delete(self, message_id: str) -> None:
        """Acknowledge a received message by removing it from the queue."""
        ...

    async def bad_message(self, message_id: str, body: str) -> str:
        """
        Move a received message to the bad message queue.

        Returns:
            The id assigned by the bad message queue.
        """
        ...

    async def close(self) -> None:
        """Release the backend connection."""
        ...

    async def health_check(self) -> bool:
        """Return True if the backend is reachable."""
        ...
