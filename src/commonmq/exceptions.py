"""Exception hierarchy for commonmq."""

from __future__ import annotations


class CommonMQError(Exception):
    """Root exception for the commonmq client facade."""


# ── Configuration errors (raised at construction time) ─────────────────


class ConfigurationError(CommonMQError):
    """Base class for invalid queue configuration or connection strings."""


class MalformedUrlError(ConfigurationError):
    """Raised when a connection string cannot be parsed."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"malformed queue url {url!r}: {reason}")


class MissingProtocolError(ConfigurationError):
    """Raised when the primary queue url has no ``scheme://`` prefix."""


class UnsupportedProtocolError(ConfigurationError):
    """Raised when no adapter is registered for a scheme."""

    def __init__(self, scheme: str) -> None:
        self.scheme = scheme
        super().__init__(f"queue protocol {scheme} is not supported")


class ProtocolMismatchError(ConfigurationError):
    """Raised when primary and bad message queues use different schemes."""


class IncompatibleDeadLetterQueueError(ConfigurationError):
    """Raised when the bad message queue lives on a different backend endpoint.

    Which fields have to match depends on the backend (host and port for
    RSMQ, region for SQS).
    """


# ── Runtime operation errors ───────────────────────────────────────────


class QueueOperationError(CommonMQError):
    """Base class for errors raised by queue client operations."""


class NotFoundError(QueueOperationError):
    """Raised when the backend no longer holds the targeted message."""

    def __init__(self, message_id: str, detail: str = "message not found") -> None:
        self.message_id = message_id
        super().__init__(f"{detail}: {message_id}")


class QueueNotFoundError(NotFoundError):
    """Raised when the addressed queue does not exist on the backend."""

    def __init__(self, queue_name: str) -> None:
        self.queue_name = queue_name
        super().__init__(queue_name, detail="queue not found")


class MissingReceiptError(QueueOperationError):
    """Raised when no receipt handle is cached for a message id."""

    def __init__(self, message_id: str) -> None:
        self.message_id = message_id
        super().__init__(f"no receipt handle for message available: {message_id}")


class MessageTooLargeError(QueueOperationError):
    """Raised when a message body exceeds the queue's configured maximum size."""

    def __init__(self, size: int, max_size: int) -> None:
        self.size = size
        self.max_size = max_size
        super().__init__(f"message of {size} bytes exceeds queue maxsize {max_size}")


class NoDeadLetterQueueError(QueueOperationError):
    """Raised when bad_message() is called without a bad message queue."""


class DeadLetterDeleteError(QueueOperationError):
    """Raised when a message reached the dead-letter queue but was not deleted.

    ``dead_letter_id`` is the id the dead-letter queue assigned; the original
    message is still on the primary queue. The delete failure is chained on
    ``__cause__``.
    """

    def __init__(self, message_id: str, dead_letter_id: str) -> None:
        self.message_id = message_id
        self.dead_letter_id = dead_letter_id
        super().__init__(
            f"message {message_id} was sent to the bad message queue as "
            f"{dead_letter_id} but could not be deleted from the primary queue"
        )


class BackendTransportError(QueueOperationError):
    """Raised when the underlying queue library reports a failure.

    The library's own exception is chained on ``__cause__``.
    """
