"""One queue client API over RSMQ and AWS SQS, selected by connection string."""

from __future__ import annotations

from .base import QueueClient
from .config import QueueConfig
from .exceptions import (
    BackendTransportError,
    CommonMQError,
    ConfigurationError,
    DeadLetterDeleteError,
    IncompatibleDeadLetterQueueError,
    MalformedUrlError,
    MessageTooLargeError,
    MissingProtocolError,
    MissingReceiptError,
    NoDeadLetterQueueError,
    NotFoundError,
    ProtocolMismatchError,
    QueueNotFoundError,
    QueueOperationError,
    UnsupportedProtocolError,
)
from .factory import create_client, supported_schemes
from .message import InboundMessage
from .ports import IQueueClient
from .rsmq import RSMQClient
from .sqs import SQSClient
from .url import ConnectionDescriptor, RSMQDescriptor, SQSDescriptor, parse_url

__all__ = [
    "BackendTransportError",
    "CommonMQError",
    "ConfigurationError",
    "ConnectionDescriptor",
    "DeadLetterDeleteError",
    "IQueueClient",
    "InboundMessage",
    "IncompatibleDeadLetterQueueError",
    "MalformedUrlError",
    "MessageTooLargeError",
    "MissingProtocolError",
    "MissingReceiptError",
    "NoDeadLetterQueueError",
    "NotFoundError",
    "ProtocolMismatchError",
    "QueueClient",
    "QueueConfig",
    "QueueNotFoundError",
    "QueueOperationError",
    "RSMQClient",
    "RSMQDescriptor",
    "SQSClient",
    "SQSDescriptor",
    "UnsupportedProtocolError",
    "create_client",
    "parse_url",
    "supported_schemes",
]
