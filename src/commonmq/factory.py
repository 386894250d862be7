"""create_client: pick and build the queue client for a connection string."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from .base import QueueClient
from .config import DEFAULT_QUEUE, QueueConfig
from .exceptions import (
    ConfigurationError,
    MissingProtocolError,
    ProtocolMismatchError,
    UnsupportedProtocolError,
)
from .rsmq import RSMQClient
from .sqs import SQSClient
from .url import SCHEME_SEPARATOR

logger = logging.getLogger("commonmq.factory")

# Adding a backend means adding its client class here.
CLIENT_TYPES: tuple[type[QueueClient[Any]], ...] = (RSMQClient, SQSClient)

_CLIENTS_BY_SCHEME: dict[str, type[QueueClient[Any]]] = {
    client_type.scheme: client_type for client_type in CLIENT_TYPES
}


def supported_schemes() -> list[str]:
    """Return the registered url schemes."""
    return sorted(_CLIENTS_BY_SCHEME)


def _raw_option(
    name: str,
    config: QueueConfig | Mapping[str, Any] | None,
    overrides: Mapping[str, Any],
    default: Any,
) -> Any:
    """Look up field *name* before validation; overrides win over *config*."""
    normalized = QueueConfig.by_field_name(overrides)
    if name in normalized:
        return normalized[name]
    if isinstance(config, QueueConfig):
        return getattr(config, name)
    if config is not None:
        normalized = QueueConfig.by_field_name(config)
        if name in normalized:
            return normalized[name]
    return default


def create_client(
    config: QueueConfig | Mapping[str, Any] | None = None,
    **overrides: Any,
) -> QueueClient[Any]:
    """Build the queue client for ``config.queue``.

    Usage::

        client = create_client(
            queue="sqs://eu-west-1/123456789012/orders",
            bad_message_queue="sqs://eu-west-1/123456789012/orders-dlq",
        )
        message = await client.receive()

    All configuration errors are raised here, before any backend handle is
    created. The protocol checks run on the raw options, so a queue without
    ``scheme://`` fails with MissingProtocolError whatever the other fields
    hold. Remaining validation failures surface as ConfigurationError.
    """
    queue = _raw_option("queue", config, overrides, DEFAULT_QUEUE)
    if not isinstance(queue, str) or SCHEME_SEPARATOR not in queue:
        raise MissingProtocolError("options.queue does not contain a protocol.")
    scheme = queue.split(SCHEME_SEPARATOR, 1)[0]
    client_type = _CLIENTS_BY_SCHEME.get(scheme)
    if client_type is None:
        raise UnsupportedProtocolError(scheme)

    bad_message_queue = _raw_option("bad_message_queue", config, overrides, None)
    if isinstance(bad_message_queue, str) and bad_message_queue:
        dead_letter_scheme = bad_message_queue.split(SCHEME_SEPARATOR, 1)[0]
        if dead_letter_scheme != scheme:
            raise ProtocolMismatchError(
                "bad message queue and primary queue must have same protocol"
            )

    try:
        cfg = QueueConfig.from_options(config, **overrides)
    except ValidationError as e:
        raise ConfigurationError(f"invalid queue configuration: {e}") from e

    client = client_type(cfg)
    logger.debug("Created %s for %s", client_type.__name__, cfg.queue)
    return client
