"""Connection string parsing into scheme-specific connection descriptors."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from .exceptions import (
    IncompatibleDeadLetterQueueError,
    MalformedUrlError,
    UnsupportedProtocolError,
)

SCHEME_SEPARATOR = "://"

RSMQ_DEFAULT_HOST = "localhost"
RSMQ_DEFAULT_PORT = 6379

SQS_QUEUE_URL_TEMPLATE = "https://sqs.{region}.amazonaws.com/{account_id}/{queue_name}"


def split_scheme(url: str) -> tuple[str, str]:
    """Split ``scheme://remainder`` into ``(scheme, remainder)``."""
    if SCHEME_SEPARATOR not in url:
        raise MalformedUrlError(url, "missing '://' separator")
    scheme, _, remainder = url.partition(SCHEME_SEPARATOR)
    return scheme, remainder


@dataclass(frozen=True)
class RSMQDescriptor:
    """Queue on a Redis server: ``rsmq://[host[:port]/]queueName``."""

    scheme: ClassVar[str] = "rsmq"

    host: str
    port: int
    queue_name: str

    @property
    def resolved_address(self) -> str:
        # the Redis connection already targets host:port
        return self.queue_name

    @classmethod
    def parse(cls, url: str) -> RSMQDescriptor:
        _, remainder = split_scheme(url)
        parts = remainder.split("/")
        host = RSMQ_DEFAULT_HOST
        port = RSMQ_DEFAULT_PORT

        if len(parts) == 2:
            host, sep, raw_port = parts[0].partition(":")
            if sep:
                if not raw_port.isdigit():
                    raise MalformedUrlError(url, f"invalid port {raw_port!r}")
                port = int(raw_port)
            if not host:
                raise MalformedUrlError(url, "empty host")
        elif len(parts) != 1:
            raise MalformedUrlError(
                url, "expected rsmq://[host[:port]/]queueName"
            )

        queue_name = parts[-1]
        if not queue_name:
            raise MalformedUrlError(url, "empty queue name")
        return cls(host=host, port=port, queue_name=queue_name)

    def check_dead_letter_compatible(self, other: RSMQDescriptor) -> None:
        """Both queues must live on the same Redis server."""
        if (self.host, self.port) != (other.host, other.port):
            raise IncompatibleDeadLetterQueueError(
                "primary and bad message queues must have matching hosts and ports"
            )


@dataclass(frozen=True)
class SQSDescriptor:
    """Hosted SQS queue: ``sqs://region/accountId/queueName``."""

    scheme: ClassVar[str] = "sqs"

    region: str
    account_id: str
    queue_name: str

    @property
    def resolved_address(self) -> str:
        return SQS_QUEUE_URL_TEMPLATE.format(
            region=self.region,
            account_id=self.account_id,
            queue_name=self.queue_name,
        )

    @classmethod
    def parse(cls, url: str) -> SQSDescriptor:
        _, remainder = split_scheme(url)
        parts = remainder.split("/")
        if len(parts) != 3 or not all(parts):
            raise MalformedUrlError(url, "expected sqs://region/accountId/queueName")
        region, account_id, queue_name = parts
        return cls(region=region, account_id=account_id, queue_name=queue_name)

    def check_dead_letter_compatible(self, other: SQSDescriptor) -> None:
        """Both queues must be in the same region."""
        if self.region != other.region:
            raise IncompatibleDeadLetterQueueError(
                "primary and bad message queues must have matching regions"
            )


ConnectionDescriptor = RSMQDescriptor | SQSDescriptor

_DESCRIPTORS: dict[str, type[RSMQDescriptor] | type[SQSDescriptor]] = {
    RSMQDescriptor.scheme: RSMQDescriptor,
    SQSDescriptor.scheme: SQSDescriptor,
}


def parse_url(url: str) -> ConnectionDescriptor:
    """Parse a connection string into the descriptor for its scheme."""
    scheme, _ = split_scheme(url)
    descriptor_cls = _DESCRIPTORS.get(scheme)
    if descriptor_cls is None:
        raise UnsupportedProtocolError(scheme)
    return descriptor_cls.parse(url)
