"""RSMQ queue primitives on top of redis.asyncio."""

from __future__ import annotations

import contextlib
import logging
import secrets
import string
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from redis.asyncio import Redis
from redis.exceptions import RedisError

from ..exceptions import (
    BackendTransportError,
    MessageTooLargeError,
    QueueNotFoundError,
)
from ..url import RSMQ_DEFAULT_HOST, RSMQ_DEFAULT_PORT

logger = logging.getLogger("commonmq.rsmq.connection")

DEFAULT_NAMESPACE = "rsmq"

_ID_ALPHABET = string.ascii_letters + string.digits
_BASE36 = string.digits + string.ascii_lowercase

# KEYS: [queue_key]  ARGV: [now_ms, invisible_until_ms]
RECEIVE_MESSAGE_SCRIPT = """
local msg = redis.call("ZRANGEBYSCORE", KEYS[1], "-inf", ARGV[1], "LIMIT", "0", "1")
if #msg == 0 then
    return {}
end
local attrs = KEYS[1] .. ":Q"
redis.call("ZADD", KEYS[1], ARGV[2], msg[1])
redis.call("HINCRBY", attrs, "totalrecv", 1)
local body = redis.call("HGET", attrs, msg[1]) or ""
local rc = redis.call("HINCRBY", attrs, msg[1] .. ":rc", 1)
local fr = ARGV[1]
if rc == 1 then
    redis.call("HSET", attrs, msg[1] .. ":fr", ARGV[1])
else
    fr = redis.call("HGET", attrs, msg[1] .. ":fr") or ARGV[1]
end
return {msg[1], body, rc, fr}
"""

# KEYS: [queue_key]  ARGV: [message_id, invisible_until_ms]
CHANGE_VISIBILITY_SCRIPT = """
local found = redis.call("ZSCORE", KEYS[1], ARGV[1])
if not found then
    return 0
end
redis.call("ZADD", KEYS[1], ARGV[2], ARGV[1])
return 1
"""


@dataclass(frozen=True)
class QueueAttributes:
    """Queue settings read together with the server clock."""

    vt: int
    delay: int
    maxsize: int
    now_ms: int
    now_us: int


@dataclass(frozen=True)
class RSMQMessage:
    """Raw message as returned by the receive script."""

    id: str
    message: str
    rc: int
    fr: int


@contextlib.contextmanager
def _transport_errors() -> Iterator[None]:
    try:
        yield
    except RedisError as e:
        raise BackendTransportError(str(e)) from e


def _base36(value: int) -> str:
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits)) or "0"


def make_message_id(now_us: int) -> str:
    """Build an RSMQ id: base-36 microsecond timestamp plus 22 random chars."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(22))
    return _base36(now_us) + suffix


class RSMQConnection:
    """Owns a redis.asyncio client and implements the four queue primitives
    over the RSMQ key layout.

    Keys per queue (``ns`` defaults to ``rsmq``):
        - ``{ns}:{qname}``: sorted set of ids scored by visible-at time (ms)
        - ``{ns}:{qname}:Q``: hash with queue attributes (``vt``, ``delay``,
          ``maxsize``, ``totalsent``, ``totalrecv``) and message fields
          ``{id}``, ``{id}:rc``, ``{id}:fr``

    Queues are expected to exist already. The Redis client connects lazily on
    the first command.
    """

    def __init__(
        self,
        host: str = RSMQ_DEFAULT_HOST,
        port: int = RSMQ_DEFAULT_PORT,
        *,
        namespace: str = DEFAULT_NAMESPACE,
        redis: Redis | None = None,  # type: ignore[type-arg]
        **client_kwargs: Any,
    ) -> None:
        """
        Configure the Redis endpoint.

        Args:
            host: Redis host.
            port: Redis port.
            namespace: Key prefix shared with other RSMQ clients.
            redis: Pre-built client; *host*, *port* and *client_kwargs* are
                ignored when given.
            **client_kwargs: Extra keyword arguments for ``Redis``.
        """
        self._namespace = namespace
        if redis is None:
            redis = Redis(
                host=host,
                port=port,
                decode_responses=True,
                **client_kwargs,
            )
        self._redis = redis
        self._closed = False

    @property
    def redis(self) -> Redis:  # type: ignore[type-arg]
        return self._redis

    def _key(self, qname: str) -> str:
        return f"{self._namespace}:{qname}"

    async def get_queue_attributes(self, qname: str) -> QueueAttributes:
        """Read ``vt``/``delay``/``maxsize`` and the Redis server time."""
        with _transport_errors():
            vt, delay, maxsize = await self._redis.hmget(
                f"{self._key(qname)}:Q", ["vt", "delay", "maxsize"]
            )
            seconds, micros = await self._redis.time()
        if vt is None or delay is None or maxsize is None:
            raise QueueNotFoundError(qname)
        now_us = int(seconds) * 1_000_000 + int(micros)
        return QueueAttributes(
            vt=int(vt),
            delay=int(delay),
            maxsize=int(maxsize),
            now_ms=now_us // 1000,
            now_us=now_us,
        )

    async def send_message(self, qname: str, message: str) -> str:
        """Store *message* and return its new id."""
        queue = await self.get_queue_attributes(qname)
        size = len(message.encode("utf-8"))
        if queue.maxsize != -1 and size > queue.maxsize:
            raise MessageTooLargeError(size, queue.maxsize)

        message_id = make_message_id(queue.now_us)
        key = self._key(qname)
        with _transport_errors():
            async with self._redis.pipeline(transaction=True) as pipe:
                pipe.zadd(key, {message_id: queue.now_ms + queue.delay * 1000})
                pipe.hset(f"{key}:Q", message_id, message)
                pipe.hincrby(f"{key}:Q", "totalsent", 1)
                await pipe.execute()
        return message_id

    async def receive_message(self, qname: str) -> RSMQMessage | None:
        """Claim the first visible message for the queue's ``vt`` seconds."""
        queue = await self.get_queue_attributes(qname)
        with _transport_errors():
            result = await self._redis.eval(
                RECEIVE_MESSAGE_SCRIPT,
                1,
                self._key(qname),
                str(queue.now_ms),
                str(queue.now_ms + queue.vt * 1000),
            )
        if not result:
            return None
        message_id, body, rc, fr = result
        return RSMQMessage(
            id=str(message_id), message=body or "", rc=int(rc), fr=int(fr)
        )

    async def change_message_visibility(
        self, qname: str, message_id: str, vt: int
    ) -> int:
        """Make *message_id* invisible for *vt* seconds from now.

        Returns the number of messages affected (0 or 1).
        """
        if vt < 0:
            raise ValueError("vt must be >= 0")
        queue = await self.get_queue_attributes(qname)
        with _transport_errors():
            result = await self._redis.eval(
                CHANGE_VISIBILITY_SCRIPT,
                1,
                self._key(qname),
                message_id,
                str(queue.now_ms + vt * 1000),
            )
        return int(result)

    async def delete_message(self, qname: str, message_id: str) -> int:
        """Remove *message_id*; returns the number of messages affected."""
        key = self._key(qname)
        with _transport_errors():
            async with self._redis.pipeline(transaction=True) as pipe:
                pipe.zrem(key, message_id)
                pipe.hdel(
                    f"{key}:Q", message_id, f"{message_id}:rc", f"{message_id}:fr"
                )
                removed, _ = await pipe.execute()
        return int(removed)

    async def close(self) -> None:
        """Close the Redis connection pool. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        await self._redis.aclose()

    async def health_check(self) -> bool:
        """Return True if Redis answers PING."""
        try:
            return bool(await self._redis.ping())
        except Exception:  # noqa: BLE001
            logger.debug("Redis health check failed", exc_info=True)
            return False
