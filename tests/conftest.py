"""Pytest fixtures for commonmq tests."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest


@pytest.fixture
def no_sleep(monkeypatch: pytest.MonkeyPatch) -> AsyncMock:
    """Replace the poll wait so receive() loops run instantly."""
    sleep = AsyncMock()
    monkeypatch.setattr("commonmq.base._sleep", sleep)
    return sleep


@pytest.fixture
def rsmq_connection() -> MagicMock:
    conn = MagicMock()
    conn.send_message = AsyncMock(return_value="abcdef-01234-56789-0")
    conn.receive_message = AsyncMock(return_value=None)
    conn.change_message_visibility = AsyncMock(return_value=1)
    conn.delete_message = AsyncMock(return_value=1)
    conn.close = AsyncMock()
    conn.health_check = AsyncMock(return_value=True)
    return conn


@pytest.fixture
def sqs_connection() -> MagicMock:
    conn = MagicMock()
    conn.send_message = AsyncMock(return_value="sqs-msg-1")
    conn.receive_message = AsyncMock(return_value=None)
    conn.change_message_visibility = AsyncMock(return_value=1)
    conn.delete_message = AsyncMock(return_value=1)
    conn.close = AsyncMock()
    conn.health_check = AsyncMock(return_value=True)
    return conn


@pytest.fixture
def mock_redis() -> MagicMock:
    """redis.asyncio.Redis stand-in with an RSMQ queue of vt=30, no delay."""
    redis = MagicMock()
    redis.hmget = AsyncMock(return_value=["30", "0", "65536"])
    redis.time = AsyncMock(return_value=(1700000000, 123456))
    redis.eval = AsyncMock(return_value=[])
    redis.ping = AsyncMock(return_value=True)
    redis.aclose = AsyncMock()

    pipe = MagicMock()
    pipe.execute = AsyncMock(return_value=[1, 3])
    pipe_cm = MagicMock()
    pipe_cm.__aenter__ = AsyncMock(return_value=pipe)
    pipe_cm.__aexit__ = AsyncMock(return_value=None)
    redis.pipeline = MagicMock(return_value=pipe_cm)
    redis.pipe = pipe
    return redis
