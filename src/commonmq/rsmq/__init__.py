"""RSMQ (Redis Simple Message Queue) backend."""

from __future__ import annotations

from .client import RSMQClient
from .connection import RSMQConnection, RSMQMessage

__all__ = [
    "RSMQClient",
    "RSMQConnection",
    "RSMQMessage",
]
