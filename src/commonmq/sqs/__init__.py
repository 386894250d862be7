"""AWS SQS backend."""

from __future__ import annotations

from .client import SQSClient
from .connection import SQSConnectionManager

__all__ = [
    "SQSClient",
    "SQSConnectionManager",
]
