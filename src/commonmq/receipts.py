"""ReceiptStore: message id to receipt handle mapping."""

from __future__ import annotations

import asyncio

from .exceptions import MissingReceiptError


class ReceiptStore:
    """Caches receipt handles between receive() and a later acknowledgment.

    All access goes through an ``asyncio.Lock`` so concurrent operations on
    one client see a consistent mapping. Entries are only removed explicitly;
    there is no expiry.
    """

    def __init__(self) -> None:
        self._handles: dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def put(self, message_id: str, receipt_handle: str) -> None:
        """Store the handle for a delivery, replacing any older one."""
        async with self._lock:
            self._handles[message_id] = receipt_handle

    async def get(self, message_id: str) -> str:
        """Return the handle for *message_id* or raise MissingReceiptError."""
        async with self._lock:
            handle = self._handles.get(message_id)
        if handle is None:
            raise MissingReceiptError(message_id)
        return handle

    async def discard(self, message_id: str, receipt_handle: str | None = None) -> None:
        """Remove the entry for *message_id*.

        When *receipt_handle* is given the entry is only removed if it still
        holds that handle, so a newer delivery's receipt is kept.
        """
        async with self._lock:
            current = self._handles.get(message_id)
            if current is None:
                return
            if receipt_handle is None or current == receipt_handle:
                del self._handles[message_id]

    async def clear(self) -> None:
        async with self._lock:
            self._handles.clear()

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._handles
