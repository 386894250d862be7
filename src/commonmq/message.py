"""InboundMessage: normalized message handed to callers by receive()."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class InboundMessage(BaseModel):
    """Immutable view of one delivery.

    ``ack_token`` is only set by backends that acknowledge with a receipt
    distinct from the message id; the client keeps its own copy, so callers
    always acknowledge by ``id``.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    body: str
    ack_token: str | None = None
    receive_count: int | None = Field(default=None, ge=1)
