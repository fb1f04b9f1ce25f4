# chanidx/contracts/handler.py
"""
Handler contracts for channel message delivery.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, Union


@dataclass(frozen=True)
class MessageContext:
    """
    Context provided to handlers along with the message payload.

    Attributes:
        channel: The channel the message arrived on (never a pattern).
        received_at: Timestamp when the message was received.
        session_name: Name of the broker session that delivered it.
        raw_payload: Original message bytes, when available.
    """

    channel: str
    received_at: datetime
    session_name: str = "local"
    raw_payload: bytes | None = None


# Handlers receive the decoded payload and its context. Both plain and
# coroutine functions are accepted.
MessageHandler = Callable[[Any, MessageContext], Union[Awaitable[None], None]]
