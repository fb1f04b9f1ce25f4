# chanidx/contracts/broker.py
"""
Broker session protocol.

The subscription service only needs to ask the transport to start or stop
delivering a channel. Connection setup and frame formatting live behind
this protocol.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class BrokerSession(Protocol):
    """Transport-agnostic subscribe/unsubscribe surface."""

    name: str

    async def subscribe(self, channel: str) -> None: ...
    async def unsubscribe(self, channel: str) -> None: ...
