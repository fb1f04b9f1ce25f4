# tests/conftest.py
from __future__ import annotations

import pytest


class FakeBrokerSession:
    """Records subscribe/unsubscribe requests instead of sending frames."""

    name = "fake"

    def __init__(self) -> None:
        self.subscribed: list[str] = []
        self.unsubscribed: list[str] = []

    async def subscribe(self, channel: str) -> None:
        self.subscribed.append(channel)

    async def unsubscribe(self, channel: str) -> None:
        self.unsubscribed.append(channel)


@pytest.fixture
def session() -> FakeBrokerSession:
    return FakeBrokerSession()


@pytest.fixture(autouse=True)
def _clear_pending_handlers(monkeypatch):
    from chanidx.core.subscription import service

    monkeypatch.setattr(service, "_pending_handlers", [])
