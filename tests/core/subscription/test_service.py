# tests/core/subscription/test_service.py
from __future__ import annotations

import pytest

from chanidx.contracts.broker import BrokerSession
from chanidx.core.subscription.service import (
    NullSubscriptionService,
    SubscriptionService,
    subscribe,
)


class TestSubscribe:
    @pytest.mark.asyncio
    async def test_subscribe_before_start_defers_broker_request(self, session):
        service = SubscriptionService(session=session)

        await service.subscribe("a/b", lambda p, c: None)

        assert session.subscribed == []
        assert service.list_channels() == ["a/b"]

    @pytest.mark.asyncio
    async def test_start_subscribes_every_channel(self, session):
        service = SubscriptionService(session=session)
        await service.subscribe("a/b", lambda p, c: None)
        await service.subscribe("a/+/c", lambda p, c: None)

        await service.start()

        assert service.is_running
        assert sorted(session.subscribed) == ["a/+/c", "a/b"]

    @pytest.mark.asyncio
    async def test_subscribe_while_running(self, session):
        service = SubscriptionService(session=session)
        await service.start()

        await service.subscribe("x/y", lambda p, c: None)

        assert session.subscribed == ["x/y"]

    @pytest.mark.asyncio
    async def test_subscribe_rejects_non_callable(self, session):
        service = SubscriptionService(session=session)

        with pytest.raises(TypeError):
            await service.subscribe("a", "not-a-handler")

    @pytest.mark.asyncio
    async def test_resubscribe_replaces_handler(self, session):
        service = SubscriptionService(session=session)
        seen: list[str] = []
        await service.subscribe("a", lambda p, c: seen.append("first"))
        await service.subscribe("a", lambda p, c: seen.append("second"))

        assert await service.on_message("a", None) == 1
        assert seen == ["second"]


class TestUnsubscribe:
    @pytest.mark.asyncio
    async def test_unsubscribe_removes_channel_handler(self, session):
        service = SubscriptionService(session=session)
        await service.subscribe("a/b", lambda p, c: None)
        await service.start()

        assert await service.unsubscribe("a/b") is True

        assert session.unsubscribed == ["a/b"]
        assert service.list_channels() == []
        assert await service.on_message("a/b", None) == 0

    @pytest.mark.asyncio
    async def test_unsubscribe_unknown_channel(self, session):
        service = SubscriptionService(session=session)

        assert await service.unsubscribe("missing") is False
        assert session.unsubscribed == []


class TestOnMessage:
    @pytest.mark.asyncio
    async def test_context_carries_channel_and_session(self, session):
        service = SubscriptionService(session=session)
        contexts = []

        async def handler(payload, context):
            contexts.append(context)

        await service.subscribe("sensors/+/temp", handler)

        count = await service.on_message("sensors/k/temp", {"v": 1}, raw_payload=b'{"v": 1}')

        assert count == 1
        assert contexts[0].channel == "sensors/k/temp"
        assert contexts[0].session_name == "fake"
        assert contexts[0].raw_payload == b'{"v": 1}'

    @pytest.mark.asyncio
    async def test_prefix_handler_receives_deeper_channel(self, session):
        service = SubscriptionService(session=session)
        seen: list[str] = []
        await service.subscribe("sensors", lambda p, c: seen.append(c.channel))

        await service.on_message("sensors/k/temp", None)

        assert seen == ["sensors/k/temp"]


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_decorator_handlers_registered_on_start(self, session):
        @subscribe("alerts/+")
        async def on_alert(payload, context):
            pass

        service = SubscriptionService(session=session)
        await service.start()

        assert service.list_channels() == ["alerts/+"]
        assert session.subscribed == ["alerts/+"]
        assert service.index.match("alerts/fire") == [on_alert]

    @pytest.mark.asyncio
    async def test_start_twice_is_noop(self, session):
        service = SubscriptionService(session=session)
        await service.subscribe("a", lambda p, c: None)
        await service.start()
        await service.start()

        assert session.subscribed == ["a"]

    @pytest.mark.asyncio
    async def test_stop(self, session):
        service = SubscriptionService(session=session)
        await service.start()
        await service.stop()

        assert not service.is_running
        await service.subscribe("late", lambda p, c: None)
        assert session.subscribed == []

    @pytest.mark.asyncio
    async def test_stats(self, session):
        service = SubscriptionService(session=session)
        await service.subscribe("a/b", lambda p, c: None)
        await service.subscribe("a/c", lambda p, c: None)
        await service.unsubscribe("a/c")
        await service.on_message("a/b", None)

        stats = service.get_stats()

        assert stats == {
            "running": False,
            "channel_count": 1,
            "node_count": 4,
            "dispatch_count": 1,
            "dispatch_errors": 0,
        }

    def test_fake_session_satisfies_protocol(self, session):
        assert isinstance(session, BrokerSession)


class TestNullSubscriptionService:
    @pytest.mark.asyncio
    async def test_local_delivery(self):
        service = NullSubscriptionService()
        seen: list[object] = []
        await service.subscribe("a/+", lambda p, c: seen.append((p, c.session_name)))
        await service.start()

        assert service.is_running
        assert await service.on_message("a/b", 1) == 1
        assert seen == [(1, "local")]

        await service.stop()
        assert not service.is_running
