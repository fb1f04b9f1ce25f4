# chanidx/core/subscription/service.py
"""
Subscription service tying the channel index to a broker session.

Subscribing registers the handler in the index and asks the broker to
deliver the channel; inbound messages are routed through the dispatcher.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from chanidx.contracts.broker import BrokerSession
from chanidx.contracts.handler import MessageContext, MessageHandler
from chanidx.core.subscription.dispatcher import MessageDispatcher
from chanidx.core.trie import ReverseTrie

logger = logging.getLogger(__name__)


# Handlers collected by @subscribe, registered when a service starts
_pending_handlers: list[tuple[str, MessageHandler]] = []


def subscribe(channel: str):
    """
    Decorator registering a handler for *channel* on the next service start.

    Example:
        @subscribe("sensors/+/temperature")
        async def on_temperature(payload, context):
            print(f"{context.channel}: {payload}")
    """

    def decorator(func: MessageHandler) -> MessageHandler:
        _pending_handlers.append((channel, func))
        return func

    return decorator


class SubscriptionService:
    """
    High-level service for channel subscriptions.

    Example:
        service = SubscriptionService(session=my_session)

        await service.subscribe("sensors/+/temperature", on_temperature)
        await service.start()

        # Called by the transport for each inbound message
        await service.on_message("sensors/kitchen/temperature", {"c": 21})

        await service.unsubscribe("sensors/+/temperature")
        await service.stop()
    """

    def __init__(
        self,
        session: BrokerSession | None = None,
        max_concurrent_handlers: int = 100,
    ) -> None:
        """
        Args:
            session: Broker session. If None, handlers are registered
                locally but nothing is requested from a broker.
            max_concurrent_handlers: Maximum concurrent handler invocations.
        """
        self._index = ReverseTrie()
        self._dispatcher = MessageDispatcher(
            index=self._index,
            max_concurrent=max_concurrent_handlers,
        )
        self._session = session
        self._running = False

    @property
    def index(self) -> ReverseTrie:
        return self._index

    @property
    def dispatcher(self) -> MessageDispatcher:
        return self._dispatcher

    @property
    def is_running(self) -> bool:
        return self._running

    async def subscribe(self, channel: str, handler: MessageHandler) -> None:
        """
        Register *handler* for *channel* and request delivery from the broker.

        Registering a channel again replaces its handler.

        Raises:
            TypeError: If *handler* is not callable.
        """
        if not callable(handler):
            raise TypeError("handler must be callable")

        self._index.register_handler(channel, handler)

        if self._running and self._session is not None:
            await self._session.subscribe(channel)

        logger.info("Subscribed to channel '%s'", channel)

    async def unsubscribe(self, channel: str) -> bool:
        """
        Remove the handler for *channel* and request the broker to stop
        delivering it.

        Returns:
            True if a handler was registered for *channel*.
        """
        removed = self._index.unregister_handler(channel)

        if self._running and self._session is not None:
            await self._session.unsubscribe(channel)

        if removed:
            logger.info("Unsubscribed from channel '%s'", channel)
        else:
            logger.warning("No handler registered for channel '%s'", channel)

        return removed

    def list_channels(self) -> list[str]:
        return sorted(self._index.channels())

    async def start(self) -> None:
        """
        Start the service.

        Registers decorator-collected handlers, then subscribes the broker
        session to every channel in the index.
        """
        if self._running:
            logger.warning("Subscription service already running")
            return

        self._register_pending_handlers()

        if self._session is not None:
            for channel in self.list_channels():
                await self._session.subscribe(channel)
        else:
            logger.warning(
                "No broker session provided, external messages won't be received"
            )

        self._running = True

        logger.info(
            "Subscription service started with %d channel(s)",
            len(self._index),
        )

    async def stop(self) -> None:
        if not self._running:
            return

        self._running = False
        logger.info("Subscription service stopped")

    def _register_pending_handlers(self) -> None:
        global _pending_handlers

        for channel, handler in _pending_handlers:
            self._index.register_handler(channel, handler)
            logger.debug("Registered decorator handler for '%s'", channel)

        _pending_handlers = []

    async def on_message(
        self,
        channel: str,
        payload: Any,
        raw_payload: bytes | None = None,
    ) -> int:
        """
        Route an inbound message to its handlers.

        Returns:
            Number of handlers invoked.
        """
        context = MessageContext(
            channel=channel,
            received_at=datetime.now(timezone.utc),
            session_name=self._session.name if self._session is not None else "local",
            raw_payload=raw_payload,
        )

        return await self._dispatcher.dispatch(payload, context)

    def get_stats(self) -> dict[str, Any]:
        return {
            "running": self._running,
            "channel_count": len(self._index),
            "node_count": self._index.node_count(),
            "dispatch_count": self._dispatcher.dispatch_count,
            "dispatch_errors": self._dispatcher.error_count,
        }


class NullSubscriptionService(SubscriptionService):
    """
    Subscription service without a broker session, for tests and local use.
    """

    def __init__(self) -> None:
        super().__init__(session=None)

    async def start(self) -> None:
        self._register_pending_handlers()
        self._running = True
        logger.debug("NullSubscriptionService started (no-op)")

    async def stop(self) -> None:
        self._running = False
        logger.debug("NullSubscriptionService stopped (no-op)")
