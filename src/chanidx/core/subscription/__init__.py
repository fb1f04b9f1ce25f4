# chanidx/core/subscription/__init__.py
"""
Subscription layer on top of the channel index.

This module provides:
- SubscriptionService for subscribing handlers to channels
- MessageDispatcher for routing inbound messages to matching handlers
- Configuration loading from YAML

Example usage:

    from chanidx.core.subscription import SubscriptionService, subscribe

    @subscribe("sensors/+/temperature")
    async def on_temperature(payload, context):
        print(f"{context.channel}: {payload}")

    service = SubscriptionService(session=my_session)
    await service.start()
"""

from chanidx.core.subscription.dispatcher import MessageDispatcher
from chanidx.core.subscription.service import (
    SubscriptionService,
    NullSubscriptionService,
    subscribe,
)
from chanidx.core.subscription.config import (
    load_subscriptions_config,
    register_subscriptions_from_config,
    SubscriptionSpec,
    SubscriptionsConfig,
)

__all__ = [
    # Dispatcher
    "MessageDispatcher",
    # Service
    "SubscriptionService",
    "NullSubscriptionService",
    "subscribe",
    # Config
    "load_subscriptions_config",
    "register_subscriptions_from_config",
    "SubscriptionSpec",
    "SubscriptionsConfig",
]
