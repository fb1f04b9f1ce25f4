# chanidx/main.py
"""
Subscription service factory.

Builds a ``SubscriptionService`` from ``Settings``: configures logging,
sizes the dispatcher and registers the handlers listed in the
subscriptions YAML files.
"""
from __future__ import annotations

import logging

from chanidx.contracts.broker import BrokerSession
from chanidx.core.config import Settings, settings as default_settings
from chanidx.core.logging import configure_logging
from chanidx.core.subscription.config import (
    load_subscriptions_config,
    register_subscriptions_from_config,
)
from chanidx.core.subscription.service import SubscriptionService

logger = logging.getLogger(__name__)


async def create_service(
    session: BrokerSession | None = None,
    cfg: Settings | None = None,
) -> SubscriptionService:
    """
    Create a subscription service with configured subscriptions registered.

    The service is returned stopped; call ``start()`` once the broker
    session is connected.
    """
    cfg = cfg or default_settings

    configure_logging(cfg.log_level, json=cfg.log_json)

    service = SubscriptionService(
        session=session,
        max_concurrent_handlers=cfg.dispatch_max_concurrent,
    )

    subscriptions = load_subscriptions_config(cfg.subscriptions_config_paths)
    registered = await register_subscriptions_from_config(service, subscriptions)

    logger.info(
        "Created subscription service (env=%s) with %d configured channel(s)",
        cfg.app_env,
        len(registered),
    )

    return service
