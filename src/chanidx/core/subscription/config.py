# chanidx/core/subscription/config.py
"""
Configuration loading for subscriptions.

Loads channel/handler pairs from YAML and registers them with the
subscription service.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from chanidx.core.loader import import_attr, load_yaml_files, substitute_env_vars
from chanidx.core.subscription.service import SubscriptionService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubscriptionSpec:
    """
    A subscription read from configuration.

    Attributes:
        channel: Channel pattern to subscribe to.
        handler: Import path to the handler (module:function).
        enabled: Whether the subscription should be registered.
    """

    channel: str
    handler: str
    enabled: bool = True


@dataclass(frozen=True)
class SubscriptionsConfig:
    subscriptions: list[SubscriptionSpec] = field(default_factory=list)


def load_subscriptions_config(patterns: Iterable[str]) -> SubscriptionsConfig:
    """
    Load subscriptions configuration from YAML files.

    Expected YAML structure:
    ```yaml
    subscriptions:
      - channel: "sensors/+/temperature"
        handler: "myapp.handlers:on_temperature"
        enabled: true
      - channel: "${SITE:-lab}/alerts"
        handler: "myapp.handlers:on_alert"
    ```

    Raises:
        ValueError: If an entry lacks ``channel`` or ``handler``.
    """
    specs: list[SubscriptionSpec] = []

    for data in load_yaml_files(patterns):
        for raw in data.get("subscriptions") or []:
            if "channel" not in raw:
                raise ValueError("Subscription missing required 'channel' field")

            if "handler" not in raw:
                raise ValueError(
                    f"Subscription '{raw['channel']}' missing required 'handler' field"
                )

            specs.append(
                SubscriptionSpec(
                    channel=substitute_env_vars(str(raw["channel"])),
                    handler=raw["handler"],
                    enabled=bool(raw.get("enabled", True)),
                )
            )

    logger.info(
        "Loaded %d subscription spec(s): %s",
        len(specs),
        [s.channel for s in specs],
    )

    return SubscriptionsConfig(subscriptions=specs)


async def register_subscriptions_from_config(
    service: SubscriptionService,
    config: SubscriptionsConfig,
) -> list[str]:
    """
    Import each configured handler and subscribe it on *service*.

    Returns:
        Channels that were subscribed, in configuration order.

    Raises:
        ImportError: If a handler module cannot be imported.
        AttributeError: If a handler attribute does not exist.
        ValueError: If a handler is not callable.
    """
    registered: list[str] = []

    for spec in config.subscriptions:
        if not spec.enabled:
            logger.info("Skipping disabled subscription: %s", spec.channel)
            continue

        try:
            handler = import_attr(spec.handler)
        except (ImportError, AttributeError) as exc:
            logger.error(
                "Failed to import handler '%s' for channel '%s': %s",
                spec.handler,
                spec.channel,
                exc,
            )
            raise

        if not callable(handler):
            raise ValueError(
                f"Handler '{spec.handler}' for channel '{spec.channel}' "
                f"is not callable"
            )

        await service.subscribe(spec.channel, handler)
        registered.append(spec.channel)

        logger.info("Registered subscription '%s' -> %s", spec.channel, spec.handler)

    return registered
