# chanidx/core/subscription/dispatcher.py
"""
Message dispatcher for routing inbound messages to channel handlers.

The dispatcher resolves a message's channel against the index and
concurrently invokes every handler that matches.
"""
from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any

from chanidx.contracts.handler import MessageContext, MessageHandler
from chanidx.core.trie import ReverseTrie

logger = logging.getLogger(__name__)


class MessageDispatcher:
    """
    Dispatches messages to every handler matching their channel.

    Features:
    - Concurrent handler execution, bounded by a semaphore
    - Error isolation (one handler failure doesn't affect others)
    - Plain and coroutine handlers

    Example:
        dispatcher = MessageDispatcher(index=trie)

        # Called by the subscription service when a message arrives
        await dispatcher.dispatch(payload, context)
    """

    def __init__(
        self,
        index: ReverseTrie,
        max_concurrent: int = 100,
    ) -> None:
        """
        Initialize the dispatcher.

        Args:
            index: The channel index used for matching.
            max_concurrent: Maximum concurrent handler invocations.
        """
        self._index = index
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._dispatch_count = 0
        self._error_count = 0

    @property
    def index(self) -> ReverseTrie:
        return self._index

    @property
    def dispatch_count(self) -> int:
        """Total number of messages dispatched."""
        return self._dispatch_count

    @property
    def error_count(self) -> int:
        """Total number of handler errors."""
        return self._error_count

    async def dispatch(self, payload: Any, context: MessageContext) -> int:
        """
        Dispatch a message to all matching handlers.

        Args:
            payload: The decoded message payload.
            context: The message context (channel, session, etc.).

        Returns:
            Number of handlers invoked.
        """
        self._dispatch_count += 1

        handlers = self._index.match(context.channel)

        if not handlers:
            logger.debug("No handlers match channel '%s'", context.channel)
            return 0

        logger.debug(
            "Dispatching message to %d handler(s) for channel '%s'",
            len(handlers),
            context.channel,
        )

        await asyncio.gather(
            *(self._invoke_handler(h, payload, context) for h in handlers),
            return_exceptions=True,
        )

        return len(handlers)

    async def _invoke_handler(
        self,
        handler: MessageHandler,
        payload: Any,
        context: MessageContext,
    ) -> None:
        name = getattr(handler, "__qualname__", repr(handler))

        async with self._semaphore:
            try:
                result = handler(payload, context)
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                self._error_count += 1

                logger.error(
                    "Handler '%s' failed for message on '%s': %s",
                    name,
                    context.channel,
                    exc,
                    exc_info=True,
                )

    def reset_counters(self) -> None:
        """Reset dispatch and error counters."""
        self._dispatch_count = 0
        self._error_count = 0
