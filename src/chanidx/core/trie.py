# chanidx/core/trie.py
"""
Reverse trie mapping slash-delimited channels to message handlers.

Handlers are registered against channel patterns, where a ``+`` segment
matches any single segment in that position. An incoming channel is
resolved to every handler whose pattern matches it, including handlers
registered on a shorter prefix of the channel.

The trie is safe to share between threads:

- each node guards its handler slot with its own lock
- child nodes are created with an atomic get-or-insert
- ``match`` reads without locking
"""
from __future__ import annotations

import logging
import threading
from typing import Iterator

from chanidx.contracts.handler import MessageHandler

logger = logging.getLogger(__name__)

DELIMITER = "/"
WILDCARD = "+"


def create_key(channel: str) -> list[str]:
    """
    Split a channel into its segments.

    Splitting is literal: empty segments are kept, so ``"a/"`` yields
    ``["a", ""]`` and ``""`` yields ``[""]``.
    """
    return channel.split(DELIMITER)


class TrieNode:
    """A single segment position in the trie."""

    __slots__ = ("children", "depth", "handler", "_lock")

    def __init__(self, depth: int) -> None:
        self.depth = depth
        self.children: dict[str, TrieNode] = {}
        self.handler: MessageHandler | None = None
        self._lock = threading.Lock()

    def get_or_add_child(self, segment: str) -> TrieNode:
        child = self.children.get(segment)
        if child is not None:
            return child
        # setdefault is a single dict operation, so two racing callers
        # always end up sharing whichever node was inserted first.
        return self.children.setdefault(segment, TrieNode(self.depth + 1))

    def add_or_update(self, handler: MessageHandler) -> bool:
        """Store *handler*; returns True if a previous handler was replaced."""
        with self._lock:
            replaced = self.handler is not None
            self.handler = handler
            return replaced

    def try_remove(self) -> MessageHandler | None:
        with self._lock:
            removed = self.handler
            self.handler = None
            return removed


class ReverseTrie:
    """
    Concurrent channel index with single-level wildcard matching.

    Nodes are created lazily on registration and are never pruned; a node
    whose handler was removed stays in the tree.

    Example:
        trie = ReverseTrie()

        trie.register_handler("sensors/+/temperature", on_temperature)
        trie.register_handler("sensors", on_any_sensor)

        trie.match("sensors/kitchen/temperature")
        # -> [on_any_sensor, on_temperature] (order not significant)
    """

    def __init__(self) -> None:
        self._root = TrieNode(0)

    def register_handler(self, channel: str, handler: MessageHandler) -> None:
        """
        Register *handler* for *channel*, replacing any existing handler.

        Args:
            channel: Channel pattern, ``+`` segments act as wildcards.
            handler: Callable invoked for matching messages.
        """
        node = self._root
        for segment in create_key(channel):
            node = node.get_or_add_child(segment)

        if node.add_or_update(handler):
            logger.debug("Replaced handler for channel '%s'", channel)
        else:
            logger.debug("Added handler for channel '%s'", channel)

    def unregister_handler(self, channel: str) -> bool:
        """
        Remove the handler registered for exactly *channel*.

        Wildcards are not expanded: ``+`` is matched as literal text.

        Returns:
            True if a handler was removed, False if there was none.
        """
        node = self._find(channel)
        if node is None or node.try_remove() is None:
            logger.debug("No handler to remove for channel '%s'", channel)
            return False

        logger.debug("Removed handler for channel '%s'", channel)
        return True

    def match(self, channel: str) -> list[MessageHandler]:
        """
        Find every handler whose registered pattern matches *channel*.

        Handlers registered on a prefix of *channel* are included. An
        empty list is returned when nothing matches.
        """
        query = create_key(channel)
        result: list[MessageHandler] = []

        stack = [self._root]
        while stack:
            current = stack.pop()

            handler = current.handler
            if handler is not None:
                result.append(handler)

            # Query exhausted at this depth, nothing further to descend into.
            if current.depth >= len(query):
                continue

            child = current.children.get(WILDCARD)
            if child is not None:
                stack.append(child)

            child = current.children.get(query[current.depth])
            if child is not None:
                stack.append(child)

        return result

    def channels(self) -> list[str]:
        """List every channel that currently holds a handler."""
        return [DELIMITER.join(key) for key, _node in self._walk()]

    def node_count(self) -> int:
        """Number of nodes in the trie, root and handler-less nodes included."""
        count = 0
        stack = [self._root]
        while stack:
            node = stack.pop()
            count += 1
            stack.extend(list(node.children.values()))
        return count

    def _find(self, channel: str) -> TrieNode | None:
        node = self._root
        for segment in create_key(channel):
            child = node.children.get(segment)
            if child is None:
                return None
            node = child
        return node

    def _walk(self) -> Iterator[tuple[list[str], TrieNode]]:
        # The root is never a terminal: every key has at least one segment.
        stack: list[tuple[list[str], TrieNode]] = [([], self._root)]
        while stack:
            key, node = stack.pop()
            if key and node.handler is not None:
                yield key, node
            for segment, child in list(node.children.items()):
                stack.append((key + [segment], child))

    def __len__(self) -> int:
        return sum(1 for _ in self._walk())

    def __contains__(self, channel: str) -> bool:
        node = self._find(channel)
        return node is not None and node.handler is not None
