"""Concurrent channel index mapping slash-delimited channels to handlers."""
from chanidx.contracts import BrokerSession, MessageContext, MessageHandler
from chanidx.core.trie import ReverseTrie, create_key

__all__ = [
    "ReverseTrie", "create_key",
    "MessageContext", "MessageHandler", "BrokerSession",
]
