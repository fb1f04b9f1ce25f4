"""Public contracts for the channel index."""
from chanidx.contracts.handler import MessageContext, MessageHandler
from chanidx.contracts.broker import BrokerSession

__all__ = [
    "MessageContext", "MessageHandler",
    "BrokerSession",
]
