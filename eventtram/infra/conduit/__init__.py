"""
Conduit Layer - Interface and Implementations

Peer message pipes for the broadcast strategy.
"""

from eventtram.infra.conduit.base import Conduit, MessageListener

from .memory import InMemoryConduit
from .redis import RedisConduit

__all__ = [
    "Conduit",
    "MessageListener",
    "InMemoryConduit",
    "RedisConduit",
]
