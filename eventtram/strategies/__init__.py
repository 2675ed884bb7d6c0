"""
Notify strategies - pluggable delivery backends
"""

from eventtram.strategies.base import DispatchHook, NotifyStrategy, Repliers
from eventtram.strategies.broadcast import BroadcastNotifyStrategy
from eventtram.strategies.local import LocalNotifyStrategy

__all__ = [
    "NotifyStrategy",
    "DispatchHook",
    "Repliers",
    "LocalNotifyStrategy",
    "BroadcastNotifyStrategy",
]
