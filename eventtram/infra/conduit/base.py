"""
Conduit Base Classes

A conduit is the opaque peer-to-peer message pipe consumed by the broadcast
strategy. Semantics follow a broadcast channel: every peer joined to the same
group receives each posted message asynchronously, except the peer that
posted it.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from eventtram.infra.logging import get_logger

logger = get_logger(__name__)

MessageListener = Callable[[Any], None]


class Conduit(ABC):
    """Abstract base class for peer conduits."""

    def __init__(self, group: str) -> None:
        self.group = group
        self._listeners: list[MessageListener] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def add_listener(self, listener: MessageListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: MessageListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @abstractmethod
    def post(self, message: dict[str, Any]) -> None:
        """Send a message to every other peer of the group. Never blocks."""

    @abstractmethod
    def spawn(self, group: str) -> "Conduit":
        """Open a conduit of the same kind on another group."""

    def close(self) -> None:
        self._closed = True
        self._listeners.clear()

    def _deliver(self, message: Any) -> None:
        """Fan an inbound message out to the listeners, isolating their errors."""
        if self._closed:
            return
        for listener in tuple(self._listeners):
            try:
                listener(message)
            except Exception as e:
                logger.exception("conduit listener failed", group=self.group)
                asyncio.get_running_loop().call_exception_handler(
                    {
                        "message": f"Unhandled error in conduit listener for {self.group!r}",
                        "exception": e,
                    }
                )
