"""
Notify Strategy - delivery backend interface

A channel delegates every publication and every query to its strategy.
The strategy receives a reference to the channel's replier table and a
dispatch hook; it decides where a publication goes and how a query is
resolved.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from eventtram.errors import StrategyError
from eventtram.protocol.envelope import Publication

DispatchHook = Callable[[Publication], None]
Repliers = dict[str, Callable[..., Any]]


class NotifyStrategy(ABC):
    """
    Abstract base class for delivery strategies.

    Lifecycle: constructed by the user (or defaulted), bound to exactly one
    channel through init(), released with the channel through close().
    """

    def __init__(self) -> None:
        self._repliers: Repliers | None = None
        self._hook: DispatchHook | None = None

    @property
    def repliers(self) -> Repliers:
        """The owning channel's replier table; read it, never cache it."""
        if self._repliers is None:
            raise StrategyError(f"{type(self).__name__} used before init()")
        return self._repliers

    @property
    def bound(self) -> bool:
        return self._repliers is not None

    def init(self, repliers: Repliers) -> None:
        """Store a reference to the channel's replier table. Called once."""
        if self._repliers is not None:
            raise StrategyError(
                f"{type(self).__name__} is already bound to a channel; "
                "use spawn() or a factory to get one instance per channel"
            )
        self._repliers = repliers

    def on_notify_subscribers(self, callback: DispatchHook) -> None:
        """Register the channel's local dispatch hook."""
        self._hook = callback

    @abstractmethod
    def notify_subscribers(self, envelope: Publication) -> None:
        """Route an outgoing publication."""

    @abstractmethod
    def query(self, name: str, *params: Any) -> Any:
        """Resolve a query; the result is passed through to the caller untouched."""

    def spawn(self, channel_name: str) -> "NotifyStrategy":
        """Return a fresh, unbound strategy of the same kind for a sub-channel."""
        return type(self)()

    def close(self) -> None:
        """Release private resources."""
