"""
EventTram - the hub channel

The hub is a full channel named "eventTram" that additionally owns named
sub-channels. Sub-channels are created lazily on first lookup with the hub's
options; each one gets its own strategy instance (a factory call, or
spawn() on the hub's strategy) and its own subscriber/replier space.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from eventtram.channel import Channel
from eventtram.config import ChannelOptions
from eventtram.infra.logging import get_logger
from eventtram.strategies.base import NotifyStrategy
from eventtram.types import ChannelMap, ChannelSpec, Event, EventMap, Query, QueryMap, merge

logger = get_logger(__name__)

HUB_NAME = "eventTram"


class EventTram(Channel):
    """
    Event hub.

    Args:
        options: ChannelOptions shared with every sub-channel
        channels: Optional channel catalog; unknown channel names are rejected
        events: Optional event catalog for the hub's own namespace
        queries: Optional query catalog for the hub's own namespace
        **overrides: ChannelOptions fields, e.g. throw_immediately=True
    """

    def __init__(
        self,
        options: ChannelOptions | None = None,
        *,
        channels: ChannelMap | None = None,
        events: EventMap | None = None,
        queries: QueryMap | None = None,
        **overrides: Any,
    ) -> None:
        super().__init__(HUB_NAME, options, events=events, queries=queries, **overrides)
        self._catalog = channels
        self._channels: dict[str, Channel] = {}

    @property
    def channels(self) -> Mapping[str, Channel]:
        """Sub-channels instantiated so far."""
        return MappingProxyType(self._channels)

    @property
    def catalog(self) -> ChannelMap | None:
        return self._catalog

    def channel(self, name: str) -> Channel:
        """Return the sub-channel called name, creating it on first access."""
        existing = self._channels.get(name)
        if existing is not None:
            return existing

        spec = self._catalog.check(name) if self._catalog is not None else None
        channel = Channel(
            name,
            self._options.model_copy(update={"notify_strategy": self._strategy_for(name)}),
            events=spec.events if spec else None,
            queries=spec.queries if spec else None,
        )
        self._channels[name] = channel
        logger.debug("sub-channel created", hub=self.name, channel=name)
        return channel

    def _strategy_for(self, name: str) -> NotifyStrategy:
        choice = self._options.notify_strategy
        if choice is None or isinstance(choice, NotifyStrategy):
            return self.strategy.spawn(name)
        return choice(name)

    # ==================== namespace registration ====================

    def register_channel(
        self,
        channel: ChannelSpec | str,
        events: EventMap | None = None,
        queries: QueryMap | None = None,
    ) -> EventTram:
        """Add a channel to the catalog. Returns the same hub."""
        spec = ChannelSpec(channel, events, queries) if isinstance(channel, str) else channel
        self._catalog = merge(self._catalog, ChannelMap(spec))
        return self

    def register_events(self, *events: Event | str) -> EventTram:
        """Add events to the hub's own catalog. Returns the same hub."""
        self._events = merge(self._events, EventMap(*events))
        return self

    def register_queries(self, *queries: Query | str) -> EventTram:
        """Add queries to the hub's own catalog. Returns the same hub."""
        self._queries = merge(self._queries, QueryMap(*queries))
        return self

    def close(self) -> None:
        for channel in self._channels.values():
            channel.close()
        super().close()
