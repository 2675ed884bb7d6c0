"""
Channel - subscriber and replier tables plus the dispatch engine

A channel is a namespace with its own subscribers (event name -> ordered
callbacks) and repliers (query name -> one callback). Publications and
queries go through the channel's notify strategy; the strategy calls back
into _dispatch() when a publication is ready for local fan-out.

Delivery modes:
- publish(): every subscriber runs on a later scheduler tick
- publish_sync(): every subscriber runs before publish_sync() returns

Subscriber errors are isolated: they are reported asynchronously and the
fan-out continues, unless throw_immediately is set, in which case the error
propagates out of the dispatch and the remaining subscribers are skipped.
"""

from __future__ import annotations

import weakref
from collections.abc import Callable
from typing import Any

from eventtram.config import ChannelOptions
from eventtram.infra.logging import get_logger
from eventtram.protocol.envelope import Publication
from eventtram.scheduler import AsyncioScheduler, Scheduler
from eventtram.strategies.base import NotifyStrategy
from eventtram.strategies.local import LocalNotifyStrategy
from eventtram.types import EventMap, QueryMap

logger = get_logger(__name__)

EventCallback = Callable[[Any], Any]
ReplyCallback = Callable[..., Any]


def resolve_strategy(options: ChannelOptions, channel_name: str) -> NotifyStrategy:
    """Build the strategy instance a channel will own exclusively."""
    choice = options.notify_strategy
    if choice is None:
        return LocalNotifyStrategy()
    if isinstance(choice, NotifyStrategy):
        return choice
    return choice(channel_name)


def _matches(registered: EventCallback, target: EventCallback) -> bool:
    return registered == target or getattr(registered, "__wrapped__", None) == target


class ReadonlyChannel:
    """Consumer view of a channel: subscribe and query, never publish."""

    __slots__ = ("_channel",)

    def __init__(self, channel: Channel) -> None:
        self._channel = channel

    @property
    def name(self) -> str:
        return self._channel.name

    def on(self, event: str, callback: EventCallback) -> None:
        self._channel.on(event, callback)

    def once(self, event: str, callback: EventCallback) -> None:
        self._channel.once(event, callback)

    def off(self, event: str | EventCallback, callback: EventCallback | None = None) -> None:
        self._channel.off(event, callback)

    def query(self, name: str, *params: Any) -> Any:
        return self._channel.query(name, *params)


class WriteonlyChannel:
    """Producer view of a channel: publish and reply, never subscribe."""

    __slots__ = ("_channel",)

    def __init__(self, channel: Channel) -> None:
        self._channel = channel

    @property
    def name(self) -> str:
        return self._channel.name

    def publish(self, event: str, payload: Any = None) -> None:
        self._channel.publish(event, payload)

    def publish_sync(self, event: str, payload: Any = None) -> None:
        self._channel.publish_sync(event, payload)

    def reply(self, name: str, callback: ReplyCallback) -> None:
        self._channel.reply(name, callback)


class Channel:
    """
    A named event/query namespace.

    Args:
        name: Channel name, unique within its hub
        options: ChannelOptions; keyword overrides are merged on top
        events: Optional event catalog; unknown events are rejected when set
        queries: Optional query catalog; unknown queries are rejected when set
    """

    def __init__(
        self,
        name: str,
        options: ChannelOptions | None = None,
        *,
        events: EventMap | None = None,
        queries: QueryMap | None = None,
        **overrides: Any,
    ) -> None:
        self.name = name
        self._options = (options or ChannelOptions()).merge(**overrides)
        self._scheduler: Scheduler = self._options.scheduler or AsyncioScheduler()
        self._events = events
        self._queries = queries

        self._subscribers: dict[str, list[EventCallback]] = {}
        self._repliers: dict[str, ReplyCallback] = {}
        # Holds once-wrappers that already fired, so duplicate deferred
        # deliveries queued before the wrapper was removed become no-ops.
        self._once_fired: weakref.WeakSet[EventCallback] = weakref.WeakSet()

        self._strategy = resolve_strategy(self._options, name)
        self._strategy.init(self._repliers)
        self._strategy.on_notify_subscribers(self._dispatch)
        logger.debug(
            "channel created", channel=name, strategy=type(self._strategy).__name__
        )

    # ==================== views & introspection ====================

    @property
    def options(self) -> ChannelOptions:
        return self._options

    @property
    def strategy(self) -> NotifyStrategy:
        return self._strategy

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    @property
    def events(self) -> EventMap | None:
        return self._events

    @property
    def queries(self) -> QueryMap | None:
        return self._queries

    @property
    def readonly(self) -> ReadonlyChannel:
        return ReadonlyChannel(self)

    @property
    def writeonly(self) -> WriteonlyChannel:
        return WriteonlyChannel(self)

    @property
    def subscriber_counts(self) -> dict[str, int]:
        """Number of subscribers per event name."""
        return {event: len(subs) for event, subs in self._subscribers.items() if subs}

    def has_replier(self, name: str) -> bool:
        return name in self._repliers

    # ==================== subscribe ====================

    def on(self, event: str, callback: EventCallback) -> None:
        """Subscribe callback to event. Subscribing twice delivers twice."""
        self._check_event(event)
        self._subscribers.setdefault(event, []).append(callback)

    def once(self, event: str, callback: EventCallback) -> None:
        """Subscribe callback for a single delivery of event."""
        self._check_event(event)

        def wrapper(payload: Any) -> Any:
            if wrapper in self._once_fired:
                return None
            self._once_fired.add(wrapper)
            self.off(event, wrapper)
            return callback(payload)

        wrapper.__wrapped__ = callback
        self.on(event, wrapper)

    def off(self, event: str | EventCallback, callback: EventCallback | None = None) -> None:
        """
        Unsubscribe.

        off(event, callback) removes callback from event,
        off(event) removes every callback of event,
        off(callback) removes callback from every event.
        A callback registered with once() can be removed by passing the
        original callback.
        Unknown events are ignored.
        """
        if not isinstance(event, str):
            target = event
            for name, subs in list(self._subscribers.items()):
                self._subscribers[name] = [cb for cb in subs if not _matches(cb, target)]
            return

        self._check_event(event)
        if callback is not None:
            subs = self._subscribers.get(event)
            if subs:
                self._subscribers[event] = [cb for cb in subs if not _matches(cb, callback)]
            return
        self._subscribers.pop(event, None)

    # ==================== publish ====================

    def publish(self, event: str, payload: Any = None) -> None:
        """Deliver payload to event's subscribers on a later scheduler tick."""
        self._check_event(event, payload)
        self._strategy.notify_subscribers(Publication(event=event, payload=payload, sync=False))

    def publish_sync(self, event: str, payload: Any = None) -> None:
        """Deliver payload to event's subscribers before returning."""
        self._check_event(event, payload)
        self._strategy.notify_subscribers(Publication(event=event, payload=payload, sync=True))

    # ==================== query / reply ====================

    def query(self, name: str, *params: Any) -> Any:
        """
        Ask the replier registered for name.

        Returns whatever the strategy resolves: the replier's return value
        locally (None when nobody replies), or an awaitable for async
        repliers and peer strategies.
        """
        if self._queries is not None:
            self._queries.check(self.name, name, params)
        return self._strategy.query(name, *params)

    def reply(self, name: str, callback: ReplyCallback) -> None:
        """Register the replier for name, replacing any previous one."""
        if self._queries is not None:
            self._queries.check(self.name, name)
        self._repliers[name] = callback

    # ==================== dispatch ====================

    def _dispatch(self, envelope: Publication) -> None:
        subscribers = self._subscribers.get(envelope.event)
        if not subscribers:
            return

        # Copy so that off() from inside a callback cannot skip or repeat peers.
        for subscriber in tuple(subscribers):
            step = self._make_step(envelope.event, subscriber, envelope.payload)
            if envelope.sync:
                step()
            else:
                self._scheduler.call_soon(step)

    def _make_step(self, event: str, subscriber: EventCallback, payload: Any) -> Callable[[], None]:
        def step() -> None:
            try:
                subscriber(payload)
            except Exception as e:
                if self._options.throw_immediately:
                    raise
                logger.exception("subscriber failed", channel=self.name, event_name=event)
                self._scheduler.report_error(e, {"channel": self.name, "event": event})

        return step

    def _check_event(self, event: str, payload: Any = None) -> None:
        if self._events is None:
            return
        self._events.check(self.name, event, payload, with_payload=payload is not None)

    def close(self) -> None:
        """Release the strategy; the channel must not be used afterwards."""
        self._strategy.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"
