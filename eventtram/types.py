"""
Namespace catalogs

Name-indexed maps of the events, queries and channels a hub knows about.
A channel holding a catalog rejects unknown names and validates payloads and
query parameters against the declared annotations; a channel without one is
open and accepts anything.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from pydantic import TypeAdapter, ValidationError

from eventtram.errors import (
    PayloadValidationError,
    UnknownChannelError,
    UnknownEventError,
    UnknownQueryError,
)


@dataclass(frozen=True)
class Event:
    """An event name and the annotation its payload must satisfy (None: any)."""

    name: str
    payload: Any = None
    _adapter: TypeAdapter | None = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.payload is not None:
            object.__setattr__(self, "_adapter", TypeAdapter(self.payload))

    def validate(self, payload: Any) -> None:
        if self._adapter is None:
            return
        try:
            self._adapter.validate_python(payload)
        except ValidationError as e:
            raise PayloadValidationError(self.name, e) from e


@dataclass(frozen=True)
class Query:
    """
    A query name with positional parameter annotations and a return annotation.

    params=None disables parameter checking. Trailing parameters may be
    omitted when their annotation accepts None.
    """

    name: str
    params: Sequence[Any] | None = None
    returns: Any = None
    _adapters: tuple[TypeAdapter, ...] | None = field(
        default=None, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if self.params is not None:
            object.__setattr__(self, "params", tuple(self.params))
            object.__setattr__(self, "_adapters", tuple(TypeAdapter(p) for p in self.params))

    def validate(self, params: Sequence[Any]) -> None:
        if self._adapters is None:
            return
        if len(params) > len(self._adapters):
            raise PayloadValidationError(
                self.name,
                ValueError(f"expected at most {len(self._adapters)} parameters, got {len(params)}"),
            )
        padded = list(params) + [None] * (len(self._adapters) - len(params))
        try:
            for adapter, value in zip(self._adapters, padded):
                adapter.validate_python(value)
        except ValidationError as e:
            raise PayloadValidationError(self.name, e) from e


class _Catalog(Mapping):
    def __init__(self, entries: Iterable[Any] = (), open: bool = False) -> None:
        self._entries: dict[str, Any] = {}
        self.open = open
        for entry in entries:
            self._entries[entry.name] = entry

    def __getitem__(self, name: str) -> Any:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __or__(self, other: _Catalog) -> Any:
        if not isinstance(other, type(self)):
            return NotImplemented
        merged = type(self)(open=self.open or other.open)
        merged._entries = {**self._entries, **other._entries}
        return merged

    def __repr__(self) -> str:
        return f"{type(self).__name__}({', '.join(self._entries)})"


class EventMap(_Catalog):
    """Catalog of events, keyed by event name."""

    def __init__(self, *events: Event | str, open: bool = False) -> None:
        super().__init__((Event(e) if isinstance(e, str) else e for e in events), open=open)

    def check(self, channel: str, event: str, payload: Any = None, *, with_payload: bool = False):
        spec = self._entries.get(event)
        if spec is None:
            if self.open:
                return
            raise UnknownEventError(channel, event)
        if with_payload:
            spec.validate(payload)


class QueryMap(_Catalog):
    """Catalog of queries, keyed by query name."""

    def __init__(self, *queries: Query | str, open: bool = False) -> None:
        super().__init__((Query(q) if isinstance(q, str) else q for q in queries), open=open)

    def check(self, channel: str, query: str, params: Sequence[Any] | None = None):
        spec = self._entries.get(query)
        if spec is None:
            if self.open:
                return
            raise UnknownQueryError(channel, query)
        if params is not None:
            spec.validate(params)


@dataclass(frozen=True)
class ChannelSpec:
    """A sub-channel name with the catalogs its channel validates against."""

    name: str
    events: EventMap | None = None
    queries: QueryMap | None = None


class ChannelMap(_Catalog):
    """Catalog of sub-channels, keyed by channel name."""

    def __init__(self, *channels: ChannelSpec | str, open: bool = False) -> None:
        super().__init__(
            (ChannelSpec(c) if isinstance(c, str) else c for c in channels), open=open
        )

    def check(self, channel: str) -> ChannelSpec | None:
        spec = self._entries.get(channel)
        if spec is None and not self.open:
            raise UnknownChannelError(channel)
        return spec


def merge(current: _Catalog | None, extra: _Catalog) -> _Catalog:
    """
    Widen a catalog.

    An absent catalog stands for an open namespace; widening it must not
    start rejecting names that were accepted before, so the result stays open.
    """
    if current is None:
        return type(extra)(open=True) | extra
    return current | extra
