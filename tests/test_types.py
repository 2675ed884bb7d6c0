"""
Tests for namespace catalogs
"""

import pytest

from eventtram import (
    ChannelMap,
    ChannelSpec,
    Event,
    EventMap,
    PayloadValidationError,
    Query,
    QueryMap,
    UnknownChannelError,
    UnknownEventError,
    UnknownQueryError,
)
from eventtram.types import merge


class TestEventMap:
    """Test EventMap class."""

    def test_mapping_interface(self):
        events = EventMap("a", Event("b", payload=int))

        assert list(events) == ["a", "b"]
        assert len(events) == 2
        assert events["b"].payload is int
        assert "c" not in events

    def test_unknown_event(self):
        with pytest.raises(UnknownEventError) as exc_info:
            EventMap("a").check("orders", "b")

        assert exc_info.value.channel == "orders"
        assert exc_info.value.name == "b"
        assert "orders" in str(exc_info.value)

    def test_open_catalog_accepts_unknown(self):
        EventMap("a", open=True).check("orders", "b", object(), with_payload=True)

    def test_payload_validation(self):
        events = EventMap(Event("e", payload=dict[str, int]))

        events.check("hub", "e", {"v": 1}, with_payload=True)
        with pytest.raises(PayloadValidationError) as exc_info:
            events.check("hub", "e", {"v": "not a number"}, with_payload=True)

        assert exc_info.value.code == "INVALID_PAYLOAD"
        assert exc_info.value.name == "e"

    def test_payload_not_checked_without_flag(self):
        EventMap(Event("e", payload=int)).check("hub", "e", "text")

    def test_untyped_event_accepts_any_payload(self):
        EventMap("e").check("hub", "e", object(), with_payload=True)

    def test_union(self):
        merged = EventMap("a") | EventMap("b")

        assert set(merged) == {"a", "b"}
        assert merged.open is False
        assert (EventMap("a") | EventMap(open=True)).open is True

    def test_union_with_other_kind_is_rejected(self):
        with pytest.raises(TypeError):
            EventMap("a") | QueryMap("b")


class TestQueryMap:
    """Test QueryMap class."""

    def test_unknown_query(self):
        with pytest.raises(UnknownQueryError):
            QueryMap("q").check("hub", "other")

    def test_params_validated_positionally(self):
        queries = QueryMap(Query("sum", params=[int, int], returns=int))

        queries.check("hub", "sum", (1, 2))
        with pytest.raises(PayloadValidationError):
            queries.check("hub", "sum", (1, "two"))

    def test_optional_trailing_params_may_be_omitted(self):
        queries = QueryMap(Query("find", params=[str, int | None]))

        queries.check("hub", "find", ("name",))
        with pytest.raises(PayloadValidationError):
            queries.check("hub", "find", ())

    def test_too_many_params(self):
        with pytest.raises(PayloadValidationError, match="at most 1"):
            QueryMap(Query("one", params=[int])).check("hub", "one", (1, 2))

    def test_params_none_skips_validation(self):
        QueryMap(Query("any")).check("hub", "any", (1, "x", None))

    def test_params_are_frozen(self):
        query = Query("q", params=[int])

        assert query.params == (int,)


class TestChannelMap:
    """Test ChannelMap class."""

    def test_known_channel_returns_spec(self):
        events = EventMap("e")
        channels = ChannelMap(ChannelSpec("orders", events=events), "billing")

        assert channels.check("orders").events is events
        assert channels.check("billing").events is None

    def test_unknown_channel(self):
        with pytest.raises(UnknownChannelError) as exc_info:
            ChannelMap("orders").check("billing")

        assert exc_info.value.code == "UNKNOWN_CHANNEL"

    def test_open_channel_map_returns_none(self):
        assert ChannelMap(open=True).check("anything") is None


class TestMerge:
    """Test merge function."""

    def test_merge_into_closed_catalog(self):
        merged = merge(EventMap("a"), EventMap("b"))

        assert set(merged) == {"a", "b"}
        assert merged.open is False

    def test_merge_into_absent_catalog_stays_open(self):
        merged = merge(None, QueryMap("q"))

        assert isinstance(merged, QueryMap)
        assert merged.open is True
        assert "q" in merged
        merged.check("hub", "undeclared")

    def test_later_entries_win(self):
        merged = merge(EventMap(Event("e", payload=int)), EventMap(Event("e", payload=str)))

        assert merged["e"].payload is str
