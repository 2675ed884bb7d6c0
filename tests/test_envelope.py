"""
Tests for wire envelopes
"""

import pytest

from eventtram.protocol import (
    Publication,
    QueryRequest,
    QueryResponse,
    parse_envelope,
)


@pytest.mark.contract
class TestWireForm:
    """Each envelope serialises to the exact shape peers agree on."""

    def test_publication(self):
        assert Publication(event="a:x", payload={"v": 1}).to_wire() == {
            "event": "a:x",
            "payload": {"v": 1},
            "sync": False,
        }

    def test_query_request(self):
        assert QueryRequest(query="sum", params=[2, 3]).to_wire() == {
            "query": "sum",
            "params": [2, 3],
        }

    def test_query_response(self):
        response = QueryResponse(query_response="sum", payload=5)

        assert response.query_response == "sum"
        assert response.to_wire() == {"queryResponse": "sum", "payload": 5}


class TestParseEnvelope:
    """Test parse_envelope function."""

    def test_publication(self):
        envelope = parse_envelope({"event": "e", "payload": None, "sync": True})

        assert envelope == Publication(event="e", sync=True)

    def test_query_request_without_params(self):
        assert parse_envelope({"query": "q"}) == QueryRequest(query="q", params=[])

    def test_query_response_by_wire_name(self):
        envelope = parse_envelope({"queryResponse": "q", "payload": [1]})

        assert isinstance(envelope, QueryResponse)
        assert envelope.payload == [1]

    @pytest.mark.parametrize(
        "data",
        [
            None,
            "event",
            ["event"],
            {},
            {"hello": "world"},
            {"event": 1},
            {"query": "q", "params": "not a list"},
        ],
    )
    def test_foreign_or_invalid_messages(self, data):
        assert parse_envelope(data) is None
