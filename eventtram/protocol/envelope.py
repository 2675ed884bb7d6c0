"""
Envelope - wire form of publications and queries

Three shapes travel on a peer conduit and any other implementation sharing
the same group must agree on them exactly:

    publication     {"event": str, "payload": any, "sync": bool}
    query request   {"query": str, "params": [any, ...]}
    query response  {"queryResponse": str, "payload": any}
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class Publication(BaseModel):
    """An event travelling one-way from publisher to subscribers."""

    model_config = ConfigDict(frozen=True)

    event: str
    payload: Any = None
    sync: bool = False

    def to_wire(self) -> dict[str, Any]:
        return {"event": self.event, "payload": self.payload, "sync": self.sync}


class QueryRequest(BaseModel):
    """A peer asking for the replier registered under `query`."""

    model_config = ConfigDict(frozen=True)

    query: str
    params: list[Any] = Field(default_factory=list)

    def to_wire(self) -> dict[str, Any]:
        return {"query": self.query, "params": list(self.params)}


class QueryResponse(BaseModel):
    """The answer a replying peer posts back."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    queryResponse: str = Field(alias="query_response")
    payload: Any = None

    @property
    def query_response(self) -> str:
        """Snake-case alias of queryResponse."""
        return self.queryResponse

    def to_wire(self) -> dict[str, Any]:
        return {"queryResponse": self.queryResponse, "payload": self.payload}


Envelope = Publication | QueryRequest | QueryResponse


def parse_envelope(data: Any) -> Envelope | None:
    """
    Decode a raw conduit message.

    Returns None for anything that is not one of the three envelope shapes,
    so foreign traffic on a shared group is ignored rather than fatal.
    """
    if not isinstance(data, dict):
        return None
    try:
        if "event" in data:
            return Publication.model_validate(data)
        if "query" in data:
            return QueryRequest.model_validate(data)
        if "queryResponse" in data:
            return QueryResponse.model_validate(data)
    except ValidationError:
        return None
    return None
