"""
Protocol - envelopes exchanged with peers
"""

from eventtram.protocol.envelope import (
    Envelope,
    Publication,
    QueryRequest,
    QueryResponse,
    parse_envelope,
)

__all__ = ["Envelope", "Publication", "QueryRequest", "QueryResponse", "parse_envelope"]
