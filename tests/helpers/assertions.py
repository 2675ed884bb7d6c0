"""
Test Assertions Helper

Assertions and loop helpers shared by the eventtram test suites.
"""

import asyncio
from typing import Any
from unittest.mock import Mock


async def drain(ticks: int = 5) -> None:
    """Let the running loop process everything queued for the next few ticks."""
    for _ in range(ticks):
        await asyncio.sleep(0)


def assert_called_once_with_payload(callback: Mock, payload: Any):
    """
    Assert a subscriber ran exactly once and received payload itself.

    Args:
        callback: Mock subscriber
        payload: Expected payload object (compared by identity, then equality)
    """
    assert callback.call_count == 1, f"called {callback.call_count} times, expected 1"
    received = callback.call_args.args[0]
    assert received is payload or received == payload, f"received {received!r}, expected {payload!r}"


def assert_exception_reported(contexts: list[dict], error_type: type, message: str | None = None):
    """
    Assert the loop exception handler saw an error of error_type.

    Args:
        contexts: Contexts collected by the loop_errors fixture
        error_type: Expected exception class
        message: Optional substring of str(exception)
    """
    errors = [ctx.get("exception") for ctx in contexts]
    matching = [e for e in errors if isinstance(e, error_type)]
    assert matching, f"no {error_type.__name__} reported, got {errors!r}"
    if message is not None:
        assert any(message in str(e) for e in matching), f"{message!r} not in {matching!r}"
