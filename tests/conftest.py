"""
Pytest Configuration and Fixtures
"""

import asyncio
from uuid import uuid4

import pytest

from eventtram import EventTram, ManualScheduler


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Returns a fresh ManualScheduler."""
    return ManualScheduler()


@pytest.fixture
def tram(scheduler: ManualScheduler) -> EventTram:
    """Returns an EventTram whose deferred deliveries run on scheduler.drain()."""
    return EventTram(scheduler=scheduler)


@pytest.fixture
def group() -> str:
    """Returns a conduit group name no other test uses."""
    return f"test-{uuid4().hex}"


@pytest.fixture
async def loop_errors():
    """Collects contexts passed to the running loop's exception handler."""
    collected: list[dict] = []
    loop = asyncio.get_running_loop()
    previous = loop.get_exception_handler()
    loop.set_exception_handler(lambda _loop, context: collected.append(context))
    yield collected
    loop.set_exception_handler(previous)
