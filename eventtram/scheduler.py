"""
Deferred-dispatch schedulers.

A scheduler decides what "later" means for deferred publishes and how an
isolated subscriber error is surfaced as an uncaught asynchronous error.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections import deque
from collections.abc import Callable
from typing import Any

from eventtram.errors import SchedulerError
from eventtram.infra.logging import get_logger

logger = get_logger(__name__)

Step = Callable[[], Any]


class Scheduler(ABC):
    """Yields work to the host task loop."""

    @abstractmethod
    def call_soon(self, step: Step) -> None:
        """Run step on a later tick, never during the current call."""

    @abstractmethod
    def report_error(self, error: BaseException, context: dict[str, Any] | None = None) -> None:
        """Surface error asynchronously so an outer handler can observe it."""


class AsyncioScheduler(Scheduler):
    """
    Schedules on the running asyncio loop.

    Loop handles created by call_soon do not keep a loop alive, so pending
    deferred deliveries never extend the lifetime of run_until_complete().
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError as e:
            raise SchedulerError(
                "Deferred dispatch needs a running event loop; "
                "use publish_sync() or a ManualScheduler outside asyncio",
                e,
            ) from e

    def call_soon(self, step: Step) -> None:
        self._get_loop().call_soon(step)

    def report_error(self, error: BaseException, context: dict[str, Any] | None = None) -> None:
        """
        Hand error to the loop's exception handler on a later tick.

        Synchronous hosts have no loop to report to; the error is logged
        instead and never raised into the dispatch that isolated it.
        """
        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                logger.error(
                    "unhandled error in event subscriber",
                    exc_info=error,
                    context=dict(context or {}),
                )
                return
        payload = {"message": "Unhandled error in event subscriber", "exception": error}
        if context:
            payload.update(context)
        loop.call_soon(loop.call_exception_handler, payload)


class ManualScheduler(Scheduler):
    """
    FIFO queue drained explicitly.

    Useful for synchronous hosts and deterministic tests. Reported errors are
    queued as raising steps, so drain() raises them once the fan-out that
    produced them has run.
    """

    def __init__(self) -> None:
        self._queue: deque[Step] = deque()

    @property
    def pending(self) -> int:
        return len(self._queue)

    def call_soon(self, step: Step) -> None:
        self._queue.append(step)

    def report_error(self, error: BaseException, context: dict[str, Any] | None = None) -> None:
        def _raise() -> None:
            raise error

        self._queue.append(_raise)

    def drain(self) -> int:
        """
        Run queued steps, including those queued while draining.

        The first step that raises aborts the drain and propagates; the rest
        stay queued for the next call.

        Returns:
            Number of steps run.
        """
        ran = 0
        while self._queue:
            step = self._queue.popleft()
            ran += 1
            step()
        return ran
