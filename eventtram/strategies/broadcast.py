"""
Broadcast strategy - delivery to cooperating peers

Every publication is posted to a conduit group shared by peer processes.
Following broadcast-channel semantics, and to avoid infinite echo loops, the
posting peer does NOT receive its own publications: channels that also want
local delivery must dispatch locally themselves.

Query protocol:
    caller  -> {"query": name, "params": [...]}
    replier -> {"queryResponse": name, "payload": result}

The first matching response resolves the caller's future; a timer rejects it
with QueryTimeoutError after `timeout_ms`. Responses carry no correlation id,
so pending queries with the same name are resolved first-in, first-out, one
response each. Extra responses (several peers replying) are ignored.
"""

import asyncio
import inspect
from collections import defaultdict, deque
from typing import Any

from eventtram.config import BroadcastOptions
from eventtram.errors import QueryTimeoutError, StrategyError
from eventtram.infra.conduit import Conduit, InMemoryConduit
from eventtram.infra.logging import get_logger
from eventtram.protocol.envelope import (
    Publication,
    QueryRequest,
    QueryResponse,
    parse_envelope,
)
from eventtram.strategies.base import NotifyStrategy

logger = get_logger(__name__)


class BroadcastNotifyStrategy(NotifyStrategy):
    """Broadcast publications and queries to every other peer of a group."""

    def __init__(
        self,
        group: str,
        options: BroadcastOptions | None = None,
        *,
        conduit: Conduit | None = None,
    ) -> None:
        """
        Args:
            group: Conduit group shared by the cooperating peers
            options: Timeout configuration (default 5000 ms)
            conduit: Conduit to use; an InMemoryConduit on `group` when omitted
        """
        super().__init__()
        self.group = group
        self.options = options or BroadcastOptions()
        self._conduit = conduit if conduit is not None else InMemoryConduit(group)
        self._pending: dict[str, deque[asyncio.Future[Any]]] = defaultdict(deque)
        self._reply_tasks: set[asyncio.Task[Any]] = set()
        self._conduit.add_listener(self._on_message)

    @property
    def conduit(self) -> Conduit:
        return self._conduit

    @property
    def pending_queries(self) -> int:
        return sum(len(q) for q in self._pending.values())

    # ==================== publish path ====================

    def notify_subscribers(self, envelope: Publication) -> None:
        self._conduit.post(envelope.to_wire())

    def _on_message(self, data: Any) -> None:
        envelope = parse_envelope(data)
        if envelope is None:
            logger.debug("ignoring foreign message", group=self.group)
            return
        if isinstance(envelope, Publication):
            if self._hook is not None:
                self._hook(envelope)
        elif isinstance(envelope, QueryRequest):
            self._answer(envelope)
        else:
            self._resolve(envelope)

    # ==================== query protocol ====================

    def query(self, name: str, *params: Any) -> "asyncio.Future[Any]":
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as e:
            raise StrategyError("peer queries need a running event loop") from e

        future: asyncio.Future[Any] = loop.create_future()
        self._pending[name].append(future)
        timer = loop.call_later(self.options.timeout_ms / 1000, self._expire, name, future)
        future.add_done_callback(lambda f: self._release(name, f, timer))

        try:
            self._conduit.post(QueryRequest(query=name, params=list(params)).to_wire())
        except Exception:
            future.cancel()
            raise
        return future

    def _resolve(self, response: QueryResponse) -> None:
        for future in self._pending.get(response.queryResponse, ()):
            if not future.done():
                future.set_result(response.payload)
                return

    def _expire(self, name: str, future: "asyncio.Future[Any]") -> None:
        if future.done():
            return
        logger.warning("peer query timed out", query=name, timeout_ms=self.options.timeout_ms)
        future.set_exception(QueryTimeoutError(name, self.options.timeout_ms))

    def _release(self, name: str, future: "asyncio.Future[Any]", timer: asyncio.TimerHandle) -> None:
        timer.cancel()
        queue = self._pending.get(name)
        if queue is None:
            return
        if future in queue:
            queue.remove(future)
        if not queue:
            del self._pending[name]

    # ==================== reply path ====================

    def _answer(self, request: QueryRequest) -> None:
        # Repliers are looked up at receipt time; the channel may have
        # registered or replaced them since this strategy was bound.
        if not self.bound:
            return
        replier = self.repliers.get(request.query)
        if replier is None:
            return
        try:
            result = replier(*request.params)
        except Exception as e:
            self._report(e, f"Replier for {request.query!r} failed")
            return
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(self._answer_async(request.query, result))
            self._reply_tasks.add(task)
            task.add_done_callback(self._reply_tasks.discard)
        else:
            self._post_response(request.query, result)

    async def _answer_async(self, name: str, pending: Any) -> None:
        try:
            result = await pending
        except Exception as e:
            self._report(e, f"Replier for {name!r} failed")
            return
        self._post_response(name, result)

    def _post_response(self, name: str, payload: Any) -> None:
        try:
            self._conduit.post(QueryResponse(queryResponse=name, payload=payload).to_wire())
        except Exception as e:
            self._report(e, f"Could not post response for {name!r}")

    def _report(self, error: Exception, message: str) -> None:
        logger.error(message, group=self.group, error=str(error))
        asyncio.get_running_loop().call_exception_handler({"message": message, "exception": error})

    # ==================== lifecycle ====================

    def spawn(self, channel_name: str) -> "BroadcastNotifyStrategy":
        group = f"{self.group}/{channel_name}"
        return BroadcastNotifyStrategy(group, self.options, conduit=self._conduit.spawn(group))

    def close(self) -> None:
        """Leave the group and cancel everything still in flight."""
        for queue in list(self._pending.values()):
            for future in list(queue):
                future.cancel()
        for task in tuple(self._reply_tasks):
            task.cancel()
        self._conduit.remove_listener(self._on_message)
        self._conduit.close()
