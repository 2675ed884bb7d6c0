"""
Redis Conduit Implementation

Peers in different processes (or hosts) share a group through a Redis
pub/sub channel. Redis echoes a publication back to the publishing client's
own subscription, so every frame carries the sender's origin id and a
conduit drops frames it posted itself.
"""

import asyncio
import json
from typing import Any
from uuid import uuid4

try:
    import redis.asyncio as aioredis
except ImportError:
    aioredis = None

from eventtram.config import RedisConduitOptions
from eventtram.errors import ConduitError
from eventtram.infra.conduit.base import Conduit, MessageListener
from eventtram.infra.logging import get_logger

logger = get_logger(__name__)


class RedisConduit(Conduit):
    """
    Redis pub/sub conduit.

    Connection is lazy: the first post() or add_listener() inside a running
    loop connects in the background. Await connect() to be sure the
    subscription is live before peers start posting.
    """

    def __init__(
        self,
        group: str,
        options: RedisConduitOptions | None = None,
        *,
        client: Any = None,
    ) -> None:
        if aioredis is None and client is None:
            raise ImportError(
                "redis package is required for RedisConduit. "
                "Install it with: pip install eventtram[redis]"
            )
        super().__init__(group)
        self.options = options or RedisConduitOptions()
        self.origin = uuid4().hex
        self.redis = client
        self.pubsub: Any = None
        self._connected = False
        self._connect_lock: asyncio.Lock | None = None
        self._listen_task: asyncio.Task[Any] | None = None
        self._background_tasks: set[asyncio.Task[Any]] = set()

    @property
    def topic(self) -> str:
        return f"{self.options.prefix}:{self.group}"

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        """Connect and subscribe to the group's topic. Idempotent."""
        if self._connect_lock is None:
            self._connect_lock = asyncio.Lock()
        async with self._connect_lock:
            if self._connected:
                return
            if self._closed:
                raise ConduitError(self.group, "connect on a closed conduit")
            if self.redis is None:
                self.redis = aioredis.from_url(self.options.url)
            try:
                await self.redis.ping()
                self.pubsub = self.redis.pubsub()
                await self.pubsub.subscribe(self.topic)
            except Exception as e:
                raise ConduitError(self.group, f"cannot connect to {self.options.url}", e) from e
            self._listen_task = asyncio.create_task(self._listen())
            self._connected = True
            logger.debug("redis conduit connected", group=self.group, topic=self.topic)

    def add_listener(self, listener: MessageListener) -> None:
        super().add_listener(listener)
        self._connect_in_background()

    def post(self, message: dict[str, Any]) -> None:
        if self._closed:
            raise ConduitError(self.group, "post on a closed conduit")
        try:
            frame = json.dumps({"origin": self.origin, "data": message})
        except (TypeError, ValueError) as e:
            raise ConduitError(self.group, "message is not serialisable", e) from e
        self._create_background_task(self._publish(frame))

    async def _publish(self, frame: str) -> None:
        await self.connect()
        await self.redis.publish(self.topic, frame)

    async def _listen(self) -> None:
        async for item in self.pubsub.listen():
            if item.get("type") not in ("message", "pmessage"):
                continue
            raw = item.get("data")
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8")
            try:
                frame = json.loads(raw)
            except (TypeError, ValueError):
                logger.warning("dropping malformed frame", group=self.group)
                continue
            if not isinstance(frame, dict) or frame.get("origin") == self.origin:
                continue
            self._deliver(frame.get("data"))

    def _connect_in_background(self) -> None:
        if self._connected or self._closed:
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return
        self._create_background_task(self.connect())

    def _create_background_task(self, coro: Any) -> asyncio.Task[Any]:
        task = asyncio.create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._on_background_done)
        return task

    def _on_background_done(self, task: asyncio.Task[Any]) -> None:
        self._background_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("redis conduit task failed", group=self.group, error=str(error))
            task.get_loop().call_exception_handler(
                {"message": f"Redis conduit {self.group!r} failed", "exception": error}
            )

    def spawn(self, group: str) -> "RedisConduit":
        return RedisConduit(group, self.options)

    def close(self) -> None:
        """Stop listening; the connection itself is released by aclose()."""
        if self._closed:
            return
        super().close()
        if self._listen_task is not None:
            self._listen_task.cancel()

    async def aclose(self) -> None:
        self.close()
        for task in tuple(self._background_tasks):
            task.cancel()
        if self.pubsub is not None:
            await self.pubsub.unsubscribe(self.topic)
            await self.pubsub.close()
        if self.redis is not None:
            await self.redis.close()
        self._connected = False
        logger.debug("redis conduit closed", group=self.group)
