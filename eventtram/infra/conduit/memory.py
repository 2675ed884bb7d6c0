"""
In-Memory Conduit Implementation
"""

import asyncio
import json
from collections import defaultdict
from typing import Any

from eventtram.errors import ConduitError
from eventtram.infra.conduit.base import Conduit
from eventtram.infra.logging import get_logger

logger = get_logger(__name__)


class InMemoryConduit(Conduit):
    """
    Broadcast-channel peers inside one process, using asyncio.

    Messages cross as JSON, so peers never share mutable payload objects and
    non-serialisable payloads fail at post time just as they would on a real
    inter-process pipe.
    """

    _groups: dict[str, list["InMemoryConduit"]] = defaultdict(list)

    def __init__(self, group: str) -> None:
        super().__init__(group)
        self._groups[group].append(self)
        logger.debug("conduit joined", group=group, peers=len(self._groups[group]))

    @classmethod
    def peers(cls, group: str) -> int:
        """Number of open conduits on a group."""
        return len(cls._groups.get(group, ()))

    def post(self, message: dict[str, Any]) -> None:
        if self._closed:
            raise ConduitError(self.group, "post on a closed conduit")
        try:
            data = json.dumps(message)
        except (TypeError, ValueError) as e:
            raise ConduitError(self.group, "message is not serialisable", e) from e
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as e:
            raise ConduitError(self.group, "post needs a running event loop", e) from e

        for peer in tuple(self._groups.get(self.group, ())):
            if peer is not self:
                loop.call_soon(peer._receive, data)

    def _receive(self, data: str) -> None:
        self._deliver(json.loads(data))

    def spawn(self, group: str) -> "InMemoryConduit":
        return InMemoryConduit(group)

    def close(self) -> None:
        if self._closed:
            return
        super().close()
        members = self._groups.get(self.group)
        if members is not None:
            if self in members:
                members.remove(self)
            if not members:
                del self._groups[self.group]
        logger.debug("conduit left", group=self.group)
