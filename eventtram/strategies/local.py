"""
Local strategy - in-process delivery

The usual strategy: publications go straight to the owning channel's
dispatch hook and queries call the local replier.
"""

from typing import Any

from eventtram.protocol.envelope import Publication
from eventtram.strategies.base import NotifyStrategy


class LocalNotifyStrategy(NotifyStrategy):
    """Deliver to the channel that owns this strategy."""

    def notify_subscribers(self, envelope: Publication) -> None:
        if self._hook is not None:
            self._hook(envelope)

    def query(self, name: str, *params: Any) -> Any:
        replier = self.repliers.get(name)
        if replier is None:
            return None
        return replier(*params)
