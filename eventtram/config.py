"""
Configuration models

Pydantic models shared by channels, the hub, strategies and conduits.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from eventtram.scheduler import Scheduler


class ChannelOptions(BaseModel):
    """Options recognised by Channel and EventTram constructors."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    throw_immediately: bool = Field(
        False,
        description="Re-raise a subscriber error from the dispatch call and stop the fan-out",
    )
    notify_strategy: Any = Field(
        None,
        description="NotifyStrategy instance or factory(channel_name); local strategy when unset",
    )
    scheduler: Scheduler | None = Field(
        None, description="Deferred-dispatch scheduler; AsyncioScheduler when unset"
    )

    @field_validator("notify_strategy")
    @classmethod
    def _check_strategy(cls, value: Any) -> Any:
        from eventtram.strategies.base import NotifyStrategy

        if value is None or isinstance(value, NotifyStrategy) or callable(value):
            return value
        raise ValueError(
            f"notify_strategy must be a NotifyStrategy or a factory, got {type(value).__name__}"
        )

    def merge(self, **overrides: Any) -> "ChannelOptions":
        """Return a copy with the given fields replaced."""
        if not overrides:
            return self
        return type(self)(**{**dict(self), **overrides})


class BroadcastOptions(BaseModel):
    """Peer-broadcast strategy options."""

    model_config = ConfigDict(frozen=True)

    timeout_ms: int = Field(5000, gt=0, description="Peer query timeout in milliseconds")


class RedisConduitOptions(BaseModel):
    """Redis pub/sub conduit options."""

    model_config = ConfigDict(frozen=True)

    url: str = Field("redis://localhost:6379", description="Redis connection URL")
    prefix: str = Field("eventtram", description="Pub/sub channel prefix")
