"""
eventtram - event bus with named channels and request/reply queries

```python
from eventtram import EventTram

tram = EventTram()
tram.on("cart:updated", lambda payload: print(payload))
tram.publish_sync("cart:updated", {"items": 3})

tram.reply("cart:total", lambda a, b: a + b)
tram.query("cart:total", 2, 3)  # 5

orders = tram.channel("orders")  # independent namespace
```

Deferred publish() runs subscribers on a later asyncio tick; pass a
ManualScheduler to drive delivery from synchronous code. Cross-process
delivery is provided by BroadcastNotifyStrategy over a conduit.
"""

from eventtram.channel import Channel, ReadonlyChannel, WriteonlyChannel
from eventtram.config import BroadcastOptions, ChannelOptions, RedisConduitOptions
from eventtram.errors import (
    ConduitError,
    PayloadValidationError,
    QueryTimeoutError,
    SchedulerError,
    StrategyError,
    TramError,
    UnknownChannelError,
    UnknownEventError,
    UnknownQueryError,
)
from eventtram.scheduler import AsyncioScheduler, ManualScheduler, Scheduler
from eventtram.strategies import BroadcastNotifyStrategy, LocalNotifyStrategy, NotifyStrategy
from eventtram.tram import EventTram
from eventtram.types import ChannelMap, ChannelSpec, Event, EventMap, Query, QueryMap

__version__ = "0.3.0"

__all__ = [
    "EventTram",
    "Channel",
    "ReadonlyChannel",
    "WriteonlyChannel",
    "ChannelOptions",
    "BroadcastOptions",
    "RedisConduitOptions",
    "NotifyStrategy",
    "LocalNotifyStrategy",
    "BroadcastNotifyStrategy",
    "Scheduler",
    "AsyncioScheduler",
    "ManualScheduler",
    "Event",
    "EventMap",
    "Query",
    "QueryMap",
    "ChannelSpec",
    "ChannelMap",
    "TramError",
    "UnknownEventError",
    "UnknownQueryError",
    "UnknownChannelError",
    "PayloadValidationError",
    "QueryTimeoutError",
    "StrategyError",
    "SchedulerError",
    "ConduitError",
]
