"""
Tests for configuration models
"""

import pytest
from pydantic import ValidationError

from eventtram import (
    BroadcastOptions,
    ChannelOptions,
    LocalNotifyStrategy,
    ManualScheduler,
    RedisConduitOptions,
)


class TestChannelOptions:
    """Test ChannelOptions model."""

    def test_defaults(self):
        options = ChannelOptions()

        assert options.throw_immediately is False
        assert options.notify_strategy is None
        assert options.scheduler is None

    def test_accepts_strategy_instance_or_factory(self):
        strategy = LocalNotifyStrategy()

        assert ChannelOptions(notify_strategy=strategy).notify_strategy is strategy
        assert ChannelOptions(notify_strategy=lambda name: strategy).notify_strategy is not None

    def test_rejects_other_strategy_values(self):
        with pytest.raises(ValidationError, match="notify_strategy"):
            ChannelOptions(notify_strategy="local")

    def test_is_frozen(self):
        options = ChannelOptions()

        with pytest.raises(ValidationError):
            options.throw_immediately = True

    def test_merge_keeps_objects(self):
        scheduler = ManualScheduler()
        strategy = LocalNotifyStrategy()
        options = ChannelOptions(scheduler=scheduler, notify_strategy=strategy)

        merged = options.merge(throw_immediately=True)

        assert merged.throw_immediately is True
        assert merged.scheduler is scheduler
        assert merged.notify_strategy is strategy
        assert options.throw_immediately is False

    def test_merge_without_overrides_returns_self(self):
        options = ChannelOptions()

        assert options.merge() is options


class TestBroadcastOptions:
    """Test BroadcastOptions model."""

    def test_default_timeout(self):
        assert BroadcastOptions().timeout_ms == 5000

    @pytest.mark.parametrize("timeout_ms", [0, -1])
    def test_timeout_must_be_positive(self, timeout_ms):
        with pytest.raises(ValidationError):
            BroadcastOptions(timeout_ms=timeout_ms)


class TestRedisConduitOptions:
    """Test RedisConduitOptions model."""

    def test_defaults(self):
        options = RedisConduitOptions()

        assert options.url == "redis://localhost:6379"
        assert options.prefix == "eventtram"
