"""Structured error hierarchy for channels, strategies and conduits."""

from __future__ import annotations


class TramError(Exception):
    def __init__(self, code: str, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.cause = cause

    @classmethod
    def wrap(cls, err: Exception) -> TramError:
        if isinstance(err, TramError):
            return err
        return TramError("UNKNOWN", str(err), err)


class NamespaceError(TramError):
    def __init__(self, code: str, name: str, message: str) -> None:
        super().__init__(code, message)
        self.name = name


class UnknownEventError(NamespaceError):
    def __init__(self, channel: str, event: str) -> None:
        super().__init__(
            "UNKNOWN_EVENT", event, f'Event "{event}" is not registered on channel "{channel}"'
        )
        self.channel = channel


class UnknownQueryError(NamespaceError):
    def __init__(self, channel: str, query: str) -> None:
        super().__init__(
            "UNKNOWN_QUERY", query, f'Query "{query}" is not registered on channel "{channel}"'
        )
        self.channel = channel


class UnknownChannelError(NamespaceError):
    def __init__(self, channel: str) -> None:
        super().__init__("UNKNOWN_CHANNEL", channel, f'Channel "{channel}" is not registered')


class PayloadValidationError(TramError):
    def __init__(self, name: str, cause: Exception) -> None:
        super().__init__("INVALID_PAYLOAD", f'Invalid payload for "{name}": {cause}', cause)
        self.name = name


class QueryTimeoutError(TramError):
    def __init__(self, query: str, timeout_ms: int) -> None:
        super().__init__("QUERY_TIMEOUT", f'Query "{query}" timed out after {timeout_ms}ms')
        self.query = query
        self.timeout_ms = timeout_ms


class StrategyError(TramError):
    def __init__(self, message: str) -> None:
        super().__init__("STRATEGY_ERROR", message)


class SchedulerError(TramError):
    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__("SCHEDULER_ERROR", message, cause)


class ConduitError(TramError):
    def __init__(self, group: str, message: str, cause: Exception | None = None) -> None:
        super().__init__("CONDUIT_ERROR", f'Conduit "{group}": {message}', cause)
        self.group = group
