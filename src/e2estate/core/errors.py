"""Error handling with friendly messages."""

from __future__ import annotations


class E2EStateError(Exception):
    """Base exception for all e2estate errors."""

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(message)

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message}\nSuggestion: {self.suggestion}"
        return self.message


class ConfigError(E2EStateError):
    """Configuration error."""

    pass


class StateArgumentError(E2EStateError, ValueError):
    """A caller passed arguments the state core cannot work with.

    This is the only error raised by the cache operations themselves. Runtime
    conditions (contention, corrupt files, disk trouble) are reported through
    result values instead.
    """

    pass


class UnknownComponentTypeError(StateArgumentError):
    """Component type is not one of indexer, downloadclient, importlist."""

    def __init__(self, value: object) -> None:
        super().__init__(
            f"Unknown component type: {value!r}",
            "Use one of: indexer, downloadclient, importlist",
        )
