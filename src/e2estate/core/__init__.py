"""Ambient infrastructure shared by the e2estate modules."""

from e2estate.core.config import ConfigResolver
from e2estate.core.errors import (
    ConfigError,
    E2EStateError,
    StateArgumentError,
    UnknownComponentTypeError,
)
from e2estate.core.events import EventBus, get_event_bus
from e2estate.core.logging import VerbosityLevel, get_logger, get_verbosity, set_verbosity

__all__ = [
    "ConfigResolver",
    "ConfigError",
    "E2EStateError",
    "StateArgumentError",
    "UnknownComponentTypeError",
    "EventBus",
    "get_event_bus",
    "VerbosityLevel",
    "get_logger",
    "get_verbosity",
    "set_verbosity",
]
