"""Core logging for e2estate.

Four verbosity levels, matching the `logging.level` config key:
- QUIET (0): Warnings + errors
- NORMAL (1): Info + warnings + errors
- VERBOSE (2): Store outcomes (written / no_changes) and selection details
- DEBUG (3): Everything, including lock polling and recovered parse failures

Usage:
    from e2estate.core.logging import get_logger

    logger = get_logger(__name__)
    logger.warning("lock timeout")

Every emitted line is also published on the LogBus so an enclosing E2E
runner can route it into its own run log.
"""

from __future__ import annotations

import sys
from enum import IntEnum

from e2estate.core.log_bus import LogRecord, get_log_bus


class VerbosityLevel(IntEnum):
    """Verbosity levels for e2estate."""

    QUIET = 0
    NORMAL = 1
    VERBOSE = 2
    DEBUG = 3


_LEVELS_BY_NAME = {
    "quiet": VerbosityLevel.QUIET,
    "normal": VerbosityLevel.NORMAL,
    "verbose": VerbosityLevel.VERBOSE,
    "debug": VerbosityLevel.DEBUG,
}

_VERBOSITY: VerbosityLevel = VerbosityLevel.NORMAL
_USE_COLORS: bool = True


def set_verbosity(level: int | str | VerbosityLevel) -> None:
    """Set global verbosity level.

    Args:
        level: 0-3, a VerbosityLevel, or a level name (quiet|normal|verbose|debug)
    """
    global _VERBOSITY

    if isinstance(level, str):
        try:
            level = _LEVELS_BY_NAME[level.strip().lower()]
        except KeyError:
            raise ValueError(f"Unknown verbosity level: {level!r}") from None
    _VERBOSITY = VerbosityLevel(level)


def get_verbosity() -> VerbosityLevel:
    return _VERBOSITY


def set_colors(enabled: bool) -> None:
    global _USE_COLORS
    _USE_COLORS = enabled


class E2EStateLogger:
    """Logger with verbosity support."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "VERBOSE": "\033[34m",  # Blue
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "RESET": "\033[0m",
    }

    def __init__(self, name: str):
        self.name = name

    def _format_message(self, level: str, message: str) -> str:
        if _USE_COLORS and sys.stderr.isatty():
            color = self.COLORS.get(level, "")
            reset = self.COLORS["RESET"]
            return f"{color}[{level.lower()}]{reset} {message}"
        return f"[{level.lower()}] {message}"

    def _log(self, level: VerbosityLevel, level_name: str, message: str) -> None:
        if level > _VERBOSITY:
            return

        plain = f"[{level_name.lower()}] {message}"
        get_log_bus().publish(LogRecord(level_name=level_name, plain=plain, logger_name=self.name))

        # stdout belongs to the CLI's JSON output.
        print(self._format_message(level_name, message), file=sys.stderr)

    def debug(self, message: str) -> None:
        self._log(VerbosityLevel.DEBUG, "DEBUG", message)

    def verbose(self, message: str) -> None:
        self._log(VerbosityLevel.VERBOSE, "VERBOSE", message)

    def info(self, message: str) -> None:
        self._log(VerbosityLevel.NORMAL, "INFO", message)

    def warning(self, message: str) -> None:
        self._log(VerbosityLevel.QUIET, "WARNING", message)

    def error(self, message: str) -> None:
        """Log error message (always shown)."""
        self._log(VerbosityLevel.QUIET, "ERROR", message)


_LOGGERS: dict[str, E2EStateLogger] = {}


def get_logger(name: str = __name__) -> E2EStateLogger:
    """Get logger instance for module.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    if name not in _LOGGERS:
        _LOGGERS[name] = E2EStateLogger(name)

    return _LOGGERS[name]
