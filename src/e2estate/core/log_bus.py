"""In-process bus carrying every record emitted by the core logger.

Callers that want the cache's log lines (an E2E runner writing its own run
log, or tests asserting on warnings) subscribe here instead of scraping
stdout. Subscriber failures are written to stderr and never reach the
publishing code path.
"""

from __future__ import annotations

import contextlib
import sys
import traceback
from collections.abc import Callable, Iterator
from dataclasses import dataclass

Subscriber = Callable[["LogRecord"], None]


@dataclass(frozen=True)
class LogRecord:
    level_name: str
    plain: str
    logger_name: str


class LogBus:
    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []

    def subscribe(self, cb: Subscriber) -> None:
        self._subscribers.append(cb)

    def unsubscribe(self, cb: Subscriber) -> None:
        try:
            self._subscribers.remove(cb)
        except ValueError:
            return

    def publish(self, record: LogRecord) -> None:
        for cb in list(self._subscribers):
            try:
                cb(record)
            except Exception:
                # The core logger must not be used here (recursion).
                msg = "LogBus subscriber raised; suppressed.\n" + traceback.format_exc()
                with contextlib.suppress(Exception):
                    sys.stderr.write(msg)

    @contextlib.contextmanager
    def capture(self, level_name: str | None = None) -> Iterator[list[LogRecord]]:
        """Collect records published while the block runs.

        Args:
            level_name: Only keep records of this level (e.g. "WARNING").
        """
        records: list[LogRecord] = []

        def _collect(rec: LogRecord) -> None:
            if level_name is None or rec.level_name == level_name:
                records.append(rec)

        self.subscribe(_collect)
        try:
            yield records
        finally:
            self.unsubscribe(_collect)

    def clear(self) -> None:
        self._subscribers.clear()


_LOG_BUS: LogBus | None = None


def get_log_bus() -> LogBus:
    global _LOG_BUS
    if _LOG_BUS is None:
        _LOG_BUS = LogBus()
    return _LOG_BUS
