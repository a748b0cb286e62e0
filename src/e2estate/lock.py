"""Advisory cross-process lock for the state document.

Protocol: the lock is a sibling file created with O_CREAT|O_EXCL. Whoever
creates it holds it; release deletes it. A lock file whose mtime (UTC) is
older than the stale threshold belongs to a writer that crashed and is
reclaimed (deleted and recreated). Acquisition is a bounded poll loop with
no fairness: first to see the file absent (or stale) wins.

This is best-effort. The lock is re-checked right before a reclaim and left
alone if its mtime moved, but two processes that both judge the same lock
stale at the same instant can still both proceed; the atomic replace in the
store keeps the document itself whole in that case.
"""

from __future__ import annotations

import contextlib
import os
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from e2estate.core.diagnostics import emit
from e2estate.core.logging import get_logger

_logger = get_logger(__name__)

LOCK_SUFFIX = ".lock"


def lock_path_for(document_path: Path) -> Path:
    return document_path.with_name(document_path.name + LOCK_SUFFIX)


def _lock_mtime(lock_path: Path) -> float | None:
    try:
        return lock_path.stat().st_mtime
    except FileNotFoundError:
        return None


def _age_from_mtime(mtime: float) -> float:
    modified = datetime.fromtimestamp(mtime, UTC)
    return (datetime.now(UTC) - modified).total_seconds()


def lock_age_seconds(lock_path: Path) -> float | None:
    """Age of the lock file from its mtime, in UTC; None if it does not exist."""
    mtime = _lock_mtime(lock_path)
    return None if mtime is None else _age_from_mtime(mtime)


@dataclass
class AdvisoryLock:
    path: Path
    timeout_ms: int = 5000
    retry_delay_ms: int = 100
    stale_seconds: int = 120
    held: bool = False
    reclaimed: bool = False

    def acquire(self) -> bool:
        """Poll until the lock is created or the timeout elapses.

        Returns:
            True when held, False on timeout.

        Raises:
            OSError: anything other than contention (permissions, bad parent).
        """
        deadline = time.monotonic() + self.timeout_ms / 1000.0
        attempts = 0
        while True:
            attempts += 1
            if self._try_create():
                self.held = True
                _logger.debug(f"Acquired {self.path} after {attempts} attempt(s)")
                return True

            mtime = _lock_mtime(self.path)
            if mtime is None:
                # Released between our create and stat; go again right away.
                continue
            age = _age_from_mtime(mtime)
            if age > self.stale_seconds:
                self._reclaim(mtime, age)
                continue

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                _logger.debug(f"Gave up on {self.path} after {attempts} attempt(s)")
                return False
            time.sleep(min(self.retry_delay_ms / 1000.0, remaining))

    def release(self) -> None:
        if not self.held:
            return
        self.held = False
        with contextlib.suppress(FileNotFoundError):
            self.path.unlink()

    def _try_create(self) -> bool:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            fd = os.open(str(self.path), os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            return False
        try:
            os.write(fd, f"pid={os.getpid()}\nstarted={int(time.time())}\n".encode("utf-8"))
        finally:
            os.close(fd)
        return True

    def _reclaim(self, observed_mtime: float, age: float) -> None:
        # Another contender may have reclaimed and recreated it since the stat.
        if _lock_mtime(self.path) != observed_mtime:
            _logger.debug(f"Lock {self.path} changed since it was judged stale; not reclaiming")
            return
        _logger.warning(
            f"Reclaiming stale lock {self.path} (age {age:.0f}s > {self.stale_seconds}s)"
        )
        with contextlib.suppress(FileNotFoundError):
            self.path.unlink()
        self.reclaimed = True
        emit(
            "lock.reclaimed",
            component="e2estate.lock",
            operation="acquire",
            data={"path": str(self.path), "age_seconds": round(age, 3)},
        )
