"""Persistent state store for preferred component ids.

read_state never fails: a missing, empty, unreadable or malformed document
reads as the empty State. write_state never fails for runtime conditions:
contention and filesystem trouble come back as a WriteResult reason.

Write protocol:
1. Serialize the normalized candidate deterministically (sorted keys).
2. Take the advisory lock (see e2estate.lock), reclaiming a stale one.
3. If the on-disk bytes already equal the candidate: no_changes.
4. Otherwise write a temp file next to the document and os.replace it in.
The document is never cached in memory between calls.
"""

from __future__ import annotations

import contextlib
import json
import os
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any

from e2estate.core.config import ConfigResolver
from e2estate.core.diagnostics import emit
from e2estate.core.errors import StateArgumentError
from e2estate.core.logging import get_logger
from e2estate.lock import AdvisoryLock, lock_path_for
from e2estate.models import SCHEMA_VERSION, empty_state, normalize_state

_logger = get_logger(__name__)


class WriteReason(StrEnum):
    WRITTEN = "written"
    NO_CHANGES = "no_changes"
    LOCK_TIMEOUT = "lock_timeout"
    IO_ERROR = "io_error"


@dataclass(frozen=True)
class WriteResult:
    wrote: bool
    reason: WriteReason
    attempted: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {"attempted": self.attempted, "wrote": self.wrote, "reason": str(self.reason)}


@dataclass(frozen=True)
class StoreSettings:
    """Lock tunables for write_state."""

    lock_timeout_ms: int = 5000
    retry_delay_ms: int = 100
    stale_seconds: int = 120

    @classmethod
    def from_resolver(cls, resolver: ConfigResolver) -> StoreSettings:
        """Build settings from lock.timeout_ms, lock.retry_delay_ms, lock.stale_seconds.

        Raises:
            ConfigError: a value is not a non-negative integer.
        """
        return cls(
            lock_timeout_ms=resolver.resolve_int("lock.timeout_ms"),
            retry_delay_ms=resolver.resolve_int("lock.retry_delay_ms"),
            stale_seconds=resolver.resolve_int("lock.stale_seconds"),
        )


def serialize_state(state: dict[str, Any]) -> bytes:
    """Deterministic UTF-8 (no BOM) encoding of the normalized State.

    Raises:
        StateArgumentError: state is not a dict stamped with SCHEMA_VERSION.
    """
    if not isinstance(state, dict) or state.get("schemaVersion") != SCHEMA_VERSION:
        raise StateArgumentError(
            f"Refusing to persist a state without schemaVersion {SCHEMA_VERSION}",
            "Start from read_state() or empty_state()",
        )
    text = json.dumps(normalize_state(state), indent=2, sort_keys=True, ensure_ascii=False)
    return (text + "\n").encode("utf-8")


def read_state(path: str | Path) -> dict[str, Any]:
    """Read the State document at path, or the empty State on any failure."""
    p = Path(path)
    try:
        raw = json.loads(p.read_bytes().decode("utf-8-sig"))
    except FileNotFoundError:
        return empty_state()
    except (OSError, UnicodeDecodeError, ValueError) as e:
        # Includes a half-visible document from a non-atomic writer.
        _logger.debug(f"Unreadable state document {p}; using empty state ({type(e).__name__}: {e})")
        return empty_state()
    return normalize_state(raw)


def _atomic_write_bytes(path: Path, data: bytes) -> None:
    tmp_path = path.with_name(f"{path.name}.{os.getpid()}.tmp")
    try:
        with open(tmp_path, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        with contextlib.suppress(OSError):
            tmp_path.unlink()
        raise


def _read_current(path: Path) -> bytes | None:
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return None


def _finish(path: Path, reason: WriteReason, *, reclaimed: bool = False) -> WriteResult:
    result = WriteResult(wrote=reason is WriteReason.WRITTEN, reason=reason)
    emit(
        "state.write",
        component="e2estate.store",
        operation="write_state",
        data={"path": str(path), "reason": str(reason), "lock_reclaimed": reclaimed},
    )
    return result


def write_state(
    path: str | Path,
    state: dict[str, Any],
    settings: StoreSettings | None = None,
) -> WriteResult:
    """Persist state under the advisory lock.

    Returns:
        WriteResult with reason written, no_changes, lock_timeout or io_error.

    Raises:
        StateArgumentError: state is not a versioned State (nothing is touched).
    """
    p = Path(path)
    settings = settings or StoreSettings()
    payload = serialize_state(state)

    lock = AdvisoryLock(
        path=lock_path_for(p),
        timeout_ms=settings.lock_timeout_ms,
        retry_delay_ms=settings.retry_delay_ms,
        stale_seconds=settings.stale_seconds,
    )
    try:
        if not lock.acquire():
            _logger.warning(
                f"Timed out after {settings.lock_timeout_ms}ms waiting for {lock.path}; "
                "preferred ids were not persisted"
            )
            return _finish(p, WriteReason.LOCK_TIMEOUT)

        if _read_current(p) == payload:
            _logger.verbose(f"State document unchanged: {p}")
            return _finish(p, WriteReason.NO_CHANGES, reclaimed=lock.reclaimed)

        _atomic_write_bytes(p, payload)
        _logger.verbose(f"Wrote state document: {p}")
        return _finish(p, WriteReason.WRITTEN, reclaimed=lock.reclaimed)
    except OSError as e:
        _logger.warning(f"Could not persist state document {p}: {type(e).__name__}: {e}")
        return _finish(p, WriteReason.IO_ERROR, reclaimed=lock.reclaimed)
    finally:
        with contextlib.suppress(OSError):
            lock.release()
