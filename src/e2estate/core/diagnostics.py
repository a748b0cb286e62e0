"""Diagnostics envelope + JSONL sink.

Schema of every envelope:
    {
      "event": "<string>",
      "component": "<string>",
      "operation": "<string>",
      "timestamp": "<iso8601 utc, trailing Z>",
      "data": { ... }
    }

The sink is registered at most once per process and self-filters when
`diagnostics.enabled` is false.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from e2estate.core.config import ConfigResolver
from e2estate.core.errors import ConfigError
from e2estate.core.events import get_event_bus
from e2estate.core.logging import get_logger

_logger = get_logger(__name__)


def build_envelope(
    *,
    event: str,
    component: str,
    operation: str,
    data: dict[str, Any],
) -> dict[str, Any]:
    ts = datetime.now(UTC).replace(microsecond=0).isoformat().replace("+00:00", "Z")
    return {
        "event": event,
        "component": component,
        "operation": operation,
        "timestamp": ts,
        "data": data,
    }


def emit(event: str, *, component: str, operation: str, data: dict[str, Any]) -> None:
    """Publish an envelope on the global event bus; never raises."""
    try:
        env = build_envelope(event=event, component=component, operation=operation, data=data)
        get_event_bus().publish(event, env)
    except Exception:
        return


def is_diagnostics_enabled(resolver: ConfigResolver) -> bool:
    try:
        return resolver.resolve_bool("diagnostics.enabled")
    except ConfigError as e:
        _logger.warning(f"{e}; treating diagnostics as disabled.")
        return False


_SINK: Callable[[str, dict[str, Any]], None] | None = None


def install_jsonl_sink(*, resolver: ConfigResolver) -> None:
    """Install the JSONL diagnostics sink subscriber (idempotent).

    Sink path comes from `diagnostics.path`. When diagnostics are disabled the
    subscriber performs no file IO.
    """
    global _SINK
    if _SINK is not None:
        return

    def _on_any_event(event: str, data: dict[str, Any]) -> None:
        if not is_diagnostics_enabled(resolver):
            return

        try:
            out_path = resolver.resolve_path("diagnostics.path")
        except ConfigError as e:
            _logger.warning(f"Cannot write diagnostics JSONL: {e}")
            return

        payload = data
        if "event" not in data or "timestamp" not in data:
            payload = build_envelope(
                event=event, component="unknown", operation="unknown", data=data
            )

        try:
            out_path.parent.mkdir(parents=True, exist_ok=True)
            line = json.dumps(payload, ensure_ascii=True, separators=(",", ":"), sort_keys=True)
            with out_path.open("a", encoding="utf-8") as f:
                f.write(line)
                f.write("\n")
        except OSError as e:
            _logger.warning(f"Diagnostics sink write failed: {type(e).__name__}: {e}")

    get_event_bus().subscribe_all(_on_any_event)
    _SINK = _on_any_event


def uninstall_jsonl_sink() -> None:
    global _SINK
    if _SINK is None:
        return
    get_event_bus().unsubscribe_all(_SINK)
    _SINK = None
