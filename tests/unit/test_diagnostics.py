"""Tests for diagnostics envelopes and the JSONL sink."""

from __future__ import annotations

import json
import re
from pathlib import Path

from e2estate.core.config import ConfigResolver
from e2estate.core.diagnostics import build_envelope, emit, install_jsonl_sink
from e2estate.core.events import get_event_bus
from e2estate.models import empty_state
from e2estate.store import StoreSettings, write_state


def _resolver(tmp_path: Path, enabled: bool) -> ConfigResolver:
    return ConfigResolver(
        cli_args={"diagnostics": {"enabled": enabled, "path": str(tmp_path / "diag.jsonl")}},
        user_config_path=tmp_path / "none.yaml",
        system_config_path=tmp_path / "none.yaml",
    )


def test_envelope_shape() -> None:
    env = build_envelope(event="state.write", component="c", operation="o", data={"k": 1})

    assert set(env) == {"event", "component", "operation", "timestamp", "data"}
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z", env["timestamp"])


def test_emit_swallows_handler_failures() -> None:
    def _boom(data: dict) -> None:
        raise RuntimeError("handler failure")

    get_event_bus().subscribe("x", _boom)
    emit("x", component="c", operation="o", data={})


def test_sink_writes_when_enabled(tmp_path: Path) -> None:
    install_jsonl_sink(resolver=_resolver(tmp_path, True))

    write_state(tmp_path / "ids.json", empty_state(), StoreSettings(lock_timeout_ms=100))

    lines = (tmp_path / "diag.jsonl").read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    rec = json.loads(lines[0])
    assert rec["event"] == "state.write"
    assert rec["data"]["reason"] == "written"


def test_sink_silent_when_disabled(tmp_path: Path) -> None:
    install_jsonl_sink(resolver=_resolver(tmp_path, False))

    emit("state.write", component="c", operation="o", data={})

    assert not (tmp_path / "diag.jsonl").exists()


def test_sink_is_installed_once(tmp_path: Path) -> None:
    resolver = _resolver(tmp_path, True)
    install_jsonl_sink(resolver=resolver)
    install_jsonl_sink(resolver=resolver)

    emit("ping", component="c", operation="o", data={})

    assert len((tmp_path / "diag.jsonl").read_text(encoding="utf-8").splitlines()) == 1
