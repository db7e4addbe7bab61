from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from parlor.api.runtime import build_runtime


def test_build_runtime_rejects_unknown_venue_timezone(monkeypatch) -> None:
    monkeypatch.setenv("VENUE_TIMEZONE", "Mars/Olympus_Mons")

    with pytest.raises(ValueError, match="unknown venue timezone"):
        build_runtime()


def test_build_runtime_keeps_configured_venue_timezone(monkeypatch) -> None:
    monkeypatch.setenv("VENUE_TIMEZONE", "Asia/Kolkata")
    monkeypatch.delenv("REDIS_URL", raising=False)
    monkeypatch.delenv("HARDWARE_ENABLED", raising=False)

    runtime = build_runtime()
    try:
        assert runtime.venue_timezone == "Asia/Kolkata"
    finally:
        runtime.shutdown()
