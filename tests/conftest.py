"""Shared fixtures and helpers for the pulsetrack test suite."""

from __future__ import annotations

import json
import os
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from pulsetrack.analytics.metrics import WorkoutSession
from pulsetrack.telemetry import TelemetrySample


T0 = datetime(2024, 3, 4, 7, 0, tzinfo=timezone.utc)  # a Monday


# ---------------------------------------------------------------------------
# Sample-building helpers
# ---------------------------------------------------------------------------


def make_block(
    start: datetime = T0,
    minutes: float = 12,
    heart_rate: int | None = 150,
    sport: str | None = "Running",
    interval_sec: float = 60.0,
) -> list[TelemetrySample]:
    """Evenly spaced samples covering ``minutes`` (both endpoints included)."""
    count = int(round(minutes * 60 / interval_sec)) + 1
    return [
        TelemetrySample(
            timestamp=start + timedelta(seconds=i * interval_sec),
            heart_rate=heart_rate,
            sport=sport,
        )
        for i in range(count)
    ]


def block_end(block: list[TelemetrySample]) -> datetime:
    return block[-1].timestamp


def make_session(
    start: datetime = T0,
    duration_min: int = 30,
    zones: dict[str, int] | None = None,
    trimp_score: int | None = 100,
    calories_burned: int = 300,
    sport: str = "Running",
) -> WorkoutSession:
    """Build a WorkoutSession directly, bypassing detection."""
    return WorkoutSession(
        sport=sport,
        session_start=start,
        session_end=start + timedelta(minutes=duration_min),
        duration_min=duration_min,
        avg_heart_rate=140,
        zones=zones if zones is not None else {"Z1": 0, "Z2": 0, "Z3": duration_min, "Z4": 0, "Z5": 0},
        calories_burned=calories_burned,
        intensity_score=74,
        trimp_score=trimp_score,
    )


# ---------------------------------------------------------------------------
# Export file helpers
# ---------------------------------------------------------------------------


def sample_to_entry(sample: TelemetrySample) -> dict:
    return {
        "timestamp": sample.timestamp.isoformat().replace("+00:00", "Z"),
        "heart_rate": sample.heart_rate,
        "sport": sample.sport,
    }


def write_jsonl(path: Path, entries: list[dict]) -> Path:
    """Write a list of dicts as JSONL to the given path."""
    with open(path, "w") as f:
        for entry in entries:
            f.write(json.dumps(entry) + "\n")
    return path


@pytest.fixture
def scenario_a() -> list[TelemetrySample]:
    """12 min Running, 8 min gap, 20 min Cycling."""
    running = make_block(T0, minutes=12, heart_rate=150, sport="Running")
    cycling = make_block(
        block_end(running) + timedelta(minutes=8), minutes=20, heart_rate=130, sport="Cycling",
    )
    return running + cycling


@pytest.fixture
def new_york_tz():
    """Run the test with the process local timezone set to America/New_York."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is unavailable on this platform")
    saved = os.environ.get("TZ")
    os.environ["TZ"] = "America/New_York"
    time.tzset()
    yield
    if saved is None:
        os.environ.pop("TZ", None)
    else:
        os.environ["TZ"] = saved
    time.tzset()
