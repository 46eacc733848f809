"""Per-session workout metrics.

Turns one closed :class:`SessionSpan` into a :class:`WorkoutSession`:
average HR, zone minutes, calories, TRIMP, intensity, fat-burn/cardio
split and HR standard deviation.

Zone minutes use a uniform time-per-sample approximation: the session's
wall-clock duration is spread evenly over its samples instead of using the
real inter-sample deltas.  With irregular sampling this over- or
under-weights individual readings, but the zone total still matches the
session duration.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import numpy as np

from pulsetrack.analytics.segmenter import SessionSpan
from pulsetrack.analytics.zones import (
    CARDIO_ZONES,
    DEFAULT_ZONE_CONFIG,
    FAT_BURN_ZONES,
    Zone,
    ZoneConfig,
    build_zones,
    classify,
    empty_breakdown,
    round_half_up,
)


@dataclass(frozen=True)
class WorkoutSession:
    """A detected workout with derived metrics."""

    sport: str
    session_start: datetime
    session_end: datetime
    duration_min: int
    avg_heart_rate: int | None
    zones: dict[str, int] = field(default_factory=empty_breakdown)
    calories_burned: int = 0
    intensity_score: int | None = None
    trimp_score: int | None = None
    fat_burn_ratio: float = 0.0
    cardio_ratio: float = 0.0
    bpm_std_dev: float | None = None
    # Declared in the output schema but never computed
    recovery_drop_bpm: int | None = None
    warmup_duration_sec: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict with ISO timestamps (JSON-friendly)."""
        return {
            "sport": self.sport,
            "session_start": self.session_start.isoformat(),
            "session_end": self.session_end.isoformat(),
            "duration_min": self.duration_min,
            "avg_heart_rate": self.avg_heart_rate,
            "calories_burned": self.calories_burned,
            "zones": dict(self.zones),
            "recovery_drop_bpm": self.recovery_drop_bpm,
            "intensity_score": self.intensity_score,
            "trimp_score": self.trimp_score,
            "fat_burn_ratio": self.fat_burn_ratio,
            "cardio_ratio": self.cardio_ratio,
            "bpm_std_dev": self.bpm_std_dev,
            "warmup_duration_sec": self.warmup_duration_sec,
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    def __repr__(self) -> str:
        avg = f"{self.avg_heart_rate}bpm" if self.avg_heart_rate is not None else "no HR"
        return (
            f"WorkoutSession({self.sport}, {self.session_start.isoformat()}, "
            f"dur={self.duration_min}min, avg={avg}, "
            f"trimp={self.trimp_score}, cal≈{self.calories_burned})"
        )


def _zone_minutes(
    span: SessionSpan,
    config: ZoneConfig,
) -> dict[str, int]:
    zones = build_zones(config.max_heart_rate, config)
    n = len(span.samples)
    seconds_per_reading = span.duration_sec / n if n > 1 else 1.0

    totals = {zone.value: 0.0 for zone in Zone}
    for sample in span.samples:
        if not sample.heart_rate:
            continue
        zone = classify(sample.heart_rate, zones)
        if zone is not None:
            totals[zone.value] += seconds_per_reading / 60.0

    return {k: round_half_up(v) for k, v in totals.items()}


def compute_session_metrics(
    span: SessionSpan,
    zone_config: ZoneConfig = DEFAULT_ZONE_CONFIG,
) -> WorkoutSession:
    """Compute all derived metrics for one closed session.

    A session with no valid heart rate readings is still returned, with
    ``None`` for the HR-derived scores and zero zone minutes.

    Args:
        span: Closed session from the segmenter.
        zone_config: Zone bands, calorie table and athlete max HR.

    Returns:
        A WorkoutSession.
    """
    hrs = np.asarray(
        [s.heart_rate for s in span.samples if s.heart_rate is not None and s.heart_rate > 0],
        dtype=np.float64,
    )
    max_hr = zone_config.max_heart_rate

    avg_hr = round_half_up(float(np.mean(hrs))) if hrs.size > 0 else None
    duration_min = round_half_up(span.duration_sec / 60.0)

    zone_mins = _zone_minutes(span, zone_config)

    calories = sum(
        round_half_up(zone_mins[zone.value] * zone_config.calories_per_minute[zone])
        for zone in Zone
    )

    fat_burn = sum(zone_mins[z.value] for z in FAT_BURN_ZONES)
    cardio = sum(zone_mins[z.value] for z in CARDIO_ZONES)
    total = fat_burn + cardio
    fat_burn_ratio = fat_burn / total if total > 0 else 0.0
    cardio_ratio = cardio / total if total > 0 else 0.0

    std_dev = round(float(np.std(hrs)), 1) if hrs.size >= 2 else None

    if avg_hr is not None:
        relative = avg_hr / max_hr
        trimp = round_half_up(duration_min * relative * 100.0)
        intensity = round_half_up(relative * 100.0)
    else:
        trimp = None
        intensity = None

    return WorkoutSession(
        sport=span.sport,
        session_start=span.start,
        session_end=span.last_time,
        duration_min=duration_min,
        avg_heart_rate=avg_hr,
        zones=zone_mins,
        calories_burned=calories,
        intensity_score=intensity,
        trimp_score=trimp,
        fat_burn_ratio=round(fat_burn_ratio, 2),
        cardio_ratio=round(cardio_ratio, 2),
        bpm_std_dev=std_dev,
    )
