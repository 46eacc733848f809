"""Reductions over detected sessions: weekly zones, training load, sports.

All functions are pure and accept empty input, returning zeroed or empty
structures rather than raising.
"""

from __future__ import annotations

import json
from collections import defaultdict
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Sequence

import numpy as np

from pulsetrack.analytics.metrics import WorkoutSession
from pulsetrack.analytics.zones import Zone, empty_breakdown, round_half_up
from pulsetrack.telemetry import TelemetrySample, as_utc


@dataclass(frozen=True)
class TrainingLoadPoint:
    """Summed TRIMP for one calendar day."""

    date: date
    trimp_score: int

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date.isoformat(), "trimp_score": self.trimp_score}


@dataclass
class ZoneAnalysis:
    """Zone distribution across a set of sessions."""

    total_duration_minutes: int = 0
    total_calories: int = 0
    zone_distribution: dict[str, int] = field(default_factory=empty_breakdown)
    zone_percentages: dict[str, int] = field(default_factory=empty_breakdown)
    sessions_analyzed: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict (JSON-friendly)."""
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)


@dataclass
class SportSummary:
    """Raw-sample statistics for one sport label."""

    sport: str
    record_count: int
    unique_days: int
    first_recorded: datetime
    last_recorded: datetime
    avg_heart_rate: int | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "sport": self.sport,
            "record_count": self.record_count,
            "unique_days": self.unique_days,
            "date_range": {
                "first_recorded": self.first_recorded.isoformat(),
                "last_recorded": self.last_recorded.isoformat(),
            },
            "avg_heart_rate": self.avg_heart_rate,
        }


# ---------------------------------------------------------------------------
# Date windows
# ---------------------------------------------------------------------------


def session_date(session: WorkoutSession) -> date:
    """UTC calendar date on which a session started."""
    return as_utc(session.session_start).date()


def week_range(week_start: date) -> tuple[date, date]:
    """Inclusive ``(week_start, week_start + 6 days)``."""
    return week_start, week_start + timedelta(days=6)


def sessions_in_range(
    sessions: Iterable[WorkoutSession],
    start: date | None = None,
    end: date | None = None,
) -> list[WorkoutSession]:
    """Sessions whose start date falls in ``[start, end]`` (either bound optional)."""
    selected = []
    for s in sessions:
        day = session_date(s)
        if start is not None and day < start:
            continue
        if end is not None and day > end:
            continue
        selected.append(s)
    return selected


# ---------------------------------------------------------------------------
# Reductions
# ---------------------------------------------------------------------------


def weekly_zone_breakdown(sessions: Iterable[WorkoutSession]) -> dict[str, int]:
    """Sum each zone's minutes across sessions (no normalization).

    Callers scope ``sessions`` to a week with :func:`week_range` and
    :func:`sessions_in_range`.
    """
    totals = empty_breakdown()
    for s in sessions:
        for zone in Zone:
            totals[zone.value] += s.zones.get(zone.value, 0)
    return totals


def training_load_trend(sessions: Iterable[WorkoutSession]) -> list[TrainingLoadPoint]:
    """Daily TRIMP totals, sorted by date.

    Days without sessions are omitted; a missing ``trimp_score`` counts as 0.
    """
    daily: dict[date, int] = defaultdict(int)
    for s in sessions:
        daily[session_date(s)] += s.trimp_score or 0
    return [TrainingLoadPoint(date=d, trimp_score=daily[d]) for d in sorted(daily)]


def zone_analysis(sessions: Sequence[WorkoutSession]) -> ZoneAnalysis:
    """Zone totals plus each zone's share of total session duration."""
    if not sessions:
        return ZoneAnalysis()

    distribution = weekly_zone_breakdown(sessions)
    total_duration = sum(s.duration_min for s in sessions)
    total_calories = sum(s.calories_burned or 0 for s in sessions)

    if total_duration > 0:
        percentages = {
            z: round_half_up(minutes / total_duration * 100.0)
            for z, minutes in distribution.items()
        }
    else:
        percentages = empty_breakdown()

    return ZoneAnalysis(
        total_duration_minutes=total_duration,
        total_calories=total_calories,
        zone_distribution=distribution,
        zone_percentages=percentages,
        sessions_analyzed=len(sessions),
    )


def sport_breakdown(samples: Iterable[TelemetrySample]) -> list[SportSummary]:
    """Per-sport sample counts, active days, date range and mean HR.

    Samples without a sport label are skipped.  Ordered by record count,
    most frequent first.
    """
    by_sport: dict[str, list[TelemetrySample]] = defaultdict(list)
    for s in samples:
        if s.sport:
            by_sport[s.sport].append(s)

    summaries = []
    for sport, group in by_sport.items():
        timestamps = [s.timestamp for s in group]
        hrs = [s.heart_rate for s in group if s.heart_rate is not None and s.heart_rate > 0]
        days = {as_utc(t).date() for t in timestamps}
        summaries.append(SportSummary(
            sport=sport,
            record_count=len(group),
            unique_days=len(days),
            first_recorded=min(timestamps),
            last_recorded=max(timestamps),
            avg_heart_rate=round_half_up(float(np.mean(hrs))) if hrs else None,
        ))

    summaries.sort(key=lambda s: (-s.record_count, s.sport))
    return summaries
