"""Telemetry samples, detection settings, and export loading.

Samples reach the engine already materialized.  This module holds the
sample type itself plus the helpers a caller uses to get a clean batch:
band/date/sport filtering (the in-memory version of the dashboard query)
and loading JSONL or CSV exports from disk.
"""

from __future__ import annotations

import csv
import json
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Sequence

from pulsetrack.errors import TelemetryFormatError, ValidationError


UNKNOWN_SPORT = "Unknown"


@dataclass(frozen=True)
class TelemetrySample:
    """A single heart-rate/GPS reading."""

    timestamp: datetime
    heart_rate: int | None = None
    sport: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    altitude: float | None = None
    speed: float | None = None

    @property
    def sport_label(self) -> str:
        return self.sport or UNKNOWN_SPORT


@dataclass(frozen=True)
class SessionDetectionConfig:
    """Boundary rules for session detection.

    ``min_heart_rate``/``max_heart_rate`` describe the band of plausible
    sensor readings, not the athlete's maximum heart rate.
    """

    min_session_duration_minutes: float = 10.0
    max_gap_minutes: float = 5.0
    min_heart_rate: int = 50
    max_heart_rate: int = 220

    def __post_init__(self) -> None:
        if self.min_session_duration_minutes < 0:
            raise ValidationError(
                "min_session_duration_minutes must be >= 0",
                field="min_session_duration_minutes",
            )
        if self.max_gap_minutes <= 0:
            raise ValidationError("max_gap_minutes must be > 0", field="max_gap_minutes")
        if not 0 < self.min_heart_rate < self.max_heart_rate:
            raise ValidationError(
                f"invalid heart rate band [{self.min_heart_rate}, {self.max_heart_rate}]",
                field="min_heart_rate",
            )

    @property
    def max_gap_sec(self) -> float:
        return self.max_gap_minutes * 60.0

    @property
    def min_session_duration_sec(self) -> float:
        return self.min_session_duration_minutes * 60.0


DEFAULT_DETECTION_CONFIG = SessionDetectionConfig()


# ---------------------------------------------------------------------------
# Ordering and filtering
# ---------------------------------------------------------------------------


def as_utc(dt: datetime) -> datetime:
    """Return ``dt`` in UTC; naive values are taken to already be UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def ensure_sorted(samples: Sequence[TelemetrySample]) -> None:
    """Raise ValidationError if timestamps ever go backwards."""
    for i in range(1, len(samples)):
        if samples[i].timestamp < samples[i - 1].timestamp:
            raise ValidationError(
                f"sample {i} at {samples[i].timestamp.isoformat()} precedes "
                f"sample {i - 1} at {samples[i - 1].timestamp.isoformat()}",
                field="timestamp",
            )


def filter_samples(
    samples: Iterable[TelemetrySample],
    config: SessionDetectionConfig = DEFAULT_DETECTION_CONFIG,
    start_date: date | None = None,
    end_date: date | None = None,
    sport: str | None = None,
) -> list[TelemetrySample]:
    """Keep samples with an in-band heart rate, optionally scoped by date and sport.

    Date bounds are inclusive and compare the sample's UTC calendar date.
    The result is sorted ascending by timestamp, ready for segmentation.
    """
    kept: list[TelemetrySample] = []
    for s in samples:
        if s.heart_rate is None:
            continue
        if not config.min_heart_rate <= s.heart_rate <= config.max_heart_rate:
            continue
        day = as_utc(s.timestamp).date()
        if start_date is not None and day < start_date:
            continue
        if end_date is not None and day > end_date:
            continue
        if sport is not None and s.sport != sport:
            continue
        kept.append(s)
    kept.sort(key=lambda s: s.timestamp)
    return kept


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 string or epoch seconds into an aware UTC datetime."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)):
        return datetime.fromtimestamp(float(value), tz=timezone.utc)
    elif isinstance(value, str) and value:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    else:
        raise ValueError(f"unsupported timestamp {value!r}")

    return as_utc(dt)


def _opt_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


def _opt_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return int(round(float(value)))


def sample_from_dict(entry: dict[str, Any]) -> TelemetrySample:
    """Build a sample from an export row.

    Accepts ``timestamp`` or the dashboard's ``recorded_time_utc`` column.
    """
    raw_ts = entry.get("timestamp", entry.get("recorded_time_utc"))
    if raw_ts is None:
        raise ValueError("missing timestamp")

    return TelemetrySample(
        timestamp=parse_timestamp(raw_ts),
        heart_rate=_opt_int(entry.get("heart_rate")),
        sport=entry.get("sport") or None,
        latitude=_opt_float(entry.get("latitude")),
        longitude=_opt_float(entry.get("longitude")),
        altitude=_opt_float(entry.get("altitude")),
        speed=_opt_float(entry.get("speed")),
    )


def _load_jsonl(path: Path) -> list[TelemetrySample]:
    samples: list[TelemetrySample] = []
    # Decoded line by line so a bad byte reports its line number
    with open(path, "rb") as f:
        for line_num, raw in enumerate(f, 1):
            try:
                line = raw.decode("utf-8").strip()
            except UnicodeDecodeError as e:
                raise TelemetryFormatError(f"invalid UTF-8 ({e.reason})", line=line_num) from e
            if not line:
                continue
            try:
                entry = json.loads(line)
            except json.JSONDecodeError as e:
                raise TelemetryFormatError(f"invalid JSON ({e.msg})", line=line_num) from e
            if not isinstance(entry, dict):
                raise TelemetryFormatError("expected a JSON object", line=line_num)
            try:
                samples.append(sample_from_dict(entry))
            except (TypeError, ValueError, OverflowError) as e:
                raise TelemetryFormatError(str(e), line=line_num) from e
    return samples


def _load_csv(path: Path) -> list[TelemetrySample]:
    samples: list[TelemetrySample] = []
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        try:
            # Header is line 1
            for line_num, row in enumerate(reader, 2):
                try:
                    samples.append(sample_from_dict(row))
                except (TypeError, ValueError, OverflowError) as e:
                    raise TelemetryFormatError(str(e), line=line_num) from e
        except UnicodeDecodeError as e:
            raise TelemetryFormatError(
                f"invalid UTF-8 ({e.reason})", line=reader.line_num + 1
            ) from e
    return samples


def load_samples(path: str | Path) -> list[TelemetrySample]:
    """Load a telemetry export (``.jsonl``/``.json`` lines, or ``.csv``).

    Samples are returned in file order; pass them through
    :func:`filter_samples` before detection.
    """
    path = Path(path)
    if not path.exists():
        raise TelemetryFormatError(f"file not found: {path}")

    if path.suffix.lower() == ".csv":
        return _load_csv(path)
    return _load_jsonl(path)
