"""Analytics engine for workout-session detection and training load.

Modules:
    zones     -- HR zone bands, classification, calorie calibration
    segmenter -- Gap/sport-change session segmentation
    metrics   -- Per-session zone minutes, calories, TRIMP, HR std-dev
    aggregate -- Weekly zone totals, daily training load, sport breakdown
    pipeline  -- detect_sessions() entry point
"""

from pulsetrack.analytics.zones import (
    Zone,
    ZoneConfig,
    HeartRateZones,
    build_zones,
    classify,
    DEFAULT_ZONE_CONFIG,
    DEFAULT_MAX_HEART_RATE,
)
from pulsetrack.analytics.segmenter import (
    SessionSpan,
    Idle,
    Accumulating,
    step,
    segment,
)
from pulsetrack.analytics.metrics import WorkoutSession, compute_session_metrics
from pulsetrack.analytics.aggregate import (
    weekly_zone_breakdown,
    training_load_trend,
    zone_analysis,
    sport_breakdown,
    sessions_in_range,
    week_range,
    TrainingLoadPoint,
    ZoneAnalysis,
    SportSummary,
)
from pulsetrack.analytics.pipeline import detect_sessions

__all__ = [
    # zones
    "Zone",
    "ZoneConfig",
    "HeartRateZones",
    "build_zones",
    "classify",
    "DEFAULT_ZONE_CONFIG",
    "DEFAULT_MAX_HEART_RATE",
    # segmenter
    "SessionSpan",
    "Idle",
    "Accumulating",
    "step",
    "segment",
    # metrics
    "WorkoutSession",
    "compute_session_metrics",
    # aggregate
    "weekly_zone_breakdown",
    "training_load_trend",
    "zone_analysis",
    "sport_breakdown",
    "sessions_in_range",
    "week_range",
    "TrainingLoadPoint",
    "ZoneAnalysis",
    "SportSummary",
    # pipeline
    "detect_sessions",
]
