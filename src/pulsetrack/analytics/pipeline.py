"""Detection pipeline: ordered samples in, enriched workout sessions out."""

from __future__ import annotations

import logging
from typing import Sequence

from pulsetrack.analytics.metrics import WorkoutSession, compute_session_metrics
from pulsetrack.analytics.segmenter import DiscardCallback, segment
from pulsetrack.analytics.zones import DEFAULT_ZONE_CONFIG, ZoneConfig
from pulsetrack.telemetry import (
    DEFAULT_DETECTION_CONFIG,
    SessionDetectionConfig,
    TelemetrySample,
    ensure_sorted,
)

logger = logging.getLogger(__name__)


def detect_sessions(
    samples: Sequence[TelemetrySample],
    config: SessionDetectionConfig | None = None,
    zone_config: ZoneConfig | None = None,
    on_discard: DiscardCallback | None = None,
) -> list[WorkoutSession]:
    """Detect workout sessions and compute their metrics.

    Args:
        samples: Heart-rate samples already filtered to the valid band and
            sorted ascending (see :func:`pulsetrack.telemetry.filter_samples`).
        config: Session boundary rules (default 10 min / 5 min gap).
        zone_config: Zone bands, calorie table and athlete max HR.
        on_discard: Optional callback for candidates shorter than the minimum.

    Returns:
        WorkoutSession records in time order.  Empty input yields ``[]``.

    Raises:
        ValidationError: If the samples are not sorted by timestamp.
    """
    config = config or DEFAULT_DETECTION_CONFIG
    zone_config = zone_config or DEFAULT_ZONE_CONFIG

    ensure_sorted(samples)
    spans = segment(samples, config, on_discard=on_discard)
    sessions = [compute_session_metrics(span, zone_config) for span in spans]

    logger.debug(
        "detected %d session(s) from %d sample(s)", len(sessions), len(samples)
    )
    return sessions
