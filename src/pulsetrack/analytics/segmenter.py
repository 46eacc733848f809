"""Session segmentation: split an ordered telemetry stream into workouts.

The segmenter is a two-state machine folded over the samples:

    Idle ──sample──▶ Accumulating
    Accumulating ──gap > max_gap or sport change──▶ (close) Accumulating
    Accumulating ──end of stream──▶ (close)

Closing a session emits it only when ``last_time - start`` reaches the
minimum duration; shorter candidates are discarded.  Discards are not
errors, but they are reported through an optional ``on_discard`` callback
and a DEBUG log line so callers can tell filtered activity from none.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, Union

from pulsetrack.errors import ValidationError
from pulsetrack.telemetry import (
    DEFAULT_DETECTION_CONFIG,
    SessionDetectionConfig,
    TelemetrySample,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionSpan:
    """A closed, raw session: boundaries plus member samples."""

    sport: str
    start: datetime
    last_time: datetime
    samples: tuple[TelemetrySample, ...]

    @property
    def duration_sec(self) -> float:
        return (self.last_time - self.start).total_seconds()

    def __repr__(self) -> str:
        return (
            f"SessionSpan({self.sport}, {self.start.isoformat()}, "
            f"dur={self.duration_sec / 60:.1f}min, n={len(self.samples)})"
        )


@dataclass(frozen=True)
class Idle:
    """No session open."""


@dataclass
class Accumulating:
    """A session is open and collecting samples."""

    sport: str
    start: datetime
    last_time: datetime
    samples: list[TelemetrySample] = field(default_factory=list)

    @classmethod
    def open(cls, sample: TelemetrySample) -> Accumulating:
        return cls(
            sport=sample.sport_label,
            start=sample.timestamp,
            last_time=sample.timestamp,
            samples=[sample],
        )

    def close(self) -> SessionSpan:
        return SessionSpan(
            sport=self.sport,
            start=self.start,
            last_time=self.last_time,
            samples=tuple(self.samples),
        )


SegmenterState = Union[Idle, Accumulating]

DiscardCallback = Callable[[SessionSpan], None]


def _is_boundary(
    state: Accumulating,
    sample: TelemetrySample,
    config: SessionDetectionConfig,
) -> bool:
    gap = (sample.timestamp - state.last_time).total_seconds()
    if gap < 0:
        raise ValidationError(
            f"sample at {sample.timestamp.isoformat()} is earlier than "
            f"{state.last_time.isoformat()}; samples must be sorted",
            field="timestamp",
        )
    return gap > config.max_gap_sec or sample.sport_label != state.sport


def step(
    state: SegmenterState,
    sample: TelemetrySample,
    config: SessionDetectionConfig = DEFAULT_DETECTION_CONFIG,
) -> tuple[SegmenterState, SessionSpan | None]:
    """Advance the state machine by one sample.

    An ``Accumulating`` state is extended in place and returned as the next
    state, so a caller holding the previous state sees the new sample too.
    Copy it first if the old state must be kept.  Closed spans are immutable
    snapshots and are never affected.

    Returns:
        ``(next_state, closed)`` where ``closed`` is the span that this
        sample ended (before the duration filter), or None.
    """
    if isinstance(state, Idle):
        return Accumulating.open(sample), None

    if _is_boundary(state, sample, config):
        return Accumulating.open(sample), state.close()

    state.samples.append(sample)
    state.last_time = sample.timestamp
    return state, None


def finalize(
    span: SessionSpan,
    config: SessionDetectionConfig = DEFAULT_DETECTION_CONFIG,
) -> bool:
    """True if ``span`` is long enough to keep."""
    return span.duration_sec >= config.min_session_duration_sec


def segment(
    samples: Iterable[TelemetrySample],
    config: SessionDetectionConfig = DEFAULT_DETECTION_CONFIG,
    on_discard: DiscardCallback | None = None,
) -> list[SessionSpan]:
    """Partition an ascending sample stream into session spans.

    Args:
        samples: Telemetry samples, sorted ascending by timestamp.
        config: Gap and minimum-duration rules.
        on_discard: Called with every candidate dropped for being too short.

    Returns:
        Accepted spans in time order.

    Raises:
        ValidationError: If a sample is earlier than its predecessor.
    """
    spans: list[SessionSpan] = []

    def _emit(span: SessionSpan) -> None:
        if finalize(span, config):
            spans.append(span)
            return
        logger.debug(
            "discarding short %s session at %s (%.1f min < %.1f min)",
            span.sport,
            span.start.isoformat(),
            span.duration_sec / 60.0,
            config.min_session_duration_minutes,
        )
        if on_discard is not None:
            on_discard(span)

    state: SegmenterState = Idle()
    for sample in samples:
        state, closed = step(state, sample, config)
        if closed is not None:
            _emit(closed)

    if isinstance(state, Accumulating):
        _emit(state.close())

    return spans
