"""Heart rate training zones (% of max HR).

Five fixed bands derived from a single maximum heart rate:

    Z1 50-60%  Recovery
    Z2 60-70%  Aerobic
    Z3 70-80%  Anaerobic
    Z4 80-90%  VO2 Max
    Z5 90-100% Neuromuscular

The bands and the calorie-per-minute table live in :class:`ZoneConfig` so
tests and callers can swap them out without touching module state.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from pulsetrack.errors import ValidationError


class Zone(str, Enum):
    """Heart rate zone label."""

    Z1 = "Z1"
    Z2 = "Z2"
    Z3 = "Z3"
    Z4 = "Z4"
    Z5 = "Z5"


ZONE_NAMES = {
    Zone.Z1: "Recovery",
    Zone.Z2: "Aerobic",
    Zone.Z3: "Anaerobic",
    Zone.Z4: "VO2 Max",
    Zone.Z5: "Neuromuscular",
}

FAT_BURN_ZONES = (Zone.Z1, Zone.Z2)
CARDIO_ZONES = (Zone.Z3, Zone.Z4, Zone.Z5)

# Age-based default: 220 - 30 years
DEFAULT_MAX_HEART_RATE = 190


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties away from zero for positives."""
    return int(math.floor(value + 0.5))


def _frozen(mapping: dict) -> Mapping:
    return MappingProxyType(dict(mapping))


def _check_max_heart_rate(max_heart_rate: object) -> None:
    if (
        isinstance(max_heart_rate, bool)
        or not isinstance(max_heart_rate, int)
        or max_heart_rate <= 0
    ):
        raise ValidationError(
            f"max_heart_rate must be a positive integer, got {max_heart_rate!r}",
            field="max_heart_rate",
        )


def _check_fractions(fractions: Mapping[Zone, tuple[float, float]]) -> None:
    """Each band must be non-empty, and floors and ceilings must both ascend."""
    lows = [fractions[z][0] for z in Zone]
    highs = [fractions[z][1] for z in Zone]
    if any(lo <= 0 for lo in lows) or lows != sorted(lows):
        raise ValidationError("zone floors must be positive and ascending", field="fractions")
    if highs != sorted(highs):
        raise ValidationError("zone ceilings must be ascending", field="fractions")
    for zone, lo, hi in zip(Zone, lows, highs):
        if lo >= hi:
            raise ValidationError(
                f"{zone.value} floor {lo} must be below its ceiling {hi}", field="fractions"
            )


@dataclass(frozen=True)
class ZoneConfig:
    """Zone fractions, calorie calibration, and the athlete's max HR."""

    max_heart_rate: int = DEFAULT_MAX_HEART_RATE
    fractions: Mapping[Zone, tuple[float, float]] = field(
        default_factory=lambda: _frozen({
            Zone.Z1: (0.50, 0.60),
            Zone.Z2: (0.60, 0.70),
            Zone.Z3: (0.70, 0.80),
            Zone.Z4: (0.80, 0.90),
            Zone.Z5: (0.90, 1.00),
        })
    )
    # kcal per minute spent in each zone (rough estimates)
    calories_per_minute: Mapping[Zone, float] = field(
        default_factory=lambda: _frozen({
            Zone.Z1: 8,
            Zone.Z2: 12,
            Zone.Z3: 16,
            Zone.Z4: 20,
            Zone.Z5: 25,
        })
    )

    def __post_init__(self) -> None:
        _check_max_heart_rate(self.max_heart_rate)
        if set(self.fractions) != set(Zone):
            raise ValidationError("fractions must define Z1-Z5", field="fractions")
        if set(self.calories_per_minute) != set(Zone):
            raise ValidationError(
                "calories_per_minute must define Z1-Z5", field="calories_per_minute"
            )
        _check_fractions(self.fractions)
        # Freeze caller-supplied dicts too
        object.__setattr__(self, "fractions", _frozen(self.fractions))
        object.__setattr__(self, "calories_per_minute", _frozen(self.calories_per_minute))


DEFAULT_ZONE_CONFIG = ZoneConfig()


@dataclass(frozen=True)
class HeartRateZones:
    """Concrete bpm bounds for each zone."""

    max_heart_rate: int
    zone_bounds: Mapping[Zone, tuple[int, int]]

    def floor(self, zone: Zone) -> int:
        return self.zone_bounds[zone][0]

    def to_dict(self) -> dict[str, dict]:
        """Convert to a plain dict (JSON-friendly)."""
        return {
            zone.value: {"min": lo, "max": hi, "name": ZONE_NAMES[zone]}
            for zone, (lo, hi) in self.zone_bounds.items()
        }

    def __repr__(self) -> str:
        bands = ", ".join(f"{z.value}={lo}-{hi}" for z, (lo, hi) in self.zone_bounds.items())
        return f"HeartRateZones(max={self.max_heart_rate}, {bands})"


def build_zones(
    max_heart_rate: int,
    config: ZoneConfig = DEFAULT_ZONE_CONFIG,
) -> HeartRateZones:
    """Derive zone bounds from a maximum heart rate.

    Args:
        max_heart_rate: Athlete max HR in bpm; must be a positive integer.
        config: Zone fractions to apply.

    Returns:
        HeartRateZones with integer bpm bounds (half-up rounded).
    """
    _check_max_heart_rate(max_heart_rate)
    bounds = {
        zone: (
            round_half_up(max_heart_rate * config.fractions[zone][0]),
            round_half_up(max_heart_rate * config.fractions[zone][1]),
        )
        for zone in Zone
    }
    return HeartRateZones(max_heart_rate=max_heart_rate, zone_bounds=_frozen(bounds))


def classify(heart_rate: float | None, zones: HeartRateZones) -> Zone | None:
    """Return the highest zone whose floor ``heart_rate`` reaches.

    Readings above Z5's ceiling still count as Z5; readings below Z1's
    floor (or missing) are unzoned.
    """
    if heart_rate is None:
        return None
    for zone in reversed(Zone):
        if heart_rate >= zones.floor(zone):
            return zone
    return None


def empty_breakdown() -> dict[str, int]:
    """Zeroed ``{"Z1": 0, ..., "Z5": 0}`` dict."""
    return {zone.value: 0 for zone in Zone}
