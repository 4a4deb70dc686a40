"""
Speed Factor & Range Conversion
===============================
Scalar transforms turning ballistics at a range into the values the
weapon-behaviour file expects.

    factor = (range_m / (t · cos θ_impact)) / 32

speed_factor() returns either SpeedFactor or FactorRejected; a rejected
factor is never a number, so it cannot be mistaken for zero.
"""

import math
from dataclasses import dataclass
from typing import Union


MIN_IMPACT_COS   = 0.0872   # cos(85°): steeper impacts are rejected
FACTOR_DIVISOR   = 32.0
FACTOR_DECIMALS  = 3
RANGE_UNIT_M     = 30.3     # metres per output distance unit
RANGE_BUFFER_KM  = 0.5      # added to the max range of the upper fire mode


@dataclass(frozen=True)
class SpeedFactor:
    value: float


@dataclass(frozen=True)
class FactorRejected:
    reason: str


FactorOutcome = Union[SpeedFactor, FactorRejected]


def _round_half_up(value: float, decimals: int = 0) -> float:
    scale = 10 ** decimals
    return math.floor(value * scale + 0.5) / scale


def speed_factor(range_km: float, flight_time_s: float,
                 impact_angle_deg: float) -> FactorOutcome:
    """
    Speed factor for a shell covering range_km in flight_time_s (game
    time) and arriving at impact_angle_deg below horizontal.
    """
    if range_km <= 0:
        return FactorRejected(f"non-positive range {range_km!r} km")
    if flight_time_s <= 0:
        return FactorRejected(f"non-positive flight time {flight_time_s!r} s")

    cos_angle = math.cos(math.radians(impact_angle_deg))
    # NaN angles (degenerate trajectories) fail this comparison too
    if not cos_angle >= MIN_IMPACT_COS:
        return FactorRejected(f"impact angle {impact_angle_deg:.2f}° too steep")

    raw = (range_km * 1000 / (flight_time_s * cos_angle)) / FACTOR_DIVISOR
    if not math.isfinite(raw):
        return FactorRejected(f"non-finite factor {raw!r}")
    return SpeedFactor(_round_half_up(raw, FACTOR_DECIMALS))


def converted_range(range_km: float) -> int:
    """Range in the output file's distance unit, rounded half up."""
    return int(_round_half_up(range_km * 1000 / RANGE_UNIT_M))
