"""
Launch-Angle Solver & Ballistics Query
======================================
Inverts range → elevation by bisection over [0°, 45°], using simulate()
as the oracle. Range grows with elevation up to the envelope peak, so for
any target inside the envelope the bracket [0°, peak] contains the answer.

Light, high-drag shells peak a little below 45° (the 127 mm destroyer
reference shell tops out near 44°), so the envelope is found by search
rather than read off at ANGLE_HIGH.

Cost: ceil(log2(45 / 0.001)) = 16 simulations per solve, each at most
MAX_STEPS integration steps. The envelope search costs a few dozen more
and is cached per shell.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

import numpy as np
from scipy.optimize import minimize_scalar

from .errors import UnreachableRangeError
from .integrator import simulate
from .shell import ShellParameters


# ── Search constants ──────────────────────────────────────────────────────
ANGLE_LOW        = 0.0      # degrees
ANGLE_HIGH       = 45.0     # degrees
ANGLE_TOLERANCE  = 0.001    # degrees, final bracket width
ENVELOPE_SCAN    = 46       # coarse elevations, 1° apart over the bracket
ENVELOPE_WINDOW  = 1.0      # degrees either side of the coarse peak


@dataclass(frozen=True)
class BallisticsAtRange:
    """Shell behaviour at a given target range, in game time."""
    flight_time: float       # s, game-adjusted
    impact_angle: float      # degrees
    impact_velocity: float   # m/s
    launch_angle: float      # degrees


@lru_cache(maxsize=256)
def envelope_peak(shell: ShellParameters) -> Tuple[float, float]:
    """
    (elevation°, range m) of the furthest shot in [ANGLE_LOW, ANGLE_HIGH].

    A 1° scan locates the peak, then a bounded scalar minimisation of
    -range refines it inside ±ENVELOPE_WINDOW. Range is a fine sawtooth in
    elevation, so the refinement is kept only when it beats the scan.
    """
    angles = np.linspace(ANGLE_LOW, ANGLE_HIGH, ENVELOPE_SCAN)
    ranges = np.array([simulate(float(a), shell).range for a in angles])
    best = int(np.argmax(ranges))
    peak_angle, peak_range = float(angles[best]), float(ranges[best])

    lo = max(ANGLE_LOW, peak_angle - ENVELOPE_WINDOW)
    hi = min(ANGLE_HIGH, peak_angle + ENVELOPE_WINDOW)
    refined = minimize_scalar(lambda a: -simulate(a, shell).range,
                              bounds=(lo, hi), method='bounded',
                              options={'xatol': ANGLE_TOLERANCE})
    if refined.success and -refined.fun > peak_range:
        peak_angle, peak_range = float(refined.x), float(-refined.fun)

    return peak_angle, peak_range


def max_range(shell: ShellParameters) -> float:
    """Furthest range (m) reachable at any elevation in the search bracket."""
    return envelope_peak(shell)[1]


def solve_angle_for_range(target_range_m: float, shell: ShellParameters,
                          tolerance: float = ANGLE_TOLERANCE,
                          strict: bool = False) -> float:
    """
    Find the elevation (degrees) at which the shell lands at target_range_m.

    Parameters
    ----------
    target_range_m : float
        Horizontal distance to hit (m), > 0.
    shell : ShellParameters
    tolerance : float
        Bracket width at which the search stops (degrees).
    strict : bool
        If True, raise UnreachableRangeError when the target lies beyond
        max_range(shell), and search only the rising side [ANGLE_LOW, peak].
        Otherwise the bracket is [ANGLE_LOW, ANGLE_HIGH] and an out-of-reach
        target converges on its top, returning that angle.
    """
    low, high = ANGLE_LOW, ANGLE_HIGH
    if strict:
        peak_angle, reachable = envelope_peak(shell)
        if reachable < target_range_m:
            raise UnreachableRangeError(target_range_m, reachable)
        high = peak_angle

    while high - low > tolerance:
        mid = (low + high) / 2
        if simulate(mid, shell).range < target_range_m:
            low = mid
        else:
            high = mid

    return (low + high) / 2


def ballistics_at_range(target_range_km: float, shell: ShellParameters,
                        strict: bool = False) -> BallisticsAtRange:
    """
    Solve for the elevation hitting target_range_km and report flight
    time (game-adjusted), impact angle and impact velocity there.
    """
    angle = solve_angle_for_range(target_range_km * 1000, shell,
                                  strict=strict)
    result = simulate(angle, shell)
    return BallisticsAtRange(
        flight_time=result.adjusted_flight_time,
        impact_angle=result.impact_angle,
        impact_velocity=result.impact_velocity,
        launch_angle=angle,
    )
