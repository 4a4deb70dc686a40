"""
Solver Validation
=================
Checks the two assumptions the launch-angle bisection rests on:

  - range increases monotonically with elevation up to the envelope
    peak, which sits at 45° for heavy shells and a little below it for
    light, high-drag ones
  - the bisection result agrees with an independent root finder
    (scipy.optimize.brentq on range(θ) − target)

Reference shells cover the calibres fed to the engine, from destroyer
guns to battleship main batteries.
"""

import numpy as np
from dataclasses import dataclass
from typing import Dict, List, Optional

from scipy.optimize import brentq

from .integrator import simulate
from .shell import ShellParameters
from .solver import (
    ANGLE_HIGH, ANGLE_LOW, envelope_peak, solve_angle_for_range,
)


REFERENCE_SHELLS = {
    '127mm DD': ShellParameters(muzzle_velocity=792.0, caliber=127.0,
                                mass=24.5, drag_coefficient=0.32,
                                name='127mm DD', shell_type='he'),
    '203mm CA': ShellParameters(muzzle_velocity=830.0, caliber=203.0,
                                mass=118.0, drag_coefficient=0.3,
                                name='203mm CA', shell_type='ap'),
    '406mm BB': ShellParameters(muzzle_velocity=762.0, caliber=406.0,
                                mass=1225.0, drag_coefficient=0.35,
                                name='406mm BB', shell_type='ap'),
}

# Target ranges (km) checked for every reference shell
REFERENCE_RANGES_KM = (5.0, 10.0, 15.0)


@dataclass
class SolverCheck:
    """Bisection result compared against brentq for one target."""
    target_range: float       # m
    bisection_angle: float    # degrees
    bisection_range: float    # m
    brentq_angle: Optional[float]
    range_error_pct: float    # bisection range vs target

    @property
    def angle_delta(self) -> Optional[float]:
        if self.brentq_angle is None:
            return None
        return abs(self.bisection_angle - self.brentq_angle)


def range_curve(shell: ShellParameters, angles: np.ndarray) -> np.ndarray:
    """Simulated range (m) at each elevation in angles (degrees)."""
    return np.array([simulate(float(a), shell).range for a in angles])


def is_monotonic(shell: ShellParameters, n_angles: int = 46,
                 low: float = ANGLE_LOW, high: float = ANGLE_HIGH) -> bool:
    """True when range strictly increases across n_angles elevations."""
    ranges = range_curve(shell, np.linspace(low, high, n_angles))
    return bool(np.all(np.diff(ranges) > 0))


def cross_check_solver(shell: ShellParameters,
                       target_range_m: float) -> SolverCheck:
    """
    Solve target_range_m by bisection and by brentq.

    brentq_angle is None when the target is outside [ANGLE_LOW, ANGLE_HIGH]
    (no sign change for brentq to bracket).
    """
    angle = solve_angle_for_range(target_range_m, shell)
    achieved = simulate(angle, shell).range

    def miss(theta):
        return simulate(theta, shell).range - target_range_m

    try:
        reference = brentq(miss, ANGLE_LOW, ANGLE_HIGH, xtol=1e-4)
    except ValueError:
        reference = None

    return SolverCheck(
        target_range=target_range_m,
        bisection_angle=angle,
        bisection_range=achieved,
        brentq_angle=reference,
        range_error_pct=100.0 * (achieved - target_range_m) / target_range_m,
    )


def validate_shell(shell: ShellParameters,
                   ranges_km=REFERENCE_RANGES_KM,
                   verbose: bool = True) -> List[SolverCheck]:
    """Run cross_check_solver at each range and optionally print a table."""
    checks = [cross_check_solver(shell, r * 1000) for r in ranges_km]

    if verbose:
        print(f"\n{'='*66}")
        print(f"  VALIDATION: {shell.name}")
        print(f"  Muzzle velocity: {shell.muzzle_velocity} m/s | "
              f"Caliber: {shell.caliber:.0f} mm | Mass: {shell.mass} kg")
        print(f"  Monotonic range over [{ANGLE_LOW:.0f}°, {ANGLE_HIGH:.0f}°]: "
              f"{'yes' if is_monotonic(shell) else 'NO'}")
        peak_angle, peak_range = envelope_peak(shell)
        print(f"  Envelope peak: {peak_range:.0f} m at {peak_angle:.2f}°")
        print(f"{'='*66}")
        print(f"{'Target (m)':>11} {'Bisect°':>9} {'Brentq°':>9} "
              f"{'Δ°':>8} {'Range (m)':>10} {'Err %':>8}")
        print("-" * 66)
        for c in checks:
            brentq_txt = f"{c.brentq_angle:>9.4f}" if c.brentq_angle is not None else f"{'—':>9}"
            delta_txt = f"{c.angle_delta:>8.4f}" if c.angle_delta is not None else f"{'—':>8}"
            print(f"{c.target_range:>11.0f} {c.bisection_angle:>9.4f} "
                  f"{brentq_txt} {delta_txt} "
                  f"{c.bisection_range:>10.1f} {c.range_error_pct:>+8.3f}")
        print(f"{'='*66}\n")

    return checks


def run_all_validations(verbose: bool = True) -> Dict[str, List[SolverCheck]]:
    """Run validation against all reference shells."""
    return {name: validate_shell(shell, verbose=verbose)
            for name, shell in REFERENCE_SHELLS.items()}
