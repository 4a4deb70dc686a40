"""
Naval Shell Ballistics & Speed-Factor Engine
============================================
Computes, for a shell of known muzzle velocity, caliber, mass and drag
coefficient, the flight time and impact angle when fired to reach a given
range, accounting for gravity and altitude-dependent air drag:
  - Lapse-rate atmosphere (density vs altitude)
  - Quadratic drag with a combined drag factor
  - Fixed-step RK4 trajectory integration
  - Bisection over elevation to invert range → angle

From those it derives the speed factor and distance values used by a game
weapon-behaviour file, after applying vehicle range modifiers.
"""

from .atmosphere import (
    air_temperature, air_pressure, air_density, atmosphere_profile,
)
from .errors import (
    BallisticsError, InvalidShellError, UnreachableRangeError,
    UnknownVehicleClassError,
)
from .shell import ShellParameters, combined_drag_factor
from .integrator import (
    KinematicState, TrajectoryResult, TrajectoryPath,
    simulate, trace_trajectory,
)
from .solver import (
    BallisticsAtRange, solve_angle_for_range, ballistics_at_range, max_range,
    envelope_peak,
)
from .modifiers import (
    VehicleClass, RangeModifierRules, RangeModifierInputs, DEFAULT_RULES,
    modified_range, modified_range_for,
)
from .factors import (
    SpeedFactor, FactorRejected, speed_factor, converted_range,
)
from .pipeline import (
    VehicleRecord, VehicleResult, ShellRangeResult, BatchReport,
    compute_vehicle, compute_all, load_vehicles,
)

__version__ = "1.0.0"
__all__ = [
    'ShellParameters', 'KinematicState', 'TrajectoryResult', 'TrajectoryPath',
    'BallisticsAtRange',
    'air_temperature', 'air_pressure', 'air_density', 'atmosphere_profile',
    'combined_drag_factor',
    'simulate', 'trace_trajectory',
    'solve_angle_for_range', 'ballistics_at_range', 'max_range',
    'envelope_peak',
    'VehicleClass', 'RangeModifierRules', 'RangeModifierInputs',
    'DEFAULT_RULES', 'modified_range', 'modified_range_for',
    'SpeedFactor', 'FactorRejected', 'speed_factor', 'converted_range',
    'VehicleRecord', 'VehicleResult', 'ShellRangeResult', 'BatchReport',
    'compute_vehicle', 'compute_all', 'load_vehicles',
    'BallisticsError', 'InvalidShellError', 'UnreachableRangeError',
    'UnknownVehicleClassError',
]
