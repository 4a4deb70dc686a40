"""
Shell Definition & Equations of Motion
======================================
Defines the ShellParameters dataclass and the planar equations of motion
for a shell under gravity and quadratic drag:

    dx/dt  = vx
    dy/dt  = vy
    dvx/dt = −k·ρ(y)·vx·|v|
    dvy/dt = −g − k·ρ(y)·vy·|v|

where k = ½·Cd·A / m folds drag coefficient, frontal area and mass into
a single drag factor.

Coordinate system:
  x = downrange (horizontal)
  y = altitude relative to the launch point (up positive)
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from .atmosphere import air_density, GRAVITY
from .errors import InvalidShellError


SHELL_TYPES = ('ap', 'he', 'sap')


def combined_drag_factor(drag_coefficient: float, caliber_m: float,
                         mass: float) -> float:
    """Combined drag factor k = ½·Cd·π·(d/2)² / m  (1/m)."""
    if mass == 0:
        # Infinite drag: the trajectory degenerates to NaN on the first step
        return math.inf
    return 0.5 * drag_coefficient * math.pi * (caliber_m / 2) ** 2 / mass


@dataclass(frozen=True)
class ShellParameters:
    """
    Physical properties of one shell type fired by one vehicle.

    The engine trusts these values; call validate() before simulating
    data that has not been checked upstream.
    """
    muzzle_velocity: float            # m/s
    caliber: float                    # mm
    mass: float                       # kg
    drag_coefficient: float           # dimensionless
    name: str = "Shell"
    shell_type: Optional[str] = None  # 'ap', 'he' or 'sap'

    @property
    def caliber_m(self) -> float:
        """Diameter in metres."""
        return self.caliber / 1000

    @property
    def drag_factor(self) -> float:
        return combined_drag_factor(self.drag_coefficient, self.caliber_m,
                                    self.mass)

    def validate(self) -> 'ShellParameters':
        """Raise InvalidShellError unless every physical field is positive."""
        for field_name in ('muzzle_velocity', 'caliber', 'mass',
                           'drag_coefficient'):
            value = getattr(self, field_name)
            if not (value > 0) or math.isinf(value):
                raise InvalidShellError(
                    f"{self.name}: {field_name} must be a positive number, "
                    f"got {value!r}"
                )
        if self.shell_type is not None and self.shell_type not in SHELL_TYPES:
            raise InvalidShellError(
                f"{self.name}: unknown shell type '{self.shell_type}'. "
                f"Available: {list(SHELL_TYPES)}"
            )
        return self

    @classmethod
    def from_dict(cls, data: dict, name: str = "Shell",
                  shell_type: Optional[str] = None) -> 'ShellParameters':
        """Build from a record using the collaborator's camelCase keys."""
        return cls(
            muzzle_velocity=float(data['muzzleVelocity']),
            caliber=float(data['caliber']),
            mass=float(data['mass']),
            drag_coefficient=float(data['dragCoefficient']),
            name=name,
            shell_type=shell_type,
        )

    def to_dict(self) -> dict:
        return {
            'muzzleVelocity': self.muzzle_velocity,
            'caliber': self.caliber,
            'mass': self.mass,
            'dragCoefficient': self.drag_coefficient,
        }


def derivatives(y: float, vx: float, vy: float,
                k: float) -> Tuple[float, float, float, float]:
    """
    Right-hand side of the equations of motion.

    Returns
    -------
    (dx/dt, dy/dt, dvx/dt, dvy/dt)
    """
    speed = math.sqrt(vx * vx + vy * vy)
    k_rho = k * air_density(y)
    return (
        vx,
        vy,
        -k_rho * vx * speed,
        -GRAVITY - k_rho * vy * speed,
    )
