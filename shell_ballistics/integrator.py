"""
Numerical Integration Engine
=============================
Fixed-step 4th-order Runge-Kutta integration of the shell's equations of
motion (see shell.derivatives), run from the launch point until the shell
returns below launch altitude or the flight-time ceiling is reached.

Step size and ceiling are module constants, not arguments: every caller
gets the same numerical accuracy and the same bounded cost.

Output: TrajectoryResult (impact summary) or, from trace_trajectory,
TrajectoryPath with the full state history.
"""

import math
import numpy as np
from dataclasses import dataclass

from .atmosphere import air_density
from .shell import ShellParameters, derivatives


# ── Integration constants ─────────────────────────────────────────────────
TIME_STEP        = 0.02     # s
MAX_FLIGHT_TIME  = 120.0    # s
MAX_STEPS        = int(round(MAX_FLIGHT_TIME / TIME_STEP))   # 6000
TIME_MULTIPLIER  = 2.75     # physical seconds per game second


@dataclass
class KinematicState:
    """Planar position (m) and velocity (m/s) of the shell."""
    x: float
    y: float
    vx: float
    vy: float

    @property
    def speed(self) -> float:
        return math.sqrt(self.vx * self.vx + self.vy * self.vy)

    @classmethod
    def at_launch(cls, shell: ShellParameters,
                  launch_angle_deg: float) -> 'KinematicState':
        theta = math.radians(launch_angle_deg)
        return cls(
            x=0.0,
            y=0.0,
            vx=shell.muzzle_velocity * math.cos(theta),
            vy=shell.muzzle_velocity * math.sin(theta),
        )


@dataclass(frozen=True)
class TrajectoryResult:
    """Impact summary of one simulated shot."""
    launch_angle: float          # degrees
    range: float                 # m
    flight_time: float           # s, physical
    adjusted_flight_time: float  # s, game time
    impact_angle: float          # degrees below horizontal
    impact_velocity: float       # m/s
    steps: int

    @property
    def hit_time_ceiling(self) -> bool:
        """True when the shell was still airborne at MAX_FLIGHT_TIME."""
        return self.steps >= MAX_STEPS

    def summary(self) -> str:
        """Human-readable summary string."""
        lines = [
            f"  Elevation    : {self.launch_angle:>10.3f} °",
            f"  Range        : {self.range:>10.1f} m  ({self.range/1000:>7.2f} km)",
            f"  Flight time  : {self.flight_time:>10.2f} s  "
            f"(game {self.adjusted_flight_time:.2f} s)",
            f"  Impact vel   : {self.impact_velocity:>10.1f} m/s",
            f"  Impact angle : {self.impact_angle:>10.2f} °",
        ]
        return '\n'.join(lines)


@dataclass
class TrajectoryPath:
    """Full state history of one simulated shot. Arrays have shape (N,)."""
    shell: ShellParameters
    result: TrajectoryResult
    time: np.ndarray
    x: np.ndarray
    y: np.ndarray
    vx: np.ndarray
    vy: np.ndarray
    speed: np.ndarray
    density: np.ndarray

    @property
    def max_altitude(self) -> float:
        """Maximum altitude reached (m)."""
        return float(np.max(self.y))


def rk4_step(state: KinematicState, dt: float, k: float) -> KinematicState:
    """Advance the state by one classical RK4 step."""
    x, y, vx, vy = state.x, state.y, state.vx, state.vy

    k1x, k1y, k1vx, k1vy = derivatives(y, vx, vy, k)
    k2x, k2y, k2vx, k2vy = derivatives(y + 0.5 * dt * k1y,
                                       vx + 0.5 * dt * k1vx,
                                       vy + 0.5 * dt * k1vy, k)
    k3x, k3y, k3vx, k3vy = derivatives(y + 0.5 * dt * k2y,
                                       vx + 0.5 * dt * k2vx,
                                       vy + 0.5 * dt * k2vy, k)
    k4x, k4y, k4vx, k4vy = derivatives(y + dt * k3y,
                                       vx + dt * k3vx,
                                       vy + dt * k3vy, k)

    return KinematicState(
        x=x + dt * (k1x + 2*k2x + 2*k3x + k4x) / 6,
        y=y + dt * (k1y + 2*k2y + 2*k3y + k4y) / 6,
        vx=vx + dt * (k1vx + 2*k2vx + 2*k3vx + k4vx) / 6,
        vy=vy + dt * (k1vy + 2*k2vy + 2*k3vy + k4vy) / 6,
    )


def _build_result(launch_angle_deg: float, state: KinematicState,
                  steps: int) -> TrajectoryResult:
    flight_time = steps * TIME_STEP
    return TrajectoryResult(
        launch_angle=launch_angle_deg,
        range=state.x,
        flight_time=flight_time,
        adjusted_flight_time=flight_time / TIME_MULTIPLIER,
        impact_angle=math.degrees(math.atan2(-state.vy, state.vx)),
        impact_velocity=state.speed,
        steps=steps,
    )


def simulate(launch_angle_deg: float, shell: ShellParameters) -> TrajectoryResult:
    """
    Fire the shell at the given elevation and integrate to impact.

    The loop stops on the first step that takes the shell below launch
    altitude, or after MAX_STEPS steps (MAX_FLIGHT_TIME seconds).
    """
    k = shell.drag_factor
    state = KinematicState.at_launch(shell, launch_angle_deg)
    steps = 0

    while state.y >= 0 and steps < MAX_STEPS:
        state = rk4_step(state, TIME_STEP, k)
        steps += 1

    return _build_result(launch_angle_deg, state, steps)


def trace_trajectory(launch_angle_deg: float,
                     shell: ShellParameters) -> TrajectoryPath:
    """
    Same integration as simulate(), keeping every intermediate state.

    Intended for plotting; the final recorded state matches simulate().
    """
    k = shell.drag_factor
    state = KinematicState.at_launch(shell, launch_angle_deg)
    steps = 0
    history = [(0.0, state)]

    while state.y >= 0 and steps < MAX_STEPS:
        state = rk4_step(state, TIME_STEP, k)
        steps += 1
        history.append((steps * TIME_STEP, state))

    times, states = zip(*history)
    return TrajectoryPath(
        shell=shell,
        result=_build_result(launch_angle_deg, state, steps),
        time=np.array(times),
        x=np.array([s.x for s in states]),
        y=np.array([s.y for s in states]),
        vx=np.array([s.vx for s in states]),
        vy=np.array([s.vy for s in states]),
        speed=np.array([s.speed for s in states]),
        density=np.array([air_density(s.y) for s in states]),
    )
