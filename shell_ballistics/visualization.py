"""
Visualization Engine
====================
Plots for inspecting the ballistics behind a set of speed factors:
  1. Trajectory (altitude vs range) at the solved elevation
  2. Range vs elevation curve (the bisection's search space)
  3. Speed factor and flight time vs target range
  4. Atmospheric profile
"""

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from typing import Dict, Optional, Sequence
import os

from .atmosphere import atmosphere_profile
from .factors import SpeedFactor, speed_factor
from .integrator import TrajectoryPath
from .shell import ShellParameters
from .solver import ANGLE_HIGH, ANGLE_LOW, ballistics_at_range
from .validation import range_curve


# ── Style Configuration ───────────────────────────────────────────────────
STYLE = {
    'bg_color': '#0a0a0a',
    'text_color': '#e0e0e0',
    'grid_color': '#333333',
    'accent_colors': ['#00d4ff', '#ff6b35', '#00e676', '#ffeb3b',
                      '#e040fb', '#ff5252'],
}

LEGEND_STYLE = dict(facecolor='#1a1a1a', edgecolor='#444',
                    labelcolor=STYLE['text_color'])


def _apply_dark_style(fig, axes):
    """Apply consistent dark theme to figure and axes."""
    fig.patch.set_facecolor(STYLE['bg_color'])
    if not isinstance(axes, np.ndarray):
        axes = [axes]
    else:
        axes = axes.flatten()

    for ax in axes:
        ax.set_facecolor(STYLE['bg_color'])
        ax.tick_params(colors=STYLE['text_color'])
        ax.xaxis.label.set_color(STYLE['text_color'])
        ax.yaxis.label.set_color(STYLE['text_color'])
        ax.title.set_color(STYLE['text_color'])
        ax.grid(True, color=STYLE['grid_color'], alpha=0.4, linewidth=0.5)
        for spine in ax.spines.values():
            spine.set_color(STYLE['grid_color'])


def _finish(fig, save_path: Optional[str]):
    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight',
                    facecolor=STYLE['bg_color'])
    return fig


def ensure_output_dir(path: str = 'outputs'):
    os.makedirs(path, exist_ok=True)
    return path


# ══════════════════════════════════════════════════════════════════════════
#  1. Single Trajectory Plot
# ══════════════════════════════════════════════════════════════════════════

def plot_trajectory(path: TrajectoryPath, save_path: str = None) -> plt.Figure:
    """Altitude vs downrange for a single traced shot."""
    fig, ax = plt.subplots(figsize=(12, 6))
    _apply_dark_style(fig, ax)

    result = path.result
    ax.plot(path.x / 1000, path.y, color=STYLE['accent_colors'][0],
            linewidth=2.5, label=path.shell.name)
    ax.plot(0, 0, 'o', color='#00e676', markersize=10, label='Launch', zorder=5)
    ax.plot(path.x[-1] / 1000, path.y[-1], 'x', color='#ff5252',
            markersize=12, markeredgewidth=3,
            label=f'Impact ({result.impact_angle:.1f}°)', zorder=5)

    idx_max = int(np.argmax(path.y))
    ax.plot(path.x[idx_max] / 1000, path.y[idx_max], '^', color='#ffeb3b',
            markersize=10, label=f'Apex ({path.max_altitude:.0f} m)', zorder=5)

    ax.set_xlabel('Downrange (km)', fontsize=12)
    ax.set_ylabel('Altitude (m)', fontsize=12)
    ax.set_title(f'Shell Trajectory — {path.shell.name} '
                 f'(v₀={path.shell.muzzle_velocity:.0f} m/s, '
                 f'θ={result.launch_angle:.2f}°, t={result.flight_time:.1f} s)',
                 fontsize=13, fontweight='bold')
    ax.legend(loc='upper right', fontsize=10, **LEGEND_STYLE)
    ax.set_ylim(bottom=0)
    ax.set_xlim(left=0)
    return _finish(fig, save_path)


# ══════════════════════════════════════════════════════════════════════════
#  2. Range vs Elevation
# ══════════════════════════════════════════════════════════════════════════

def plot_range_curve(shells: Dict[str, ShellParameters], n_angles: int = 46,
                     save_path: str = None) -> plt.Figure:
    """Range against elevation over the solver bracket, one line per shell."""
    fig, ax = plt.subplots(figsize=(11, 6))
    _apply_dark_style(fig, ax)

    angles = np.linspace(ANGLE_LOW, ANGLE_HIGH, n_angles)
    colors = STYLE['accent_colors']
    for i, (name, shell) in enumerate(shells.items()):
        ranges = range_curve(shell, angles)
        ax.plot(angles, ranges / 1000, color=colors[i % len(colors)],
                linewidth=2, label=name)

    ax.set_xlabel('Elevation (°)', fontsize=12)
    ax.set_ylabel('Range (km)', fontsize=12)
    ax.set_title('Range vs Elevation', fontsize=14, fontweight='bold')
    ax.legend(fontsize=10, **LEGEND_STYLE)
    ax.set_xlim(ANGLE_LOW, ANGLE_HIGH)
    ax.set_ylim(bottom=0)
    return _finish(fig, save_path)


# ══════════════════════════════════════════════════════════════════════════
#  3. Speed Factor vs Range
# ══════════════════════════════════════════════════════════════════════════

def plot_factor_curve(shell: ShellParameters, ranges_km: Sequence[float],
                      save_path: str = None) -> plt.Figure:
    """Speed factor and game flight time across target ranges."""
    factors, times, used = [], [], []
    for r in ranges_km:
        b = ballistics_at_range(r, shell)
        outcome = speed_factor(r, b.flight_time, b.impact_angle)
        if isinstance(outcome, SpeedFactor):
            used.append(r)
            factors.append(outcome.value)
            times.append(b.flight_time)

    fig, axes = plt.subplots(1, 2, figsize=(16, 6))
    _apply_dark_style(fig, axes)

    axes[0].plot(used, factors, 'o-', color=STYLE['accent_colors'][1],
                 linewidth=2)
    axes[0].set_xlabel('Target range (km)')
    axes[0].set_ylabel('Speed factor')
    axes[0].set_title('Speed Factor vs Range', fontweight='bold')

    axes[1].plot(used, times, 'o-', color=STYLE['accent_colors'][2],
                 linewidth=2)
    axes[1].set_xlabel('Target range (km)')
    axes[1].set_ylabel('Flight time (game s)')
    axes[1].set_title('Flight Time vs Range', fontweight='bold')

    fig.suptitle(shell.name, fontsize=15, fontweight='bold',
                 color=STYLE['text_color'])
    return _finish(fig, save_path)


# ══════════════════════════════════════════════════════════════════════════
#  4. Atmospheric Profile
# ══════════════════════════════════════════════════════════════════════════

def plot_atmosphere(max_altitude: float = 10000.0,
                    save_path: str = None) -> plt.Figure:
    """Temperature, pressure and density from sea level to max_altitude."""
    altitudes = np.linspace(0, max_altitude, 300)
    profile = atmosphere_profile(altitudes)

    fig, axes = plt.subplots(1, 3, figsize=(15, 6), sharey=True)
    _apply_dark_style(fig, axes)

    alt_km = altitudes / 1000
    params = [
        ('Temperature (K)', profile['temperature'], '#ff6b35'),
        ('Pressure (Pa)', profile['pressure'], '#00d4ff'),
        ('Density (kg/m³)', profile['density'], '#00e676'),
    ]
    for ax, (title, data, color) in zip(axes, params):
        ax.plot(data, alt_km, color=color, linewidth=2)
        ax.set_xlabel(title, fontsize=10)

    axes[0].set_ylabel('Altitude (km)', fontsize=12)
    fig.suptitle('Lapse-Rate Atmosphere', fontsize=14, fontweight='bold',
                 color=STYLE['text_color'])
    return _finish(fig, save_path)
