"""
Standard Atmosphere Model
=========================
Air density as a function of altitude above the launch point, using the
troposphere lapse-rate form of the barometric formula:

    T(y) = T0 − L·y
    p(y) = p0 · (T / T0) ^ (g·M / (R·L))
    ρ(y) = p·M / (R·T)

Shell trajectories in this domain stay within a few kilometres of sea
level, so a single lapse-rate layer is all that is needed.
"""

import numpy as np


# ── Physics constants ─────────────────────────────────────────────────────
GRAVITY              = 9.81        # m/s²
SEA_LEVEL_TEMP       = 288.15      # K  (15 °C)
SEA_LEVEL_PRESSURE   = 101325.0    # Pa
LAPSE_RATE           = 0.0065      # K/m
MOLAR_MASS_AIR       = 0.0289644   # kg/mol
GAS_CONSTANT         = 8.31447     # J/(mol·K)

# Barometric exponent g·M / (R·L)
PRESSURE_EXPONENT = GRAVITY * MOLAR_MASS_AIR / (GAS_CONSTANT * LAPSE_RATE)


def air_temperature(altitude: float) -> float:
    """Temperature (K) at the given altitude (m)."""
    return SEA_LEVEL_TEMP - LAPSE_RATE * altitude


def air_pressure(altitude: float) -> float:
    """Pressure (Pa) at the given altitude (m)."""
    T = air_temperature(altitude)
    return SEA_LEVEL_PRESSURE * (T / SEA_LEVEL_TEMP) ** PRESSURE_EXPONENT


def air_density(altitude: float) -> float:
    """
    Air density (kg/m³) at the given altitude (m).

    Slightly negative altitudes (the last integration step of a shell
    dipping below the launch point) are valid inputs. Above the altitude
    where the lapse-rate temperature reaches 0 K (~44 km) the formula has
    no real value and the density is 0.
    """
    T = air_temperature(altitude)
    if T <= 0.0:
        return 0.0
    p = SEA_LEVEL_PRESSURE * (T / SEA_LEVEL_TEMP) ** PRESSURE_EXPONENT
    return p * MOLAR_MASS_AIR / (GAS_CONSTANT * T)


# ── Vectorized version for plotting ───────────────────────────────────────
def atmosphere_profile(alt_array: np.ndarray) -> dict:
    """
    Compute the atmospheric profile for an array of altitudes.
    Returns dict with keys: 'altitude', 'temperature', 'pressure', 'density'.
    """
    alt_array = np.asarray(alt_array, dtype=float)
    T = SEA_LEVEL_TEMP - LAPSE_RATE * alt_array
    T_pos = np.clip(T, 1e-9, None)
    P = np.where(T > 0,
                 SEA_LEVEL_PRESSURE * (T_pos / SEA_LEVEL_TEMP) ** PRESSURE_EXPONENT,
                 0.0)
    rho = P * MOLAR_MASS_AIR / (GAS_CONSTANT * T_pos)
    return {
        'altitude': alt_array,
        'temperature': T,
        'pressure': P,
        'density': rho,
    }
