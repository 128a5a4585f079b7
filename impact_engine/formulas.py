"""
Impact Engine - Formula Library

Pure functions converting physical quantities into derived impact quantities:
atmospheric entry, crater scaling, seismic shaking, tsunami generation and
the blast / thermal pulse of an explosion. The formulas are simplified,
documented approximations intended for an educational tool.

None of the functions perform I/O. Degenerate inputs (zero energy, zero
radius) resolve to zero results instead of NaN or math domain errors.
"""

import math
from dataclasses import dataclass

import numpy as np

from impact_engine.utils import (
    AIR_DENSITY, GRAVITY, WATER_DENSITY, TNT_TON_J,
    convert_energy_j_to_tons, sphere_mass,
)

# Drag coefficient for a sphere in the simplified entry model
ENTRY_DRAG_COEFFICIENT = 1.0

# Crater scaling (Holsapple 1993 style power law)
CRATER_GRAVITY_EXPONENT = 1.65
CRATER_COEFFICIENT = 0.75
CRATER_EXPONENT = 0.13
CRATER_ANGLE_EXPONENT = 0.33
CRATER_DEPTH_RATIO = 0.28

# Seismic magnitude fit and the distance constants of the shaking bands
SEISMIC_SLOPE = 0.67
SEISMIC_OFFSET = 0.645
SEVERE_SHAKING_CONSTANT = 1.8
MODERATE_SHAKING_CONSTANT = 1.2
LIGHT_SHAKING_CONSTANT = 0.6

# Blast wave fit (kPa) and thermal partition
PEAK_OVERPRESSURE_KPA = 808.0
SCALED_DISTANCE_REFERENCE = 4.5
THERMAL_FRACTION = 0.3

# Wave height decay reference distance (m)
TSUNAMI_REFERENCE_DISTANCE = 100.0


@dataclass(frozen=True)
class CraterDimensions:
    radius: float
    depth: float


@dataclass(frozen=True)
class SeismicEffects:
    magnitude: float
    severe_km: float
    moderate_km: float
    light_km: float


@dataclass(frozen=True)
class TsunamiEffects:
    height: float
    velocity: float


def _slant_range(r, altitude):
    return math.sqrt(r ** 2 + altitude ** 2)


@dataclass(frozen=True)
class BlastWave:
    """
    Peak overpressure of the blast wave as a function of ground range.

    The overpressure (kPa) follows a scaled-distance fit
    ``808 · (1 + (z/4.5)²)^-1.5`` with ``z = slant / TNT^(1/3)``.
    """
    tnt_tons: float
    altitude_m: float = 0.0

    def evaluate_at(self, r):
        """Overpressure in kPa at ground range ``r`` meters."""
        if self.tnt_tons <= 0:
            return 0.0
        z = _slant_range(r, self.altitude_m) / self.tnt_tons ** (1 / 3)
        return PEAK_OVERPRESSURE_KPA * (1 + (z / SCALED_DISTANCE_REFERENCE) ** 2) ** -1.5

    def profile(self, radii):
        """Vectorised :meth:`evaluate_at` over an array of ranges."""
        radii = np.asarray(radii, dtype=float)
        if self.tnt_tons <= 0:
            return np.zeros_like(radii)
        z = np.hypot(radii, self.altitude_m) / self.tnt_tons ** (1 / 3)
        return PEAK_OVERPRESSURE_KPA * (1 + (z / SCALED_DISTANCE_REFERENCE) ** 2) ** -1.5


@dataclass(frozen=True)
class ThermalPulse:
    """Inverse-square thermal radiation intensity (W/m²) of a point source."""
    thermal_energy_j: float
    altitude_m: float = 0.0

    def evaluate_at(self, r):
        if self.thermal_energy_j <= 0:
            return 0.0
        slant = _slant_range(r, self.altitude_m)
        if slant == 0:
            return float('inf')
        return self.thermal_energy_j / (4 * math.pi * slant ** 2)

    def profile(self, radii):
        radii = np.asarray(radii, dtype=float)
        if self.thermal_energy_j <= 0:
            return np.zeros_like(radii)
        slant = np.hypot(radii, self.altitude_m)
        with np.errstate(divide='ignore'):
            return self.thermal_energy_j / (4 * np.pi * slant ** 2)


@dataclass(frozen=True)
class AtmosphericEffects:
    blast: BlastWave
    thermal: ThermalPulse


def atmospheric_entry_velocity(v0, radius, density, angle_deg):
    """
    Velocity remaining after atmospheric drag.

    Parameters
    ----------
    v0 : float
        Entry velocity in m/s
    radius : float
        Impactor radius in meters
    density : float
        Impactor bulk density in kg/m³
    angle_deg : float
        Entry angle in degrees. The simplified drag model is angle
        independent; the argument keeps the signature uniform with the
        other entry formulas.

    Returns
    -------
    float
        Final velocity in m/s, never negative

    Mathematical Form
    -----------------
    A = πr², m = 4/3·π·r³·ρ
    Δv = ρ_air · A · C_D · v0² / (2m)
    v = max(0, v0 − Δv)
    """
    mass = sphere_mass(radius, density)
    if mass <= 0:
        # Δv grows as 1/r, so a vanishing body keeps no velocity.
        return 0.0
    cross_section = math.pi * radius ** 2
    velocity_loss = (AIR_DENSITY * cross_section * ENTRY_DRAG_COEFFICIENT * v0 ** 2) / (2 * mass)
    return max(0.0, v0 - velocity_loss)


def crater_dimensions(energy, target_density, gravity, impact_angle_deg):
    """
    Transient crater radius and depth from power-law scaling.

    Parameters
    ----------
    energy : float
        Impact energy in Joules
    target_density : float
        Target rock density in kg/m³
    gravity : float
        Surface gravity in m/s²
    impact_angle_deg : float
        Impact angle in degrees from horizontal; 0 collapses the crater to zero

    Returns
    -------
    CraterDimensions
        ``radius`` and ``depth`` (0.28 × radius)
    """
    if energy <= 0:
        return CraterDimensions(radius=0.0, depth=0.0)
    pi2 = energy / (target_density * gravity ** CRATER_GRAVITY_EXPONENT)
    transient_radius = CRATER_COEFFICIENT * pi2 ** CRATER_EXPONENT
    # A negative sine would raise to a complex power.
    sine = max(0.0, math.sin(math.radians(impact_angle_deg)))
    radius = transient_radius * sine ** CRATER_ANGLE_EXPONENT
    return CraterDimensions(radius=radius, depth=radius * CRATER_DEPTH_RATIO)


def seismic_magnitude(tnt_tons):
    """
    Richter-like magnitude for an explosion of ``tnt_tons``.

    ``0.67 · (log10(TNT) − 0.645)``, clamped to zero for non-positive yields
    and for yields small enough to give a negative magnitude.
    """
    if tnt_tons <= 0:
        return 0.0
    return max(0.0, SEISMIC_SLOPE * (math.log10(tnt_tons) - SEISMIC_OFFSET))


def seismic_effects(energy):
    """
    Seismic magnitude and the radii (km) of severe, moderate and light shaking.

    Each radius is ``10^(0.5·M − c)`` for c = 1.8, 1.2 and 0.6. Non-positive
    energy produces no shaking at all.
    """
    tnt = convert_energy_j_to_tons(energy)
    if tnt <= 0:
        return SeismicEffects(magnitude=0.0, severe_km=0.0, moderate_km=0.0, light_km=0.0)
    magnitude = seismic_magnitude(tnt)
    return SeismicEffects(
        magnitude=magnitude,
        severe_km=10 ** (0.5 * magnitude - SEVERE_SHAKING_CONSTANT),
        moderate_km=10 ** (0.5 * magnitude - MODERATE_SHAKING_CONSTANT),
        light_km=10 ** (0.5 * magnitude - LIGHT_SHAKING_CONSTANT),
    )


def tsunami_effects(energy, water_depth, distance):
    """
    Tsunami wave height and propagation speed at ``distance`` meters.

    Parameters
    ----------
    energy : float
        Impact energy in Joules
    water_depth : float
        Water depth at the impact point in meters; land (≤ 0) gives no wave
    distance : float
        Distance from the impact point in meters

    Returns
    -------
    TsunamiEffects
        ``height`` in meters and shallow-water ``velocity`` in m/s

    Mathematical Form
    -----------------
    c = √(g·h)
    H0 = (E / (ρ_w · g · h))^(1/4)
    H = H0 · √(100 / max(d, 100))
    """
    if water_depth <= 0 or energy <= 0:
        return TsunamiEffects(height=0.0, velocity=0.0)
    wave_velocity = math.sqrt(GRAVITY * water_depth)
    initial_height = (energy / (WATER_DENSITY * GRAVITY * water_depth)) ** 0.25
    height = initial_height * math.sqrt(TSUNAMI_REFERENCE_DISTANCE / max(distance, TSUNAMI_REFERENCE_DISTANCE))
    return TsunamiEffects(height=height, velocity=wave_velocity)


def atmospheric_effects(energy, altitude):
    """
    Blast wave and thermal pulse of an explosion releasing ``energy`` Joules
    at ``altitude`` meters.

    30% of the energy is radiated thermally. Both members expose
    ``evaluate_at(r)`` for a ground range ``r`` in meters.
    """
    tnt = energy / TNT_TON_J if energy > 0 else 0.0
    thermal_energy = THERMAL_FRACTION * energy if energy > 0 else 0.0
    return AtmosphericEffects(
        blast=BlastWave(tnt_tons=tnt, altitude_m=altitude),
        thermal=ThermalPulse(thermal_energy_j=thermal_energy, altitude_m=altitude),
    )
