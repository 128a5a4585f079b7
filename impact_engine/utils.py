"""
Impact Engine - Utility Functions and Constants Module

This module provides the physical constants and small helpers shared by the
formula library, the impact orchestrator and the mitigation model. It includes:

1. Physical and atmospheric constants
2. Unit conversion utilities (distance, energy, time)
3. Great-circle distance on a spherical Earth

The constants are fixed so that the formulas reproduce reference outputs
within floating-point tolerance.
"""

import math

# =============================================================================
# PHYSICAL AND ATMOSPHERIC CONSTANTS
# =============================================================================

# Gravitational constant (m³/kg/s²)
G = 6.67430e-11

# Earth's mass (kg)
EARTH_MASS = 5.972e24

# Earth's mean radius (meters)
EARTH_RADIUS = 6371000.0

# Earth's mean radius (kilometers) - used for haversine distances
EARTH_RADIUS_KM = 6371.0

# Sea level air density (kg/m³)
AIR_DENSITY = 1.225

# Standard gravity used by the simplified wave and crater formulas (m/s²)
GRAVITY = 9.81

# Sea water density used by the tsunami source term (kg/m³)
WATER_DENSITY = 1000.0

# Earth's escape velocity (m/s) - added in quadrature to the approach speed
EARTH_ESCAPE_VELOCITY = 11200.0

# Astronomical unit (meters)
AU = 149597870700.0

# Julian year (seconds)
YEAR_SECONDS = 31557600.0

DAY_SECONDS = 86400.0

# =============================================================================
# ENERGY EQUIVALENTS
# =============================================================================

# One ton of TNT (Joules)
TNT_TON_J = 4.184e9

# One kiloton of TNT (Joules)
TNT_KILOTON_J = 4.184e12

# One megaton of TNT (Joules)
TNT_MEGATON_J = 4.184e15

# =============================================================================
# UNIT CONVERSION UTILITIES
# =============================================================================

def km_to_m(km):
    """
    Convert kilometers to meters.

    Parameters
    ----------
    km : float
        Distance in kilometers

    Returns
    -------
    float
        Distance in meters
    """
    return km * 1000.0

def m_to_km(m):
    """
    Convert meters to kilometers.

    Parameters
    ----------
    m : float
        Distance in meters

    Returns
    -------
    float
        Distance in kilometers
    """
    return m / 1000.0

def convert_energy_j_to_tons(energy_j):
    """
    Convert energy from Joules to tons of TNT equivalent.

    Uses 1 ton TNT = 4.184 × 10^9 Joules.

    Parameters
    ----------
    energy_j : float
        Energy in Joules

    Returns
    -------
    float
        Energy in tons TNT equivalent
    """
    return energy_j / TNT_TON_J

def convert_energy_j_to_mt(energy_j):
    """Convert energy from Joules to Megatons of TNT equivalent."""
    return energy_j / TNT_MEGATON_J

def convert_mt_to_energy_j(megatons):
    """Convert a yield in Megatons of TNT to Joules."""
    return megatons * TNT_MEGATON_J

def days_to_seconds(days):
    return days * DAY_SECONDS

def months_to_seconds(months):
    """Convert mission months to seconds (a month is 1/12 of a Julian year)."""
    return months * YEAR_SECONDS / 12.0

# =============================================================================
# GEOMETRIC FUNCTIONS
# =============================================================================

def sphere_mass(radius, density):
    """
    Mass of a homogeneous sphere.

    Parameters
    ----------
    radius : float
        Sphere radius in meters
    density : float
        Bulk density in kg/m³

    Returns
    -------
    float
        Mass in kilograms, 4/3·π·r³·ρ
    """
    return (4.0 / 3.0) * math.pi * (radius ** 3) * density

def haversine_km(lat1, lon1, lat2, lon2):
    """
    Great-circle distance between two points on a spherical Earth.

    Parameters
    ----------
    lat1, lon1 : float
        First point in decimal degrees
    lat2, lon2 : float
        Second point in decimal degrees

    Returns
    -------
    float
        Distance in kilometers on a sphere of radius 6371 km

    Mathematical Form
    -----------------
    a = sin²(Δφ/2) + cos φ1 · cos φ2 · sin²(Δλ/2)
    d = 2R · atan2(√a, √(1−a))
    """
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (math.sin(d_lat / 2) ** 2
         + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2)
    # Rounding can push antipodal points just past 1.
    a = min(1.0, a)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c

def safe_ratio(numerator, denominator):
    """
    Divide two non-negative quantities without raising.

    A zero denominator yields ``inf`` for a positive numerator and ``0.0``
    when both are zero, so heuristic caps downstream stay well defined.
    """
    if denominator > 0:
        return numerator / denominator
    return math.inf if numerator > 0 else 0.0
