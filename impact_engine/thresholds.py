"""
Fixed thresholds, presets and heuristic tiers used by the impact engine.
"""

# ==========================================
# Impactor material presets (kg/m³)
# ==========================================
MATERIAL_DENSITIES = {
    "ice": 917.0,
    "porous_rock": 1500.0,
    "stony": 3000.0,
    "iron": 7800.0,
}

DEFAULT_DENSITY = MATERIAL_DENSITIES["stony"]

# ==========================================
# Environment
# ==========================================
# Elevation below which a site is treated as a coastal / tsunami risk.
# A coarse proxy for "near the coast", not a coastline lookup.
COASTAL_ELEVATION_THRESHOLD_M = 100.0

# Terrain multipliers applied to the crater diameter.
SUBMERGED_TERRAIN_MULTIPLIER = 0.8
HIGHLAND_ELEVATION_M = 2000.0
HIGHLAND_TERRAIN_MULTIPLIER = 1.2

DEFAULT_SEISMIC_RADIUS_KM = 100.0

# EPQS reports points without coverage with a large negative sentinel.
ELEVATION_NODATA_LIMIT_M = -100000.0

def terrain_multiplier(elevation_m):
    """Crater size multiplier for the terrain at the impact point."""
    if elevation_m < 0:
        return SUBMERGED_TERRAIN_MULTIPLIER
    if elevation_m > HIGHLAND_ELEVATION_M:
        return HIGHLAND_TERRAIN_MULTIPLIER
    return 1.0

# ==========================================
# Mitigation lead times (days)
# ==========================================
LEAD_TIME_DAYS = {
    "none": 0,
    "kinetic": 365,
    "nuclear": 180,
    "gravity_tractor": 3650,
}

# ==========================================
# Mitigation effectiveness tiers
# ==========================================
# (ratio upper bound, multiplier); first matching tier wins, above all tiers no penalty.
KINETIC_MASS_RATIO_TIERS = [(1e-4, 0.1), (1e-3, 0.3), (1e-2, 0.7)]
NUCLEAR_YIELD_MASS_RATIO_TIERS = [(0.1, 0.2), (1.0, 0.5), (10.0, 0.8)]
TRACTOR_TIME_RATIO_TIERS = [(0.1, 0.1), (1.0, 0.4), (5.0, 0.8)]
TRACTOR_MASS_RATIO_TIERS = [(1e-6, 0.1), (1e-5, 0.3), (1e-4, 0.7)]

KINETIC_EFFECTIVENESS = {"floor": 0.05, "cap": 0.98}
NUCLEAR_EFFECTIVENESS = {"floor": 0.10, "cap": 0.98}
TRACTOR_EFFECTIVENESS = {"floor": 0.02, "cap": 0.90}

# Effectiveness at or above which a caller treats the mitigation as a success.
DEFAULT_SUCCESS_THRESHOLD = 0.5

# Fraction of the original diameter re-simulated after a successful mitigation.
REDUCED_IMPACT_FACTOR = 0.1

def tier_multiplier(ratio, tiers):
    """Return the penalty multiplier for ``ratio`` from an ordered tier table."""
    for upper_bound, multiplier in tiers:
        if ratio < upper_bound:
            return multiplier
    return 1.0

# ==========================================
# Ablation material properties
# ==========================================
# specific heat (J/kg/K), heat of vaporization (J/kg)
ABLATION_PROPERTIES = {
    "ice": {"specific_heat": 2000.0, "vaporization": 2.3e6},
    "rock": {"specific_heat": 1000.0, "vaporization": 8e6},
}
ABLATION_TEMPERATURE_RISE_K = 2000.0
MAX_RADIATION_COUPLING = 0.7

# ==========================================
# Casualty model
# ==========================================
# Share of the affected population per severity band and its case-fatality ratio.
CASUALTY_BANDS = {
    "crater": {"share": 0.25, "fatality_ratio": 0.9},
    "blast": {"share": 0.45, "fatality_ratio": 0.3},
    "shock": {"share": 0.30, "fatality_ratio": 0.05},
}

RURAL_DENSITY_PER_KM2 = 20
RURAL_OVERLAP_DISCOUNT = 50000
NEARBY_CITY_WEIGHT = 0.25
MIN_ASSESSMENT_RADIUS_KM = 10

COST_PER_AFFECTED_PERSON_USD = 20000
