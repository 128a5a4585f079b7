"""
Impact Engine - Impact Calculation Orchestrator

This module composes the environmental context and the headline impact
formulas into a single ``ImpactResult``:

- compute_impact(): asynchronous entry point (awaits the environment resolver)
- compute_impact_sync(): blocking wrapper for synchronous callers
- calculate_impact_effects(): the pure formula stage, given a resolved context
- collect_effect_details(): formula-library breakdown for display

The headline energy uses a simplified entry-angle attenuation of the
velocity, ``v0 · 0.7^cos(θ)``, rather than the drag model of the formula
library.
"""

import asyncio
import logging
import math

from impact_engine.formulas import (
    atmospheric_effects, atmospheric_entry_velocity, crater_dimensions,
    seismic_effects, seismic_magnitude, tsunami_effects,
)
from impact_engine.models import EnvironmentalContext, ImpactResult, has_valid_coordinate
from impact_engine.thresholds import terrain_multiplier
from impact_engine.utils import GRAVITY, TNT_KILOTON_J, convert_energy_j_to_tons

logger = logging.getLogger(__name__)

# Crustal rock density for the crater breakdown (kg/m³)
TARGET_ROCK_DENSITY = 2600.0

DEFAULT_REFERENCE_DISTANCE_M = 10000.0

# Velocity retained at grazing incidence (cos θ = 1)
ENTRY_ATTENUATION_BASE = 0.7

# Empirical crater / blast / tsunami fits
CRATER_ENERGY_SCALE = 1e15
CRATER_EXPONENT = 0.26
BLAST_EXPONENT = 0.33
SHOCKWAVE_FACTOR = 2.5
TSUNAMI_ENERGY_SCALE = 1e15
TSUNAMI_EXPONENT = 0.25
TSUNAMI_HEIGHT_FACTOR = 10.0


def attenuated_velocity(v0, entry_angle_deg):
    """Velocity after entry: steep entries lose less speed than grazing ones."""
    return v0 * ENTRY_ATTENUATION_BASE ** math.cos(math.radians(entry_angle_deg))


def calculate_impact_effects(spec, environment):
    """
    Evaluate the impact formulas for ``spec`` in an already resolved ``environment``.

    Args:
        spec (ImpactorSpecification): The impactor.
        environment (EnvironmentalContext): Elevation, coastal flag and seismic events.

    Returns:
        ImpactResult: Energy, TNT equivalent, crater, blast, shockwave, seismic
        magnitude and tsunami height. Zero-energy impacts give zero effects.
    """
    mass = spec.mass_kg
    v_final = attenuated_velocity(spec.initial_velocity_m_s, spec.entry_angle_deg)
    energy = 0.5 * mass * v_final ** 2
    tnt_tons = convert_energy_j_to_tons(energy)

    if energy > 0:
        crater_diameter = (energy / CRATER_ENERGY_SCALE) ** CRATER_EXPONENT * 1000 * terrain_multiplier(environment.elevation_m)
        blast_radius = (energy / TNT_KILOTON_J) ** BLAST_EXPONENT * 1000
    else:
        crater_diameter = 0.0
        blast_radius = 0.0

    if environment.is_coastal_risk and energy > 0:
        tsunami_height = (energy / TSUNAMI_ENERGY_SCALE) ** TSUNAMI_EXPONENT * TSUNAMI_HEIGHT_FACTOR
    else:
        tsunami_height = 0.0

    return ImpactResult(
        mass_kg=mass,
        final_velocity_m_s=v_final,
        energy_j=energy,
        tnt_equivalent_tons=tnt_tons,
        crater_diameter_m=crater_diameter,
        blast_radius_m=blast_radius,
        shockwave_radius_m=blast_radius * SHOCKWAVE_FACTOR,
        seismic_magnitude=seismic_magnitude(tnt_tons),
        tsunami_height_m=tsunami_height,
        environment=environment,
    )


async def resolve_environment(coord, resolver=None):
    """
    Environmental context for ``coord``, or the default context.

    Missing or invalid coordinates skip the lookups. A resolver that fails
    unexpectedly is logged and replaced by the default context as well.
    """
    if not has_valid_coordinate(coord):
        logger.debug(f"No usable coordinate ({coord!r}); using the default environment.")
        return EnvironmentalContext.default()

    if resolver is None:
        # Imported lazily so pure callers never need the HTTP stack configured.
        from impact_engine.environment import EnvironmentResolver
        resolver = EnvironmentResolver()
    try:
        return await resolver.resolve(coord.latitude, coord.longitude)
    except Exception:
        logger.exception(f"Environment lookup failed for {coord!r}; using the default environment.")
        return EnvironmentalContext.default()


async def compute_impact(spec, coord=None, resolver=None):
    """
    Consolidated impact result for ``spec`` striking at ``coord``.

    Args:
        spec (ImpactorSpecification): Validated impactor parameters.
        coord (GeoCoordinate, optional): Impact point; absent or invalid
            coordinates fall back to sea level, inland, no seismic events.
        resolver (EnvironmentResolver, optional): Resolver to use; a default
            one configured from the environment is created when omitted.

    Returns:
        ImpactResult
    """
    environment = await resolve_environment(coord, resolver)
    result = calculate_impact_effects(spec, environment)
    logger.info(
        f"Impact D={spec.diameter_m}m, ρ={spec.density_kg_m3}kg/m³, v={spec.speed_km_s}km/s, "
        f"θ={spec.entry_angle_deg}°: E={result.energy_j:.3e} J, crater={result.crater_diameter_m:.0f} m"
    )
    return result


def compute_impact_sync(spec, coord=None, resolver=None):
    """Blocking variant of :func:`compute_impact` for code without an event loop."""
    return asyncio.run(compute_impact(spec, coord, resolver))


def collect_effect_details(spec, result, distance_m=DEFAULT_REFERENCE_DISTANCE_M):
    """
    Formula-library breakdown of an impact for display next to the headline figures.

    Args:
        spec (ImpactorSpecification): The impactor.
        result (ImpactResult): Headline result for the same impactor.
        distance_m (float): Ground range at which blast, thermal and tsunami
            effects are evaluated.

    Returns:
        dict: Drag-model entry velocity, transient crater, seismic shaking radii,
        tsunami wave at ``distance_m`` (submerged sites only) and the blast
        overpressure / thermal intensity at ``distance_m``.
    """
    energy = result.energy_j
    crater = crater_dimensions(energy, TARGET_ROCK_DENSITY, GRAVITY, spec.entry_angle_deg)
    seismic = seismic_effects(energy)
    water_depth = max(0.0, -result.environment.elevation_m)
    tsunami = tsunami_effects(energy, water_depth, distance_m)
    atmosphere = atmospheric_effects(energy, 0.0)

    return {
        "reference_distance_m": distance_m,
        "atmospheric_entry": {
            "drag_model_velocity_m_s": atmospheric_entry_velocity(
                spec.initial_velocity_m_s, spec.radius_m, spec.density_kg_m3, spec.entry_angle_deg
            ),
        },
        "crater_formation": {"transient_radius_m": crater.radius, "depth_m": crater.depth},
        "seismic": {
            "magnitude": seismic.magnitude,
            "severe_shaking_km": seismic.severe_km,
            "moderate_shaking_km": seismic.moderate_km,
            "light_shaking_km": seismic.light_km,
        },
        "tsunami": {"water_depth_m": water_depth, "height_m": tsunami.height, "velocity_m_s": tsunami.velocity},
        "airblast": {
            "overpressure_kpa": atmosphere.blast.evaluate_at(distance_m),
            "thermal_intensity_w_m2": atmosphere.thermal.evaluate_at(distance_m),
        },
    }
