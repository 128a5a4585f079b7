"""
Impact Engine Web Application

This Flask-based web application exposes the impact and mitigation physics
engine as a small JSON API for the interactive front end. The front end
supplies the impactor parameters and the impact coordinate; the engine
returns the consequences of the impact and the effectiveness of a chosen
deflection strategy.

Endpoints:
    POST /simulate  - impact energy, crater, blast, seismic and tsunami figures
    POST /mitigate  - mitigation effectiveness and deflection physics
    GET  /health    - liveness probe
"""

import logging

from flask import Flask, jsonify, request

from impact_engine.config import load_settings
from impact_engine.consequences import assess_consequences
from impact_engine.environment import EnvironmentResolver
from impact_engine.mitigation import (
    GravityTractorParameters, KineticParameters, MitigationParameters, NuclearParameters,
    StrategyKind, evaluate, mitigated_impactor,
)
from impact_engine.models import GeoCoordinate, ImpactorSpecification, has_valid_coordinate
from impact_engine.results import collect_effect_details, compute_impact
from impact_engine.thresholds import DEFAULT_DENSITY, DEFAULT_SUCCESS_THRESHOLD, MATERIAL_DENSITIES
from impact_engine.utils import convert_energy_j_to_mt, km_to_m

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(message)s')
logger = logging.getLogger(__name__)

app = Flask(__name__)


class InvalidInput(ValueError):
    """Request payload rejected at the API boundary."""


def get_resolver():
    """Environment resolver configured from the process environment."""
    return EnvironmentResolver(load_settings())


def _number(data, key, default=None):
    value = data.get(key, default)
    if value is None:
        raise InvalidInput(f"Missing required parameter '{key}'.")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"Parameter '{key}' must be numeric.")


def _optional_number(data, key):
    return _number(data, key) if data.get(key) is not None else None


def parse_impactor(data):
    """
    Build and validate an ``ImpactorSpecification`` from request JSON.

    Expected keys: ``diameter`` (m), ``velocity`` (km/s), optional
    ``entry_angle`` (degrees, default 45) and either ``density`` (kg/m³) or a
    ``material`` preset name (default stony, 3000 kg/m³).
    """
    if "density" in data and data["density"] is not None:
        density = _number(data, "density")
    elif data.get("material") is not None:
        material = data["material"]
        if material not in MATERIAL_DENSITIES:
            raise InvalidInput(f"Unknown material '{material}'. Choose one of: {', '.join(MATERIAL_DENSITIES)}.")
        density = MATERIAL_DENSITIES[material]
    else:
        density = DEFAULT_DENSITY

    spec = ImpactorSpecification(
        diameter_m=_number(data, "diameter"),
        density_kg_m3=density,
        speed_km_s=_number(data, "velocity"),
        entry_angle_deg=_number(data, "entry_angle", 45.0),
    )
    try:
        return spec.validate()
    except ValueError as e:
        raise InvalidInput(str(e))


def parse_coordinate(data):
    """Impact coordinate from ``latitude``/``longitude``, or ``None`` when absent or invalid."""
    if data.get("latitude") is None or data.get("longitude") is None:
        return None
    try:
        coord = GeoCoordinate(float(data["latitude"]), float(data["longitude"]))
    except (TypeError, ValueError):
        return None
    return coord if coord.is_valid() else None


def parse_mitigation_parameters(data):
    """Strategy parameter sets from request JSON; absent values keep their defaults."""
    kinetic_defaults = KineticParameters()
    nuclear_defaults = NuclearParameters()
    tractor_defaults = GravityTractorParameters()
    try:
        return MitigationParameters(
            kinetic=KineticParameters(
                impactor_mass_kg=_number(data, "impactor_mass", kinetic_defaults.impactor_mass_kg),
                impactor_velocity_km_s=_number(data, "impactor_velocity", kinetic_defaults.impactor_velocity_km_s),
                approach_distance_m=_number(data, "approach_distance", kinetic_defaults.approach_distance_m),
            ).validate(),
            nuclear=NuclearParameters(
                yield_megatons=_number(data, "yield", nuclear_defaults.yield_megatons),
                standoff_distance_m=_number(data, "standoff", nuclear_defaults.standoff_distance_m),
                material=data.get("ablation_material") or nuclear_defaults.material,
                time_to_impact_days=_optional_number(data, "time_to_impact_days"),
            ).validate(),
            gravity_tractor=GravityTractorParameters(
                spacecraft_mass_kg=_number(data, "spacecraft_mass", tractor_defaults.spacecraft_mass_kg),
                hover_distance_m=_number(data, "hover_distance", tractor_defaults.hover_distance_m),
                duration_months=_number(data, "duration", tractor_defaults.duration_months),
                time_to_impact_days=_optional_number(data, "time_to_impact_days"),
            ).validate(),
        )
    except InvalidInput:
        raise
    except ValueError as e:
        raise InvalidInput(str(e))


def _bad_request(message):
    return jsonify({"error": message}), 400


@app.route('/simulate', methods=['POST'])
async def simulate():
    """
    Primary endpoint for impact simulations.

    Expected JSON Input:
        diameter (float): Diameter of the impactor in meters (> 0).
        velocity (float): Entry speed in km/s (> 0).
        entry_angle (float, optional): Entry angle in degrees, 0-90 (default 45).
        density (float, optional): Bulk density in kg/m³ (default 3000).
        material (str, optional): Density preset used when density is absent.
        latitude, longitude (float, optional): Impact point; without them the
            environment defaults to sea level, inland, no seismic activity.
        distance (float, optional): Reference distance in km for the detailed
            effects (>= 1, default 10).

    Returns:
        JSON: ``{"results_data": {...}}`` with the input parameters, the impact
        result, the detailed effects and, for a valid coordinate, the
        population / casualty / cost estimates.

    Raises:
        HTTP 400: If input parameters are missing or invalid.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _bad_request("Request body must be a JSON object.")
    try:
        spec = parse_impactor(data)
        distance_km = _number(data, "distance", 10.0)
        if distance_km < 1:
            raise InvalidInput("Distance must be 1 km or greater.")
    except InvalidInput as e:
        return _bad_request(str(e))

    coord = parse_coordinate(data)
    if coord is not None:
        logger.info(f"Simulation Request - Coordinates: {coord.latitude:.6f}°, {coord.longitude:.6f}°")
    logger.info(f"Parameters: D={spec.diameter_m}m, ρ={spec.density_kg_m3}kg/m³, v={spec.speed_km_s}km/s, θ={spec.entry_angle_deg}°")

    resolver = get_resolver() if coord is not None else None
    result = await compute_impact(spec, coord, resolver)

    results_data = {
        "input_parameters": {
            "diameter": spec.diameter_m,
            "density": spec.density_kg_m3,
            "velocity": spec.speed_km_s,
            "entry_angle": spec.entry_angle_deg,
            "latitude": coord.latitude if coord else None,
            "longitude": coord.longitude if coord else None,
        },
        "impact": {**result.to_dict(), "energy_mt": convert_energy_j_to_mt(result.energy_j)},
        "effects": collect_effect_details(spec, result, km_to_m(distance_km)),
    }
    logger.info(f"Impact energy: {convert_energy_j_to_mt(result.energy_j):.2f} Mt TNT")
    if has_valid_coordinate(coord):
        results_data["consequences"] = assess_consequences(result, coord).to_dict()

    return jsonify({"results_data": results_data})


@app.route('/mitigate', methods=['POST'])
async def mitigate():
    """
    Evaluate a deflection strategy against the impactor.

    Expected JSON Input:
        strategy (str): ``none``, ``kinetic``, ``nuclear`` or ``gravity_tractor``.
        diameter, velocity, entry_angle, density/material: as for /simulate.
        impactor_mass (kg), impactor_velocity (km/s), approach_distance (m): kinetic.
        yield (Mt), standoff (m), ablation_material (``rock``/``ice``): nuclear.
        spacecraft_mass (kg), hover_distance (m), duration (months): gravity tractor.
        time_to_impact_days (float, optional): overrides the strategy lead time.
        success_threshold (float, optional): effectiveness counted as success (default 0.5).
        latitude, longitude (float, optional): impact point for the residual impact.

    Returns:
        JSON: The mitigation outcome, plus ``reduced_impact`` (the impact of the
        remaining fragment) when the mitigation counts as successful.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _bad_request("Request body must be a JSON object.")
    try:
        strategy = StrategyKind.parse(data.get("strategy", "none"))
        spec = parse_impactor(data)
        params = parse_mitigation_parameters(data)
        threshold = _number(data, "success_threshold", DEFAULT_SUCCESS_THRESHOLD)
    except ValueError as e:
        return _bad_request(str(e))

    outcome = evaluate(strategy, spec, params)
    response = {"mitigation": outcome.to_dict(), "successful": outcome.is_successful(threshold)}

    fragment = mitigated_impactor(spec, outcome, threshold)
    if fragment is not None:
        coord = parse_coordinate(data)
        resolver = get_resolver() if coord is not None else None
        response["reduced_impact"] = (await compute_impact(fragment, coord, resolver)).to_dict()

    logger.info(f"Mitigation {strategy.value}: effectiveness {outcome.effectiveness:.3f}, Δv {outcome.delta_v_m_s:.3e} m/s")
    return jsonify(response)


@app.route('/health')
def health():
    return jsonify({"status": "ok"})


if __name__ == '__main__':
    app.run(debug=False)
