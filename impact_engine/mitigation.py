"""
Impact Engine - Mitigation Effectiveness Model

Scores candidate deflection strategies for an incoming impactor and reports
the deflection physics behind them:

- Kinetic impactor: momentum transfer by a spacecraft collision
- Nuclear standoff: surface ablation by a detonation at a distance
- Gravity tractor: slow tug by a hovering spacecraft
- None: no defense deployed

The effectiveness scores are simplified heuristics for an educational tool,
not validated mission analysis. Every outcome is a deterministic function of
its inputs; whether a mitigation "succeeds" is decided by the caller from the
effectiveness (see ``mitigated_impactor``).
"""

import math
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

import numpy as np

from impact_engine.thresholds import (
    ABLATION_PROPERTIES, ABLATION_TEMPERATURE_RISE_K, DEFAULT_SUCCESS_THRESHOLD,
    KINETIC_EFFECTIVENESS, KINETIC_MASS_RATIO_TIERS, LEAD_TIME_DAYS, MAX_RADIATION_COUPLING,
    NUCLEAR_EFFECTIVENESS, NUCLEAR_YIELD_MASS_RATIO_TIERS, REDUCED_IMPACT_FACTOR,
    TRACTOR_EFFECTIVENESS, TRACTOR_MASS_RATIO_TIERS, TRACTOR_TIME_RATIO_TIERS, tier_multiplier,
)
from impact_engine.utils import (
    AU, EARTH_ESCAPE_VELOCITY, G, convert_mt_to_energy_j, days_to_seconds,
    km_to_m, months_to_seconds, safe_ratio,
)


class StrategyKind(str, Enum):
    NONE = "none"
    KINETIC = "kinetic"
    NUCLEAR = "nuclear"
    GRAVITY_TRACTOR = "gravity_tractor"

    @classmethod
    def parse(cls, value):
        """
        Strategy from its name; accepts ``gravity`` and ``gravityTractor`` as aliases.

        Raises:
            ValueError: For an unknown strategy name.
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip()
        aliases = {"gravity": cls.GRAVITY_TRACTOR, "gravityTractor": cls.GRAVITY_TRACTOR}
        if key in aliases:
            return aliases[key]
        try:
            return cls(key.lower().replace("-", "_"))
        except ValueError:
            raise ValueError(f"Unknown mitigation strategy {value!r}")


def _require_positive(owner, **values):
    for name, value in values.items():
        if not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
            raise ValueError(f"{owner}.{name} must be a positive number, got {value!r}")


@dataclass(frozen=True)
class KineticParameters:
    impactor_mass_kg: float = 500.0
    impactor_velocity_km_s: float = 10.0
    # Distance to Earth at interception, converts the deflection angle to a miss distance.
    approach_distance_m: float = 0.05 * AU
    impactor_direction: Tuple[float, float, float] = (0.0, 1.0, 0.0)

    def validate(self):
        _require_positive("kinetic", impactor_mass_kg=self.impactor_mass_kg,
                          impactor_velocity_km_s=self.impactor_velocity_km_s,
                          approach_distance_m=self.approach_distance_m)
        return self


@dataclass(frozen=True)
class NuclearParameters:
    yield_megatons: float = 1.0
    standoff_distance_m: float = 1000.0
    material: str = "rock"
    time_to_impact_days: Optional[float] = None

    def validate(self):
        _require_positive("nuclear", yield_megatons=self.yield_megatons,
                          standoff_distance_m=self.standoff_distance_m)
        if self.material not in ABLATION_PROPERTIES:
            raise ValueError(f"nuclear.material must be one of {sorted(ABLATION_PROPERTIES)}, got {self.material!r}")
        return self


@dataclass(frozen=True)
class GravityTractorParameters:
    spacecraft_mass_kg: float = 1000.0
    hover_distance_m: float = 100.0
    duration_months: float = 12.0
    time_to_impact_days: Optional[float] = None

    def validate(self):
        _require_positive("gravity_tractor", spacecraft_mass_kg=self.spacecraft_mass_kg,
                          hover_distance_m=self.hover_distance_m,
                          duration_months=self.duration_months)
        return self


@dataclass(frozen=True)
class MitigationParameters:
    """Per-strategy parameter sets; any set left as ``None`` uses its defaults."""
    kinetic: Optional[KineticParameters] = None
    nuclear: Optional[NuclearParameters] = None
    gravity_tractor: Optional[GravityTractorParameters] = None

    def kinetic_or_default(self):
        return self.kinetic or KineticParameters()

    def nuclear_or_default(self):
        return self.nuclear or NuclearParameters()

    def gravity_tractor_or_default(self):
        return self.gravity_tractor or GravityTractorParameters()


@dataclass(frozen=True)
class KineticDeflection:
    delta_v_m_s: float
    deflection_angle_deg: float
    miss_distance_m: float
    new_velocity_m_s: Tuple[float, float, float]


@dataclass(frozen=True)
class NuclearDeflection:
    delta_v_m_s: float
    coupling_efficiency: float
    ablated_mass_kg: float
    exhaust_velocity_m_s: float
    deflection_distance_m: float


@dataclass(frozen=True)
class TractorDeflection:
    force_n: float
    acceleration_m_s2: float
    delta_v_m_s: float
    deflection_distance_m: float
    required_hover_time_s: float


Deflection = Union[KineticDeflection, NuclearDeflection, TractorDeflection]


@dataclass(frozen=True)
class MitigationOutcome:
    strategy: StrategyKind
    effectiveness: float
    delta_v_m_s: float
    required_lead_time_days: int
    energy_reduction_j: float = 0.0
    success_probability_percent: float = 0.0
    deflection: Optional[Deflection] = field(default=None)

    def is_successful(self, threshold=DEFAULT_SUCCESS_THRESHOLD):
        return self.strategy is not StrategyKind.NONE and self.effectiveness >= threshold

    def to_dict(self):
        return {
            "strategy": self.strategy.value,
            "effectiveness": self.effectiveness,
            "delta_v_m_s": self.delta_v_m_s,
            "required_lead_time_days": self.required_lead_time_days,
            "energy_reduction_j": self.energy_reduction_j,
            "success_probability_percent": self.success_probability_percent,
            "deflection": asdict(self.deflection) if self.deflection is not None else None,
        }


def encounter_velocity(approach_velocity_m_s):
    """Approach speed combined in quadrature with Earth's escape velocity."""
    return math.sqrt(approach_velocity_m_s ** 2 + EARTH_ESCAPE_VELOCITY ** 2)


def _bounded(value, floor, cap):
    return min(cap, max(floor, value))

# =============================================================================
# EFFECTIVENESS HEURISTICS
# =============================================================================

def kinetic_effectiveness(asteroid_mass, asteroid_velocity, entry_energy, params):
    """
    Kinetic impactor score from momentum and energy transfer.

    ``min(0.98, 3·momentum_ratio + 0.8·energy_ratio)`` scaled down for small
    impactor-to-asteroid mass ratios (×0.1 below 1e-4, ×0.3 below 1e-3,
    ×0.7 below 1e-2) and floored at 0.05.
    """
    impactor_velocity = km_to_m(params.impactor_velocity_km_s)
    impactor_energy = 0.5 * params.impactor_mass_kg * impactor_velocity ** 2
    momentum_ratio = safe_ratio(params.impactor_mass_kg * impactor_velocity, asteroid_mass * asteroid_velocity)
    energy_ratio = safe_ratio(impactor_energy, entry_energy)

    effectiveness = min(KINETIC_EFFECTIVENESS["cap"], 3 * momentum_ratio + 0.8 * energy_ratio)
    effectiveness *= tier_multiplier(safe_ratio(params.impactor_mass_kg, asteroid_mass), KINETIC_MASS_RATIO_TIERS)
    return _bounded(effectiveness, KINETIC_EFFECTIVENESS["floor"], KINETIC_EFFECTIVENESS["cap"])


def nuclear_effectiveness(asteroid_mass, entry_energy, params):
    """
    Nuclear standoff score from yield and standoff distance.

    ``min(0.98, 1.2·yield/E + 0.4·max(0.3, 2000/standoff))``, penalised when
    the yield (as 1e6 kg per megaton) is small against the asteroid mass
    (×0.2 below 0.1, ×0.5 below 1, ×0.8 below 10), floored at 0.10.
    """
    yield_energy = convert_mt_to_energy_j(params.yield_megatons)
    yield_ratio = safe_ratio(yield_energy, entry_energy)
    standoff_effect = max(0.3, safe_ratio(2000.0, params.standoff_distance_m))

    effectiveness = min(NUCLEAR_EFFECTIVENESS["cap"], yield_ratio * 1.2 + standoff_effect * 0.4)
    yield_mass_ratio = safe_ratio(params.yield_megatons * 1e6, asteroid_mass)
    effectiveness *= tier_multiplier(yield_mass_ratio, NUCLEAR_YIELD_MASS_RATIO_TIERS)
    return _bounded(effectiveness, NUCLEAR_EFFECTIVENESS["floor"], NUCLEAR_EFFECTIVENESS["cap"])


def gravity_tractor_effectiveness(asteroid_mass, params):
    """
    Gravity tractor score from spacecraft mass and mission duration.

    ``min(0.90, 2000·m_s/m + 0.6·(months/12)^1.5)``, penalised when the
    duration per billion kg of asteroid is short (×0.1 below 0.1, ×0.4 below
    1, ×0.8 below 5) and when the spacecraft is tiny against the asteroid
    (×0.1 below 1e-6, ×0.3 below 1e-5, ×0.7 below 1e-4), floored at 0.02.
    """
    mass_ratio = safe_ratio(params.spacecraft_mass_kg, asteroid_mass)
    time_effect = (params.duration_months / 12.0) ** 1.5

    effectiveness = min(TRACTOR_EFFECTIVENESS["cap"], mass_ratio * 2000 + time_effect * 0.6)
    required_time_ratio = safe_ratio(params.duration_months, asteroid_mass / 1e9)
    effectiveness *= tier_multiplier(required_time_ratio, TRACTOR_TIME_RATIO_TIERS)
    effectiveness *= tier_multiplier(mass_ratio, TRACTOR_MASS_RATIO_TIERS)
    return _bounded(effectiveness, TRACTOR_EFFECTIVENESS["floor"], TRACTOR_EFFECTIVENESS["cap"])

# =============================================================================
# DEFLECTION PHYSICS
# =============================================================================

def kinetic_deflection(asteroid_mass, asteroid_velocity, params):
    """
    Perfectly inelastic collision of the impactor with the asteroid.

    The asteroid travels along +x; the impactor arrives along
    ``params.impactor_direction``. Momentum conservation gives the new
    velocity, whose angle to the old one sets the miss distance at
    ``params.approach_distance_m``.
    """
    asteroid_v = np.array([asteroid_velocity, 0.0, 0.0])
    direction = np.asarray(params.impactor_direction, dtype=float)
    norm = np.linalg.norm(direction)
    direction = direction / norm if norm > 0 else np.array([0.0, 1.0, 0.0])
    impactor_v = direction * km_to_m(params.impactor_velocity_km_s)

    combined_mass = asteroid_mass + params.impactor_mass_kg
    if combined_mass <= 0:
        return KineticDeflection(0.0, 0.0, 0.0, (0.0, 0.0, 0.0))
    new_v = (asteroid_mass * asteroid_v + params.impactor_mass_kg * impactor_v) / combined_mass

    delta_v = float(np.linalg.norm(new_v - asteroid_v))
    # atan2 keeps precision for the tiny angles typical of real missions.
    angle_deg = float(np.degrees(np.arctan2(np.linalg.norm(np.cross(asteroid_v, new_v)), np.dot(asteroid_v, new_v))))
    miss_distance = params.approach_distance_m * math.tan(math.radians(angle_deg))
    return KineticDeflection(
        delta_v_m_s=delta_v,
        deflection_angle_deg=angle_deg,
        miss_distance_m=miss_distance,
        new_velocity_m_s=tuple(float(c) for c in new_v),
    )


def radiation_coupling(standoff_distance, asteroid_radius):
    """Fraction of the yield intercepted by the asteroid's disc, at most 70%."""
    if standoff_distance <= 0:
        return MAX_RADIATION_COUPLING
    solid_angle = math.pi * asteroid_radius ** 2 / (4 * math.pi * standoff_distance ** 2)
    return min(MAX_RADIATION_COUPLING * solid_angle, MAX_RADIATION_COUPLING)


def ablated_mass(absorbed_energy, material):
    """Surface mass heated by 2000 K and vaporised by ``absorbed_energy`` Joules."""
    properties = ABLATION_PROPERTIES.get(material, ABLATION_PROPERTIES["rock"])
    return absorbed_energy / (properties["specific_heat"] * ABLATION_TEMPERATURE_RISE_K + properties["vaporization"])


def nuclear_deflection(asteroid_mass, asteroid_radius, params, time_to_impact_s):
    energy = convert_mt_to_energy_j(params.yield_megatons)
    coupling = radiation_coupling(params.standoff_distance_m, asteroid_radius)
    absorbed = energy * coupling
    ablated = ablated_mass(absorbed, params.material)
    if ablated <= 0:
        return NuclearDeflection(0.0, coupling, 0.0, 0.0, 0.0)

    exhaust_velocity = math.sqrt(2 * absorbed / ablated)
    delta_v = safe_ratio(ablated * exhaust_velocity, asteroid_mass)
    return NuclearDeflection(
        delta_v_m_s=delta_v,
        coupling_efficiency=coupling,
        ablated_mass_kg=ablated,
        exhaust_velocity_m_s=exhaust_velocity,
        deflection_distance_m=delta_v * time_to_impact_s,
    )


def gravity_tractor_deflection(asteroid_mass, asteroid_radius, params, time_to_impact_s):
    """
    Newtonian tug of a spacecraft hovering at ``params.hover_distance_m``.

    F = G·m_s·m/d², a = F/m, Δv = a·t, displacement 0.5·a·t². The required
    hover time compares Δv with the asteroid's surface escape velocity.
    """
    distance_sq = params.hover_distance_m ** 2
    force = safe_ratio(G * params.spacecraft_mass_kg * asteroid_mass, distance_sq)
    acceleration = safe_ratio(G * params.spacecraft_mass_kg, distance_sq)
    duration_s = months_to_seconds(params.duration_months)
    delta_v = acceleration * duration_s

    escape_velocity = math.sqrt(2 * G * asteroid_mass / asteroid_radius) if asteroid_radius > 0 else 0.0
    return TractorDeflection(
        force_n=force,
        acceleration_m_s2=acceleration,
        delta_v_m_s=delta_v,
        deflection_distance_m=0.5 * acceleration * duration_s ** 2,
        required_hover_time_s=safe_ratio(delta_v, escape_velocity) * time_to_impact_s,
    )

# =============================================================================
# ENTRY POINT
# =============================================================================

def evaluate(strategy, spec, params=None):
    """
    Effectiveness and deflection outcome of ``strategy`` against ``spec``.

    Args:
        strategy (StrategyKind or str): ``none``, ``kinetic``, ``nuclear`` or
            ``gravity_tractor`` (``gravity`` accepted).
        spec (ImpactorSpecification): The asteroid to deflect.
        params (MitigationParameters, optional): Strategy parameters; missing
            sets fall back to their defaults.

    Returns:
        MitigationOutcome: effectiveness in [0, 1], delta-v, fixed lead time,
        energy reduction and the strategy's deflection details.
    """
    kind = StrategyKind.parse(strategy)
    params = params or MitigationParameters()
    lead_time = LEAD_TIME_DAYS[kind.value]

    if kind is StrategyKind.NONE:
        return MitigationOutcome(strategy=kind, effectiveness=0.0, delta_v_m_s=0.0, required_lead_time_days=lead_time)

    mass = spec.mass_kg
    v0 = spec.initial_velocity_m_s
    # Encounter speed drives momentum; the energy terms use the entry energy.
    velocity = encounter_velocity(v0)
    entry_energy = 0.5 * mass * v0 ** 2

    if kind is StrategyKind.KINETIC:
        kinetic = params.kinetic_or_default()
        effectiveness = kinetic_effectiveness(mass, velocity, entry_energy, kinetic)
        deflection = kinetic_deflection(mass, velocity, kinetic)
    elif kind is StrategyKind.NUCLEAR:
        nuclear = params.nuclear_or_default()
        days = lead_time if nuclear.time_to_impact_days is None else nuclear.time_to_impact_days
        effectiveness = nuclear_effectiveness(mass, entry_energy, nuclear)
        deflection = nuclear_deflection(mass, spec.radius_m, nuclear, days_to_seconds(days))
    else:
        tractor = params.gravity_tractor_or_default()
        days = lead_time if tractor.time_to_impact_days is None else tractor.time_to_impact_days
        effectiveness = gravity_tractor_effectiveness(mass, tractor)
        deflection = gravity_tractor_deflection(mass, spec.radius_m, tractor, days_to_seconds(days))

    effectiveness = min(1.0, max(0.0, effectiveness))
    return MitigationOutcome(
        strategy=kind,
        effectiveness=effectiveness,
        delta_v_m_s=deflection.delta_v_m_s,
        required_lead_time_days=lead_time,
        energy_reduction_j=entry_energy * effectiveness,
        success_probability_percent=effectiveness * 100.0,
        deflection=deflection,
    )


def mitigated_impactor(spec, outcome, threshold=DEFAULT_SUCCESS_THRESHOLD):
    """
    Fragment left to strike after a successful mitigation, or ``None``.

    Success is gated on ``outcome.effectiveness >= threshold``; the remaining
    impactor keeps 10% of the original diameter.
    """
    if not outcome.is_successful(threshold):
        return None
    return spec.scaled(REDUCED_IMPACT_FACTOR)
