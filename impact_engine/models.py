"""
Impact Engine - Value Objects

Immutable inputs and results passed between the caller, the environmental
resolver and the impact orchestrator.
"""

import math
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime
from typing import Optional, Tuple

from impact_engine.utils import km_to_m, sphere_mass


@dataclass(frozen=True)
class ImpactorSpecification:
    """Physical description of the incoming body."""
    diameter_m: float
    density_kg_m3: float
    speed_km_s: float
    entry_angle_deg: float = 45.0

    @property
    def radius_m(self) -> float:
        return self.diameter_m / 2.0

    @property
    def mass_kg(self) -> float:
        return sphere_mass(self.radius_m, self.density_kg_m3)

    @property
    def initial_velocity_m_s(self) -> float:
        return km_to_m(self.speed_km_s)

    def validate(self):
        """
        Reject specifications the engine is not meant to evaluate.

        Raises:
            ValueError: If diameter, density or speed is not a positive finite
                number, or the entry angle lies outside 0-90 degrees.
        """
        for name in ("diameter_m", "density_kg_m3", "speed_km_s"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"{name} must be a positive number, got {value!r}")
        if not math.isfinite(self.entry_angle_deg) or not 0 <= self.entry_angle_deg <= 90:
            raise ValueError(f"entry_angle_deg must be between 0 and 90, got {self.entry_angle_deg!r}")
        return self

    def scaled(self, factor: float) -> "ImpactorSpecification":
        """Copy of this impactor with the diameter multiplied by ``factor``."""
        return replace(self, diameter_m=self.diameter_m * factor)


@dataclass(frozen=True)
class GeoCoordinate:
    latitude: float
    longitude: float

    def is_valid(self) -> bool:
        return (
            isinstance(self.latitude, (int, float)) and isinstance(self.longitude, (int, float))
            and math.isfinite(self.latitude) and math.isfinite(self.longitude)
            and -90 <= self.latitude <= 90 and -180 <= self.longitude <= 180
        )


def has_valid_coordinate(coord: Optional[GeoCoordinate]) -> bool:
    return coord is not None and coord.is_valid()


@dataclass(frozen=True)
class SeismicEvent:
    """One event of the recent seismic activity feed."""
    magnitude: Optional[float]
    latitude: float
    longitude: float
    distance_km: float
    depth_km: Optional[float] = None
    place: Optional[str] = None
    time: Optional[datetime] = None

    def to_dict(self):
        data = asdict(self)
        data["time"] = self.time.isoformat() if self.time else None
        return data


@dataclass(frozen=True)
class EnvironmentalContext:
    elevation_m: float = 0.0
    is_coastal_risk: bool = False
    recent_seismic_events: Tuple[SeismicEvent, ...] = field(default_factory=tuple)

    @classmethod
    def default(cls) -> "EnvironmentalContext":
        """Context used when no coordinate is available: sea level, inland, quiet."""
        return cls()

    def to_dict(self):
        return {
            "elevation_m": self.elevation_m,
            "is_coastal_risk": self.is_coastal_risk,
            "recent_seismic_events": [event.to_dict() for event in self.recent_seismic_events],
        }


@dataclass(frozen=True)
class ImpactResult:
    mass_kg: float
    final_velocity_m_s: float
    energy_j: float
    tnt_equivalent_tons: float
    crater_diameter_m: float
    blast_radius_m: float
    shockwave_radius_m: float
    seismic_magnitude: float
    tsunami_height_m: float
    environment: EnvironmentalContext

    def to_dict(self):
        return {
            "mass_kg": self.mass_kg,
            "final_velocity_m_s": self.final_velocity_m_s,
            "energy_j": self.energy_j,
            "tnt_equivalent_tons": self.tnt_equivalent_tons,
            "crater_diameter_m": self.crater_diameter_m,
            "blast_radius_m": self.blast_radius_m,
            "shockwave_radius_m": self.shockwave_radius_m,
            "seismic_magnitude": self.seismic_magnitude,
            "tsunami_height_m": self.tsunami_height_m,
            "environment": self.environment.to_dict(),
        }
