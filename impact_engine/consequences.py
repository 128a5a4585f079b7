"""
Impact Engine - Consequence Estimates

Coarse "impact facts" for an impact result at a coordinate: the population
within the damage radius, the expected loss of life by severity band and a
rough economic cost. Population is approximated from a sample of the world's
largest metropolitan areas plus a uniform rural background density, so the
figures are indicative only.
"""

import logging
import math
from dataclasses import asdict, dataclass

from impact_engine.thresholds import (
    CASUALTY_BANDS, COST_PER_AFFECTED_PERSON_USD, MIN_ASSESSMENT_RADIUS_KM,
    NEARBY_CITY_WEIGHT, RURAL_DENSITY_PER_KM2, RURAL_OVERLAP_DISCOUNT,
)
from impact_engine.utils import haversine_km, m_to_km

logger = logging.getLogger(__name__)

# (name, latitude, longitude, metropolitan population)
CITY_POPULATION_SAMPLES = [
    ("Tokyo", 35.6895, 139.6917, 37400068),
    ("Delhi", 28.7041, 77.1025, 28514000),
    ("Shanghai", 31.2304, 121.4737, 25582000),
    ("Sao Paulo", -23.5505, -46.6333, 21650000),
    ("Mexico City", 19.4326, -99.1332, 21581000),
    ("Cairo", 30.0444, 31.2357, 20076000),
    ("Mumbai", 19.0760, 72.8777, 19980000),
    ("Beijing", 39.9042, 116.4074, 19618000),
    ("Dhaka", 23.8103, 90.4125, 19578000),
    ("Osaka", 34.6937, 135.5023, 19281000),
    ("New York", 40.7128, -74.0060, 18804000),
    ("Karachi", 24.8607, 67.0011, 15400000),
    ("Buenos Aires", -34.6037, -58.3816, 14967000),
    ("Kolkata", 22.5726, 88.3639, 14667000),
    ("Istanbul", 41.0082, 28.9784, 15030000),
    ("Manila", 14.5995, 120.9842, 13923452),
    ("Lagos", 6.5244, 3.3792, 13900000),
    ("Rio de Janeiro", -22.9068, -43.1729, 13293000),
    ("Tianjin", 39.3434, 117.3616, 13215000),
    ("Kinshasa", -4.4419, 15.2663, 13130000),
]


@dataclass(frozen=True)
class CasualtyEstimate:
    crater_deaths: int
    blast_deaths: int
    shock_deaths: int

    @property
    def total_deaths(self):
        return self.crater_deaths + self.blast_deaths + self.shock_deaths


@dataclass(frozen=True)
class ImpactConsequences:
    radius_km: float
    population: int
    deaths: CasualtyEstimate
    economic_cost_usd: int

    def to_dict(self):
        data = asdict(self)
        data["deaths"]["total_deaths"] = self.deaths.total_deaths
        return data


def estimate_population_within(lat, lon, radius_km):
    """
    Population living within ``radius_km`` of ``lat``/``lon``.

    Cities whose centre lies inside the radius count fully, those within twice
    the radius count at 25%. A rural background of 20 people/km² (less a fixed
    overlap discount) is added for the rest of the disc.
    """
    population = 0.0
    for name, city_lat, city_lon, city_pop in CITY_POPULATION_SAMPLES:
        distance = haversine_km(lat, lon, city_lat, city_lon)
        if distance <= radius_km:
            population += city_pop
        elif distance <= radius_km * 2:
            population += city_pop * NEARBY_CITY_WEIGHT

    area_km2 = math.pi * radius_km ** 2
    population += max(0.0, area_km2 * RURAL_DENSITY_PER_KM2 - RURAL_OVERLAP_DISCOUNT)
    return int(round(population))


def estimate_lives_lost(population):
    """Deaths per severity band, using fixed population shares and fatality ratios."""
    deaths = {}
    for band, ratios in CASUALTY_BANDS.items():
        band_population = round(population * ratios["share"])
        deaths[band] = int(round(band_population * ratios["fatality_ratio"]))
    return CasualtyEstimate(
        crater_deaths=deaths["crater"],
        blast_deaths=deaths["blast"],
        shock_deaths=deaths["shock"],
    )


def estimate_economic_cost(population, energy_j):
    """
    Economic cost in USD: $20k per affected person, scaled up by the impact
    energy in petajoules for events above 1 PJ.
    """
    energy_factor = max(1.0, energy_j / 1e15)
    return int(round(population * COST_PER_AFFECTED_PERSON_USD * energy_factor))


def assess_consequences(result, coord):
    """
    Population, casualties and cost for ``result`` at ``coord``.

    The assessment radius is the blast radius rounded to whole kilometers,
    but never less than 10 km.
    """
    radius_km = max(round(m_to_km(result.blast_radius_m)), MIN_ASSESSMENT_RADIUS_KM)
    population = estimate_population_within(coord.latitude, coord.longitude, radius_km)
    deaths = estimate_lives_lost(population)
    cost = estimate_economic_cost(population, result.energy_j)
    logger.info(
        f"Consequences within {radius_km} km of ({coord.latitude:.4f}, {coord.longitude:.4f}): "
        f"population {population:,}, deaths {deaths.total_deaths:,}, cost ${cost:,}"
    )
    return ImpactConsequences(radius_km=radius_km, population=population, deaths=deaths, economic_cost_usd=cost)
