import math
import unittest

from impact_engine import consequences
from impact_engine.models import EnvironmentalContext, GeoCoordinate, ImpactResult


def _result(blast_radius_m, energy_j=1e15):
    return ImpactResult(
        mass_kg=1.0,
        final_velocity_m_s=1.0,
        energy_j=energy_j,
        tnt_equivalent_tons=energy_j / 4.184e9,
        crater_diameter_m=0.0,
        blast_radius_m=blast_radius_m,
        shockwave_radius_m=blast_radius_m * 2.5,
        seismic_magnitude=0.0,
        tsunami_height_m=0.0,
        environment=EnvironmentalContext.default(),
    )


class TestPopulationEstimate(unittest.TestCase):
    def test_open_ocean_uses_rural_background(self):
        population = consequences.estimate_population_within(0.0, -140.0, 100)
        expected = round(math.pi * 100 ** 2 * 20 - 50000)
        self.assertEqual(population, expected)

    def test_small_radius_has_no_negative_background(self):
        self.assertEqual(consequences.estimate_population_within(0.0, -140.0, 10), 0)

    def test_city_inside_radius_counts_fully(self):
        population = consequences.estimate_population_within(35.6895, 139.6917, 10)
        self.assertEqual(population, 37400068)

    def test_nearby_city_counts_partially(self):
        tokyo_only = 37400068
        population = consequences.estimate_population_within(35.6895, 139.6917, 300)
        self.assertGreater(population, tokyo_only + 0.25 * 19281000)
        self.assertLess(population, tokyo_only + 19281000 + math.pi * 300 ** 2 * 20)


class TestLivesLost(unittest.TestCase):
    def test_bands(self):
        deaths = consequences.estimate_lives_lost(1000000)
        self.assertEqual(deaths.crater_deaths, 225000)
        self.assertEqual(deaths.blast_deaths, 135000)
        self.assertEqual(deaths.shock_deaths, 15000)
        self.assertEqual(deaths.total_deaths, 375000)

    def test_zero_population(self):
        self.assertEqual(consequences.estimate_lives_lost(0).total_deaths, 0)


class TestEconomicCost(unittest.TestCase):
    def test_small_events_are_not_discounted(self):
        self.assertEqual(consequences.estimate_economic_cost(1000, 1e12), 20000000)

    def test_scales_with_energy(self):
        self.assertEqual(consequences.estimate_economic_cost(1000, 5e15), 100000000)


class TestAssessConsequences(unittest.TestCase):
    def test_radius_from_blast(self):
        assessment = consequences.assess_consequences(_result(34406.0), GeoCoordinate(0.0, -140.0))
        self.assertEqual(assessment.radius_km, 34)

    def test_minimum_radius(self):
        assessment = consequences.assess_consequences(_result(4000.0), GeoCoordinate(40.7128, -74.0060))
        self.assertEqual(assessment.radius_km, 10)
        self.assertEqual(assessment.population, 18804000)
        self.assertEqual(assessment.economic_cost_usd, 18804000 * 20000)

    def test_to_dict(self):
        data = consequences.assess_consequences(_result(4000.0), GeoCoordinate(40.7128, -74.0060)).to_dict()
        self.assertEqual(
            data["deaths"]["total_deaths"],
            data["deaths"]["crater_deaths"] + data["deaths"]["blast_deaths"] + data["deaths"]["shock_deaths"],
        )
        self.assertEqual(data["radius_km"], 10)


if __name__ == '__main__':
    unittest.main()
