import unittest
import sys
import os

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from impact_engine.mitigation import StrategyKind, evaluate, mitigated_impactor
from impact_engine.models import EnvironmentalContext, ImpactorSpecification
from impact_engine.results import calculate_impact_effects, collect_effect_details
from impact_engine.utils import convert_energy_j_to_mt


class TestPhysicsScenarios(unittest.TestCase):

    def test_scenario_a_small_stony_over_land(self):
        print("\n=== Scenario A (Small stony body, inland) Results ===")
        print("Parameters: D=50m, v=22km/s, rho=3100kg/m3, angle=55, elevation=350m, dist=2km")

        spec = ImpactorSpecification(diameter_m=50, density_kg_m3=3100, speed_km_s=22, entry_angle_deg=55)
        env = EnvironmentalContext(elevation_m=350.0, is_coastal_risk=False)

        result = calculate_impact_effects(spec, env)
        print(f"Impact energy: {result.energy_j:.2e} J ({convert_energy_j_to_mt(result.energy_j):.2f} Mt)")
        print(f"Crater diameter: {result.crater_diameter_m:.0f} m")
        print(f"Blast radius: {result.blast_radius_m/1000:.2f} km")
        print(f"Seismic magnitude: {result.seismic_magnitude:.2f}")

        details = collect_effect_details(spec, result, 2000.0)
        print(f"Overpressure at 2 km: {details['airblast']['overpressure_kpa']:.2f} kPa")
        print(f"Thermal intensity at 2 km: {details['airblast']['thermal_intensity_w_m2']:.2e} W/m2")

        self.assertGreater(result.energy_j, 0)
        self.assertEqual(result.tsunami_height_m, 0.0)
        self.assertLess(result.blast_radius_m, result.shockwave_radius_m)
        self.assertLess(details['seismic']['severe_shaking_km'], details['seismic']['light_shaking_km'])

    def test_scenario_b_large_ocean_impact(self):
        print("\n=== Scenario B (Ocean impact) Results ===")
        print("Parameters: D=250m, v=27km/s, rho=3100kg/m3, angle=35, elevation=-3000m, dist=10km")

        spec = ImpactorSpecification(diameter_m=250, density_kg_m3=3100, speed_km_s=27, entry_angle_deg=35)
        env = EnvironmentalContext(elevation_m=-3000.0, is_coastal_risk=True)

        result = calculate_impact_effects(spec, env)
        print(f"Impact energy: {result.energy_j:.2e} J ({convert_energy_j_to_mt(result.energy_j):.0f} Mt)")
        print(f"Crater diameter: {result.crater_diameter_m/1000:.2f} km")
        print(f"Tsunami height: {result.tsunami_height_m:.1f} m")

        details = collect_effect_details(spec, result, 10000.0)
        print(f"Wave at 10 km: {details['tsunami']['height_m']:.1f} m at {details['tsunami']['velocity_m_s']:.0f} m/s")

        self.assertGreater(result.tsunami_height_m, 0.0)
        self.assertGreater(details['tsunami']['height_m'], 0.0)
        self.assertAlmostEqual(details['tsunami']['velocity_m_s'], (9.81 * 3000.0) ** 0.5)

    def test_scenario_c_deflection_campaign(self):
        print("\n=== Scenario C (Deflection campaign) Results ===")
        print("Parameters: D=30m, v=18km/s, rho=2000kg/m3")

        spec = ImpactorSpecification(diameter_m=30, density_kg_m3=2000, speed_km_s=18)
        for strategy in StrategyKind:
            outcome = evaluate(strategy, spec)
            fragment = mitigated_impactor(spec, outcome)
            print(
                f"{strategy.value:>16}: effectiveness {outcome.effectiveness:.3f}, "
                f"delta-v {outcome.delta_v_m_s:.2e} m/s, lead time {outcome.required_lead_time_days} d, "
                f"fragment {fragment.diameter_m if fragment else '-'}"
            )
            self.assertGreaterEqual(outcome.effectiveness, 0.0)
            self.assertLessEqual(outcome.effectiveness, 1.0)

if __name__ == '__main__':
    unittest.main()
