import unittest
from unittest import mock

import app as webapp
from impact_engine.models import EnvironmentalContext


class _StaticResolver:
    def __init__(self, context):
        self.context = context

    async def resolve(self, lat, lon, radius_km=None):
        return self.context


REFERENCE_BODY = {"diameter": 100, "density": 3000, "velocity": 20, "entry_angle": 45}


class TestSimulateEndpoint(unittest.TestCase):
    def setUp(self):
        self.client = webapp.app.test_client()

    def test_rejects_non_json(self):
        response = self.client.post('/simulate', data="diameter=100", content_type="text/plain")
        self.assertEqual(response.status_code, 400)

    def test_rejects_invalid_parameters(self):
        cases = [
            {"density": 3000, "velocity": 20},
            {**REFERENCE_BODY, "diameter": -5},
            {**REFERENCE_BODY, "velocity": "fast"},
            {**REFERENCE_BODY, "entry_angle": 120},
            {**REFERENCE_BODY, "distance": 0.5},
            {"diameter": 100, "velocity": 20, "material": "cheese"},
        ]
        for body in cases:
            with self.subTest(body=body):
                response = self.client.post('/simulate', json=body)
                self.assertEqual(response.status_code, 400)
                self.assertIn("error", response.get_json())

    @mock.patch.object(webapp, "get_resolver")
    def test_simulation_without_coordinate(self, get_resolver):
        response = self.client.post('/simulate', json=REFERENCE_BODY)

        self.assertEqual(response.status_code, 200)
        get_resolver.assert_not_called()
        data = response.get_json()["results_data"]
        self.assertAlmostEqual(data["impact"]["energy_j"] / 1.897e17, 1.0, delta=0.002)
        self.assertEqual(data["impact"]["environment"]["elevation_m"], 0.0)
        self.assertAlmostEqual(data["impact"]["energy_mt"], data["impact"]["energy_j"] / 4.184e15)
        self.assertAlmostEqual(data["impact"]["energy_mt"], 45.34, delta=0.1)
        self.assertNotIn("consequences", data)
        self.assertEqual(data["effects"]["reference_distance_m"], 10000.0)
        self.assertIsNone(data["input_parameters"]["latitude"])

    @mock.patch.object(webapp, "get_resolver")
    def test_simulation_at_coastal_city(self, get_resolver):
        get_resolver.return_value = _StaticResolver(EnvironmentalContext(elevation_m=40.0, is_coastal_risk=True))
        body = {**REFERENCE_BODY, "latitude": 40.7128, "longitude": -74.0060, "distance": 25}

        response = self.client.post('/simulate', json=body)

        self.assertEqual(response.status_code, 200)
        data = response.get_json()["results_data"]
        self.assertGreater(data["impact"]["tsunami_height_m"], 0.0)
        self.assertTrue(data["impact"]["environment"]["is_coastal_risk"])
        self.assertEqual(data["effects"]["reference_distance_m"], 25000.0)
        self.assertGreaterEqual(data["consequences"]["population"], 18804000)
        self.assertEqual(data["consequences"]["radius_km"], 34)

    @mock.patch.object(webapp, "get_resolver")
    def test_material_preset(self, get_resolver):
        body = {"diameter": 100, "velocity": 20, "material": "iron"}
        response = self.client.post('/simulate', json=body)
        self.assertEqual(response.get_json()["results_data"]["input_parameters"]["density"], 7800.0)


class TestMitigateEndpoint(unittest.TestCase):
    def setUp(self):
        self.client = webapp.app.test_client()

    def test_no_mitigation(self):
        response = self.client.post('/mitigate', json={**REFERENCE_BODY, "strategy": "none"})

        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertEqual(data["mitigation"]["effectiveness"], 0.0)
        self.assertEqual(data["mitigation"]["delta_v_m_s"], 0.0)
        self.assertFalse(data["successful"])
        self.assertNotIn("reduced_impact", data)

    def test_unknown_strategy(self):
        response = self.client.post('/mitigate', json={**REFERENCE_BODY, "strategy": "wishful_thinking"})
        self.assertEqual(response.status_code, 400)

    def test_invalid_strategy_parameter(self):
        response = self.client.post('/mitigate', json={**REFERENCE_BODY, "strategy": "nuclear", "yield": -1})
        self.assertEqual(response.status_code, 400)
        response = self.client.post('/mitigate', json={**REFERENCE_BODY, "strategy": "nuclear", "ablation_material": "metal"})
        self.assertEqual(response.status_code, 400)

    def test_gravity_alias(self):
        response = self.client.post('/mitigate', json={**REFERENCE_BODY, "strategy": "gravity"})
        data = response.get_json()
        self.assertEqual(data["mitigation"]["strategy"], "gravity_tractor")
        self.assertEqual(data["mitigation"]["required_lead_time_days"], 3650)

    @mock.patch.object(webapp, "get_resolver")
    def test_successful_mitigation_reports_reduced_impact(self, get_resolver):
        body = {"diameter": 10, "density": 3000, "velocity": 20, "strategy": "nuclear", "yield": 2}

        response = self.client.post('/mitigate', json=body)

        data = response.get_json()
        self.assertTrue(data["successful"])
        self.assertIn("reduced_impact", data)
        self.assertGreater(data["reduced_impact"]["energy_j"], 0.0)
        get_resolver.assert_not_called()

    def test_custom_threshold(self):
        body = {**REFERENCE_BODY, "strategy": "nuclear", "success_threshold": 0.9}
        data = self.client.post('/mitigate', json=body).get_json()
        self.assertFalse(data["successful"])
        self.assertNotIn("reduced_impact", data)


class TestHealth(unittest.TestCase):
    def test_health(self):
        response = webapp.app.test_client().get('/health')
        self.assertEqual(response.get_json(), {"status": "ok"})


if __name__ == '__main__':
    unittest.main()
