import math
import unittest

from impact_engine import utils


class TestUtils(unittest.TestCase):
    def test_km_m_roundtrip(self):
        km = 12.345
        meters = utils.km_to_m(km)
        self.assertAlmostEqual(utils.m_to_km(meters), km, places=9)

    def test_convert_energy_j_to_tons(self):
        self.assertAlmostEqual(utils.convert_energy_j_to_tons(4.184e9), 1.0, places=12)

    def test_convert_energy_j_to_mt(self):
        one_mt = 4.184e15
        self.assertAlmostEqual(utils.convert_energy_j_to_mt(one_mt), 1.0, places=9)
        self.assertAlmostEqual(utils.convert_mt_to_energy_j(2.0), 2 * one_mt, places=0)

    def test_sphere_mass(self):
        self.assertAlmostEqual(utils.sphere_mass(50.0, 3000.0), 1.5707963e9, delta=1e3)
        self.assertEqual(utils.sphere_mass(0.0, 3000.0), 0.0)

    def test_haversine_zero_distance(self):
        self.assertAlmostEqual(utils.haversine_km(10.0, 20.0, 10.0, 20.0), 0.0, places=9)

    def test_haversine_one_degree_of_latitude(self):
        # One degree of arc on a 6371 km sphere
        expected = 6371.0 * math.pi / 180.0
        self.assertAlmostEqual(utils.haversine_km(0.0, 0.0, 1.0, 0.0), expected, places=6)

    def test_haversine_antipodes(self):
        self.assertAlmostEqual(utils.haversine_km(0.0, 0.0, 0.0, 180.0), math.pi * 6371.0, places=6)

    def test_haversine_antipodal_pairs_do_not_raise(self):
        half_circumference = math.pi * 6371.0
        for i in range(-900, 901):
            lat = i / 10.0
            for lon in (-179.3, -45.0, 0.0, 12.34, 100.0):
                with self.subTest(lat=lat, lon=lon):
                    distance = utils.haversine_km(lat, lon, -lat, lon + 180.0)
                    self.assertAlmostEqual(distance, half_circumference, delta=1e-3)

    def test_months_to_seconds(self):
        self.assertAlmostEqual(utils.months_to_seconds(12), utils.YEAR_SECONDS, places=6)

    def test_safe_ratio(self):
        self.assertEqual(utils.safe_ratio(6.0, 3.0), 2.0)
        self.assertEqual(utils.safe_ratio(1.0, 0.0), math.inf)
        self.assertEqual(utils.safe_ratio(0.0, 0.0), 0.0)


if __name__ == '__main__':
    unittest.main()
