from django.test import SimpleTestCase
from rest_framework.exceptions import NotFound, ValidationError

from core.exceptions import Conflict, api_exception_handler
from core.geo import distance_km, within_radius
from core.utils import extract_pincode, is_pincode, normalize_names, normalize_pincode


class DistanceTests(SimpleTestCase):
    BENGALURU = (12.9716, 77.5946)
    MYSURU = (12.2958, 76.6394)
    CHENNAI = (13.0827, 80.2707)

    def test_same_point_is_zero(self):
        self.assertEqual(distance_km(*self.BENGALURU, *self.BENGALURU), 0.0)

    def test_symmetric(self):
        self.assertEqual(distance_km(*self.BENGALURU, *self.CHENNAI), distance_km(*self.CHENNAI, *self.BENGALURU))

    def test_one_degree_of_longitude_on_equator(self):
        self.assertAlmostEqual(distance_km(0, 0, 0, 1), 111.195, places=2)

    def test_known_city_distance(self):
        self.assertAlmostEqual(distance_km(*self.BENGALURU, *self.MYSURU), 128.0, delta=3.0)

    def test_triangle_inequality(self):
        ab = distance_km(*self.BENGALURU, *self.MYSURU)
        bc = distance_km(*self.MYSURU, *self.CHENNAI)
        ac = distance_km(*self.BENGALURU, *self.CHENNAI)
        self.assertLessEqual(ac, ab + bc + 1e-9)

    def test_antipodal_points_do_not_fail(self):
        self.assertAlmostEqual(distance_km(0, 0, 0, 180), 20015.09, places=0)

    def test_within_radius(self):
        self.assertTrue(within_radius(*self.BENGALURU, *self.MYSURU, 140))
        self.assertFalse(within_radius(*self.BENGALURU, *self.MYSURU, 100))


class PincodeHelperTests(SimpleTestCase):
    def test_normalize_strips_separators(self):
        self.assertEqual(normalize_pincode(" 560 001 "), "560001")
        self.assertEqual(normalize_pincode("560-001"), "560001")
        self.assertEqual(normalize_pincode(None), "")

    def test_is_pincode(self):
        self.assertTrue(is_pincode("560001"))
        self.assertFalse(is_pincode("56000"))
        self.assertFalse(is_pincode("56000a"))
        self.assertFalse(is_pincode(""))

    def test_extract_pincode_from_address(self):
        self.assertEqual(extract_pincode("HSR Layout, Bengaluru 560102, India"), "560102")
        self.assertEqual(extract_pincode("no digits here"), "")

    def test_normalize_names(self):
        self.assertEqual(normalize_names([" Bangalore", "bangalore", "BLR", ""]), ["bangalore", "blr"])


class ExceptionHandlerTests(SimpleTestCase):
    def test_validation_payload_is_flattened(self):
        response = api_exception_handler(ValidationError({"pincode": ["Pincode must be 6 digits."]}), {})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["detail"], "pincode: Pincode must be 6 digits.")
        self.assertIn("pincode", response.data["errors"])

    def test_non_field_errors_keep_plain_message(self):
        response = api_exception_handler(ValidationError({"non_field_errors": ["Provide a pincode."]}), {})
        self.assertEqual(response.data["detail"], "Provide a pincode.")

    def test_detail_only_payload_untouched(self):
        response = api_exception_handler(NotFound("Vendor not found."), {})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data, {"detail": "Vendor not found."})

    def test_conflict_status(self):
        response = api_exception_handler(Conflict("Vendor already has this area with status ACTIVE."), {})
        self.assertEqual(response.status_code, 409)
        self.assertIn("ACTIVE", response.data["detail"])
