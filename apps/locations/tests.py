from decimal import Decimal
from unittest.mock import patch

from django.core.exceptions import ValidationError
from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import User
from locations.models import City, CityZone, PincodeCityMap, ServiceArea
from locations.resolver import TYPE_AREA, TYPE_CITY, TYPE_EXTERNAL, search_locations
from locations.services import ensure_service_areas, find_or_create_service_area, nearest_service_area
from vendors.models import Vendor, VendorPincode, VendorServiceArea


class LocationFixturesMixin:
    def setUp(self):
        super().setUp()
        self.bengaluru = City.objects.create(
            name="Bengaluru",
            slug="bengaluru",
            state="Karnataka",
            lat=12.9716,
            lng=77.5946,
            pincode_prefixes=["560"],
            aliases=["Bangalore"],
            base_delivery_charge=Decimal("49"),
            free_delivery_above=Decimal("999"),
        )
        self.hyderabad = City.objects.create(
            name="Hyderabad", slug="hyderabad", state="Telangana", lat=17.385, lng=78.4867, pincode_prefixes=["500"]
        )
        self.indiranagar = ServiceArea.objects.create(
            name="Indiranagar",
            pincode="560038",
            city=self.bengaluru,
            lat=12.9784,
            lng=77.6408,
            alternate_names=["HAL 2nd Stage"],
        )
        self.koramangala = ServiceArea.objects.create(
            name="Koramangala", pincode="560034", city=self.bengaluru, lat=12.9352, lng=77.6245
        )
        self.cantonment = ServiceArea.objects.create(
            name="Bengaluru Cantonment", pincode="560051", city=self.bengaluru, lat=12.9936, lng=77.5988
        )
        self.old_airport = ServiceArea.objects.create(
            name="Old Airport Road", pincode="560017", city=self.bengaluru, is_active=False
        )


class ResolverTests(LocationFixturesMixin, TestCase):
    def setUp(self):
        super().setUp()
        patcher = patch("locations.resolver.mappls.suggest_places", return_value=[])
        self.suggest = patcher.start()
        self.addCleanup(patcher.stop)

    def test_exact_pincode_prefers_service_area_over_zone_and_map(self):
        CityZone.objects.create(city=self.hyderabad, name="Odd", pincodes=["560038"])
        PincodeCityMap.objects.create(pincode="560038", city=self.hyderabad, area_name="Elsewhere")

        results = search_locations("560038")

        self.assertEqual(results[0]["type"], TYPE_AREA)
        self.assertEqual(results[0]["label"], "Indiranagar, Bengaluru")
        self.assertEqual(results[0]["city_slug"], "bengaluru")
        self.assertNotIn(TYPE_CITY, {row["type"] for row in results})

    def test_exact_pincode_zone_tier_is_one_result_per_city(self):
        CityZone.objects.create(city=self.hyderabad, name="West", pincodes=["500081"])
        CityZone.objects.create(city=self.hyderabad, name="IT Corridor", pincodes=["500081", "500032"])

        results = search_locations("500081")

        self.assertEqual(len(results), 1)
        self.assertEqual(results[0]["type"], TYPE_CITY)
        self.assertEqual(results[0]["city_id"], self.hyderabad.id)
        self.assertEqual(results[0]["pincode"], "500081")

    def test_inactive_zone_is_ignored(self):
        CityZone.objects.create(city=self.hyderabad, name="Closed", pincodes=["560099"], is_active=False)

        results = search_locations("560099")

        self.assertEqual([row["city_id"] for row in results], [self.bengaluru.id])

    def test_exact_pincode_falls_back_to_pincode_map(self):
        PincodeCityMap.objects.create(pincode="500032", city=self.hyderabad, area_name="Gachibowli")

        results = search_locations("500032")

        self.assertEqual(results[0]["label"], "Gachibowli, Hyderabad")
        self.assertEqual(results[0]["area_name"], "Gachibowli")

    def test_exact_pincode_falls_back_to_city_prefix(self):
        results = search_locations("560099")

        self.assertEqual(len(results), 1)
        self.assertEqual(results[0]["type"], TYPE_CITY)
        self.assertEqual(results[0]["city_name"], "Bengaluru")
        self.assertTrue(results[0]["is_active"])

    def test_unknown_pincode_returns_empty_list(self):
        self.assertEqual(search_locations("999999"), [])

    def test_partial_pincode_matches_active_areas_by_prefix(self):
        results = search_locations("5600")

        self.assertEqual([row["pincode"] for row in results], ["560034", "560038", "560051"])

    def test_partial_pincode_falls_back_to_city_prefix(self):
        results = search_locations("500")

        self.assertEqual([row["city_name"] for row in results], ["Hyderabad"])

    def test_text_matches_area_name_and_alternate_name(self):
        by_name = search_locations("indira")
        by_alias = search_locations("HAL 2nd Stage")

        self.assertEqual(by_name[0]["area_name"], "Indiranagar")
        self.assertEqual(by_alias[0]["area_name"], "Indiranagar")

    def test_text_city_suppressed_when_area_carries_it(self):
        results = search_locations("bengaluru")

        self.assertEqual([row["type"] for row in results], [TYPE_AREA])
        self.assertEqual(results[0]["area_name"], "Bengaluru Cantonment")

    def test_text_matches_city_alias(self):
        results = search_locations("Bangalore")

        self.assertEqual(results[0]["type"], TYPE_CITY)
        self.assertEqual(results[0]["city_id"], self.bengaluru.id)

    def test_short_query_returns_nothing(self):
        self.assertEqual(search_locations("5"), [])
        self.assertEqual(search_locations("  "), [])
        self.suggest.assert_not_called()

    def test_external_fallback_dedupes_and_caps(self):
        self.suggest.return_value = [
            {"place_id": "e1", "name": "Indiranagar Metro", "address": "Bengaluru 560038", "pincode": "560038"},
            {"place_id": "e2", "name": "HAL Airport", "address": "Bengaluru 560017", "pincode": "560017"},
            {"place_id": "e3", "name": "Domlur", "address": "Bengaluru", "pincode": ""},
            {"place_id": "e4", "name": "Ulsoor", "address": "Bengaluru", "pincode": ""},
            {"place_id": "e5", "name": "Frazer Town", "address": "Bengaluru", "pincode": ""},
        ]

        results = search_locations("indira")

        self.assertEqual([row["type"] for row in results], [TYPE_AREA] + [TYPE_EXTERNAL] * 3)
        self.assertEqual([row["external_ref"] for row in results[1:]], ["e2", "e3", "e4"])

    def test_external_not_called_when_enough_local_results(self):
        results = search_locations("560")

        self.assertEqual(len(results), 3)
        self.suggest.assert_not_called()

    def test_provider_failure_keeps_local_results(self):
        self.suggest.side_effect = RuntimeError("provider down")

        results = search_locations("indira")

        self.assertEqual([row["area_name"] for row in results], ["Indiranagar"])

    def test_limit_truncates(self):
        self.assertEqual(len(search_locations("560", limit=2)), 2)


class ServiceAreaServiceTests(LocationFixturesMixin, TestCase):
    def test_existing_active_area_is_reused(self):
        area, created = find_or_create_service_area("560038", self.hyderabad)

        self.assertEqual(area, self.indiranagar)
        self.assertFalse(created)

    def test_inactive_area_is_reactivated(self):
        area, created = find_or_create_service_area("560017", self.bengaluru)

        self.assertFalse(created)
        self.assertEqual(area.pk, self.old_airport.pk)
        self.old_airport.refresh_from_db()
        self.assertTrue(self.old_airport.is_active)

    def test_inactive_area_kept_inactive_without_reactivation(self):
        area, created = find_or_create_service_area("560017", self.bengaluru, reactivate=False)

        self.assertFalse(created)
        self.assertEqual(area.pk, self.old_airport.pk)
        self.old_airport.refresh_from_db()
        self.assertFalse(self.old_airport.is_active)

    @patch("locations.services.nominatim.geocode_pincode")
    def test_new_area_from_pincode_map(self, mock_geocode):
        PincodeCityMap.objects.create(pincode="500032", city=self.hyderabad, area_name="Gachibowli", lat=17.44, lng=78.35)

        area, created = find_or_create_service_area("500032", self.bengaluru)

        self.assertTrue(created)
        self.assertEqual(area.name, "Gachibowli")
        self.assertEqual(area.city, self.hyderabad)
        self.assertEqual(area.lat, 17.44)
        mock_geocode.assert_not_called()

    @patch("locations.services.nominatim.reverse_geocode")
    @patch("locations.services.nominatim.geocode_pincode")
    def test_new_area_from_geocoder_matches_city_alias(self, mock_geocode, mock_reverse):
        mock_geocode.return_value = {
            "name": "Whitefield",
            "lat": 12.9698,
            "lng": 77.7500,
            "city_name": "Bangalore",
            "state": "Karnataka",
            "pincode": "560066",
        }

        area, created = find_or_create_service_area("560066", self.hyderabad)

        self.assertTrue(created)
        self.assertEqual(area.name, "Whitefield")
        self.assertEqual(area.city, self.bengaluru)
        mock_reverse.assert_not_called()

    @patch("locations.services.nominatim.reverse_geocode")
    @patch("locations.services.nominatim.geocode_pincode")
    def test_sparse_geocode_is_completed_by_reverse_lookup(self, mock_geocode, mock_reverse):
        mock_geocode.return_value = {
            "name": "560067",
            "lat": 12.99,
            "lng": 77.76,
            "city_name": "",
            "state": "",
            "pincode": "560067",
        }
        mock_reverse.return_value = {"name": "Kadugodi", "city_name": "Bengaluru", "state": "Karnataka"}

        area, _ = find_or_create_service_area("560067", self.hyderabad)

        self.assertEqual(area.name, "Kadugodi")
        self.assertEqual(area.city, self.bengaluru)
        self.assertEqual(area.state, "Karnataka")

    @patch("locations.services.nominatim.geocode_pincode", return_value=None)
    def test_unresolvable_pincode_uses_fallback_city(self, mock_geocode):
        area, created = find_or_create_service_area("560300", self.bengaluru, area_name="New Layout")

        self.assertTrue(created)
        self.assertEqual(area.name, "New Layout")
        self.assertEqual(area.city, self.bengaluru)
        self.assertEqual((area.lat, area.lng), (self.bengaluru.lat, self.bengaluru.lng))

    @patch("locations.services.nominatim.geocode_pincode", return_value=None)
    def test_ensure_service_areas_only_creates_missing(self, mock_geocode):
        result = ensure_service_areas(["560038", "560300", "560300", ""], self.bengaluru)

        self.assertEqual(result, {"created": 1, "failed": []})
        self.assertTrue(ServiceArea.objects.filter(pincode="560300").exists())

    def test_nearest_area_respects_max_distance(self):
        self.assertEqual(nearest_service_area(12.9780, 77.6400, 15), self.indiranagar)
        self.assertIsNone(nearest_service_area(13.3, 77.6, 15))


class ServiceAreaIntegrityTests(LocationFixturesMixin, TestCase):
    def setUp(self):
        super().setUp()
        vendor = Vendor.objects.create(name="Petals", slug="petals", city=self.bengaluru)
        VendorServiceArea.objects.create(vendor=vendor, service_area=self.indiranagar)

    def test_linked_area_cannot_be_renamed(self):
        self.indiranagar.name = "Indira Nagar"
        with self.assertRaises(ValidationError):
            self.indiranagar.save()

    def test_linked_area_can_be_deactivated(self):
        self.indiranagar.is_active = False
        self.indiranagar.save()

        self.indiranagar.refresh_from_db()
        self.assertFalse(self.indiranagar.is_active)

    def test_unlinked_area_can_change(self):
        self.koramangala.name = "Koramangala 5th Block"
        self.koramangala.save()

        self.koramangala.refresh_from_db()
        self.assertEqual(self.koramangala.name, "Koramangala 5th Block")


class LocationApiTests(LocationFixturesMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.admin = User.objects.create_user(phone="9000000001", role=User.ROLE_ADMIN)
        self.customer = User.objects.create_user(phone="9000000002")

    @patch("locations.resolver.mappls.suggest_places", return_value=[])
    def test_search_endpoint(self, mock_suggest):
        response = self.client.get("/api/locations/search/", {"q": "560038"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["results"][0]["type"], "area")

    def test_search_endpoint_with_empty_query(self):
        response = self.client.get("/api/locations/search/", {"q": ""})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["results"], [])

    def test_search_endpoint_rejects_bad_limit(self):
        response = self.client.get("/api/locations/search/", {"q": "560038", "limit": "many"})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["detail"], "limit: Must be an integer.")

    def test_pincode_lookup_known_area(self):
        vendor = Vendor.objects.create(
            name="Petals", slug="petals", city=self.bengaluru, status=Vendor.STATUS_APPROVED
        )
        VendorPincode.objects.create(vendor=vendor, pincode="560038")

        response = self.client.get("/api/locations/pincode/", {"pincode": "560 038"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["source"], "service_area")
        self.assertEqual(response.data["area"]["name"], "Indiranagar")
        self.assertEqual(response.data["vendor_count"], 1)

    @patch("locations.views.nominatim.geocode_pincode")
    def test_pincode_lookup_records_geocoded_area_for_review(self, mock_geocode):
        mock_geocode.return_value = {
            "name": "Whitefield",
            "lat": 12.9698,
            "lng": 77.75,
            "city_name": "Bengaluru",
            "state": "Karnataka",
            "pincode": "560066",
        }

        response = self.client.get("/api/locations/pincode/", {"pincode": "560066"})

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data["pending_review"])
        area = ServiceArea.objects.get(pincode="560066")
        self.assertFalse(area.is_active)
        self.assertEqual(area.city, self.bengaluru)

    @patch("locations.views.nominatim.geocode_pincode")
    def test_pincode_lookup_with_several_inactive_areas(self, mock_geocode):
        ServiceArea.objects.create(name="Old Airport Road East", pincode="560017", city=self.bengaluru, is_active=False)
        mock_geocode.return_value = {
            "name": "HAL Airport",
            "lat": 12.96,
            "lng": 77.66,
            "city_name": "Bengaluru",
            "state": "Karnataka",
            "pincode": "560017",
        }

        response = self.client.get("/api/locations/pincode/", {"pincode": "560017"})

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data["pending_review"])
        self.assertEqual(ServiceArea.objects.filter(pincode="560017").count(), 2)
        self.assertFalse(ServiceArea.objects.filter(pincode="560017", is_active=True).exists())

    @patch("locations.views.nominatim.geocode_pincode", return_value=None)
    def test_pincode_lookup_unknown(self, mock_geocode):
        response = self.client.get("/api/locations/pincode/", {"pincode": "999999"})

        self.assertEqual(response.status_code, 404)

    def test_pincode_lookup_validates_format(self):
        response = self.client.get("/api/locations/pincode/", {"pincode": "12ab"})

        self.assertEqual(response.status_code, 400)

    def test_service_area_list_hides_inactive_for_public(self):
        response = self.client.get("/api/locations/service-areas/")

        self.assertEqual(response.status_code, 200)
        pincodes = {row["pincode"] for row in response.data}
        self.assertNotIn("560017", pincodes)
        self.assertIn("560038", pincodes)

    def test_service_area_write_requires_admin(self):
        payload = {"name": "HSR Layout", "pincode": "560102", "city": self.bengaluru.id}

        self.client.force_authenticate(self.customer)
        self.assertEqual(self.client.post("/api/locations/service-areas/", payload, format="json").status_code, 403)

        self.client.force_authenticate(self.admin)
        response = self.client.post("/api/locations/service-areas/", payload, format="json")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["city_name"], "Bengaluru")

    def test_admin_cannot_rename_linked_area(self):
        vendor = Vendor.objects.create(name="Petals", slug="petals", city=self.bengaluru)
        VendorServiceArea.objects.create(vendor=vendor, service_area=self.indiranagar)
        self.client.force_authenticate(self.admin)
        url = f"/api/locations/service-areas/{self.indiranagar.id}/"

        rename = self.client.patch(url, {"name": "Indira Nagar"}, format="json")
        deactivate = self.client.patch(url, {"is_active": False}, format="json")

        self.assertEqual(rename.status_code, 400)
        self.assertEqual(deactivate.status_code, 200)
