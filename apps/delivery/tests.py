from datetime import time
from decimal import Decimal

from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from catalog.models import Product, VendorProduct
from delivery.models import CityDeliveryConfig, DeliverySlot
from delivery.serviceability import check_serviceability
from delivery.slots import resolve_slots
from locations.models import City, ServiceArea
from vendors.models import Vendor, VendorPincode

MG_ROAD = (12.9756, 77.6066)


class DeliveryFixturesMixin:
    def setUp(self):
        super().setUp()
        self.bengaluru = City.objects.create(
            name="Bengaluru",
            slug="bengaluru",
            lat=12.9716,
            lng=77.5946,
            base_delivery_charge=Decimal("49"),
            free_delivery_above=Decimal("999"),
        )
        self.hyderabad = City.objects.create(
            name="Hyderabad", slug="hyderabad", base_delivery_charge=Decimal("59"), free_delivery_above=Decimal("1499")
        )
        self.mg_road = ServiceArea.objects.create(
            name="MG Road", pincode="560001", city=self.bengaluru, lat=MG_ROAD[0], lng=MG_ROAD[1]
        )
        self.madhapur = ServiceArea.objects.create(
            name="Madhapur", pincode="500081", city=self.hyderabad, lat=17.4483, lng=78.3915
        )
        self.morning = DeliverySlot.objects.create(
            name="Morning", slug="morning", start_time=time(9), end_time=time(12), sort_order=1
        )
        self.evening = DeliverySlot.objects.create(
            name="Evening",
            slug="evening",
            start_time=time(17),
            end_time=time(21),
            base_charge=Decimal("50"),
            sort_order=2,
        )
        self.midnight = DeliverySlot.objects.create(
            name="Midnight",
            slug="midnight",
            start_time=time(23),
            end_time=time(23, 59),
            base_charge=Decimal("199"),
            is_active=False,
            sort_order=3,
        )

    def approved_vendor(self, slug, **fields):
        fields.setdefault("city", self.bengaluru)
        return Vendor.objects.create(name=slug.title(), slug=slug, status=Vendor.STATUS_APPROVED, **fields)


class SlotResolverTests(DeliveryFixturesMixin, TestCase):
    def test_global_active_slots_without_city_config(self):
        slots = resolve_slots(self.bengaluru.id)

        self.assertEqual([slot["name"] for slot in slots], ["Morning", "Evening"])
        self.assertEqual(slots[1]["charge"], Decimal("50"))
        self.assertEqual((slots[0]["start_time"], slots[0]["end_time"]), ("09:00", "12:00"))

    def test_city_config_overrides_charge_and_availability(self):
        CityDeliveryConfig.objects.create(city=self.bengaluru, slot=self.evening, charge_override=Decimal("30"))
        CityDeliveryConfig.objects.create(city=self.bengaluru, slot=self.morning, is_available=False)

        slots = resolve_slots(self.bengaluru.id)

        self.assertEqual([(slot["name"], slot["charge"]) for slot in slots], [("Evening", Decimal("30"))])

    def test_config_without_override_uses_base_charge(self):
        CityDeliveryConfig.objects.create(city=self.bengaluru, slot=self.evening)

        self.assertEqual(resolve_slots(self.bengaluru.id)[0]["charge"], Decimal("50"))

    def test_config_for_inactive_slot_only_falls_back_to_global(self):
        CityDeliveryConfig.objects.create(city=self.bengaluru, slot=self.midnight)

        self.assertEqual([slot["name"] for slot in resolve_slots(self.bengaluru.id)], ["Morning", "Evening"])

    def test_no_slots_configured(self):
        DeliverySlot.objects.update(is_active=False)

        self.assertEqual(resolve_slots(self.bengaluru.id), [])


class ServiceabilityTests(DeliveryFixturesMixin, TestCase):
    def test_exact_pincode_with_two_vendors(self):
        for slug in ("petals", "cakes"):
            VendorPincode.objects.create(vendor=self.approved_vendor(slug), pincode="560001")

        result = check_serviceability(pincode="560001")

        self.assertTrue(result["is_serviceable"])
        self.assertFalse(result["coming_soon"])
        self.assertEqual(result["vendor_count"], 2)
        self.assertEqual(result["delivery_charge"], Decimal("49"))
        self.assertEqual(result["free_delivery_above"], Decimal("999"))
        self.assertEqual(result["city"]["name"], "Bengaluru")
        self.assertEqual(result["area_name"], "MG Road")
        self.assertEqual(len(result["available_slots"]), 2)
        self.assertIsNone(result["product_available"])

    def test_known_area_without_vendors_is_coming_soon(self):
        result = check_serviceability(pincode="500081")

        self.assertTrue(result["is_serviceable"])
        self.assertTrue(result["coming_soon"])
        self.assertEqual(result["vendor_count"], 0)
        self.assertEqual(result["city"]["name"], "Hyderabad")
        self.assertEqual(result["available_slots"], [])

    def test_unknown_pincode_without_coordinates(self):
        result = check_serviceability(pincode="999999")

        self.assertFalse(result["is_serviceable"])
        self.assertEqual(result["vendor_count"], 0)
        self.assertEqual(result["available_slots"], [])

    def test_pending_vendor_does_not_count(self):
        vendor = Vendor.objects.create(name="New", slug="new", city=self.bengaluru)
        VendorPincode.objects.create(vendor=vendor, pincode="560001")

        self.assertTrue(check_serviceability(pincode="560001")["coming_soon"])

    def test_radius_only_match_far_from_any_area(self):
        # ~20 km north of MG Road, no area within 15 km
        point = (MG_ROAD[0] + 0.18, MG_ROAD[1])
        self.approved_vendor("far-north", lat=13.05, lng=MG_ROAD[1], delivery_radius_km=25)

        result = check_serviceability(lat=point[0], lng=point[1])

        self.assertTrue(result["is_serviceable"])
        self.assertEqual(result["vendor_count"], 1)
        self.assertIsNone(result["area_name"])
        self.assertEqual(result["city"]["name"], "Bengaluru")
        self.assertEqual(result["delivery_charge"], Decimal("49"))

    def test_coordinates_with_no_vendor_anywhere(self):
        result = check_serviceability(lat=MG_ROAD[0] + 0.18, lng=MG_ROAD[1])

        self.assertFalse(result["is_serviceable"])

    def test_nearest_area_uses_caller_coordinates_for_radius(self):
        # ~5 km north of MG Road; vendor ~2 km further north with a 3 km radius
        point = (MG_ROAD[0] + 0.045, MG_ROAD[1])
        self.approved_vendor("nearby", lat=point[0] + 0.018, lng=point[1], delivery_radius_km=3)

        result = check_serviceability(lat=point[0], lng=point[1])

        self.assertEqual(result["area_name"], "MG Road")
        self.assertEqual(result["vendor_count"], 1)
        self.assertFalse(result["coming_soon"])

    def test_pincode_miss_falls_through_to_coordinates(self):
        VendorPincode.objects.create(vendor=self.approved_vendor("petals"), pincode="560001")

        result = check_serviceability(pincode="560099", lat=MG_ROAD[0] + 0.01, lng=MG_ROAD[1])

        self.assertEqual(result["area_name"], "MG Road")
        self.assertEqual(result["vendor_count"], 1)

    def test_area_without_coordinates_uses_supplied_point(self):
        area = ServiceArea.objects.create(name="Yelahanka", pincode="560064", city=self.bengaluru)
        self.approved_vendor("north", lat=13.10, lng=77.59, delivery_radius_km=2)

        with_point = check_serviceability(pincode=area.pincode, lat=13.10, lng=77.59)
        without_point = check_serviceability(pincode=area.pincode)

        self.assertEqual(with_point["vendor_count"], 1)
        self.assertTrue(without_point["coming_soon"])

    @override_settings(SERVICEABILITY_NEAREST_AREA_KM=1)
    def test_nearest_area_distance_is_configurable(self):
        result = check_serviceability(lat=MG_ROAD[0] + 0.045, lng=MG_ROAD[1])

        self.assertFalse(result["is_serviceable"])

    def test_product_availability(self):
        vendor = self.approved_vendor("petals")
        VendorPincode.objects.create(vendor=vendor, pincode="560001")
        roses = Product.objects.create(name="Red Roses", slug="red-roses")
        cake = Product.objects.create(name="Truffle Cake", slug="truffle-cake")
        VendorProduct.objects.create(vendor=vendor, product=roses)
        VendorProduct.objects.create(vendor=vendor, product=cake, is_available=False)

        self.assertTrue(check_serviceability(pincode="560001", product_id=roses.id)["product_available"])
        self.assertFalse(check_serviceability(pincode="560001", product_id=cake.id)["product_available"])


class DeliveryApiTests(DeliveryFixturesMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.client = APIClient()

    def test_serviceability_requires_pincode_or_coordinates(self):
        response = self.client.post("/api/delivery/serviceability/", {}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["detail"], "Provide a pincode or both lat and lng.")

    def test_serviceability_rejects_half_a_coordinate(self):
        response = self.client.post("/api/delivery/serviceability/", {"lat": 12.97}, format="json")

        self.assertEqual(response.status_code, 400)

    def test_serviceability_rejects_malformed_pincode(self):
        response = self.client.post("/api/delivery/serviceability/", {"pincode": "56001"}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["detail"], "pincode: Pincode must be 6 digits.")

    def test_serviceability_by_pincode(self):
        VendorPincode.objects.create(vendor=self.approved_vendor("petals"), pincode="560001")

        response = self.client.post("/api/delivery/serviceability/", {"pincode": "560001"}, format="json")

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data["is_serviceable"])
        self.assertEqual(response.data["vendor_count"], 1)

    def test_city_slots(self):
        self.assertEqual(self.client.get("/api/delivery/city-slots/").status_code, 400)
        self.assertEqual(self.client.get("/api/delivery/city-slots/", {"city_id": 999999}).status_code, 404)

        response = self.client.get("/api/delivery/city-slots/", {"city_id": self.bengaluru.id})

        self.assertEqual(response.status_code, 200)
        self.assertEqual([slot["name"] for slot in response.data["slots"]], ["Morning", "Evening"])
