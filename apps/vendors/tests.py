from datetime import timedelta
from decimal import Decimal
from io import StringIO
from unittest.mock import patch

from django.core.management import call_command
from django.db import DatabaseError
from django.test import TestCase
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.test import APIClient

from accounts.models import User
from core.exceptions import Conflict
from events.models import AuditLog
from locations.models import City, CityZone, ServiceArea
from vendors import coverage
from vendors.matching import match_vendor_ids, pincode_tier, radius_tier, zone_tier
from vendors.models import Vendor, VendorPincode, VendorServiceArea, VendorStaff, VendorZone

PENDING = VendorServiceArea.STATUS_PENDING
ACTIVE = VendorServiceArea.STATUS_ACTIVE
REJECTED = VendorServiceArea.STATUS_REJECTED


class VendorFixturesMixin:
    def setUp(self):
        super().setUp()
        self.city = City.objects.create(name="Bengaluru", slug="bengaluru", state="Karnataka", lat=12.9716, lng=77.5946)
        self.other_city = City.objects.create(name="Mysuru", slug="mysuru", state="Karnataka", lat=12.2958, lng=76.6394)
        self.indiranagar = ServiceArea.objects.create(
            name="Indiranagar", pincode="560038", city=self.city, lat=12.9784, lng=77.6408
        )
        self.koramangala = ServiceArea.objects.create(
            name="Koramangala", pincode="560034", city=self.city, lat=12.9352, lng=77.6245
        )
        self.hsr = ServiceArea.objects.create(name="HSR Layout", pincode="560102", city=self.city, lat=12.9121, lng=77.6446)
        self.vendor = Vendor.objects.create(
            name="Petals",
            slug="petals",
            city=self.city,
            status=Vendor.STATUS_APPROVED,
            lat=12.9700,
            lng=77.6400,
            delivery_radius_km=5,
        )
        self.other_vendor = Vendor.objects.create(
            name="Cakes & Co", slug="cakes", city=self.city, status=Vendor.STATUS_APPROVED
        )
        self.admin = User.objects.create_user(phone="9000000001", role=User.ROLE_OPERATIONS)
        self.owner = User.objects.create_user(phone="9000000002", role=User.ROLE_VENDOR)
        VendorStaff.objects.create(vendor=self.vendor, user=self.owner, role="OWNER")

    def request_area(self, area, status=PENDING, surcharge="0", vendor=None):
        return VendorServiceArea.objects.create(
            vendor=vendor or self.vendor, service_area=area, status=status, delivery_surcharge=Decimal(surcharge)
        )


class MatchingTests(VendorFixturesMixin, TestCase):
    def test_pincode_tier_only_counts_eligible_vendors(self):
        pending = Vendor.objects.create(name="New", slug="new", city=self.city)
        offline = Vendor.objects.create(
            name="Closed", slug="closed", city=self.city, status=Vendor.STATUS_APPROVED, is_online=False
        )
        for vendor in (self.vendor, pending, offline):
            VendorPincode.objects.create(vendor=vendor, pincode="560038")
        VendorPincode.objects.create(vendor=self.other_vendor, pincode="560038", is_active=False)

        self.assertEqual(pincode_tier("560038"), {self.vendor.id})
        self.assertEqual(pincode_tier(None), set())

    def test_zone_tier_is_scoped_to_city(self):
        zone = CityZone.objects.create(city=self.city, name="East", pincodes=["560038", "560008"])
        VendorZone.objects.create(vendor=self.other_vendor, zone=zone)

        self.assertEqual(zone_tier("560008", self.city.id), {self.other_vendor.id})
        self.assertEqual(zone_tier("560008", self.other_city.id), set())
        self.assertEqual(zone_tier("", self.city.id), set())

    def test_radius_tier_needs_coordinates(self):
        self.assertEqual(radius_tier(12.9784, 77.6408), {self.vendor.id})
        self.assertEqual(radius_tier(12.2958, 76.6394), set())
        self.assertEqual(radius_tier(None, None), set())

    def test_union_counts_each_vendor_once(self):
        VendorPincode.objects.create(vendor=self.vendor, pincode="560038")
        zone = CityZone.objects.create(city=self.city, name="East", pincodes=["560038"])
        VendorZone.objects.create(vendor=self.other_vendor, zone=zone)

        ids = match_vendor_ids(pincode="560038", city_id=self.city.id, lat=12.9784, lng=77.6408)

        self.assertEqual(ids, sorted([self.vendor.id, self.other_vendor.id]))


class TransitionTests(VendorFixturesMixin, TestCase):
    def test_activate_pending(self):
        row = self.request_area(self.indiranagar, surcharge="40")

        result = coverage.transition_coverage(self.vendor, row.id, "activate", self.admin)

        self.assertEqual(result.status, ACTIVE)
        self.assertTrue(result.is_active)
        self.assertEqual(result.activated_by, self.admin)
        self.assertIsNotNone(result.activated_at)
        pincode = VendorPincode.objects.get(vendor=self.vendor, pincode="560038")
        self.assertTrue(pincode.is_active)
        self.assertEqual(pincode.delivery_charge, Decimal("40"))
        log = AuditLog.objects.get(action_type="coverage.activate")
        self.assertEqual(log.actor_user, self.admin)
        self.assertEqual(log.actor_role, User.ROLE_OPERATIONS)
        self.assertEqual(log.old_value["status"], PENDING)
        self.assertEqual(log.new_value["status"], ACTIVE)
        self.assertEqual(log.entity_id, str(row.id))

    def test_reject_then_activate_is_refused(self):
        row = self.request_area(self.indiranagar)
        coverage.transition_coverage(self.vendor, row.id, "reject", self.admin, reason="Outside delivery hours")

        with self.assertRaises(ValidationError):
            coverage.transition_coverage(self.vendor, row.id, "activate", self.admin)

        row.refresh_from_db()
        self.assertEqual(row.status, REJECTED)
        self.assertEqual(row.rejection_reason, "Outside delivery hours")

    def test_reconsider_resets_request(self):
        row = self.request_area(self.indiranagar, status=REJECTED)
        VendorServiceArea.objects.filter(pk=row.pk).update(
            rejection_reason="No riders", requested_at=timezone.now() - timedelta(days=10)
        )
        before = VendorServiceArea.objects.get(pk=row.pk).requested_at

        result = coverage.transition_coverage(self.vendor, row.id, "reconsider", self.admin)

        self.assertEqual(result.status, PENDING)
        self.assertEqual(result.rejection_reason, "")
        self.assertGreater(result.requested_at, before)

    def test_deactivate_disables_pincode(self):
        row = self.request_area(self.indiranagar)
        coverage.transition_coverage(self.vendor, row.id, "activate", self.admin)

        result = coverage.transition_coverage(self.vendor, row.id, "deactivate", self.admin)

        self.assertEqual(result.status, REJECTED)
        self.assertFalse(result.is_active)
        self.assertEqual(result.rejection_reason, coverage.DEACTIVATION_REASON)
        self.assertFalse(VendorPincode.objects.get(vendor=self.vendor, pincode="560038").is_active)

    def test_only_pending_can_be_rejected(self):
        row = self.request_area(self.indiranagar, status=ACTIVE)

        with self.assertRaises(ValidationError):
            coverage.transition_coverage(self.vendor, row.id, "reject", self.admin)

    def test_unknown_action(self):
        row = self.request_area(self.indiranagar)

        with self.assertRaises(ValidationError):
            coverage.transition_coverage(self.vendor, row.id, "approve", self.admin)

    def test_row_of_another_vendor_is_not_found(self):
        row = self.request_area(self.indiranagar, vendor=self.other_vendor)

        with self.assertRaises(NotFound):
            coverage.transition_coverage(self.vendor, row.id, "activate", self.admin)

    def test_concurrent_change_is_a_conflict(self):
        row = self.request_area(self.indiranagar)
        stale = VendorServiceArea.objects.select_related("service_area").get(pk=row.pk)
        VendorServiceArea.objects.filter(pk=row.pk).update(status=REJECTED, is_active=False)

        with patch("vendors.coverage.get_vendor_coverage", return_value=stale):
            with self.assertRaises(Conflict):
                coverage.transition_coverage(self.vendor, row.id, "activate", self.admin)

        self.assertFalse(AuditLog.objects.exists())


class AdminCoverageTests(VendorFixturesMixin, TestCase):
    def test_bulk_add_skips_existing(self):
        self.request_area(self.indiranagar)

        result = coverage.bulk_add_coverage(
            self.vendor, [self.indiranagar.id, self.koramangala.id, self.hsr.id], Decimal("25"), self.admin
        )

        self.assertEqual(result["added"], 2)
        self.assertEqual(result["skipped_ids"], [self.indiranagar.id])
        added = VendorServiceArea.objects.get(vendor=self.vendor, service_area=self.hsr)
        self.assertEqual(added.status, ACTIVE)
        self.assertEqual(added.activated_by, self.admin)
        self.assertTrue(VendorPincode.objects.filter(vendor=self.vendor, pincode="560102", is_active=True).exists())
        self.assertEqual(
            VendorServiceArea.objects.get(vendor=self.vendor, service_area=self.indiranagar).status, PENDING
        )
        self.assertEqual(AuditLog.objects.filter(action_type="coverage.bulk_add").count(), 1)

    def test_bulk_add_rejects_unknown_area(self):
        with self.assertRaises(ValidationError):
            coverage.bulk_add_coverage(self.vendor, [self.hsr.id, 999999], Decimal("0"), self.admin)
        self.assertFalse(VendorServiceArea.objects.exists())

    @patch("locations.services.nominatim.geocode_pincode", return_value=None)
    def test_create_by_pincode_creates_area_and_active_row(self, mock_geocode):
        row, area, area_created = coverage.create_by_pincode(
            self.vendor, "560300", self.admin, area_name="Sarjapur", delivery_surcharge=Decimal("75")
        )

        self.assertTrue(area_created)
        self.assertEqual(area.name, "Sarjapur")
        self.assertEqual(area.city, self.city)
        self.assertEqual(row.status, ACTIVE)
        self.assertEqual(row.delivery_surcharge, Decimal("75"))
        self.assertTrue(VendorPincode.objects.filter(vendor=self.vendor, pincode="560300").exists())

    def test_create_by_pincode_conflict_names_status(self):
        self.request_area(self.indiranagar, status=REJECTED)

        with self.assertRaises(Conflict) as ctx:
            coverage.create_by_pincode(self.vendor, "560038", self.admin)

        self.assertIn("REJECTED", str(ctx.exception.detail))

    def test_create_by_pincode_conflict_leaves_inactive_area_alone(self):
        self.request_area(self.indiranagar, status=REJECTED)
        self.indiranagar.is_active = False
        self.indiranagar.save()

        with self.assertRaises(Conflict):
            coverage.create_by_pincode(self.vendor, "560038", self.admin)

        self.indiranagar.refresh_from_db()
        self.assertFalse(self.indiranagar.is_active)
        self.assertFalse(VendorPincode.objects.filter(vendor=self.vendor, pincode="560038").exists())

    def test_create_by_pincode_reactivates_area_for_admin(self):
        self.hsr.is_active = False
        self.hsr.save()

        row, area, area_created = coverage.create_by_pincode(self.vendor, "560102", self.admin)

        self.assertFalse(area_created)
        self.assertEqual(area.pk, self.hsr.pk)
        self.hsr.refresh_from_db()
        self.assertTrue(self.hsr.is_active)
        self.assertEqual(row.status, ACTIVE)

    def test_bulk_activate_keeps_rows_activated_before_a_failure(self):
        self.request_area(self.indiranagar)
        self.request_area(self.koramangala)

        with patch("vendors.coverage.sync_vendor_pincode", side_effect=[None, DatabaseError("disk full")]):
            count = coverage.bulk_activate(self.vendor, self.admin)

        self.assertEqual(count, 1)
        statuses = sorted(VendorServiceArea.objects.filter(vendor=self.vendor).values_list("status", flat=True))
        self.assertEqual(statuses, [ACTIVE, PENDING])
        log = AuditLog.objects.get(action_type="coverage.bulk_activate")
        self.assertEqual(log.new_value["count"], 1)

    def test_bulk_activate_is_idempotent(self):
        self.request_area(self.indiranagar)
        self.request_area(self.koramangala)
        self.request_area(self.hsr, status=REJECTED)

        first = coverage.bulk_activate(self.vendor, self.admin)
        second = coverage.bulk_activate(self.vendor, self.admin)

        self.assertEqual((first, second), (2, 0))
        self.assertEqual(VendorServiceArea.objects.filter(vendor=self.vendor, status=ACTIVE).count(), 2)
        self.assertEqual(AuditLog.objects.filter(action_type="coverage.bulk_activate").count(), 2)

    @patch("locations.services.nominatim.geocode_pincode", return_value=None)
    def test_replace_pincodes_from_list(self, mock_geocode):
        VendorPincode.objects.create(vendor=self.vendor, pincode="560001")

        result = coverage.replace_vendor_pincodes(
            self.vendor,
            self.admin,
            coverage.MODE_PINCODES,
            pincodes=[{"pincode": "560038", "delivery_charge": Decimal("30")}, {"pincode": "560300"}],
        )

        self.assertEqual(result["count"], 2)
        self.assertEqual(result["areas_created"], 1)
        self.assertEqual(
            sorted(VendorPincode.objects.filter(vendor=self.vendor).values_list("pincode", flat=True)),
            ["560038", "560300"],
        )
        self.assertEqual(VendorPincode.objects.get(vendor=self.vendor, pincode="560038").delivery_charge, Decimal("30"))
        self.assertEqual(ServiceArea.objects.get(pincode="560300").city, self.city)
        self.vendor.refresh_from_db()
        self.assertEqual(self.vendor.coverage_method, Vendor.COVERAGE_PINCODE)
        log = AuditLog.objects.get(action_type="vendor_pincode.replace")
        self.assertEqual(log.old_value, ["560001"])

    def test_replace_pincodes_by_radius(self):
        result = coverage.replace_vendor_pincodes(
            self.vendor,
            self.admin,
            coverage.MODE_RADIUS,
            lat=12.9784,
            lng=77.6408,
            radius_km=6,
            delivery_charge=Decimal("20"),
        )

        self.assertEqual(sorted(result["pincodes"]), ["560034", "560038"])
        self.vendor.refresh_from_db()
        self.assertEqual(self.vendor.coverage_method, Vendor.COVERAGE_RADIUS)
        self.assertEqual(self.vendor.coverage_radius_km, 6)

    def test_preview_lists_areas_nearest_first(self):
        preview = coverage.preview_radius(12.9784, 77.6408, 8)

        self.assertEqual(preview["areas"][0]["pincode"], "560038")
        self.assertEqual(set(preview["pincodes"]), {"560038", "560034", "560102"})
        self.assertFalse(VendorPincode.objects.exists())


class VendorSelectionTests(VendorFixturesMixin, TestCase):
    def test_active_area_survives_deselection(self):
        active = self.request_area(self.indiranagar, status=ACTIVE, surcharge="40")

        rows = coverage.save_vendor_selection(
            self.vendor, [{"service_area_id": self.koramangala.id, "delivery_surcharge": Decimal("10")}]
        )

        self.assertEqual({row.service_area_id for row in rows}, {self.indiranagar.id, self.koramangala.id})
        active.refresh_from_db()
        self.assertEqual(active.status, ACTIVE)
        self.assertEqual(active.delivery_surcharge, Decimal("40"))

    def test_active_surcharge_is_not_editable(self):
        active = self.request_area(self.indiranagar, status=ACTIVE, surcharge="40")

        coverage.save_vendor_selection(
            self.vendor, [{"service_area_id": self.indiranagar.id, "delivery_surcharge": Decimal("5")}]
        )

        active.refresh_from_db()
        self.assertEqual(active.delivery_surcharge, Decimal("40"))

    def test_pending_rows_follow_selection(self):
        kept = self.request_area(self.indiranagar, surcharge="10")
        dropped = self.request_area(self.koramangala)
        rejected = self.request_area(self.hsr, status=REJECTED)

        coverage.save_vendor_selection(
            self.vendor, [{"service_area_id": self.indiranagar.id, "delivery_surcharge": Decimal("15")}]
        )

        kept.refresh_from_db()
        self.assertEqual(kept.delivery_surcharge, Decimal("15"))
        self.assertFalse(VendorServiceArea.objects.filter(pk__in=[dropped.pk, rejected.pk]).exists())

    def test_rejected_reselection_stays_rejected(self):
        rejected = self.request_area(self.hsr, status=REJECTED)

        coverage.save_vendor_selection(self.vendor, [{"service_area_id": self.hsr.id}])

        rejected.refresh_from_db()
        self.assertEqual(rejected.status, REJECTED)

    def test_new_selection_is_pending(self):
        rows = coverage.save_vendor_selection(self.vendor, [{"service_area_id": self.hsr.id}])

        self.assertEqual([(row.service_area_id, row.status) for row in rows], [(self.hsr.id, PENDING)])

    def test_duplicate_and_inactive_selections_are_rejected(self):
        self.hsr.is_active = False
        self.hsr.save()

        with self.assertRaises(ValidationError):
            coverage.save_vendor_selection(
                self.vendor, [{"service_area_id": self.indiranagar.id}, {"service_area_id": self.indiranagar.id}]
            )
        with self.assertRaises(ValidationError):
            coverage.save_vendor_selection(self.vendor, [{"service_area_id": self.hsr.id}])

    def test_vendor_create_area_is_pending_and_unique(self):
        row, area, created = coverage.vendor_create_area(self.vendor, "560038", delivery_surcharge=Decimal("5"))

        self.assertFalse(created)
        self.assertEqual(area, self.indiranagar)
        self.assertEqual(row.status, PENDING)
        with self.assertRaises(Conflict):
            coverage.vendor_create_area(self.vendor, "560038")

    def test_vendor_create_area_does_not_reactivate_area(self):
        self.hsr.is_active = False
        self.hsr.save()

        row, area, created = coverage.vendor_create_area(self.vendor, "560102")

        self.assertFalse(created)
        self.assertEqual(area.pk, self.hsr.pk)
        self.assertEqual(row.status, PENDING)
        self.hsr.refresh_from_db()
        self.assertFalse(self.hsr.is_active)

    def test_vendor_create_area_conflict_writes_nothing(self):
        self.request_area(self.hsr, status=REJECTED)
        self.hsr.is_active = False
        self.hsr.save()

        with self.assertRaises(Conflict):
            coverage.vendor_create_area(self.vendor, "560102")

        self.hsr.refresh_from_db()
        self.assertFalse(self.hsr.is_active)
        self.assertEqual(VendorServiceArea.objects.filter(vendor=self.vendor).count(), 1)

    def test_deactivated_area_held_active_does_not_block_resubmit(self):
        self.request_area(self.indiranagar, status=ACTIVE)
        self.indiranagar.is_active = False
        self.indiranagar.save()

        rows = coverage.save_vendor_selection(
            self.vendor, [{"service_area_id": self.indiranagar.id}, {"service_area_id": self.koramangala.id}]
        )

        self.assertEqual(
            {(row.service_area_id, row.status) for row in rows},
            {(self.indiranagar.id, ACTIVE), (self.koramangala.id, PENDING)},
        )

    def test_available_areas_exclude_requested(self):
        self.request_area(self.indiranagar)

        names = [area.name for area in coverage.available_service_areas(self.vendor)]

        self.assertEqual(names, ["HSR Layout", "Koramangala"])


class VendorCoverageApiTests(VendorFixturesMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.customer = User.objects.create_user(phone="9000000003")

    def test_my_coverage_requires_vendor_staff(self):
        self.client.force_authenticate(self.customer)
        self.assertEqual(self.client.get("/api/vendors/me/coverage/").status_code, 403)

        self.client.force_authenticate(self.owner)
        response = self.client.get("/api/vendors/me/coverage/", {"include_available": "true"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["vendor"]["id"], self.vendor.id)
        self.assertEqual(len(response.data["available"]), 3)

    def test_my_coverage_save(self):
        self.client.force_authenticate(self.owner)

        response = self.client.post(
            "/api/vendors/me/coverage/",
            {"selections": [{"service_area_id": self.hsr.id, "delivery_surcharge": "12.50"}]},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["coverage"][0]["status"], PENDING)
        self.assertEqual(response.data["coverage"][0]["delivery_surcharge"], "12.50")

    def test_my_available_areas(self):
        self.request_area(self.hsr)
        self.client.force_authenticate(self.owner)

        response = self.client.get("/api/vendors/me/coverage/available/")

        self.assertEqual([row["name"] for row in response.data["results"]], ["Indiranagar", "Koramangala"])

    def test_my_create_area_conflict(self):
        self.client.force_authenticate(self.owner)
        url = "/api/vendors/me/coverage/create-area/"

        first = self.client.post(url, {"pincode": "560038"}, format="json")
        second = self.client.post(url, {"pincode": "560038"}, format="json")

        self.assertEqual(first.status_code, 201)
        self.assertFalse(first.data["area_created"])
        self.assertEqual(second.status_code, 409)
        self.assertIn("PENDING", second.data["detail"])

    def test_admin_transition_endpoint(self):
        row = self.request_area(self.indiranagar)
        url = f"/api/vendors/{self.vendor.id}/coverage/"

        self.client.force_authenticate(self.owner)
        self.assertEqual(
            self.client.patch(url, {"coverage_id": row.id, "action": "activate"}, format="json").status_code, 403
        )

        self.client.force_authenticate(self.admin)
        response = self.client.patch(url, {"coverage_id": row.id, "action": "activate"}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], ACTIVE)

        bad = self.client.patch(url, {"coverage_id": row.id, "action": "promote"}, format="json")
        self.assertEqual(bad.status_code, 400)

    def test_admin_transition_on_other_vendor_row_is_404(self):
        row = self.request_area(self.indiranagar, vendor=self.other_vendor)
        self.client.force_authenticate(self.admin)

        response = self.client.patch(
            f"/api/vendors/{self.vendor.id}/coverage/", {"coverage_id": row.id, "action": "activate"}, format="json"
        )

        self.assertEqual(response.status_code, 404)

    def test_owning_vendor_can_read_admin_view(self):
        self.client.force_authenticate(self.owner)

        self.assertEqual(self.client.get(f"/api/vendors/{self.vendor.id}/coverage/").status_code, 200)
        self.assertEqual(self.client.get(f"/api/vendors/{self.other_vendor.id}/coverage/").status_code, 403)

    def test_unknown_vendor(self):
        self.client.force_authenticate(self.admin)

        self.assertEqual(self.client.get("/api/vendors/999999/coverage/").status_code, 404)

    def test_admin_bulk_add_endpoint(self):
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            f"/api/vendors/{self.vendor.id}/coverage/",
            {"service_area_ids": [self.indiranagar.id, self.hsr.id], "delivery_surcharge": "20"},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["added"], 2)

    @patch("locations.services.nominatim.geocode_pincode", return_value=None)
    def test_create_by_pincode_round_trip(self, mock_geocode):
        self.client.force_authenticate(self.admin)

        created = self.client.post(
            f"/api/vendors/{self.vendor.id}/coverage/create-by-pincode/",
            {"pincode": "560300", "area_name": "Sarjapur", "delivery_surcharge": "75"},
            format="json",
        )
        listing = self.client.get(f"/api/vendors/{self.vendor.id}/coverage/")

        self.assertEqual(created.status_code, 201)
        self.assertTrue(created.data["area_created"])
        row = next(item for item in listing.data["coverage"] if item["pincode"] == "560300")
        self.assertEqual(row["status"], ACTIVE)
        self.assertEqual(row["delivery_surcharge"], "75.00")

    def test_create_by_pincode_validates_pincode(self):
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            f"/api/vendors/{self.vendor.id}/coverage/create-by-pincode/", {"pincode": "5600"}, format="json"
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["detail"], "pincode: Pincode must be 6 digits.")

    def test_bulk_activate_endpoint(self):
        self.request_area(self.indiranagar)
        self.client.force_authenticate(self.admin)
        url = f"/api/vendors/{self.vendor.id}/coverage/bulk-activate/"

        self.assertEqual(self.client.post(url).data["count"], 1)
        self.assertEqual(self.client.post(url).data["count"], 0)

    def test_pincode_replace_endpoint_validates_radius_mode(self):
        self.client.force_authenticate(self.admin)
        url = f"/api/vendors/{self.vendor.id}/coverage/pincodes/"

        missing = self.client.put(url, {"mode": "radius", "lat": 12.97}, format="json")
        ok = self.client.put(url, {"mode": "radius", "lat": 12.9784, "lng": 77.6408, "radius_km": 2}, format="json")

        self.assertEqual(missing.status_code, 400)
        self.assertEqual(ok.status_code, 200)
        self.assertEqual(ok.data["pincodes"], ["560038"])

    def test_preview_endpoint_defaults_to_vendor_location(self):
        self.client.force_authenticate(self.admin)

        response = self.client.get(f"/api/vendors/{self.vendor.id}/coverage/preview/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["radius_km"], 8.0)
        self.assertIn("560038", response.data["pincodes"])


class SyncCoveragePincodesCommandTests(VendorFixturesMixin, TestCase):
    def test_restores_pincodes_after_replace_all(self):
        row = self.request_area(self.indiranagar, surcharge="40")
        coverage.transition_coverage(self.vendor, row.id, "activate", self.admin)
        VendorPincode.objects.filter(vendor=self.vendor).delete()

        out = StringIO()
        call_command("sync_coverage_pincodes", stdout=out)

        self.assertIn("Synced 1", out.getvalue())
        pincode = VendorPincode.objects.get(vendor=self.vendor, pincode="560038")
        self.assertEqual(pincode.delivery_charge, Decimal("40"))
