from decimal import Decimal

from django.test import TestCase

from accounts.models import User
from events.models import AuditLog
from events.signals import admin_action
from locations.models import City
from vendors.models import Vendor


class AdminActionReceiverTests(TestCase):
    def setUp(self):
        self.city = City.objects.create(name="Pune", slug="pune")
        self.vendor = Vendor.objects.create(name="Bloom", slug="bloom", city=self.city)
        self.admin = User.objects.create_user(phone="9000000010", role=User.ROLE_CITY_MANAGER)

    def test_signal_writes_audit_entry(self):
        admin_action.send(
            sender=Vendor,
            actor=self.admin,
            action_type="coverage.bulk_add",
            entity_type="vendor",
            entity_id=self.vendor.pk,
            vendor=self.vendor,
            field_changed="service_areas",
            new_value={"service_area_ids": [1, 2], "delivery_surcharge": Decimal("25.00")},
            reason="Bulk-added 2 service areas.",
        )

        log = AuditLog.objects.get()
        self.assertEqual(log.actor_user, self.admin)
        self.assertEqual(log.actor_role, User.ROLE_CITY_MANAGER)
        self.assertEqual(log.entity_id, str(self.vendor.pk))
        self.assertEqual(log.vendor, self.vendor)
        self.assertEqual(log.new_value["delivery_surcharge"], "25.00")
        self.assertIsNone(log.old_value)

    def test_system_actor_is_recorded_without_user(self):
        admin_action.send(sender=Vendor, actor=None, action_type="coverage.sync", entity_type="vendor", entity_id=1)

        log = AuditLog.objects.get()
        self.assertIsNone(log.actor_user)
        self.assertEqual(log.actor_role, "")
        self.assertEqual(log.reason, "")
