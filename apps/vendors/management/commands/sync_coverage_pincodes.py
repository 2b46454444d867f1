from django.core.management.base import BaseCommand

from vendors.coverage import sync_vendor_pincode
from vendors.models import VendorServiceArea


class Command(BaseCommand):
    help = "Upsert the VendorPincode row for every ACTIVE vendor coverage request."

    def add_arguments(self, parser):
        parser.add_argument("--vendor", type=int, help="Only sync this vendor id.")

    def handle(self, *args, **options):
        rows = VendorServiceArea.objects.filter(status=VendorServiceArea.STATUS_ACTIVE).select_related("service_area")
        if options.get("vendor"):
            rows = rows.filter(vendor_id=options["vendor"])

        synced = 0
        for coverage in rows.order_by("id"):
            sync_vendor_pincode(coverage)
            synced += 1

        self.stdout.write(self.style.SUCCESS(f"Synced {synced} coverage pincodes."))
