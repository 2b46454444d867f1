from typing import Optional

from vendors.models import Vendor, VendorStaff


def get_active_vendor_staff(user) -> Optional[VendorStaff]:
    """
    First active VendorStaff role for the authenticated user.
    Terminated vendors are ignored.
    """
    if not user or not getattr(user, "is_authenticated", False):
        return None

    return (
        VendorStaff.objects.select_related("vendor", "vendor__city")
        .filter(user=user, is_active=True)
        .exclude(vendor__status=Vendor.STATUS_TERMINATED)
        .order_by("-created_at")
        .first()
    )
