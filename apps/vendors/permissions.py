from rest_framework.permissions import SAFE_METHODS, BasePermission

from accounts.permissions import is_admin_role
from vendors.services import get_active_vendor_staff


class IsVendorStaff(BasePermission):
    message = "Vendor access required."

    def has_permission(self, request, view):
        staff = get_active_vendor_staff(request.user)
        if staff:
            setattr(request, "vendor_staff", staff)
            return True
        return False


class IsAdminRoleOrOwningVendorReadOnly(BasePermission):
    """
    Admins may do anything; staff of the vendor named in the URL may read.
    """

    message = "Admin access required."

    def has_permission(self, request, view):
        if is_admin_role(request.user):
            return True
        if request.method not in SAFE_METHODS:
            return False
        staff = get_active_vendor_staff(request.user)
        return bool(staff and str(staff.vendor_id) == str(view.kwargs.get("vendor_id")))
