"""
Vendor matching tiers. Each tier returns the ids of eligible vendors
(approved and online); a vendor found by any tier can deliver.
"""
from typing import List, Optional, Set

from core.geo import distance_km
from core.utils import filter_json_list_contains
from locations.models import CityZone
from vendors.models import Vendor, VendorPincode, VendorZone


def pincode_tier(pincode: Optional[str]) -> Set[int]:
    if not pincode:
        return set()
    qs = VendorPincode.objects.filter(
        pincode=pincode,
        is_active=True,
        vendor__in=Vendor.objects.eligible(),
    )
    return set(qs.values_list("vendor_id", flat=True))


def zone_tier(pincode: Optional[str], city_id: Optional[int] = None) -> Set[int]:
    if not pincode:
        return set()
    zones = CityZone.objects.filter(is_active=True)
    if city_id is not None:
        zones = zones.filter(city_id=city_id)
    zone_ids = [zone.id for zone in filter_json_list_contains(zones, "pincodes", pincode)]
    if not zone_ids:
        return set()
    qs = VendorZone.objects.filter(
        zone_id__in=zone_ids,
        is_active=True,
        vendor__in=Vendor.objects.eligible(),
    )
    return set(qs.values_list("vendor_id", flat=True))


def vendors_in_radius(lat: Optional[float], lng: Optional[float]) -> List[Vendor]:
    """
    Eligible vendors whose delivery radius reaches the point, ordered by id.
    """
    if lat is None or lng is None:
        return []
    candidates = (
        Vendor.objects.eligible()
        .filter(lat__isnull=False, lng__isnull=False, delivery_radius_km__isnull=False, delivery_radius_km__gt=0)
        .select_related("city")
        .order_by("id")
    )
    return [v for v in candidates if distance_km(v.lat, v.lng, lat, lng) <= v.delivery_radius_km]


def radius_tier(lat: Optional[float], lng: Optional[float]) -> Set[int]:
    return {vendor.id for vendor in vendors_in_radius(lat, lng)}


def match_vendor_ids(
    pincode: Optional[str] = None,
    city_id: Optional[int] = None,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
) -> List[int]:
    """
    Sorted union of the pincode, zone and radius tiers.
    Tiers whose inputs are missing contribute nothing.
    """
    ids = pincode_tier(pincode) | zone_tier(pincode, city_id) | radius_tier(lat, lng)
    return sorted(ids)
