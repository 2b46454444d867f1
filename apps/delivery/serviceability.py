"""
Serviceability: can an approved vendor deliver to a pincode or a point,
at what charge and in which slots.

A location is resolved into a ``ServiceTarget`` by trying, in order:
1. the active ServiceArea for the pincode
2. the nearest active ServiceArea within SERVICEABILITY_NEAREST_AREA_KM
If neither applies, vendors are matched by delivery radius alone.
"""
import logging
from collections import namedtuple
from typing import Any, Dict, List, Optional

from django.conf import settings

from catalog.models import VendorProduct
from delivery.slots import resolve_slots
from locations.models import City, ServiceArea
from locations.services import nearest_service_area
from vendors.matching import match_vendor_ids, vendors_in_radius

logger = logging.getLogger(__name__)

ServiceTarget = namedtuple("ServiceTarget", ["pincode", "city", "area_name", "lat", "lng"])


def _city_payload(city: Optional[City]) -> Optional[Dict[str, Any]]:
    if city is None:
        return None
    return {
        "id": city.id,
        "name": city.name,
        "slug": city.slug,
        "state": city.state,
        "is_coming_soon": city.is_coming_soon,
    }


def _response(**fields) -> Dict[str, Any]:
    data = {
        "is_serviceable": False,
        "coming_soon": False,
        "vendor_count": 0,
        "product_available": None,
        "delivery_charge": None,
        "free_delivery_above": None,
        "city": None,
        "area_name": None,
        "available_slots": [],
        "message": "",
    }
    data.update(fields)
    return data


def not_serviceable() -> Dict[str, Any]:
    return _response(message="We do not deliver to this location yet.")


# -------------------------
# Target resolution
# -------------------------

def _target_from_pincode(pincode, lat, lng) -> Optional[ServiceTarget]:
    if not pincode:
        return None
    area = ServiceArea.objects.select_related("city").filter(pincode=pincode, is_active=True).order_by("name").first()
    if area is None:
        return None
    if area.has_coordinates:
        lat, lng = area.lat, area.lng
    return ServiceTarget(area.pincode, area.city, area.name, lat, lng)


def _target_from_nearest_area(pincode, lat, lng) -> Optional[ServiceTarget]:
    if lat is None or lng is None:
        return None
    max_km = float(getattr(settings, "SERVICEABILITY_NEAREST_AREA_KM", 15))
    area = nearest_service_area(lat, lng, max_km)
    if area is None:
        return None
    # radius tier uses the caller's point, not the area's
    return ServiceTarget(area.pincode, area.city, area.name, lat, lng)


TARGET_STRATEGIES = (_target_from_pincode, _target_from_nearest_area)


def resolve_target(pincode=None, lat=None, lng=None) -> Optional[ServiceTarget]:
    for strategy in TARGET_STRATEGIES:
        target = strategy(pincode, lat, lng)
        if target is not None:
            return target
    return None


# -------------------------
# Checks
# -------------------------

def product_available(vendor_ids: List[int], product_id) -> Optional[bool]:
    if product_id is None:
        return None
    return VendorProduct.objects.filter(
        vendor_id__in=vendor_ids,
        product_id=product_id,
        is_available=True,
        product__is_active=True,
    ).exists()


def _serviceable(city: City, vendor_ids: List[int], product_id, area_name=None) -> Dict[str, Any]:
    return _response(
        is_serviceable=True,
        vendor_count=len(vendor_ids),
        product_available=product_available(vendor_ids, product_id),
        delivery_charge=city.base_delivery_charge,
        free_delivery_above=city.free_delivery_above,
        city=_city_payload(city),
        area_name=area_name,
        available_slots=resolve_slots(city.id),
    )


def full_check(target: ServiceTarget, product_id=None) -> Dict[str, Any]:
    vendor_ids = match_vendor_ids(pincode=target.pincode, city_id=target.city.id, lat=target.lat, lng=target.lng)
    if not vendor_ids:
        return _response(
            is_serviceable=True,
            coming_soon=True,
            city=_city_payload(target.city),
            area_name=target.area_name,
            message=f"Delivery to {target.area_name} is coming soon.",
        )
    return _serviceable(target.city, vendor_ids, product_id, area_name=target.area_name)


def radius_only_check(lat: float, lng: float, product_id=None) -> Dict[str, Any]:
    vendors = vendors_in_radius(lat, lng)
    if not vendors:
        return not_serviceable()
    return _serviceable(vendors[0].city, [vendor.id for vendor in vendors], product_id)


def check_serviceability(pincode=None, lat=None, lng=None, product_id=None) -> Dict[str, Any]:
    target = resolve_target(pincode, lat, lng)
    if target is not None:
        result = full_check(target, product_id)
    elif lat is not None and lng is not None:
        result = radius_only_check(lat, lng, product_id)
    else:
        result = not_serviceable()

    logger.debug(
        "Serviceability pincode=%s lat=%s lng=%s -> serviceable=%s vendors=%s",
        pincode,
        lat,
        lng,
        result["is_serviceable"],
        result["vendor_count"],
    )
    return result
