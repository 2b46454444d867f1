import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from django.db import DatabaseError, transaction
from django.utils.text import slugify

from core.geo import distance_km
from integrations.services import nominatim
from locations.models import City, PincodeCityMap, ServiceArea

logger = logging.getLogger(__name__)


def match_city_by_name(name: str) -> Optional[City]:
    """
    City whose name, slug or alias matches ``name`` (case-insensitive).
    """
    if not name:
        return None
    needle = name.strip().lower()
    city = City.objects.filter(name__iexact=needle).first() or City.objects.filter(slug=slugify(needle)).first()
    if city:
        return city
    for candidate in City.objects.all():
        if needle in (candidate.aliases or []):
            return candidate
    return None


def _from_pincode_map(pincode: str) -> Optional[Dict[str, Any]]:
    row = PincodeCityMap.objects.select_related("city").filter(pincode=pincode).first()
    if not row:
        return None
    return {
        "name": row.area_name or pincode,
        "lat": row.lat,
        "lng": row.lng,
        "city": row.city,
        "state": row.city.state,
        "source": "pincode_map",
    }


def _from_geocoder(pincode: str) -> Optional[Dict[str, Any]]:
    place = nominatim.geocode_pincode(pincode)
    if not place:
        return None
    if not place["city_name"] or place["name"] == pincode:
        # sparse postal-code hit: take locality and city from a reverse lookup
        detail = nominatim.reverse_geocode(place["lat"], place["lng"]) or {}
        place["name"] = place["name"] if place["name"] != pincode else (detail.get("name") or pincode)
        place["city_name"] = place["city_name"] or detail.get("city_name", "")
        place["state"] = place["state"] or detail.get("state", "")
    return {
        "name": place["name"] or pincode,
        "lat": place["lat"],
        "lng": place["lng"],
        "city": match_city_by_name(place["city_name"]),
        "city_name": place["city_name"],
        "state": place["state"],
        "source": "geocoder",
    }


PINCODE_RESOLVERS = (_from_pincode_map, _from_geocoder)


def resolve_pincode(pincode: str) -> Optional[Dict[str, Any]]:
    """
    Name, coordinates and city for a pincode that has no ServiceArea yet.
    Tries the local pincode map first, then the external geocoder.
    """
    for resolver in PINCODE_RESOLVERS:
        resolved = resolver(pincode)
        if resolved:
            return resolved
    return None


def existing_service_area(pincode: str) -> Optional[ServiceArea]:
    """
    The ServiceArea a pincode already resolves to, active rows first.
    """
    return ServiceArea.objects.select_related("city").filter(pincode=pincode).order_by("-is_active", "id").first()


def find_or_create_service_area(
    pincode: str, fallback_city: City, area_name: Optional[str] = None, reactivate: bool = True
) -> Tuple[ServiceArea, bool]:
    """
    Existing ServiceArea for ``pincode``, or a new one whose name/coordinates
    come from ``resolve_pincode`` with ``fallback_city`` filling whatever could
    not be resolved. An inactive existing area is re-activated only when
    ``reactivate`` is set; otherwise it is returned as it is.
    """
    existing = existing_service_area(pincode)
    if existing:
        if reactivate and not existing.is_active:
            existing.is_active = True
            existing.save(update_fields=["is_active", "updated_at"])
            logger.info("Re-activated service area %s for pincode %s", existing.pk, pincode)
        return existing, False

    resolved = resolve_pincode(pincode) or {}
    city = resolved.get("city") or fallback_city
    lat, lng = resolved.get("lat"), resolved.get("lng")
    if lat is None or lng is None:
        lat, lng = fallback_city.lat, fallback_city.lng

    area = ServiceArea.objects.create(
        name=area_name or resolved.get("name") or pincode,
        pincode=pincode,
        city=city,
        state=resolved.get("state") or city.state,
        lat=lat,
        lng=lng,
        is_active=True,
    )
    logger.info(
        "Created service area %s for pincode %s (source=%s)", area.pk, pincode, resolved.get("source", "fallback")
    )
    return area, True


def ensure_service_areas(pincodes: Iterable[str], fallback_city: City) -> Dict[str, Any]:
    """
    Make sure every pincode has a ServiceArea. Each creation is independent;
    failures are collected instead of aborting the batch.
    """
    wanted = list(dict.fromkeys(p for p in pincodes if p))
    if not wanted:
        return {"created": 0, "failed": []}

    existing = set(ServiceArea.objects.filter(pincode__in=wanted).values_list("pincode", flat=True))
    created = 0
    failed: List[str] = []
    for pincode in wanted:
        if pincode in existing:
            continue
        try:
            with transaction.atomic():
                find_or_create_service_area(pincode, fallback_city)
            created += 1
        except DatabaseError:
            logger.exception("Failed to create service area for pincode %s", pincode)
            failed.append(pincode)
    return {"created": created, "failed": failed}


def areas_within_radius(lat: float, lng: float, radius_km: float) -> List[Tuple[ServiceArea, float]]:
    """
    Active, geocoded ServiceAreas within ``radius_km`` of a point, nearest first.
    """
    matches = []
    qs = ServiceArea.objects.filter(is_active=True, lat__isnull=False, lng__isnull=False).select_related("city")
    for area in qs:
        dist = distance_km(lat, lng, area.lat, area.lng)
        if dist <= radius_km:
            matches.append((area, dist))
    matches.sort(key=lambda item: (item[1], item[0].name))
    return matches


def nearest_service_area(lat: float, lng: float, max_km: float) -> Optional[ServiceArea]:
    matches = areas_within_radius(lat, lng, max_km)
    return matches[0][0] if matches else None
