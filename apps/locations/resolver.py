"""
Location search: turns a free-text or numeric query into a ranked list of
candidate locations.

Every multi-tier lookup is an ordered tuple of strategies evaluated until
one yields rows, so each tier can be tested on its own.
"""
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from django.conf import settings
from django.db.models import Q

from core.utils import filter_json_list_contains
from integrations.services import mappls
from locations.models import City, CityZone, PincodeCityMap, ServiceArea

logger = logging.getLogger(__name__)

TYPE_AREA = "area"
TYPE_CITY = "city"
TYPE_EXTERNAL = "externally_suggested"
TYPE_ORDER = {TYPE_AREA: 0, TYPE_CITY: 1, TYPE_EXTERNAL: 2}

MIN_QUERY_LENGTH = 2
AREA_RESULT_CAP = 8
PREFIX_CITY_CAP = 3
PARTIAL_CITY_CAP = 5
TEXT_CITY_CAP = 3


# -------------------------
# Result builders
# -------------------------

def _result(type_: str, label: str, **extra) -> Dict[str, Any]:
    row = {
        "type": type_,
        "label": label,
        "city_id": None,
        "city_name": None,
        "city_slug": None,
        "pincode": None,
        "area_name": None,
        "lat": None,
        "lng": None,
        "external_ref": None,
        "is_active": None,
        "is_coming_soon": None,
    }
    row.update(extra)
    return row


def _city_fields(city: City) -> Dict[str, Any]:
    return {
        "city_id": city.id,
        "city_name": city.name,
        "city_slug": city.slug,
        "is_active": city.is_active,
        "is_coming_soon": city.is_coming_soon,
    }


def area_result(area: ServiceArea) -> Dict[str, Any]:
    fields = _city_fields(area.city)
    fields["is_active"] = area.is_active and area.city.is_active
    return _result(
        TYPE_AREA,
        f"{area.name}, {area.city.name}",
        pincode=area.pincode,
        area_name=area.name,
        lat=area.lat,
        lng=area.lng,
        **fields,
    )


def city_result(city: City, pincode: Optional[str] = None, area_name: Optional[str] = None) -> Dict[str, Any]:
    label = f"{area_name}, {city.name}" if area_name else city.name
    return _result(
        TYPE_CITY, label, pincode=pincode, area_name=area_name or None, lat=city.lat, lng=city.lng, **_city_fields(city)
    )


def external_result(suggestion: Dict[str, Any]) -> Dict[str, Any]:
    name = suggestion.get("name") or ""
    address = suggestion.get("address") or ""
    label = f"{name}, {address}" if name and address else (name or address)
    return _result(
        TYPE_EXTERNAL,
        label,
        pincode=suggestion.get("pincode") or None,
        area_name=name or None,
        lat=suggestion.get("lat"),
        lng=suggestion.get("lng"),
        external_ref=suggestion.get("place_id") or None,
    )


# -------------------------
# Query helpers
# -------------------------

def _active_areas():
    return ServiceArea.objects.filter(is_active=True).select_related("city")


def _cities_with_prefix(prefix: str, cap: int) -> List[City]:
    return filter_json_list_contains(City.objects.order_by("name"), "pincode_prefixes", prefix)[:cap]


def _first_non_empty(strategies: Sequence[Callable[[str], List[Dict[str, Any]]]], query: str):
    for strategy in strategies:
        results = strategy(query)
        if results:
            return results
    return []


# -------------------------
# Exact pincode tiers
# -------------------------

def areas_for_pincode(pincode: str) -> List[Dict[str, Any]]:
    qs = _active_areas().filter(pincode=pincode).order_by("name")[:AREA_RESULT_CAP]
    return [area_result(area) for area in qs]


def zone_cities_for_pincode(pincode: str) -> List[Dict[str, Any]]:
    zones = filter_json_list_contains(
        CityZone.objects.filter(is_active=True).select_related("city").order_by("city__name", "id"), "pincodes", pincode
    )
    results = []
    seen = set()
    for zone in zones:
        if zone.city_id in seen:
            continue
        seen.add(zone.city_id)
        results.append(city_result(zone.city, pincode=pincode))
    return results


def pincode_map_city(pincode: str) -> List[Dict[str, Any]]:
    row = PincodeCityMap.objects.select_related("city").filter(pincode=pincode).first()
    if not row:
        return []
    return [city_result(row.city, pincode=pincode, area_name=row.area_name)]


def prefix_cities_for_pincode(pincode: str) -> List[Dict[str, Any]]:
    return [city_result(city) for city in _cities_with_prefix(pincode[:3], PREFIX_CITY_CAP)]


EXACT_PINCODE_STRATEGIES = (
    areas_for_pincode,
    zone_cities_for_pincode,
    pincode_map_city,
    prefix_cities_for_pincode,
)


# -------------------------
# Partial pincode tiers
# -------------------------

def areas_with_pincode_prefix(prefix: str) -> List[Dict[str, Any]]:
    qs = _active_areas().filter(pincode__startswith=prefix).order_by("pincode", "name")[:AREA_RESULT_CAP]
    return [area_result(area) for area in qs]


def cities_with_prefix(prefix: str) -> List[Dict[str, Any]]:
    return [city_result(city) for city in _cities_with_prefix(prefix, PARTIAL_CITY_CAP)]


PARTIAL_PINCODE_STRATEGIES = (
    areas_with_pincode_prefix,
    cities_with_prefix,
)


# -------------------------
# Text search
# -------------------------

def _areas_by_name(query: str) -> List[ServiceArea]:
    return list(_active_areas().filter(name__icontains=query).order_by("name")[:AREA_RESULT_CAP])


def _areas_by_alternate_name(query: str) -> List[ServiceArea]:
    return filter_json_list_contains(_active_areas().order_by("name"), "alternate_names", query.lower())


def _cities_by_name(query: str) -> List[City]:
    by_name = list(City.objects.filter(Q(name__icontains=query) | Q(slug__icontains=query)).order_by("name"))
    by_alias = filter_json_list_contains(City.objects.order_by("name"), "aliases", query.lower())
    merged = {city.id: city for city in by_name}
    for city in by_alias:
        merged.setdefault(city.id, city)
    return sorted(merged.values(), key=lambda c: c.name)


def text_search(query: str) -> List[Dict[str, Any]]:
    name_matches = _areas_by_name(query)
    alias_matches = _areas_by_alternate_name(query)
    cities = _cities_by_name(query)

    areas: Dict[int, ServiceArea] = {}
    for area in list(name_matches) + list(alias_matches):
        areas.setdefault(area.id, area)
    area_rows = list(areas.values())[:AREA_RESULT_CAP]

    covered_cities = {area.city_id for area in area_rows}
    city_rows = [city for city in cities if city.id not in covered_cities][:TEXT_CITY_CAP]

    return [area_result(area) for area in area_rows] + [city_result(city) for city in city_rows]


# -------------------------
# External fallback
# -------------------------

def _dedupe_keys(results: Iterable[Dict[str, Any]]):
    labels = set()
    pincodes = set()
    for row in results:
        if row.get("label"):
            labels.add(row["label"].strip().lower())
        if row.get("pincode"):
            pincodes.add(row["pincode"])
    return labels, pincodes


def external_suggestions(query: str, local: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Up to ``LOCATION_EXTERNAL_MAX`` provider suggestions that do not repeat a
    local label or pincode. Provider failures yield an empty list.
    """
    max_external = int(getattr(settings, "LOCATION_EXTERNAL_MAX", 3))
    try:
        suggestions = mappls.suggest_places(query)
    except Exception:
        logger.exception("Place suggestion provider failed for %r", query)
        return []

    labels, pincodes = _dedupe_keys(local)
    extra = []
    for suggestion in suggestions:
        row = external_result(suggestion)
        if not row["label"]:
            continue
        label_key = row["label"].strip().lower()
        if label_key in labels or (row["pincode"] and row["pincode"] in pincodes):
            continue
        labels.add(label_key)
        if row["pincode"]:
            pincodes.add(row["pincode"])
        extra.append(row)
        if len(extra) >= max_external:
            break
    return extra


# -------------------------
# Entry point
# -------------------------

def local_search(query: str) -> List[Dict[str, Any]]:
    if query.isdigit():
        if len(query) == 6:
            return _first_non_empty(EXACT_PINCODE_STRATEGIES, query)
        if 2 <= len(query) <= 5:
            return _first_non_empty(PARTIAL_PINCODE_STRATEGIES, query)
        return []
    return text_search(query)


def search_locations(query: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """
    Ranked location candidates for ``query``: areas, then cities, then
    externally suggested places, truncated to ``limit``.
    """
    query = (query or "").strip()
    if len(query) < MIN_QUERY_LENGTH:
        return []

    if limit is None:
        limit = int(getattr(settings, "LOCATION_SEARCH_LIMIT", 8))

    results = local_search(query)
    if len(results) < int(getattr(settings, "LOCATION_EXTERNAL_MIN_LOCAL", 3)):
        results = results + external_suggestions(query, results)

    results.sort(key=lambda row: TYPE_ORDER[row["type"]])
    return results[:limit]
