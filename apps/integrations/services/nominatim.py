import logging
from typing import Any, Dict, Optional

import requests
from django.conf import settings

logger = logging.getLogger(__name__)


def _headers() -> Dict[str, str]:
    return {"User-Agent": getattr(settings, "NOMINATIM_USER_AGENT", "gifting-serviceability/1.0")}


def _base_url() -> str:
    return getattr(settings, "NOMINATIM_BASE_URL", "https://nominatim.openstreetmap.org").rstrip("/")


def _get(path: str, params: Dict[str, Any]) -> Optional[Any]:
    try:
        resp = requests.get(
            f"{_base_url()}/{path}",
            params=params,
            headers=_headers(),
            timeout=getattr(settings, "NOMINATIM_TIMEOUT", 5),
        )
    except requests.RequestException as exc:
        logger.warning("Nominatim request failed: %s", exc)
        return None

    if resp.status_code != 200:
        logger.error("Nominatim HTTP error %s: %s", resp.status_code, resp.text[:200])
        return None

    try:
        return resp.json()
    except ValueError:
        logger.error("Nominatim non-JSON response: %s", resp.text[:200])
        return None


def _parse_place(raw: Dict[str, Any], fallback_name: str = "") -> Optional[Dict[str, Any]]:
    try:
        lat = float(raw.get("lat"))
        lng = float(raw.get("lon"))
    except (TypeError, ValueError):
        return None

    addr = raw.get("address") or {}
    return {
        "name": addr.get("suburb")
        or addr.get("neighbourhood")
        or addr.get("city_district")
        or addr.get("town")
        or addr.get("village")
        or fallback_name,
        "lat": lat,
        "lng": lng,
        "city_name": addr.get("city") or addr.get("town") or addr.get("state_district") or "",
        "state": addr.get("state") or "",
        "pincode": addr.get("postcode") or "",
    }


def geocode_pincode(pincode: str) -> Optional[Dict[str, Any]]:
    """
    Area name, coordinates, city and state for a postal code.
    ``None`` when nothing is found or the service is unreachable.
    """
    data = _get(
        "search",
        {
            "postalcode": pincode,
            "country": getattr(settings, "NOMINATIM_COUNTRY", "India"),
            "format": "json",
            "limit": 1,
            "addressdetails": 1,
        },
    )
    if not data or not isinstance(data, list):
        return None
    return _parse_place(data[0], fallback_name=pincode)


def reverse_geocode(lat: float, lng: float) -> Optional[Dict[str, Any]]:
    data = _get(
        "reverse",
        {"lat": lat, "lon": lng, "format": "json", "addressdetails": 1, "zoom": 16},
    )
    if not data or not isinstance(data, dict) or data.get("error"):
        return None
    return _parse_place(data)
