import logging
from typing import Any, Dict, List, Optional

import requests
from django.conf import settings
from django.core.cache import cache

from core.utils import extract_pincode

logger = logging.getLogger(__name__)

TOKEN_CACHE_KEY = "integrations:mappls:token"


def _credentials_configured() -> bool:
    return bool(getattr(settings, "MAPPLS_CLIENT_ID", "") and getattr(settings, "MAPPLS_CLIENT_SECRET", ""))


def _timeout() -> float:
    return float(getattr(settings, "LOCATION_SUGGEST_TIMEOUT", 3))


def get_access_token() -> Optional[str]:
    """
    OAuth client-credentials token for the Mappls APIs, cached until shortly
    before it expires. ``None`` when credentials are missing or the token
    endpoint fails.
    """
    if not _credentials_configured():
        logger.warning("Mappls credentials missing; skipping token request")
        return None

    token = cache.get(TOKEN_CACHE_KEY)
    if token:
        return token

    payload = {
        "grant_type": "client_credentials",
        "client_id": settings.MAPPLS_CLIENT_ID,
        "client_secret": settings.MAPPLS_CLIENT_SECRET,
    }
    try:
        resp = requests.post(settings.MAPPLS_TOKEN_URL, data=payload, timeout=_timeout())
        resp.raise_for_status()
        data = resp.json()
    except (requests.RequestException, ValueError) as exc:
        logger.warning("Mappls token request failed: %s", exc)
        return None

    token = data.get("access_token")
    if not token:
        logger.warning("Mappls token response without access_token: %s", data)
        return None

    expires_in = int(data.get("expires_in") or 3600)
    cache.set(TOKEN_CACHE_KEY, token, timeout=max(60, expires_in - 60))
    return token


def _to_float(value) -> Optional[float]:
    try:
        return float(value) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None


def _parse_suggestion(raw: Dict[str, Any]) -> Dict[str, Any]:
    address = raw.get("placeAddress") or ""
    return {
        "place_id": raw.get("eLoc") or "",
        "name": raw.get("placeName") or "",
        "address": address,
        "type": raw.get("type") or "",
        "pincode": extract_pincode(address),
        "lat": _to_float(raw.get("latitude")),
        "lng": _to_float(raw.get("longitude")),
    }


def suggest_places(query: str, lat: Optional[float] = None, lng: Optional[float] = None) -> List[Dict[str, Any]]:
    """
    Region-restricted place suggestions for ``query``.

    Never raises: missing credentials, timeouts and upstream errors all
    produce an empty list.
    """
    if not query or len(query.strip()) < 3:
        return []

    token = get_access_token()
    if not token:
        return []

    params = {
        "query": query.strip(),
        "region": getattr(settings, "MAPPLS_REGION", "ind"),
        "bridge": "true",
    }
    if lat is not None and lng is not None:
        params["location"] = f"{lat},{lng}"

    try:
        resp = requests.get(
            settings.MAPPLS_SEARCH_URL,
            params=params,
            headers={"Authorization": f"bearer {token}"},
            timeout=_timeout(),
        )
    except requests.RequestException as exc:
        logger.warning("Mappls search request failed: %s", exc)
        return []

    if resp.status_code == 401:
        cache.delete(TOKEN_CACHE_KEY)
    if resp.status_code != 200:
        logger.error("Mappls search HTTP error %s: %s", resp.status_code, resp.text[:200])
        return []

    try:
        data = resp.json()
    except ValueError:
        logger.error("Mappls search non-JSON response: %s", resp.text[:200])
        return []

    suggestions = data.get("suggestedLocations") or []
    return [_parse_suggestion(item) for item in suggestions if isinstance(item, dict)]
