"""Service facades for external integrations."""

from integrations.services.mappls import suggest_places
from integrations.services.nominatim import geocode_pincode, reverse_geocode

__all__ = [
    "suggest_places",
    "geocode_pincode",
    "reverse_geocode",
]
