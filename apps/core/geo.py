import math

EARTH_RADIUS_KM = 6371.0


def distance_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Great-circle (haversine) distance between two coordinates, in kilometres.
    """
    lat1_rad, lng1_rad, lat2_rad, lng2_rad = map(math.radians, [lat1, lng1, lat2, lng2])
    dlat = lat2_rad - lat1_rad
    dlng = lng2_rad - lng1_rad
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlng / 2) ** 2
    # rounding can push ``a`` a hair above 1 for antipodal points
    c = 2 * math.asin(math.sqrt(min(1.0, a)))
    return EARTH_RADIUS_KM * c


def within_radius(lat: float, lng: float, center_lat: float, center_lng: float, radius_km: float) -> bool:
    return distance_km(lat, lng, center_lat, center_lng) <= radius_km
