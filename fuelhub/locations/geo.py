"""Great-circle distances between coordinates"""
import math

EARTH_RADIUS_KM = 6371.0
EARTH_RADIUS_MILES = 3958.8


def _haversine(lat1, lng1, lat2, lng2, radius):
    lat1, lng1, lat2, lng2 = (math.radians(float(v)) for v in (lat1, lng1, lat2, lng2))
    dlat = lat2 - lat1
    dlng = lng2 - lng1
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    return 2 * radius * math.asin(math.sqrt(a))


def haversine_km(lat1, lng1, lat2, lng2):
    return _haversine(lat1, lng1, lat2, lng2, EARTH_RADIUS_KM)


def haversine_miles(lat1, lng1, lat2, lng2):
    return _haversine(lat1, lng1, lat2, lng2, EARTH_RADIUS_MILES)
