"""
Forward geocoding for delivery addresses through a Nominatim-compatible
search endpoint (``settings.GEOCODING_URL``).
"""
import logging
import requests
from django.conf import settings

logger = logging.getLogger(__name__)


class GeocodingError(Exception):
    pass


def geocode_address(address):
    """
    Resolve a free-text address to ``(lat, lng)``.

    Returns None when the service has no match. Raises GeocodingError on
    transport or response errors.
    """
    params = {
        'q': address,
        'format': 'json',
        'limit': 1,
        'countrycodes': 'za',
    }
    headers = {'User-Agent': settings.GEOCODING_USER_AGENT}
    try:
        response = requests.get(settings.GEOCODING_URL, params=params, headers=headers,
                                timeout=settings.GEOCODING_TIMEOUT)
        response.raise_for_status()
        results = response.json()
    except (requests.RequestException, ValueError) as e:
        raise GeocodingError(f"Geocoding request failed: {e}") from e

    if not results:
        return None
    try:
        return float(results[0]['lat']), float(results[0]['lon'])
    except (KeyError, TypeError, ValueError) as e:
        raise GeocodingError(f"Unexpected geocoding response: {results[0]!r}") from e


def fill_coordinates(address):
    """Populate lat/lng on an unsaved or saved DeliveryAddress when missing"""
    if address.lat is not None and address.lng is not None:
        return False
    try:
        result = geocode_address(address.full_address)
    except GeocodingError as e:
        logger.warning(f"Could not geocode address '{address.full_address}': {e}")
        return False
    if result is None:
        logger.info(f"No geocoding match for address '{address.full_address}'")
        return False
    address.lat, address.lng = result
    return True
