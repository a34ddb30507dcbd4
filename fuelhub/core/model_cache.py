"""
Caching for frequently read, rarely written data: the active fuel type
list, app settings, and per-depot pricing tiers.

Invalidation is wired up in ``fuelhub.core.cache_signals``.
"""
from django.core.cache import cache
import logging

logger = logging.getLogger(__name__)

# Cache key prefixes
FUEL_TYPE_LIST_KEY = 'fuel_type_list:active'
APP_SETTINGS_KEY = 'app_settings:current'
DEPOT_PRICING_KEY_PREFIX = 'depot_pricing:'

# Cache TTL (Time To Live) in seconds
FUEL_TYPE_LIST_CACHE_TTL = 900  # 15 minutes
APP_SETTINGS_CACHE_TTL = 600  # 10 minutes
DEPOT_PRICING_CACHE_TTL = 180  # 3 minutes


# ==================== FUEL TYPES ====================

def get_cached_fuel_type_list():
    cached_data = cache.get(FUEL_TYPE_LIST_KEY)
    if cached_data is not None:
        logger.debug("Cache hit for fuel type list")
    return cached_data


def cache_fuel_type_list(data, ttl: int = None):
    cache.set(FUEL_TYPE_LIST_KEY, data, ttl or FUEL_TYPE_LIST_CACHE_TTL)
    logger.debug(f"Cached fuel type list ({len(data)} entries)")


def invalidate_fuel_type_cache():
    cache.delete(FUEL_TYPE_LIST_KEY)
    logger.debug("Invalidated fuel type list cache")


# ==================== APP SETTINGS ====================

def get_cached_app_settings():
    return cache.get(APP_SETTINGS_KEY)


def cache_app_settings(data, ttl: int = None):
    cache.set(APP_SETTINGS_KEY, data, ttl or APP_SETTINGS_CACHE_TTL)


def invalidate_app_settings_cache():
    cache.delete(APP_SETTINGS_KEY)
    logger.debug("Invalidated app settings cache")


# ==================== DEPOT PRICING ====================

def get_depot_pricing_cache_key(depot_id: int) -> str:
    """Get cache key for a depot's pricing tiers"""
    return f"{DEPOT_PRICING_KEY_PREFIX}{depot_id}"


def get_cached_depot_pricing(depot_id: int):
    cached_data = cache.get(get_depot_pricing_cache_key(depot_id))
    if cached_data is not None:
        logger.debug(f"Cache hit for depot pricing: {depot_id}")
    return cached_data


def cache_depot_pricing(depot_id: int, data, ttl: int = None):
    cache.set(get_depot_pricing_cache_key(depot_id), data, ttl or DEPOT_PRICING_CACHE_TTL)
    logger.debug(f"Cached depot pricing: {depot_id}")


def invalidate_depot_pricing_cache(depot_id: int):
    cache.delete(get_depot_pricing_cache_key(depot_id))
    logger.debug(f"Invalidated depot pricing cache: {depot_id}")
