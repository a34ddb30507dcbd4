"""
Caching for the dashboard aggregates.

Every dashboard lives under a fixed key so that the change signals can drop
exactly the entries an order or depot touches, whichever cache backend is
configured.
"""
from functools import wraps
import logging

from django.core.cache import cache

logger = logging.getLogger(__name__)

ADMIN_DASHBOARD_CACHE_TTL = 300
SUPPLIER_DASHBOARD_CACHE_TTL = 120

ADMIN_DASHBOARD_KEY = 'dashboard:admin'


def admin_dashboard_key():
    return ADMIN_DASHBOARD_KEY


def supplier_dashboard_key(supplier_id):
    return f'dashboard:supplier:{supplier_id}'


def cached_query(cache_ttl, key_func):
    """
    Cache a builder's result under ``key_func(*args, **kwargs)``.

    Usage:
        @cached_query(SUPPLIER_DASHBOARD_CACHE_TTL, supplier_dashboard_key)
        def build_supplier_dashboard(supplier_id):
            ...
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            key = key_func(*args, **kwargs)
            data = cache.get(key)
            if data is not None:
                logger.debug(f"Cache hit: {key}")
                return data
            data = func(*args, **kwargs)
            cache.set(key, data, cache_ttl)
            logger.debug(f"Cache rebuilt: {key}")
            return data
        return wrapper
    return decorator


def invalidate_dashboard_cache(supplier_ids=()):
    """Drop the admin dashboard and the dashboards of the given suppliers"""
    keys = [ADMIN_DASHBOARD_KEY] + [supplier_dashboard_key(pk) for pk in supplier_ids if pk]
    cache.delete_many(keys)
