"""
Cache invalidation signals
Automatically invalidate cache when data changes
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging
import threading
from contextlib import contextmanager

from .cache_utils import invalidate_dashboard_cache
from .model_cache import (
    invalidate_fuel_type_cache, invalidate_app_settings_cache, invalidate_depot_pricing_cache
)

logger = logging.getLogger(__name__)

# Thread-local storage to track signal suspension
_thread_locals = threading.local()


@contextmanager
def suspend_cache_signals():
    """
    Temporarily suspend cache invalidation signals.
    Useful for bulk operations (seeding, stock updates across tiers);
    invalidate manually after the block.
    """
    try:
        _thread_locals.suspended = True
        yield
    finally:
        _thread_locals.suspended = False


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


@receiver([post_save, post_delete], sender='catalog.FuelType')
def invalidate_fuel_types_on_change(sender, instance, **kwargs):
    if is_suspended():
        return
    invalidate_fuel_type_cache()
    # every depot listing carries all active fuel types, tiered or not
    from fuelhub.locations.models import Depot
    for depot_id in Depot.objects.values_list('pk', flat=True):
        invalidate_depot_pricing_cache(depot_id)


@receiver([post_save, post_delete], sender='core.AppSetting')
def invalidate_app_settings_on_change(sender, instance, **kwargs):
    invalidate_app_settings_cache()


@receiver([post_save, post_delete], sender='pricing.DepotPrice')
def invalidate_depot_pricing_on_tier_change(sender, instance, **kwargs):
    if is_suspended():
        return
    invalidate_depot_pricing_cache(instance.depot_id)


@receiver([post_save, post_delete], sender='locations.Depot')
def invalidate_on_depot_change(sender, instance, **kwargs):
    if is_suspended():
        return
    invalidate_depot_pricing_cache(instance.pk)
    invalidate_dashboard_cache([instance.supplier_id])


@receiver([post_save, post_delete], sender='orders.Order')
def invalidate_dashboards_on_order_change(sender, instance, **kwargs):
    if is_suspended():
        return
    invalidate_dashboard_cache()


@receiver([post_save, post_delete], sender='depot_orders.DriverDepotOrder')
def invalidate_dashboards_on_depot_order_change(sender, instance, **kwargs):
    if is_suspended():
        return
    from fuelhub.locations.models import Depot
    supplier_id = Depot.objects.filter(pk=instance.depot_id).values_list('supplier_id', flat=True).first()
    invalidate_dashboard_cache([supplier_id])


@receiver([post_save, post_delete], sender='core.User')
@receiver([post_save, post_delete], sender='parties.Driver')
@receiver([post_save, post_delete], sender='parties.Supplier')
def invalidate_admin_dashboard_on_party_change(sender, instance, **kwargs):
    if is_suspended() or kwargs.get('update_fields') == frozenset({'last_login'}):
        return
    invalidate_dashboard_cache()
