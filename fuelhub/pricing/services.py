import logging
from decimal import Decimal
from django.db import transaction
from fuelhub.catalog.models import FuelType
from fuelhub.core.model_cache import get_cached_depot_pricing, cache_depot_pricing, invalidate_depot_pricing_cache
from .models import DepotPrice, DriverPricing, PricingHistory
from .tiers import tier_ranges, select_tier

logger = logging.getLogger('fuelhub.pricing')

DEFAULT_TIER_PRICE_CENTS = 10000


class PricingError(Exception):
    """Rejected pricing change; the message is safe to show to the user"""


def _tier_payload(tier, max_litres, label):
    return {
        'id': tier.pk,
        'price_cents': tier.price_cents,
        'min_litres': tier.min_litres,
        'max_litres': max_litres,
        'range_label': label,
        'available_litres': tier.available_litres,
        'updated_at': tier.updated_at,
    }


def build_depot_pricing(depot):
    """
    Active fuel types with the depot's tiers sorted by minimum quantity.
    Fuel types without tiers are included with an empty list.
    """
    cached = get_cached_depot_pricing(depot.pk)
    if cached is not None:
        return cached

    tiers_by_fuel = {}
    for tier in DepotPrice.objects.filter(depot=depot):
        tiers_by_fuel.setdefault(tier.fuel_type_id, []).append(tier)

    result = []
    for fuel_type in FuelType.objects.filter(active=True).order_by('label'):
        tiers = tiers_by_fuel.get(fuel_type.pk, [])
        ranged = tier_ranges(tiers)
        stock = tiers[0].available_litres if tiers else None
        result.append({
            'id': fuel_type.pk,
            'code': fuel_type.code,
            'label': fuel_type.label,
            'available_litres': stock,
            'pricing_tiers': [_tier_payload(t, max_l, label) for t, max_l, label in ranged],
        })
    cache_depot_pricing(depot.pk, result)
    return result


def shared_stock(depot, fuel_type):
    tier = DepotPrice.objects.filter(depot=depot, fuel_type=fuel_type).order_by('min_litres').first()
    return tier.available_litres if tier else None


@transaction.atomic
def create_tier(depot, fuel_type, price_cents, min_litres, available_litres=None, changed_by=None):
    min_litres = Decimal(min_litres)
    if DepotPrice.objects.filter(depot=depot, fuel_type=fuel_type, min_litres=min_litres).exists():
        raise PricingError(f'A tier starting at {min_litres}L already exists for {fuel_type.label}')

    if available_litres is None:
        available_litres = shared_stock(depot, fuel_type)
    else:
        DepotPrice.objects.filter(depot=depot, fuel_type=fuel_type).update(available_litres=available_litres)

    tier = DepotPrice.objects.create(
        depot=depot,
        fuel_type=fuel_type,
        price_cents=price_cents,
        min_litres=min_litres,
        available_litres=available_litres,
    )
    PricingHistory.objects.create(
        entity_type='depot', depot=depot, fuel_type=fuel_type, min_litres=min_litres,
        old_price_cents=None, new_price_cents=price_cents, changed_by=changed_by,
    )
    logger.info(f"Tier {tier.pk} created for depot {depot.pk} {fuel_type.code} from {min_litres}L @ {price_cents}c")
    return tier


@transaction.atomic
def update_tier(tier, price_cents=None, min_litres=None, available_litres=None, stock_given=False, changed_by=None):
    if min_litres is not None:
        min_litres = Decimal(min_litres)
        conflict = DepotPrice.objects.filter(
            depot_id=tier.depot_id, fuel_type_id=tier.fuel_type_id, min_litres=min_litres
        ).exclude(pk=tier.pk).exists()
        if conflict:
            raise PricingError(f'Another tier already starts at {min_litres}L')
        tier.min_litres = min_litres

    if stock_given:
        # Stock is shared across every tier of the fuel type
        DepotPrice.objects.filter(depot_id=tier.depot_id, fuel_type_id=tier.fuel_type_id).update(available_litres=available_litres)
        tier.available_litres = available_litres

    old_price = tier.price_cents
    if price_cents is not None:
        tier.price_cents = price_cents
    tier.save()

    if price_cents is not None and price_cents != old_price:
        PricingHistory.objects.create(
            entity_type='depot', depot_id=tier.depot_id, fuel_type_id=tier.fuel_type_id,
            min_litres=tier.min_litres, old_price_cents=old_price, new_price_cents=price_cents,
            changed_by=changed_by,
        )
    return tier


@transaction.atomic
def set_stock(depot, fuel_type, available_litres):
    """Set shared stock for a fuel type, creating a default tier when none exist"""
    updated = DepotPrice.objects.filter(depot=depot, fuel_type=fuel_type).update(available_litres=available_litres)
    if updated == 0:
        DepotPrice.objects.create(
            depot=depot,
            fuel_type=fuel_type,
            price_cents=DEFAULT_TIER_PRICE_CENTS,
            min_litres=Decimal('0'),
            available_litres=available_litres,
        )
        logger.info(f"Created default tier for depot {depot.pk} {fuel_type.code} while setting stock")
    invalidate_depot_pricing_cache(depot.pk)
    return DepotPrice.objects.filter(depot=depot, fuel_type=fuel_type).order_by('min_litres')


def reduce_stock(depot, fuel_type, litres):
    """Deduct released litres from shared stock, floored at zero; returns (before, after)"""
    tiers = list(DepotPrice.objects.select_for_update().filter(depot=depot, fuel_type=fuel_type))
    if not tiers or tiers[0].available_litres is None:
        return None, None
    before = Decimal(tiers[0].available_litres)
    after = max(before - Decimal(litres), Decimal('0'))
    DepotPrice.objects.filter(depot=depot, fuel_type=fuel_type).update(available_litres=after)
    invalidate_depot_pricing_cache(depot.pk)
    return before, after


def tier_for_quantity(depot, fuel_type, litres):
    tiers = list(DepotPrice.objects.filter(depot=depot, fuel_type=fuel_type))
    return select_tier(tiers, litres)


def price_per_litre_for_order(fuel_type, litres, depot=None, default_cents=2500):
    """
    Per-litre price used to quote a customer order: the matching tier at the
    selected depot, else the cheapest applicable tier at any active depot,
    else ``default_cents``.
    """
    if depot is not None:
        tier = tier_for_quantity(depot, fuel_type, litres)
        if tier is not None:
            return tier.price_cents

    best = None
    tiers_by_depot = {}
    for tier in DepotPrice.objects.filter(fuel_type=fuel_type, depot__is_active=True):
        tiers_by_depot.setdefault(tier.depot_id, []).append(tier)
    for tiers in tiers_by_depot.values():
        tier = select_tier(tiers, litres)
        if tier is not None and (best is None or tier.price_cents < best):
            best = tier.price_cents
    return best if best is not None else default_cents


@transaction.atomic
def set_driver_price(driver, fuel_type, price_cents, changed_by=None, notes=''):
    pricing = DriverPricing.objects.filter(driver=driver, fuel_type=fuel_type).first()
    old_price = None
    if pricing:
        old_price = pricing.fuel_price_per_litre_cents
        pricing.fuel_price_per_litre_cents = price_cents
        pricing.active = True
        pricing.save(update_fields=['fuel_price_per_litre_cents', 'active', 'updated_at'])
    else:
        pricing = DriverPricing.objects.create(driver=driver, fuel_type=fuel_type, fuel_price_per_litre_cents=price_cents)
    PricingHistory.objects.create(
        entity_type='driver', driver=driver, fuel_type=fuel_type,
        old_price_cents=old_price, new_price_cents=price_cents, notes=notes or '', changed_by=changed_by,
    )
    return pricing
