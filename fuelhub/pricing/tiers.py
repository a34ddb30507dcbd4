"""
Tier selection and order quoting.

Tiers are sorted by ``min_litres``; a tier's range runs up to one litre
below the next tier's minimum, and the last tier is open-ended.
"""
from decimal import Decimal, ROUND_HALF_UP


def round_cents(value):
    """Round a Decimal amount of cents half-up to an int"""
    return int(Decimal(value).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def format_litres(value):
    value = Decimal(value)
    if value == value.to_integral_value():
        return str(int(value))
    return str(value.normalize())


def sort_tiers(tiers):
    return sorted(tiers, key=lambda t: Decimal(t.min_litres))


def select_tier(tiers, litres):
    """
    Pick the tier with the highest ``min_litres`` not above ``litres``.
    Falls back to the lowest tier when the quantity is below every minimum.
    Returns None for an empty list.
    """
    ordered = sort_tiers(tiers)
    if not ordered:
        return None
    litres = Decimal(litres)
    eligible = [t for t in ordered if Decimal(t.min_litres) <= litres]
    return eligible[-1] if eligible else ordered[0]


def tier_ranges(tiers):
    """Sorted tiers paired with their ``(min, max)`` litre range; max is None for the last tier"""
    ordered = sort_tiers(tiers)
    result = []
    for index, tier in enumerate(ordered):
        min_litres = Decimal(tier.min_litres)
        max_litres = None
        if index + 1 < len(ordered):
            next_min = Decimal(ordered[index + 1].min_litres)
            if next_min > min_litres:
                max_litres = next_min - 1
        if max_litres is None:
            label = f"{format_litres(min_litres)}L+"
        else:
            label = f"{format_litres(min_litres)}L - {format_litres(max_litres)}L"
        result.append((tier, max_litres, label))
    return result


def quote_order(litres, price_per_litre_cents, app_settings):
    """
    Price breakdown for a customer order, all values in cents.

    fuel = litres x price per litre, delivery = base delivery fee,
    service = percentage of fuel with a floor of the minimum service fee.
    """
    fuel_price_cents = round_cents(Decimal(litres) * Decimal(price_per_litre_cents))
    delivery_fee_cents = int(app_settings.base_delivery_fee_cents)
    service_fee_cents = round_cents(Decimal(fuel_price_cents) * Decimal(app_settings.service_fee_percent) / Decimal('100'))
    service_fee_cents = max(service_fee_cents, int(app_settings.service_fee_min_cents))
    return {
        'price_per_litre_cents': int(price_per_litre_cents),
        'fuel_price_cents': fuel_price_cents,
        'delivery_fee_cents': delivery_fee_cents,
        'service_fee_cents': service_fee_cents,
        'total_cents': fuel_price_cents + delivery_fee_cents + service_fee_cents,
    }
