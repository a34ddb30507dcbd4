"""
Driver dispatch.

When an order is placed every eligible driver near the drop point receives a
``DispatchOffer``. Premium drivers get a head start: while any premium driver
is in range, regular drivers are deferred until ``order.regular_dispatch_at``
and picked up later by ``release_regular_offers`` (run from the
``process_dispatch`` management command).
"""
import logging
from datetime import timedelta
from django.db import transaction
from django.utils import timezone
from fuelhub.core.models import AppSetting
from fuelhub.locations.geo import haversine_miles
from fuelhub.notifications.services import notification_service, publish_event
from fuelhub.parties.models import Driver
from .models import Order, DispatchOffer

logger = logging.getLogger('fuelhub.orders')

DEFAULT_RADIUS_MILES = 20
OPEN_ORDER_STATES = ['created', 'awaiting_payment']


def eligible_drivers(order):
    """Available, KYC approved drivers whose job radius covers the drop point"""
    if order.drop_lat is None or order.drop_lng is None:
        return []
    candidates = Driver.objects.filter(
        availability_status='available',
        kyc_status='approved',
        current_lat__isnull=False,
        current_lng__isnull=False,
    ).select_related('user')

    result = []
    for driver in candidates:
        radius = driver.job_radius_preference_miles or DEFAULT_RADIUS_MILES
        distance = haversine_miles(driver.current_lat, driver.current_lng, order.drop_lat, order.drop_lng)
        if distance <= radius:
            result.append(driver)
    return result


def _offer_to(order, drivers, minutes, is_premium, now):
    already_offered = set(order.offers.values_list('driver_id', flat=True))
    expires_at = now + timedelta(minutes=minutes)
    offers = []
    for driver in drivers:
        if driver.pk in already_offered:
            continue
        offer = DispatchOffer.objects.create(
            order=order, driver=driver, expires_at=expires_at, is_premium=is_premium,
        )
        offers.append(offer)

    for offer in offers:
        notification_service.dispatch_offer_received(offer)
        publish_event(offer.driver.user, 'dispatch_offer', {
            'offer_id': offer.pk,
            'order_id': order.pk,
            'expires_at': offer.expires_at.isoformat(),
        })
    return offers


@transaction.atomic
def create_dispatch_offers(order, now=None):
    """Send offers for a newly placed order; returns the created offers"""
    now = now or timezone.now()
    app_settings = AppSetting.load()
    drivers = eligible_drivers(order)
    if not drivers:
        logger.info(f"No eligible drivers for order {order.pk}")
        return []

    premium = [d for d in drivers if d.premium_status == 'active']
    regular = [d for d in drivers if d.premium_status != 'active']

    if premium:
        offers = _offer_to(order, premium, app_settings.premium_offer_minutes, True, now)
        if regular:
            order.regular_dispatch_at = now + timedelta(minutes=app_settings.premium_offer_minutes)
            order.save(update_fields=['regular_dispatch_at', 'updated_at'])
        logger.info(f"Order {order.pk}: {len(offers)} premium offers, {len(regular)} regular drivers deferred")
        return offers

    offers = _offer_to(order, regular, app_settings.regular_offer_minutes, False, now)
    logger.info(f"Order {order.pk}: {len(offers)} regular offers")
    return offers


def release_regular_offers(now=None):
    """Offer deferred orders to regular drivers once the premium window has passed"""
    now = now or timezone.now()
    app_settings = AppSetting.load()
    due = Order.objects.filter(
        regular_dispatch_at__lte=now,
        state__in=OPEN_ORDER_STATES,
        assigned_driver__isnull=True,
    )
    released = 0
    for order in due:
        with transaction.atomic():
            regular = [d for d in eligible_drivers(order) if d.premium_status != 'active']
            released += len(_offer_to(order, regular, app_settings.regular_offer_minutes, False, now))
            order.regular_dispatch_at = None
            order.save(update_fields=['regular_dispatch_at', 'updated_at'])
    if released:
        logger.info(f"Released {released} regular offers")
    return released


def expire_old_offers(now=None):
    """Time out offers that drivers never answered"""
    now = now or timezone.now()
    expired = DispatchOffer.objects.filter(state='offered', expires_at__lt=now).update(
        state='timeout', updated_at=now
    )
    if expired:
        logger.info(f"Expired {expired} dispatch offers")
    return expired
