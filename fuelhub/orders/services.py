"""
Customer order lifecycle.

Views call these functions with validated data; every rejected transition
raises ``OrderError`` carrying the HTTP status the view should answer with.
"""
import logging
from decimal import Decimal
from django.db import transaction
from django.utils import timezone
from fuelhub.chat.services import ensure_thread, close_thread
from fuelhub.core.models import AppSetting
from fuelhub.locations.geo import haversine_km
from fuelhub.notifications.services import notification_service, publish_event
from fuelhub.pricing.services import price_per_litre_for_order
from fuelhub.pricing.tiers import quote_order, round_cents
from .dispatch import create_dispatch_offers
from .emails import send_driver_assigned_email, send_delivery_completed_emails
from .models import Order, DispatchOffer

logger = logging.getLogger('fuelhub.orders')

EDITABLE_STATES = ['created', 'awaiting_payment']
NON_CANCELLABLE_STATES = ['delivered', 'cancelled', 'refunded', 'picked_up', 'en_route']
OPEN_OFFER_STATES = ['offered', 'pending_customer']
ACTIVE_DRIVER_STATES = ['assigned', 'en_route', 'picked_up']


class OrderError(Exception):
    """Rejected order operation; ``status_code`` is the HTTP status to return"""

    def __init__(self, message, status_code=400):
        super().__init__(message)
        self.status_code = status_code


def _apply_quote(order, app_settings=None):
    app_settings = app_settings or AppSetting.load()
    price = price_per_litre_for_order(
        order.fuel_type, order.litres, depot=order.selected_depot,
        default_cents=app_settings.default_price_per_litre_cents,
    )
    quote = quote_order(order.litres, price, app_settings)
    for field, value in quote.items():
        setattr(order, field, value)
    return quote


def _broadcast_order(order, event_type='order_updated'):
    payload = {'order_id': order.pk, 'state': order.state}
    publish_event(order.customer.user, event_type, payload)
    if order.assigned_driver_id:
        publish_event(order.assigned_driver.user, event_type, payload)


def _check_ownership(customer, delivery_address=None, payment_method=None):
    if delivery_address is not None and delivery_address.customer_id != customer.pk:
        raise OrderError('Delivery address not found', 404)
    if payment_method is not None and (payment_method.customer_id != customer.pk or not payment_method.is_active):
        raise OrderError('Payment method not found', 404)


# Customer operations

def create_order(customer, data):
    """Place an order, price it and send dispatch offers"""
    delivery_address = data['delivery_address']
    payment_method = data.get('payment_method')
    _check_ownership(customer, delivery_address, payment_method)
    if not data.get('terms_accepted'):
        raise OrderError('You must accept the terms and conditions')

    now = timezone.now()
    with transaction.atomic():
        order = Order(
            customer=customer,
            fuel_type=data['fuel_type'],
            litres=data['litres'],
            delivery_address=delivery_address,
            drop_lat=delivery_address.lat,
            drop_lng=delivery_address.lng,
            from_time=data.get('from_time'),
            to_time=data.get('to_time'),
            priority_level=data.get('priority_level', 'medium'),
            access_instructions=data.get('access_instructions') or delivery_address.access_instructions,
            vehicle_registration=data.get('vehicle_registration', ''),
            equipment_type=data.get('equipment_type', ''),
            tank_capacity=data.get('tank_capacity'),
            payment_method=payment_method,
            terms_accepted=True,
            terms_accepted_at=now,
            signature_data=data.get('signature_data', ''),
            selected_depot=data.get('selected_depot'),
        )
        _apply_quote(order)
        order.save()
        logger.info(f"Order {order.pk} created by customer {customer.pk}: {order.litres}L {order.fuel_type.code}, total {order.total_cents}c")
        create_dispatch_offers(order, now=now)

    notification_service.order_created(order)
    publish_event(customer.user, 'order_created', {'order_id': order.pk, 'state': order.state})
    return order


def update_order(order, data):
    """Edit an unassigned order; repriced when fuel type, litres or depot change"""
    if order.state not in EDITABLE_STATES:
        raise OrderError('Order cannot be modified in current state')
    _check_ownership(order.customer, data.get('delivery_address'), data.get('payment_method'))

    reprice = False
    for field, value in data.items():
        if field in ('fuel_type', 'litres', 'selected_depot'):
            reprice = True
        setattr(order, field, value)
    if 'delivery_address' in data and data['delivery_address'] is not None:
        order.drop_lat = data['delivery_address'].lat
        order.drop_lng = data['delivery_address'].lng

    if reprice:
        _apply_quote(order)
    order.save()
    _broadcast_order(order)
    return order


@transaction.atomic
def cancel_order(order, cancelled_by=None):
    if order.state in NON_CANCELLABLE_STATES:
        raise OrderError('Order cannot be cancelled - already in progress or completed')

    now = timezone.now()
    order.state = 'cancelled'
    order.cancelled_at = now
    order.regular_dispatch_at = None
    order.save(update_fields=['state', 'cancelled_at', 'regular_dispatch_at', 'updated_at'])

    open_offers = list(order.offers.filter(state__in=OPEN_OFFER_STATES).select_related('driver__user'))
    order.offers.filter(state__in=OPEN_OFFER_STATES).update(state='timeout', updated_at=now)
    close_thread(order)

    recipients = {offer.driver.user for offer in open_offers}
    if order.assigned_driver_id:
        recipients.add(order.assigned_driver.user)
    for user in recipients:
        notification_service.order_cancelled(order, user)
        publish_event(user, 'order_cancelled', {'order_id': order.pk})
    publish_event(order.customer.user, 'order_updated', {'order_id': order.pk, 'state': order.state})

    by = cancelled_by.username if cancelled_by else 'system'
    logger.info(f"Order {order.pk} cancelled by {by}; {len(open_offers)} open offers withdrawn")
    return order


def accept_offer(order, offer_id, confirmed_delivery_time=None):
    """
    Customer accepts a driver's quote. The order is locked so two quotes
    cannot be accepted concurrently.
    """
    with transaction.atomic():
        order = Order.objects.select_for_update().get(pk=order.pk)
        if order.state not in EDITABLE_STATES or order.assigned_driver_id is not None:
            raise OrderError('Order already has a driver or can no longer be assigned', 409)
        offer = DispatchOffer.objects.select_for_update().filter(pk=offer_id, order=order).first()
        if offer is None:
            raise OrderError('Offer not found', 404)
        if offer.state != 'pending_customer':
            raise OrderError('Offer is not awaiting your response', 409)

        now = timezone.now()
        offer.state = 'accepted'
        offer.responded_at = now
        offer.save(update_fields=['state', 'responded_at', 'updated_at'])

        losing_offers = list(
            order.offers.filter(state__in=OPEN_OFFER_STATES).exclude(pk=offer.pk).select_related('driver__user')
        )
        order.offers.filter(state__in=OPEN_OFFER_STATES).exclude(pk=offer.pk).update(
            state='rejected', responded_at=now, updated_at=now
        )

        order.assigned_driver = offer.driver
        order.assigned_at = now
        order.state = 'assigned'
        order.regular_dispatch_at = None
        order.confirmed_delivery_time = confirmed_delivery_time or offer.proposed_delivery_time
        if offer.proposed_delivery_fee_cents is not None:
            order.delivery_fee_cents = offer.proposed_delivery_fee_cents
            order.total_cents = order.fuel_price_cents + order.delivery_fee_cents + order.service_fee_cents
        order.save()
        ensure_thread(order)

    logger.info(f"Order {order.pk} assigned to driver {offer.driver_id} via offer {offer.pk}")
    notification_service.customer_accepted_offer(offer)
    notification_service.driver_assigned(order)
    for losing in losing_offers:
        notification_service.customer_declined_offer(losing)
    publish_event(offer.driver.user, 'offer_accepted', {'order_id': order.pk, 'offer_id': offer.pk})
    _broadcast_order(order)
    send_driver_assigned_email(order)
    return order, offer


def decline_offer(order, offer_id):
    with transaction.atomic():
        Order.objects.select_for_update().get(pk=order.pk)
        offer = DispatchOffer.objects.select_for_update().filter(pk=offer_id, order=order).first()
        if offer is None:
            raise OrderError('Offer not found', 404)
        if offer.state != 'pending_customer':
            raise OrderError('Offer is not awaiting your response', 409)
        offer.state = 'rejected'
        offer.responded_at = timezone.now()
        offer.save(update_fields=['state', 'responded_at', 'updated_at'])
    notification_service.customer_declined_offer(offer)
    publish_event(offer.driver.user, 'offer_declined', {'order_id': order.pk, 'offer_id': offer.pk})
    return offer


# Driver operations

def quote_delivery_fee(driver, order, price_per_km_cents, app_settings):
    """Distance-based delivery fee from the driver's position, never below the base fee"""
    base = int(app_settings.base_delivery_fee_cents)
    if not driver.has_location or order.drop_lat is None or order.drop_lng is None:
        return base
    distance = haversine_km(driver.current_lat, driver.current_lng, order.drop_lat, order.drop_lng)
    return max(base, round_cents(Decimal(str(distance)) * Decimal(price_per_km_cents)))


def submit_quote(driver, offer_id, proposed_delivery_time=None, price_per_km_cents=None, notes=None):
    """Driver accepts a dispatch offer by sending a quote to the customer"""
    with transaction.atomic():
        offer = DispatchOffer.objects.select_for_update().select_related('order').filter(pk=offer_id, driver=driver).first()
        if offer is None:
            raise OrderError('Offer not found', 404)
        now = timezone.now()
        if offer.expires_at < now and offer.state == 'offered':
            raise OrderError('Offer has expired')
        if offer.state not in OPEN_OFFER_STATES:
            raise OrderError('Offer is no longer available (may have been accepted by another driver or expired)', 409)
        order = offer.order
        if order.state not in EDITABLE_STATES or order.assigned_driver_id is not None:
            raise OrderError('Order is no longer available to accept. Another driver may have been selected.', 409)

        app_settings = AppSetting.load()
        if price_per_km_cents is None:
            price_per_km_cents = offer.proposed_price_per_km_cents or app_settings.price_per_km_cents

        offer.proposed_price_per_km_cents = price_per_km_cents
        offer.proposed_delivery_fee_cents = quote_delivery_fee(driver, order, price_per_km_cents, app_settings)
        if proposed_delivery_time is not None:
            offer.proposed_delivery_time = proposed_delivery_time
        if notes is not None:
            offer.proposed_notes = notes
        offer.state = 'pending_customer'
        offer.responded_at = now
        offer.save()
        order.save(update_fields=['updated_at'])

    logger.info(f"Driver {driver.pk} quoted order {order.pk} at {price_per_km_cents}c/km")
    notification_service.driver_quote_received(offer)
    publish_event(order.customer.user, 'offer_received', {'order_id': order.pk, 'offer_id': offer.pk})
    return offer


@transaction.atomic
def reject_offer(driver, offer_id):
    offer = DispatchOffer.objects.select_for_update().filter(pk=offer_id, driver=driver).first()
    if offer is None:
        raise OrderError('Offer not found', 404)
    if offer.state != 'offered':
        raise OrderError('Only pending offers can be rejected')
    offer.state = 'rejected'
    offer.responded_at = timezone.now()
    offer.save(update_fields=['state', 'responded_at', 'updated_at'])
    logger.info(f"Driver {driver.pk} rejected offer {offer.pk}")
    return offer


def _assigned_order(driver, order_id):
    order = Order.objects.select_for_update().filter(pk=order_id, assigned_driver=driver).first()
    if order is None:
        raise OrderError('Order not found or not assigned to you', 404)
    return order


def start_delivery(driver, order_id):
    with transaction.atomic():
        order = _assigned_order(driver, order_id)
        if order.state != 'assigned':
            raise OrderError('Delivery can only be started when the order is assigned', 409)
        order.state = 'en_route'
        order.save(update_fields=['state', 'updated_at'])
        driver.availability_status = 'on_delivery'
        driver.save(update_fields=['availability_status', 'updated_at'])
    notification_service.driver_en_route(order)
    _broadcast_order(order)
    return order


def mark_picked_up(driver, order_id):
    with transaction.atomic():
        order = _assigned_order(driver, order_id)
        if order.state != 'en_route':
            raise OrderError('Fuel can only be marked as picked up when en route', 409)
        order.state = 'picked_up'
        order.save(update_fields=['state', 'updated_at'])
    notification_service.driver_picked_up(order)
    _broadcast_order(order)
    return order


def complete_delivery(driver, order_id, signature_data, signature_name=''):
    if not signature_data:
        raise OrderError('Customer signature is required to complete the delivery')
    with transaction.atomic():
        order = _assigned_order(driver, order_id)
        if order.state != 'picked_up':
            raise OrderError('Order must be picked up before completion', 409)
        now = timezone.now()
        order.state = 'delivered'
        order.delivered_at = now
        order.delivery_signature_data = signature_data
        order.delivery_signature_name = signature_name or ''
        order.delivery_signed_at = now
        order.save()
        driver.availability_status = 'available'
        driver.save(update_fields=['availability_status', 'updated_at'])
        close_thread(order)

    logger.info(f"Order {order.pk} delivered by driver {driver.pk}")
    notification_service.delivery_complete(order)
    _broadcast_order(order)
    send_delivery_completed_emails(order)
    return order


def driver_stats(driver):
    today = timezone.localdate()
    delivered = Order.objects.filter(assigned_driver=driver, state='delivered')
    earnings = sum(delivered.values_list('delivery_fee_cents', flat=True))
    return {
        'active_jobs': Order.objects.filter(assigned_driver=driver, state__in=ACTIVE_DRIVER_STATES).count(),
        'completed_jobs': delivered.count(),
        'total_earnings_cents': earnings,
        'today_deliveries': delivered.filter(delivered_at__date=today).count(),
    }
