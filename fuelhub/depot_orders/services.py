"""
Driver depot order lifecycle.

pending -> pending_payment (supplier accepts) -> paid / ready_for_pickup
(driver pays, supplier verifies) -> awaiting_signature (supplier releases
fuel, stock deducted) -> completed (driver confirms receipt).
"""
import logging
from decimal import Decimal
from django.db import transaction
from django.utils import timezone
from fuelhub.notifications.services import notification_service, publish_event
from fuelhub.pricing.models import DepotPrice
from fuelhub.pricing.services import reduce_stock
from fuelhub.pricing.tiers import select_tier, round_cents
from .models import DriverDepotOrder

logger = logging.getLogger('fuelhub.depot_orders')

LOW_STOCK_RATIO = Decimal('0.1')


class DepotOrderError(Exception):
    """Rejected depot order operation; ``status_code`` is the HTTP status to return"""

    def __init__(self, message, status_code=400):
        super().__init__(message)
        self.status_code = status_code


def _lock(order):
    """Reload the order row under a lock; status checks run against this copy"""
    return DriverDepotOrder.objects.select_for_update(of=('self',)).get(pk=order.pk)


def _require_status(order, *allowed, action='perform this action'):
    if order.status not in allowed:
        raise DepotOrderError(f"Order must be {' or '.join(allowed)} to {action}. Current: {order.status}")


def _notify_driver(order, notification_type, title, message, priority='medium'):
    notification_service.depot_order_event(order, order.driver.user, notification_type, title, message, priority)
    publish_event(order.driver.user, notification_type, {'depot_order_id': order.pk, 'status': order.status})


def _notify_supplier(order, notification_type, title, message, priority='medium'):
    owner = order.depot.supplier.owner
    notification_service.depot_order_event(order, owner, notification_type, title, message, priority)
    publish_event(owner, notification_type, {'depot_order_id': order.pk, 'status': order.status})


# Driver operations

def create_depot_order(driver, depot, fuel_type, litres, pickup_date, notes=''):
    if not depot.is_active:
        raise DepotOrderError('Depot is not active')
    litres = Decimal(litres)
    if litres <= 0:
        raise DepotOrderError('Invalid litres value')
    if pickup_date <= timezone.now():
        raise DepotOrderError('Pickup date must be in the future')

    tiers = list(DepotPrice.objects.filter(depot=depot, fuel_type=fuel_type))
    tier = select_tier(tiers, litres)
    if tier is None:
        raise DepotOrderError('This fuel type is not available at this depot or pricing is not set')

    stock = Decimal(tier.available_litres) if tier.available_litres is not None else Decimal('0')
    if stock > 0 and litres >= stock:
        raise DepotOrderError(f'You can only order less than {stock}L. Available stock: {stock}L')

    order = DriverDepotOrder.objects.create(
        driver=driver,
        depot=depot,
        fuel_type=fuel_type,
        litres=litres,
        price_per_litre_cents=tier.price_cents,
        total_price_cents=round_cents(Decimal(tier.price_cents) * litres),
        pickup_date=pickup_date,
        notes=notes or '',
    )
    logger.info(f"Depot order {order.pk} placed by driver {driver.pk} at depot {depot.pk}: {litres}L @ {tier.price_cents}c")
    _notify_supplier(
        order, 'depot_order_placed', 'New fuel order',
        f'{driver.user.display_name} ordered {litres}L of {fuel_type.label} for collection at {depot.name}.',
        priority='high',
    )
    return order


@transaction.atomic
def cancel_depot_order(order):
    order = _lock(order)
    if order.status != 'pending':
        raise DepotOrderError('Only pending orders can be cancelled')
    order.status = 'cancelled'
    order.save(update_fields=['status', 'updated_at'])
    _notify_supplier(order, 'depot_order_cancelled', 'Order cancelled',
                     f'Order {order.reference} was cancelled by the driver.')
    return order


@transaction.atomic
def submit_payment(order, payment_method, payment_proof_url=''):
    order = _lock(order)
    _require_status(order, 'pending_payment', action='submit payment')
    if payment_method == 'bank_transfer' and not payment_proof_url:
        raise DepotOrderError('Payment proof is required for bank transfers')

    order.payment_method = payment_method
    order.payment_proof_url = payment_proof_url or ''
    if payment_method == 'online_payment':
        order.status = 'ready_for_pickup'
        order.payment_status = 'payment_verified'
        order.payment_confirmed_at = timezone.now()
    else:
        order.status = 'paid'
        order.payment_status = 'paid'
    order.save()
    _notify_supplier(order, 'payment_submitted', 'Payment submitted',
                     f'Payment for order {order.reference} was submitted ({order.get_payment_method_display()}).')
    return order


def sign_as_driver(order, signature_url):
    order.driver_signature_url = signature_url
    order.driver_signed_at = timezone.now()
    order.save(update_fields=['driver_signature_url', 'driver_signed_at', 'updated_at'])
    return order


@transaction.atomic
def confirm_receipt(order):
    """Driver confirms collection; completes the order"""
    order = _lock(order)
    _require_status(order, 'awaiting_signature', action='confirm receipt')
    now = timezone.now()
    order.status = 'completed'
    order.completed_at = now
    if not order.driver_signed_at:
        order.driver_signed_at = now
    order.save()
    logger.info(f"Depot order {order.pk} completed")
    _notify_supplier(order, 'depot_order_completed', 'Order completed',
                     f'{order.driver.user.display_name} confirmed receipt of order {order.reference}.')
    return order


# Supplier operations

@transaction.atomic
def accept_depot_order(order):
    order = _lock(order)
    _require_status(order, 'pending', action='accept')
    order.status = 'pending_payment'
    order.save(update_fields=['status', 'updated_at'])
    _notify_driver(order, 'depot_order_accepted', 'Order accepted',
                   f'{order.depot.name} accepted order {order.reference}. Please complete payment.', priority='high')
    return order


@transaction.atomic
def reject_depot_order(order, reason=''):
    order = _lock(order)
    _require_status(order, 'pending', action='reject')
    order.status = 'rejected'
    if reason:
        order.notes = f"{order.notes}\nRejection reason: {reason}".strip()
    order.save(update_fields=['status', 'notes', 'updated_at'])
    _notify_driver(order, 'depot_order_rejected', 'Order rejected',
                   f'{order.depot.name} rejected order {order.reference}.' + (f' Reason: {reason}' if reason else ''))
    return order


@transaction.atomic
def verify_payment(order, verified_by):
    order = _lock(order)
    if order.payment_status != 'paid':
        raise DepotOrderError(f"Payment status must be 'paid' to verify. Current: {order.payment_status}")
    if order.payment_method == 'online_payment':
        raise DepotOrderError('Online payments are automatically processed and do not require verification')
    if order.payment_method == 'bank_transfer' and not order.payment_proof_url:
        raise DepotOrderError('Payment proof is required for bank transfer verification')
    order.payment_status = 'payment_verified'
    order.status = 'ready_for_pickup'
    order.payment_confirmed_at = timezone.now()
    order.payment_confirmed_by = verified_by
    order.save()
    _notify_driver(order, 'payment_verified', 'Payment verified',
                   f'Payment for order {order.reference} was verified. Your fuel is ready for pickup.', priority='high')
    return order


@transaction.atomic
def reject_payment(order):
    order = _lock(order)
    if order.payment_status != 'paid':
        raise DepotOrderError(f"Payment status must be 'paid' to reject. Current: {order.payment_status}")
    if order.payment_method == 'bank_transfer' and not order.payment_proof_url:
        raise DepotOrderError('Payment proof is required for bank transfer rejection')
    order.payment_status = 'payment_failed'
    order.status = 'pending_payment'
    order.save(update_fields=['payment_status', 'status', 'updated_at'])
    _notify_driver(order, 'payment_rejected', 'Payment not received',
                   f'The supplier could not confirm payment for order {order.reference}. Please pay again.',
                   priority='high')
    return order


@transaction.atomic
def sign_as_supplier(order, signature_url):
    order = _lock(order)
    if order.payment_method not in ('online_payment', 'pay_outside_app'):
        if order.payment_status not in ('payment_verified', 'paid'):
            raise DepotOrderError('Payment must be verified before signing')
    order.supplier_signature_url = signature_url
    order.supplier_signed_at = timezone.now()
    if order.driver_signature_url and order.payment_method != 'online_payment' and order.status == 'paid':
        order.status = 'ready_for_pickup'
    order.save()
    return order


def release_fuel(order):
    """Hand the fuel over: deduct stock and wait for the driver's signature"""
    with transaction.atomic():
        order = _lock(order)
        _require_status(order, 'ready_for_pickup', action='release')
        order.status = 'awaiting_signature'
        order.released_at = timezone.now()
        order.save(update_fields=['status', 'released_at', 'updated_at'])
        before, after = reduce_stock(order.depot, order.fuel_type, order.litres)

    logger.info(f"Depot order {order.pk} released; stock {before} -> {after}")
    _notify_driver(order, 'fuel_released', 'Fuel released',
                   f'{order.litres}L of {order.fuel_type.label} was released at {order.depot.name}. Please sign to confirm receipt.',
                   priority='high')
    if before is not None and before > 0 and after < before * LOW_STOCK_RATIO:
        notification_service.stock_low(order.depot, order.fuel_type, after)
    return order


@transaction.atomic
def confirm_delivery(order, actual_litres=None):
    order = _lock(order)
    _require_status(order, 'awaiting_signature', action='confirm delivery')
    order.actual_litres_delivered = actual_litres
    order.save(update_fields=['actual_litres_delivered', 'updated_at'])
    publish_event(order.driver.user, 'driver_depot_delivery_confirmed', {
        'depot_order_id': order.pk,
        'actual_litres': str(actual_litres) if actual_litres is not None else None,
    })
    return order
