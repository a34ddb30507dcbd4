"""
Notification and realtime event delivery.

Every state change that a user should see produces a ``Notification`` (the
bell) and/or a ``RealtimeEvent`` (the polled push channel). Both are side
effects: failures are logged and never propagate into the operation that
triggered them.
"""
import logging
from django.db import transaction
from django.utils import timezone
from .models import Notification, RealtimeEvent

logger = logging.getLogger('fuelhub.notifications')


def publish_event(user, event_type, payload=None):
    """Queue a realtime event for ``user``; returns None on failure"""
    if user is None:
        return None
    try:
        with transaction.atomic():
            return RealtimeEvent.objects.create(user=user, type=event_type, payload=payload or {})
    except Exception as e:
        logger.error(f"Failed to publish {event_type} event to user {user.pk}: {e}", exc_info=True)
        return None


class NotificationService:
    """Creates notifications and mirrors them onto the realtime feed"""

    def create_and_send(self, user, notification_type, title, message, data=None, priority='medium'):
        notification = Notification.objects.create(
            user=user,
            type=notification_type,
            title=title,
            message=message,
            data=data or {},
            priority=priority,
        )
        publish_event(user, 'notification', {
            'id': notification.pk,
            'type': notification_type,
            'title': title,
            'message': message,
            'priority': priority,
            'data': notification.data,
        })
        logger.debug(f"Notification {notification_type} sent to user {user.pk}")
        return notification

    def mark_read(self, notification):
        if not notification.read:
            notification.read = True
            notification.read_at = timezone.now()
            notification.save(update_fields=['read', 'read_at'])
        return notification

    def mark_all_read(self, user):
        return Notification.objects.filter(user=user, read=False).update(read=True, read_at=timezone.now())

    # Customer order events
    def order_created(self, order):
        return notify_safely(
            order.customer.user, 'order_created', 'Order placed',
            f'Your order for {order.litres}L of {order.fuel_type.label} has been placed. We are finding a driver.',
            data={'order_id': order.pk}
        )

    def dispatch_offer_received(self, offer):
        return notify_safely(
            offer.driver.user, 'dispatch_offer_received', 'New delivery request',
            f'New delivery request: {offer.order.litres}L of {offer.order.fuel_type.label}.',
            data={'order_id': offer.order_id, 'offer_id': offer.pk}, priority='high'
        )

    def driver_quote_received(self, offer):
        return notify_safely(
            offer.order.customer.user, 'driver_quote_received', 'New delivery quote',
            f'{offer.driver.user.display_name} sent a quote for your order.',
            data={'order_id': offer.order_id, 'offer_id': offer.pk}, priority='high'
        )

    def customer_accepted_offer(self, offer):
        return notify_safely(
            offer.driver.user, 'customer_accepted_offer', 'Quote accepted',
            'The customer accepted your quote. The delivery is now assigned to you.',
            data={'order_id': offer.order_id, 'offer_id': offer.pk}, priority='high'
        )

    def customer_declined_offer(self, offer):
        return notify_safely(
            offer.driver.user, 'customer_declined_offer', 'Quote declined',
            'The customer declined your quote.',
            data={'order_id': offer.order_id, 'offer_id': offer.pk}
        )

    def driver_assigned(self, order):
        return notify_safely(
            order.customer.user, 'driver_assigned', 'Driver assigned',
            f'{order.assigned_driver.user.display_name} will deliver your fuel.',
            data={'order_id': order.pk}, priority='high'
        )

    def driver_en_route(self, order):
        return notify_safely(
            order.customer.user, 'driver_en_route', 'Driver en route',
            'Your driver is on the way.',
            data={'order_id': order.pk}, priority='high'
        )

    def driver_picked_up(self, order):
        return notify_safely(
            order.customer.user, 'driver_picked_up', 'Fuel collected',
            'Your driver has collected the fuel and is heading to you.',
            data={'order_id': order.pk}
        )

    def delivery_complete(self, order):
        return notify_safely(
            order.customer.user, 'delivery_complete', 'Delivery complete',
            f'{order.litres}L of {order.fuel_type.label} has been delivered.',
            data={'order_id': order.pk}, priority='high'
        )

    def order_cancelled(self, order, recipient):
        return notify_safely(
            recipient, 'order_cancelled', 'Order cancelled',
            f'Order #{order.pk} has been cancelled.',
            data={'order_id': order.pk}
        )

    # Driver depot order events
    def depot_order_event(self, depot_order, recipient, notification_type, title, message, priority='medium'):
        return notify_safely(
            recipient, notification_type, title, message,
            data={'depot_order_id': depot_order.pk, 'status': depot_order.status}, priority=priority
        )

    def stock_low(self, depot, fuel_type, remaining_litres):
        return notify_safely(
            depot.supplier.owner, 'stock_low', 'Low stock',
            f'{fuel_type.label} at {depot.name} is down to {remaining_litres}L.',
            data={'depot_id': depot.pk, 'fuel_type_id': fuel_type.pk, 'available_litres': str(remaining_litres)},
            priority='high'
        )

    def new_message(self, message, recipient):
        return notify_safely(
            recipient, 'new_message', 'New message',
            f'{message.sender.display_name}: {message.body[:100]}',
            data={'thread_id': message.thread_id, 'order_id': message.thread.order_id}
        )


notification_service = NotificationService()


def notify_safely(user, notification_type, title, message, data=None, priority='medium'):
    """Send a notification without ever failing the caller"""
    if user is None:
        return None
    try:
        with transaction.atomic():
            return notification_service.create_and_send(user, notification_type, title, message, data, priority)
    except Exception as e:
        logger.error(f"Failed to send {notification_type} notification to user {user.pk}: {e}", exc_info=True)
        return None
