"""Transactional emails for customer orders. Failures are logged, never raised."""
import logging
from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger('fuelhub.orders')


def _send(subject, body, recipient):
    if not recipient:
        return False
    try:
        send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, [recipient], fail_silently=False)
        return True
    except Exception as e:
        logger.error(f"Failed to send '{subject}' to {recipient}: {e}", exc_info=True)
        return False


def _address_line(order):
    if order.delivery_address:
        return order.delivery_address.full_address
    return f"{order.drop_lat}, {order.drop_lng}"


def send_driver_assigned_email(order):
    customer_user = order.customer.user
    driver_user = order.assigned_driver.user
    when = order.confirmed_delivery_time.strftime('%Y-%m-%d %H:%M') if order.confirmed_delivery_time else 'To be confirmed'
    body = (
        f"Hi {customer_user.display_name},\n\n"
        f"{driver_user.display_name} has accepted order {order.reference}.\n\n"
        f"Fuel: {order.litres}L {order.fuel_type.label}\n"
        f"Delivery address: {_address_line(order)}\n"
        f"Confirmed delivery time: {when}\n"
        f"Driver phone: {driver_user.phone or 'Not provided'}\n"
    )
    return _send(f"Driver Assigned - Order {order.reference}", body, customer_user.email)


def send_delivery_completed_emails(order):
    """Completion email to the customer and the driver; returns how many were sent"""
    sent = 0
    delivered = order.delivered_at.strftime('%Y-%m-%d %H:%M') if order.delivered_at else ''
    signed_by = f"Signed by: {order.delivery_signature_name}\n" if order.delivery_signature_name else ''
    details = (
        f"Fuel: {order.litres}L {order.fuel_type.label}\n"
        f"Delivery address: {_address_line(order)}\n"
        f"Delivered at: {delivered}\n"
        f"{signed_by}"
    )

    customer_user = order.customer.user
    customer_body = (
        f"Hi {customer_user.display_name},\n\n"
        f"Your fuel delivery (order {order.reference}) has been completed.\n\n{details}"
    )
    if _send(f"Order {order.reference} Delivered", customer_body, customer_user.email):
        sent += 1

    if order.assigned_driver:
        driver_user = order.assigned_driver.user
        driver_body = (
            f"Hi {driver_user.display_name},\n\n"
            f"You have completed delivery for order {order.reference}.\n\n{details}"
        )
        if _send(f"Order {order.reference} Delivered", driver_body, driver_user.email):
            sent += 1
    return sent
