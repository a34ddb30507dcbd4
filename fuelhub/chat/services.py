import logging
from django.utils import timezone
from fuelhub.notifications.services import notification_service, publish_event
from .models import ChatThread, ChatMessage

logger = logging.getLogger('fuelhub.chat')

FINAL_ORDER_STATES = ['delivered', 'cancelled', 'refunded']


class ChatError(Exception):
    pass


def ensure_thread(order):
    """Open (or reopen) the thread between the customer and the assigned driver"""
    if order.assigned_driver_id is None:
        raise ChatError('Cannot create chat thread - no driver assigned')
    thread, created = ChatThread.objects.get_or_create(
        order=order,
        defaults={
            'customer_user': order.customer.user,
            'driver_user': order.assigned_driver.user,
        },
    )
    if not created and (thread.closed or thread.driver_user_id != order.assigned_driver.user_id):
        thread.driver_user = order.assigned_driver.user
        thread.closed = False
        thread.closed_at = None
        thread.save(update_fields=['driver_user', 'closed', 'closed_at', 'updated_at'])
    if created:
        logger.info(f"Chat thread {thread.pk} opened for order {order.pk}")
        for user in (thread.customer_user, thread.driver_user):
            publish_event(user, 'chat_thread_opened', {'thread_id': thread.pk, 'order_id': order.pk})
    return thread


def close_thread(order):
    thread = ChatThread.objects.filter(order=order, closed=False).first()
    if thread is None:
        return None
    thread.closed = True
    thread.closed_at = timezone.now()
    thread.save(update_fields=['closed', 'closed_at', 'updated_at'])
    for user in (thread.customer_user, thread.driver_user):
        publish_event(user, 'chat_thread_closed', {'thread_id': thread.pk, 'order_id': order.pk})
    logger.info(f"Chat thread {thread.pk} closed for order {order.pk}")
    return thread


def send_message(thread, sender, body):
    if thread.closed:
        raise ChatError('This chat has been closed')
    message = ChatMessage.objects.create(thread=thread, sender=sender, body=body)
    thread.save(update_fields=['updated_at'])
    recipient = thread.other_participant(sender)
    notification_service.new_message(message, recipient)
    publish_event(recipient, 'chat_message', {
        'thread_id': thread.pk,
        'message_id': message.pk,
        'sender_id': sender.pk,
        'body': body,
    })
    return message


def mark_thread_read(thread, user):
    """Mark the other participant's messages as read; returns how many changed"""
    return thread.messages.filter(read_at__isnull=True).exclude(sender=user).update(read_at=timezone.now())


def unread_count(thread, user):
    return thread.messages.filter(read_at__isnull=True).exclude(sender=user).count()
