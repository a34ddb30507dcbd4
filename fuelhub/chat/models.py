from django.conf import settings
from django.db import models
from fuelhub.orders.models import Order


class ChatThread(models.Model):
    """Conversation between a customer and the driver assigned to their order"""
    order = models.OneToOneField(Order, on_delete=models.CASCADE, related_name='chat_thread')
    customer_user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='customer_chat_threads')
    driver_user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='driver_chat_threads')
    closed = models.BooleanField(default=False)
    closed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Chat for {self.order.reference}"

    def is_participant(self, user):
        return user.pk in (self.customer_user_id, self.driver_user_id)

    def other_participant(self, user):
        return self.driver_user if user.pk == self.customer_user_id else self.customer_user

    class Meta:
        db_table = 'chat_threads'
        ordering = ['-updated_at']


class ChatMessage(models.Model):
    thread = models.ForeignKey(ChatThread, on_delete=models.CASCADE, related_name='messages')
    sender = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='chat_messages')
    body = models.TextField(max_length=2000)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Message {self.pk} in thread {self.thread_id}"

    class Meta:
        db_table = 'chat_messages'
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['thread', 'read_at'], name='chat_msg_thread_read_idx'),
        ]
