from django.conf import settings
from django.db import models


class Notification(models.Model):
    """In-app notification shown in the notification bell"""
    TYPE_CHOICES = [
        ('order_created', 'Order Created'),
        ('order_updated', 'Order Updated'),
        ('order_cancelled', 'Order Cancelled'),
        ('dispatch_offer_received', 'Dispatch Offer Received'),
        ('driver_quote_received', 'Driver Quote Received'),
        ('customer_accepted_offer', 'Customer Accepted Offer'),
        ('customer_declined_offer', 'Customer Declined Offer'),
        ('driver_assigned', 'Driver Assigned'),
        ('driver_en_route', 'Driver En Route'),
        ('driver_picked_up', 'Fuel Picked Up'),
        ('delivery_complete', 'Delivery Complete'),
        ('depot_order_placed', 'Depot Order Placed'),
        ('depot_order_accepted', 'Depot Order Accepted'),
        ('depot_order_rejected', 'Depot Order Rejected'),
        ('depot_order_cancelled', 'Depot Order Cancelled'),
        ('payment_submitted', 'Payment Submitted'),
        ('payment_verified', 'Payment Verified'),
        ('payment_rejected', 'Payment Rejected'),
        ('fuel_released', 'Fuel Released'),
        ('depot_order_completed', 'Depot Order Completed'),
        ('stock_low', 'Stock Low'),
        ('new_message', 'New Message'),
        ('account_approved', 'Account Approved'),
        ('account_rejected', 'Account Rejected'),
        ('system_alert', 'System Alert'),
    ]
    PRIORITY_CHOICES = [
        ('low', 'Low'),
        ('medium', 'Medium'),
        ('high', 'High'),
        ('urgent', 'Urgent'),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='notifications')
    type = models.CharField(max_length=50, choices=TYPE_CHOICES)
    title = models.CharField(max_length=255)
    message = models.TextField()
    data = models.JSONField(default=dict, blank=True)
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='medium')
    read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.type} -> {self.user_id}"

    class Meta:
        db_table = 'notifications'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'read'], name='notif_user_read_idx'),
        ]


class RealtimeEvent(models.Model):
    """
    Per-user push event (order_updated, offer received, chat message...).
    Clients poll ``events/?after=<id>`` and invalidate cached queries for
    every event they receive.
    """
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='realtime_events')
    type = models.CharField(max_length=50)
    payload = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'realtime_events'
        ordering = ['id']
        indexes = [
            models.Index(fields=['user', 'id'], name='rt_event_user_id_idx'),
        ]
