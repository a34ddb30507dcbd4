from django.conf import settings
from django.db import models
from fuelhub.catalog.models import FuelType
from fuelhub.locations.models import Depot
from fuelhub.parties.models import Driver


class DriverDepotOrder(models.Model):
    """Fuel a driver buys from a supplier depot for collection"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('pending_payment', 'Pending Payment'),
        ('paid', 'Paid'),
        ('ready_for_pickup', 'Ready for Pickup'),
        ('awaiting_signature', 'Awaiting Signature'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
        ('rejected', 'Rejected'),
    ]
    PAYMENT_STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('paid', 'Paid'),
        ('payment_verified', 'Payment Verified'),
        ('payment_failed', 'Payment Failed'),
    ]
    PAYMENT_METHOD_CHOICES = [
        ('bank_transfer', 'Bank Transfer'),
        ('online_payment', 'Online Payment'),
        ('pay_outside_app', 'Pay Outside App'),
    ]

    driver = models.ForeignKey(Driver, on_delete=models.CASCADE, related_name='depot_orders')
    depot = models.ForeignKey(Depot, on_delete=models.PROTECT, related_name='depot_orders')
    fuel_type = models.ForeignKey(FuelType, on_delete=models.PROTECT, related_name='depot_orders')
    litres = models.DecimalField(max_digits=10, decimal_places=2)
    price_per_litre_cents = models.PositiveIntegerField()
    total_price_cents = models.PositiveIntegerField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    payment_status = models.CharField(max_length=20, choices=PAYMENT_STATUS_CHOICES, default='pending')
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, blank=True)
    payment_proof_url = models.URLField(max_length=1000, blank=True)
    pickup_date = models.DateTimeField()
    notes = models.TextField(blank=True)
    driver_signature_url = models.URLField(max_length=1000, blank=True)
    driver_signed_at = models.DateTimeField(null=True, blank=True)
    supplier_signature_url = models.URLField(max_length=1000, blank=True)
    supplier_signed_at = models.DateTimeField(null=True, blank=True)
    actual_litres_delivered = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    payment_confirmed_at = models.DateTimeField(null=True, blank=True)
    payment_confirmed_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='confirmed_depot_payments')
    released_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.reference

    @property
    def reference(self):
        return f"DDO-{self.pk:06d}" if self.pk else "DDO-NEW"

    class Meta:
        db_table = 'driver_depot_orders'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['depot', 'status'], name='depot_order_depot_status_idx'),
            models.Index(fields=['driver', 'status'], name='depot_order_drv_status_idx'),
        ]
