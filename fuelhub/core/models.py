from decimal import Decimal

from django.contrib.auth.models import AbstractUser
from django.core.validators import MinValueValidator
from django.db import models


class User(AbstractUser):
    """Platform user; the role decides which profile and API surface applies"""
    ROLE_CHOICES = [
        ('customer', 'Customer'),
        ('driver', 'Driver'),
        ('supplier', 'Supplier'),
        ('admin', 'Admin'),
    ]

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='customer')
    full_name = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=20, blank=True, null=True)
    currency = models.CharField(max_length=3, default='ZAR')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'

    @property
    def display_name(self):
        return self.full_name or self.get_full_name() or self.username


class AppSetting(models.Model):
    """
    Marketplace-wide tunables. A single row (pk=1) is used; call
    ``AppSetting.load()`` rather than querying directly.
    """
    service_fee_percent = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal('5.00'),
        validators=[MinValueValidator(Decimal('0'))]
    )
    service_fee_min_cents = models.PositiveIntegerField(default=10000)
    base_delivery_fee_cents = models.PositiveIntegerField(default=35000)
    price_per_km_cents = models.PositiveIntegerField(default=5000)
    default_price_per_litre_cents = models.PositiveIntegerField(default=2500)
    premium_offer_minutes = models.PositiveIntegerField(default=5)
    regular_offer_minutes = models.PositiveIntegerField(default=15)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'app_settings'

    def __str__(self):
        return 'App settings'

    def save(self, *args, **kwargs):
        self.pk = 1
        super().save(*args, **kwargs)

    @classmethod
    def load(cls):
        obj, _ = cls.objects.get_or_create(pk=1)
        return obj


class AuditLog(models.Model):
    """Audit log for critical operations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('status_change', 'Status Change'),
        ('price_change', 'Price Change'),
        ('stock_change', 'Stock Change'),
        ('kyc_approve', 'KYC Approved'),
        ('kyc_reject', 'KYC Rejected'),
        ('document_review', 'Document Reviewed'),
        ('offer_accept', 'Offer Accepted'),
        ('payment_verify', 'Payment Verified'),
        ('settings_change', 'Settings Changed'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_reference = models.CharField(max_length=255, blank=True, null=True, help_text="Reference identifier (e.g., order reference)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_logs_created_9f1c2e_idx'),
            models.Index(fields=['action'], name='audit_logs_action_4b7d1a_idx'),
            models.Index(fields=['model_name'], name='audit_logs_model_n_6c2e8f_idx'),
            models.Index(fields=['object_reference'], name='audit_logs_object__8d3a5b_idx'),
        ]
