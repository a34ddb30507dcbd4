from django.db import models
from fuelhub.catalog.models import FuelType
from fuelhub.locations.models import Depot
from fuelhub.parties.models import Customer, Driver, DeliveryAddress, PaymentMethod


class Order(models.Model):
    """Customer fuel delivery order"""
    STATE_CHOICES = [
        ('created', 'Created'),
        ('awaiting_payment', 'Awaiting Payment'),
        ('paid', 'Paid'),
        ('assigned', 'Assigned'),
        ('en_route', 'En Route'),
        ('picked_up', 'Picked Up'),
        ('delivered', 'Delivered'),
        ('cancelled', 'Cancelled'),
        ('refunded', 'Refunded'),
    ]
    PRIORITY_CHOICES = [
        ('low', 'Low'),
        ('medium', 'Medium'),
        ('high', 'High'),
        ('urgent', 'Urgent'),
    ]

    customer = models.ForeignKey(Customer, on_delete=models.CASCADE, related_name='orders')
    fuel_type = models.ForeignKey(FuelType, on_delete=models.PROTECT, related_name='orders')
    litres = models.DecimalField(max_digits=10, decimal_places=2)
    delivery_address = models.ForeignKey(DeliveryAddress, on_delete=models.SET_NULL, null=True, blank=True, related_name='orders')
    drop_lat = models.FloatField(null=True, blank=True)
    drop_lng = models.FloatField(null=True, blank=True)
    from_time = models.DateTimeField(null=True, blank=True)
    to_time = models.DateTimeField(null=True, blank=True)
    priority_level = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='medium')
    access_instructions = models.TextField(blank=True)
    vehicle_registration = models.CharField(max_length=20, blank=True)
    equipment_type = models.CharField(max_length=50, blank=True)
    tank_capacity = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    payment_method = models.ForeignKey(PaymentMethod, on_delete=models.SET_NULL, null=True, blank=True, related_name='orders')
    terms_accepted = models.BooleanField(default=False)
    terms_accepted_at = models.DateTimeField(null=True, blank=True)
    signature_data = models.TextField(blank=True)

    price_per_litre_cents = models.PositiveIntegerField(default=0)
    fuel_price_cents = models.PositiveIntegerField(default=0)
    delivery_fee_cents = models.PositiveIntegerField(default=0)
    service_fee_cents = models.PositiveIntegerField(default=0)
    total_cents = models.PositiveIntegerField(default=0)

    selected_depot = models.ForeignKey(Depot, on_delete=models.SET_NULL, null=True, blank=True, related_name='customer_orders')
    state = models.CharField(max_length=20, choices=STATE_CHOICES, default='created')
    assigned_driver = models.ForeignKey(Driver, on_delete=models.SET_NULL, null=True, blank=True, related_name='assigned_orders')
    confirmed_delivery_time = models.DateTimeField(null=True, blank=True)
    regular_dispatch_at = models.DateTimeField(null=True, blank=True, help_text="When non-premium drivers become eligible for offers")

    assigned_at = models.DateTimeField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    delivery_signature_data = models.TextField(blank=True)
    delivery_signature_name = models.CharField(max_length=255, blank=True)
    delivery_signed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.reference

    @property
    def reference(self):
        return f"ORD-{self.pk:06d}" if self.pk else "ORD-NEW"

    class Meta:
        db_table = 'orders'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['state'], name='orders_state_idx'),
            models.Index(fields=['regular_dispatch_at'], name='orders_regular_dispatch_idx'),
        ]


class DispatchOffer(models.Model):
    """
    Delivery request sent to a driver. The driver answers with a quote
    (``pending_customer``) which the customer accepts or declines.
    """
    STATE_CHOICES = [
        ('offered', 'Offered'),
        ('pending_customer', 'Pending Customer'),
        ('accepted', 'Accepted'),
        ('rejected', 'Rejected'),
        ('timeout', 'Timed Out'),
    ]

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='offers')
    driver = models.ForeignKey(Driver, on_delete=models.CASCADE, related_name='offers')
    state = models.CharField(max_length=20, choices=STATE_CHOICES, default='offered')
    is_premium = models.BooleanField(default=False)
    expires_at = models.DateTimeField()
    proposed_delivery_time = models.DateTimeField(null=True, blank=True)
    proposed_price_per_km_cents = models.PositiveIntegerField(null=True, blank=True)
    proposed_delivery_fee_cents = models.PositiveIntegerField(null=True, blank=True)
    proposed_notes = models.CharField(max_length=500, blank=True)
    responded_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Offer {self.pk} ({self.state})"

    class Meta:
        db_table = 'dispatch_offers'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['order', 'driver'], name='uniq_offer_order_driver'),
        ]
        indexes = [
            models.Index(fields=['state', 'expires_at'], name='offers_state_expiry_idx'),
        ]
