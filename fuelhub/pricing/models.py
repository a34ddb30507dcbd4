from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from decimal import Decimal
from fuelhub.catalog.models import FuelType
from fuelhub.locations.models import Depot
from fuelhub.parties.models import Driver


class DepotPrice(models.Model):
    """
    One pricing tier for a fuel type at a depot. A tier applies from
    ``min_litres`` upward; stock (``available_litres``) is shared by every
    tier of the same depot and fuel type.
    """
    depot = models.ForeignKey(Depot, on_delete=models.CASCADE, related_name='prices')
    fuel_type = models.ForeignKey(FuelType, on_delete=models.PROTECT, related_name='depot_prices')
    price_cents = models.PositiveIntegerField()
    min_litres = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'),
                                     validators=[MinValueValidator(Decimal('0'))])
    available_litres = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True,
                                           validators=[MinValueValidator(Decimal('0'))])
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.depot.name} - {self.fuel_type.label} from {self.min_litres}L @ {self.price_cents}c"

    class Meta:
        db_table = 'depot_prices'
        ordering = ['fuel_type', 'min_litres']
        constraints = [
            models.UniqueConstraint(fields=['depot', 'fuel_type', 'min_litres'], name='uniq_depot_fuel_min_litres'),
        ]


class DriverPricing(models.Model):
    """Per-litre fuel price a driver charges customers for a fuel type"""
    driver = models.ForeignKey(Driver, on_delete=models.CASCADE, related_name='pricing')
    fuel_type = models.ForeignKey(FuelType, on_delete=models.PROTECT, related_name='driver_prices')
    fuel_price_per_litre_cents = models.PositiveIntegerField()
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'driver_pricing'
        constraints = [
            models.UniqueConstraint(fields=['driver', 'fuel_type'], name='uniq_driver_fuel_pricing'),
        ]


class PricingHistory(models.Model):
    """Audit trail of depot and driver price changes"""
    ENTITY_TYPE_CHOICES = [
        ('depot', 'Depot'),
        ('driver', 'Driver'),
    ]

    entity_type = models.CharField(max_length=10, choices=ENTITY_TYPE_CHOICES)
    depot = models.ForeignKey(Depot, on_delete=models.CASCADE, null=True, blank=True, related_name='pricing_history')
    driver = models.ForeignKey(Driver, on_delete=models.CASCADE, null=True, blank=True, related_name='pricing_history')
    fuel_type = models.ForeignKey(FuelType, on_delete=models.CASCADE, related_name='pricing_history')
    min_litres = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    old_price_cents = models.PositiveIntegerField(null=True, blank=True)
    new_price_cents = models.PositiveIntegerField()
    notes = models.TextField(blank=True)
    changed_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='price_changes')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'pricing_history'
        ordering = ['-created_at']
