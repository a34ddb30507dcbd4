from django.db import models
from fuelhub.parties.models import Supplier, Driver


class Depot(models.Model):
    """Supplier fuel storage/collection site"""
    supplier = models.ForeignKey(Supplier, on_delete=models.CASCADE, related_name='depots')
    name = models.CharField(max_length=200)
    address_street = models.CharField(max_length=255, blank=True)
    address_city = models.CharField(max_length=100, blank=True)
    address_province = models.CharField(max_length=100, blank=True)
    address_postal_code = models.CharField(max_length=20, blank=True)
    lat = models.FloatField()
    lng = models.FloatField()
    open_hours = models.JSONField(default=dict, blank=True)
    notes = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'depots'
        ordering = ['name']


class DriverLocation(models.Model):
    """Position history reported by a driver's device"""
    driver = models.ForeignKey(Driver, on_delete=models.CASCADE, related_name='locations')
    latitude = models.FloatField()
    longitude = models.FloatField()
    accuracy = models.FloatField(null=True, blank=True)
    recorded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'driver_locations'
        ordering = ['-recorded_at']
        indexes = [
            models.Index(fields=['driver', '-recorded_at'], name='driver_loc_driver_rec_idx'),
        ]
