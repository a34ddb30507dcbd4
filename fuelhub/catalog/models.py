from django.db import models


class FuelType(models.Model):
    """Product sold on the marketplace (diesel, petrol grades, paraffin)"""
    code = models.CharField(max_length=50, unique=True)
    label = models.CharField(max_length=100)
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.label

    class Meta:
        db_table = 'fuel_types'
        ordering = ['label']
