from django.contrib import admin
from .models import DriverDepotOrder


@admin.register(DriverDepotOrder)
class DriverDepotOrderAdmin(admin.ModelAdmin):
    list_display = ['id', 'driver', 'depot', 'fuel_type', 'litres', 'total_price_cents', 'status', 'payment_status', 'pickup_date']
    list_filter = ['status', 'payment_status', 'payment_method']
    search_fields = ['driver__user__username', 'depot__name']
    ordering = ['-created_at']
    readonly_fields = ['created_at', 'updated_at']
