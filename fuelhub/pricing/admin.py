from django.contrib import admin
from .models import DepotPrice, DriverPricing, PricingHistory


@admin.register(DepotPrice)
class DepotPriceAdmin(admin.ModelAdmin):
    list_display = ['depot', 'fuel_type', 'min_litres', 'price_cents', 'available_litres', 'updated_at']
    list_filter = ['fuel_type', 'depot__supplier']
    search_fields = ['depot__name', 'fuel_type__label']
    ordering = ['depot', 'fuel_type', 'min_litres']


@admin.register(DriverPricing)
class DriverPricingAdmin(admin.ModelAdmin):
    list_display = ['driver', 'fuel_type', 'fuel_price_per_litre_cents', 'active', 'updated_at']
    list_filter = ['fuel_type', 'active']


@admin.register(PricingHistory)
class PricingHistoryAdmin(admin.ModelAdmin):
    list_display = ['entity_type', 'depot', 'driver', 'fuel_type', 'old_price_cents', 'new_price_cents', 'changed_by', 'created_at']
    list_filter = ['entity_type', 'fuel_type']
    ordering = ['-created_at']
    readonly_fields = ['created_at']
