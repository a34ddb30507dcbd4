from django.contrib import admin
from .models import Order, DispatchOffer


class DispatchOfferInline(admin.TabularInline):
    model = DispatchOffer
    extra = 0
    fields = ['driver', 'state', 'is_premium', 'expires_at', 'proposed_price_per_km_cents', 'proposed_delivery_time']
    readonly_fields = ['expires_at']


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['id', 'customer', 'fuel_type', 'litres', 'state', 'assigned_driver', 'total_cents', 'created_at']
    list_filter = ['state', 'fuel_type', 'priority_level']
    search_fields = ['customer__user__username', 'customer__company_name', 'assigned_driver__user__username']
    ordering = ['-created_at']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [DispatchOfferInline]


@admin.register(DispatchOffer)
class DispatchOfferAdmin(admin.ModelAdmin):
    list_display = ['id', 'order', 'driver', 'state', 'is_premium', 'expires_at', 'created_at']
    list_filter = ['state', 'is_premium']
    ordering = ['-created_at']
