from django.contrib import admin
from .models import Depot, DriverLocation


@admin.register(Depot)
class DepotAdmin(admin.ModelAdmin):
    list_display = ['name', 'supplier', 'address_city', 'address_province', 'is_active', 'created_at']
    list_filter = ['is_active', 'address_province']
    search_fields = ['name', 'supplier__name', 'address_city']
    ordering = ['name']


@admin.register(DriverLocation)
class DriverLocationAdmin(admin.ModelAdmin):
    list_display = ['driver', 'latitude', 'longitude', 'accuracy', 'recorded_at']
    ordering = ['-recorded_at']
    readonly_fields = ['recorded_at']
