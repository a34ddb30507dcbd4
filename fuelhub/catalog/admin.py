from django.contrib import admin
from .models import FuelType


@admin.register(FuelType)
class FuelTypeAdmin(admin.ModelAdmin):
    list_display = ['code', 'label', 'active', 'created_at']
    list_filter = ['active']
    search_fields = ['code', 'label']
    ordering = ['label']
