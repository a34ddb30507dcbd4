from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User, AppSetting, AuditLog


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ['username', 'email', 'full_name', 'role', 'is_active', 'is_staff', 'date_joined']
    list_filter = ['role', 'is_active', 'is_staff', 'is_superuser', 'date_joined']
    search_fields = ['username', 'email', 'full_name', 'phone']
    ordering = ['username']
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Marketplace', {'fields': ('role', 'full_name', 'phone', 'currency')}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Marketplace', {'fields': ('role', 'full_name', 'phone')}),
    )


@admin.register(AppSetting)
class AppSettingAdmin(admin.ModelAdmin):
    list_display = ['service_fee_percent', 'service_fee_min_cents', 'base_delivery_fee_cents',
                    'price_per_km_cents', 'premium_offer_minutes', 'updated_at']
    readonly_fields = ['updated_at']

    def has_add_permission(self, request):
        return not AppSetting.objects.exists()


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['user', 'action', 'model_name', 'object_id', 'ip_address', 'created_at']
    list_filter = ['action', 'model_name', 'created_at']
    search_fields = ['user__username', 'model_name', 'object_id', 'object_reference']
    ordering = ['-created_at']
    readonly_fields = ['user', 'action', 'model_name', 'object_id', 'object_reference', 'changes', 'ip_address', 'created_at']
