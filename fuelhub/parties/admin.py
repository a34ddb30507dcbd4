from django.contrib import admin
from .models import Customer, Driver, Supplier, Vehicle, Document, DeliveryAddress, PaymentMethod


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ['user', 'company_name', 'vat_number', 'created_at']
    search_fields = ['user__username', 'user__full_name', 'company_name']


@admin.register(Driver)
class DriverAdmin(admin.ModelAdmin):
    list_display = ['user', 'kyc_status', 'status', 'premium_status', 'availability_status', 'job_radius_preference_miles']
    list_filter = ['kyc_status', 'status', 'premium_status', 'availability_status']
    search_fields = ['user__username', 'user__full_name', 'license_number']


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ['name', 'owner', 'kyb_status', 'status', 'compliance_status', 'created_at']
    list_filter = ['kyb_status', 'status', 'compliance_status']
    search_fields = ['name', 'registered_name', 'cipc_number', 'owner__username']


@admin.register(Vehicle)
class VehicleAdmin(admin.ModelAdmin):
    list_display = ['registration_number', 'driver', 'make', 'model', 'capacity_litres', 'is_active']
    list_filter = ['is_active']
    search_fields = ['registration_number', 'driver__user__username']


@admin.register(Document)
class DocumentAdmin(admin.ModelAdmin):
    list_display = ['doc_type', 'owner', 'owner_type', 'verification_status', 'expiry_date', 'uploaded_at']
    list_filter = ['owner_type', 'verification_status', 'doc_type']
    search_fields = ['owner__username', 'doc_type', 'document_number']
    readonly_fields = ['uploaded_at', 'verified_at']


@admin.register(DeliveryAddress)
class DeliveryAddressAdmin(admin.ModelAdmin):
    list_display = ['label', 'customer', 'address_city', 'address_province', 'is_default', 'verification_status']
    list_filter = ['verification_status', 'address_province']
    search_fields = ['label', 'address_street', 'address_city', 'customer__user__username']


@admin.register(PaymentMethod)
class PaymentMethodAdmin(admin.ModelAdmin):
    list_display = ['label', 'customer', 'method_type', 'is_default', 'is_active', 'created_at']
    list_filter = ['method_type', 'is_active']
    search_fields = ['label', 'customer__user__username']
