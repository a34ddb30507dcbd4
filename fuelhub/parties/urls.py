from django.urls import path
from .views import (
    my_profile,
    address_list_create, address_detail,
    payment_method_list_create, payment_method_detail,
    vehicle_list_create, vehicle_detail, driver_preferences,
    document_list_create, document_detail, compliance_status,
    admin_customer_list, admin_driver_list, admin_supplier_list, admin_kyc_pending,
    admin_driver_update, admin_driver_kyc_decision, admin_supplier_kyc_decision,
    admin_user_documents, admin_document_review,
)

urlpatterns = [
    path('profile/', my_profile, name='my-profile'),

    # Customer endpoints
    path('customer/addresses/', address_list_create, name='address-list-create'),
    path('customer/addresses/<int:pk>/', address_detail, name='address-detail'),
    path('customer/payment-methods/', payment_method_list_create, name='payment-method-list-create'),
    path('customer/payment-methods/<int:pk>/', payment_method_detail, name='payment-method-detail'),

    # Driver endpoints
    path('driver/vehicles/', vehicle_list_create, name='vehicle-list-create'),
    path('driver/vehicles/<int:pk>/', vehicle_detail, name='vehicle-detail'),
    path('driver/preferences/', driver_preferences, name='driver-preferences'),

    # Documents and compliance
    path('documents/', document_list_create, name='document-list-create'),
    path('documents/<int:pk>/', document_detail, name='document-detail'),
    path('compliance/status/', compliance_status, name='compliance-status'),

    # Admin endpoints
    path('admin/customers/', admin_customer_list, name='admin-customer-list'),
    path('admin/drivers/', admin_driver_list, name='admin-driver-list'),
    path('admin/drivers/<int:pk>/', admin_driver_update, name='admin-driver-update'),
    path('admin/drivers/<int:pk>/<str:decision>/', admin_driver_kyc_decision, name='admin-driver-kyc-decision'),
    path('admin/suppliers/', admin_supplier_list, name='admin-supplier-list'),
    path('admin/suppliers/<int:pk>/<str:decision>/', admin_supplier_kyc_decision, name='admin-supplier-kyc-decision'),
    path('admin/kyc/pending/', admin_kyc_pending, name='admin-kyc-pending'),
    path('admin/users/<int:user_id>/documents/', admin_user_documents, name='admin-user-documents'),
    path('admin/documents/<int:pk>/review/', admin_document_review, name='admin-document-review'),
]
