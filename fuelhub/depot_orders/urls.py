from django.urls import path
from .views import (
    driver_depot_order_list_create, driver_depot_order_detail, driver_depot_order_cancel,
    driver_depot_order_payment, driver_depot_order_signature, driver_depot_order_confirm_receipt,
    supplier_depot_order_list, supplier_depot_order_accept, supplier_depot_order_reject,
    supplier_depot_order_verify_payment, supplier_depot_order_reject_payment, supplier_depot_order_signature,
    supplier_depot_order_release, supplier_depot_order_confirm_delivery,
)

urlpatterns = [
    # Driver
    path('driver/depot-orders/', driver_depot_order_list_create, name='driver-depot-order-list-create'),
    path('driver/depot-orders/<int:pk>/', driver_depot_order_detail, name='driver-depot-order-detail'),
    path('driver/depot-orders/<int:pk>/cancel/', driver_depot_order_cancel, name='driver-depot-order-cancel'),
    path('driver/depot-orders/<int:pk>/payment/', driver_depot_order_payment, name='driver-depot-order-payment'),
    path('driver/depot-orders/<int:pk>/signature/', driver_depot_order_signature, name='driver-depot-order-signature'),
    path('driver/depot-orders/<int:pk>/confirm-receipt/', driver_depot_order_confirm_receipt, name='driver-depot-order-confirm-receipt'),

    # Supplier
    path('supplier/depot-orders/', supplier_depot_order_list, name='supplier-depot-order-list'),
    path('supplier/depot-orders/<int:pk>/accept/', supplier_depot_order_accept, name='supplier-depot-order-accept'),
    path('supplier/depot-orders/<int:pk>/reject/', supplier_depot_order_reject, name='supplier-depot-order-reject'),
    path('supplier/depot-orders/<int:pk>/verify-payment/', supplier_depot_order_verify_payment, name='supplier-depot-order-verify-payment'),
    path('supplier/depot-orders/<int:pk>/reject-payment/', supplier_depot_order_reject_payment, name='supplier-depot-order-reject-payment'),
    path('supplier/depot-orders/<int:pk>/signature/', supplier_depot_order_signature, name='supplier-depot-order-signature'),
    path('supplier/depot-orders/<int:pk>/release/', supplier_depot_order_release, name='supplier-depot-order-release'),
    path('supplier/depot-orders/<int:pk>/confirm-delivery/', supplier_depot_order_confirm_delivery, name='supplier-depot-order-confirm-delivery'),
]
