from django.urls import path
from .views import depot_order_receipt, customer_order_receipt, admin_dashboard, supplier_dashboard

urlpatterns = [
    path('receipts/depot-orders/<int:pk>/', depot_order_receipt, name='depot-order-receipt'),
    path('receipts/orders/<int:pk>/', customer_order_receipt, name='order-receipt'),
    path('admin/dashboard/', admin_dashboard, name='admin-dashboard'),
    path('supplier/dashboard/', supplier_dashboard, name='supplier-dashboard'),
]
