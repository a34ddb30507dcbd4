from django.urls import path
from .views import (
    customer_order_list_create, customer_order_detail, customer_order_cancel, customer_order_offers,
    customer_accept_offer, customer_decline_offer, driver_offers, driver_accept_offer, driver_reject_offer,
    driver_assigned_orders, driver_completed_orders, driver_stats_view, driver_start_delivery, driver_pickup,
    driver_complete_delivery, admin_order_list, admin_order_detail,
)

urlpatterns = [
    # Customer
    path('customer/orders/', customer_order_list_create, name='customer-order-list-create'),
    path('customer/orders/<int:pk>/', customer_order_detail, name='customer-order-detail'),
    path('customer/orders/<int:pk>/cancel/', customer_order_cancel, name='customer-order-cancel'),
    path('customer/orders/<int:pk>/offers/', customer_order_offers, name='customer-order-offers'),
    path('customer/orders/<int:pk>/offers/<int:offer_id>/accept/', customer_accept_offer, name='customer-offer-accept'),
    path('customer/orders/<int:pk>/offers/<int:offer_id>/decline/', customer_decline_offer, name='customer-offer-decline'),

    # Driver
    path('driver/offers/', driver_offers, name='driver-offers'),
    path('driver/offers/<int:offer_id>/accept/', driver_accept_offer, name='driver-offer-accept'),
    path('driver/offers/<int:offer_id>/reject/', driver_reject_offer, name='driver-offer-reject'),
    path('driver/orders/assigned/', driver_assigned_orders, name='driver-assigned-orders'),
    path('driver/orders/completed/', driver_completed_orders, name='driver-completed-orders'),
    path('driver/stats/', driver_stats_view, name='driver-stats'),
    path('driver/orders/<int:pk>/start/', driver_start_delivery, name='driver-order-start'),
    path('driver/orders/<int:pk>/pickup/', driver_pickup, name='driver-order-pickup'),
    path('driver/orders/<int:pk>/complete/', driver_complete_delivery, name='driver-order-complete'),

    # Admin
    path('admin/orders/', admin_order_list, name='admin-order-list'),
    path('admin/orders/<int:pk>/', admin_order_detail, name='admin-order-detail'),
]
