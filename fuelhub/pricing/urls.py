from django.urls import path
from .views import (
    depot_pricing, depot_pricing_tier, depot_stock, depot_pricing_history,
    driver_pricing_list, driver_pricing_update, driver_pricing_history,
)

urlpatterns = [
    # Depot tiered pricing
    path('depots/<int:depot_id>/pricing/', depot_pricing, name='depot-pricing'),
    path('depots/<int:depot_id>/pricing/stock/', depot_stock, name='depot-stock'),
    path('depots/<int:depot_id>/pricing/history/', depot_pricing_history, name='depot-pricing-history'),
    path('depots/<int:depot_id>/pricing/<int:pk>/', depot_pricing_tier, name='depot-pricing-tier'),

    # Driver pricing
    path('driver/pricing/', driver_pricing_list, name='driver-pricing-list'),
    path('driver/pricing/history/', driver_pricing_history, name='driver-pricing-history'),
    path('driver/pricing/<int:fuel_type_id>/', driver_pricing_update, name='driver-pricing-update'),
]
