from django.urls import path
from .views import (
    supplier_depot_list_create, supplier_depot_detail, driver_depot_list,
    update_location, driver_location, order_location_history,
)

urlpatterns = [
    path('supplier/depots/', supplier_depot_list_create, name='supplier-depot-list-create'),
    path('supplier/depots/<int:pk>/', supplier_depot_detail, name='supplier-depot-detail'),
    path('driver/depots/', driver_depot_list, name='driver-depot-list'),
    path('driver/location/', update_location, name='driver-location-update'),
    path('drivers/<int:driver_id>/location/', driver_location, name='driver-location'),
    path('orders/<int:order_id>/location-history/', order_location_history, name='order-location-history'),
]
