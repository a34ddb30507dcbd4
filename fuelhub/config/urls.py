"""
URL configuration for the fuelhub project.

Every app exposes its own ``urlpatterns`` which are mounted under the
versioned ``api/v1/`` prefix.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "FuelHub Administration"
admin.site.site_title = "FuelHub Admin Portal"
admin.site.index_title = "Fuel delivery marketplace"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('fuelhub.core.urls')),
    path('api/v1/', include('fuelhub.catalog.urls')),
    path('api/v1/', include('fuelhub.parties.urls')),
    path('api/v1/', include('fuelhub.locations.urls')),
    path('api/v1/', include('fuelhub.pricing.urls')),
    path('api/v1/', include('fuelhub.orders.urls')),
    path('api/v1/', include('fuelhub.depot_orders.urls')),
    path('api/v1/', include('fuelhub.notifications.urls')),
    path('api/v1/', include('fuelhub.chat.urls')),
    path('api/v1/', include('fuelhub.reports.urls')),
]
