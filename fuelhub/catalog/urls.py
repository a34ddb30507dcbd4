from django.urls import path
from .views import fuel_type_list_create, fuel_type_detail

urlpatterns = [
    path('fuel-types/', fuel_type_list_create, name='fuel-type-list-create'),
    path('fuel-types/<int:pk>/', fuel_type_detail, name='fuel-type-detail'),
]
