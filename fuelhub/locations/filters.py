import django_filters
from django.db.models import Q
from .models import Depot


class DepotFilter(django_filters.FilterSet):
    """Filters for the driver-facing depot browser"""
    fuel_type = django_filters.NumberFilter(method='filter_fuel_type')
    city = django_filters.CharFilter(field_name='address_city', lookup_expr='icontains')
    province = django_filters.CharFilter(field_name='address_province', lookup_expr='icontains')
    supplier = django_filters.NumberFilter(field_name='supplier_id')
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = Depot
        fields = ['fuel_type', 'city', 'province', 'supplier', 'search']

    def filter_fuel_type(self, queryset, name, value):
        return queryset.filter(prices__fuel_type_id=value).distinct()

    def filter_search(self, queryset, name, value):
        return queryset.filter(Q(name__icontains=value) | Q(supplier__name__icontains=value))
