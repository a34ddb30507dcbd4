import django_filters
from django.db.models import Q
from .models import Order


class OrderFilter(django_filters.FilterSet):
    """Filters for the admin order list"""
    state = django_filters.CharFilter(field_name='state')
    customer = django_filters.NumberFilter(field_name='customer_id')
    driver = django_filters.NumberFilter(field_name='assigned_driver_id')
    fuel_type = django_filters.NumberFilter(field_name='fuel_type_id')
    created_after = django_filters.DateFilter(field_name='created_at', lookup_expr='date__gte')
    created_before = django_filters.DateFilter(field_name='created_at', lookup_expr='date__lte')
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = Order
        fields = ['state', 'customer', 'driver', 'fuel_type', 'created_after', 'created_before', 'search']

    def filter_search(self, queryset, name, value):
        query = (
            Q(customer__user__username__icontains=value)
            | Q(customer__user__full_name__icontains=value)
            | Q(customer__company_name__icontains=value)
            | Q(assigned_driver__user__full_name__icontains=value)
        )
        if value.isdigit():
            query |= Q(pk=int(value))
        return queryset.filter(query)
