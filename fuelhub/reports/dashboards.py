"""Aggregate figures for the admin and supplier dashboards"""
from django.contrib.auth import get_user_model
from django.db.models import Count, Sum
from fuelhub.core.cache_utils import (
    cached_query, admin_dashboard_key, supplier_dashboard_key, ADMIN_DASHBOARD_CACHE_TTL,
    SUPPLIER_DASHBOARD_CACHE_TTL
)
from fuelhub.depot_orders.models import DriverDepotOrder
from fuelhub.locations.models import Depot
from fuelhub.orders.models import Order
from fuelhub.parties.models import Driver, Supplier


def _counts(queryset, field):
    return {row[field]: row['count'] for row in queryset.values(field).annotate(count=Count('id')).order_by(field)}


@cached_query(ADMIN_DASHBOARD_CACHE_TTL, admin_dashboard_key)
def build_admin_dashboard():
    User = get_user_model()
    delivered = Order.objects.filter(state='delivered')
    data = {
        'users_by_role': _counts(User.objects.all(), 'role'),
        'orders_by_state': _counts(Order.objects.all(), 'state'),
        'pending_kyc': {
            'drivers': Driver.objects.filter(kyc_status='pending').count(),
            'suppliers': Supplier.objects.filter(kyb_status='pending').count(),
        },
        'revenue_cents': delivered.aggregate(total=Sum('total_cents'))['total'] or 0,
        'delivered_litres': str(delivered.aggregate(total=Sum('litres'))['total'] or 0),
        'active_depots': Depot.objects.filter(is_active=True).count(),
    }
    return data


@cached_query(SUPPLIER_DASHBOARD_CACHE_TTL, supplier_dashboard_key)
def build_supplier_dashboard(supplier_id):
    orders = DriverDepotOrder.objects.filter(depot__supplier_id=supplier_id)
    completed = orders.filter(status='completed')
    return {
        'depot_count': Depot.objects.filter(supplier_id=supplier_id).count(),
        'active_depot_count': Depot.objects.filter(supplier_id=supplier_id, is_active=True).count(),
        'orders_by_status': _counts(orders, 'status'),
        'pending_orders': orders.filter(status='pending').count(),
        'completed_litres': str(completed.aggregate(total=Sum('litres'))['total'] or 0),
        'revenue_cents': completed.aggregate(total=Sum('total_price_cents'))['total'] or 0,
    }
