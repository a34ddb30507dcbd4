import logging
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from fuelhub.core.utils import is_admin
from fuelhub.depot_orders.models import DriverDepotOrder
from fuelhub.orders.models import Order
from fuelhub.parties.permissions import require_supplier
from .dashboards import build_admin_dashboard, build_supplier_dashboard
from .receipt import render_receipt_pdf, format_cents

logger = logging.getLogger('fuelhub.reports')


def _pdf_response(content, filename):
    response = HttpResponse(content, content_type='application/pdf')
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


def _when(value):
    return value.strftime('%Y-%m-%d %H:%M') if value else '-'


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def depot_order_receipt(request, pk):
    """Receipt for a completed depot order; driver or depot owner only"""
    order = get_object_or_404(
        DriverDepotOrder.objects.select_related('driver__user', 'depot__supplier', 'fuel_type'), pk=pk
    )
    is_driver = order.driver.user_id == request.user.pk
    is_supplier = order.depot.supplier.owner_id == request.user.pk
    if not (is_driver or is_supplier or is_admin(request.user)):
        return Response({'error': 'Not authorized to view this receipt'}, status=status.HTTP_403_FORBIDDEN)
    if order.status != 'completed':
        return Response({'error': 'Receipts are only available for completed orders'}, status=status.HTTP_400_BAD_REQUEST)

    currency = order.driver.user.currency
    lines = [
        ('Reference', order.reference),
        ('Depot', order.depot.name),
        ('Supplier', order.depot.supplier.name),
        ('Driver', order.driver.user.display_name),
        ('Fuel', order.fuel_type.label),
        ('Litres ordered', f'{order.litres}L'),
        ('Litres delivered', f'{order.actual_litres_delivered}L' if order.actual_litres_delivered is not None else '-'),
        ('Price per litre', format_cents(order.price_per_litre_cents, currency)),
        ('Total', format_cents(order.total_price_cents, currency)),
        ('Payment method', order.get_payment_method_display() or '-'),
        ('Pickup date', _when(order.pickup_date)),
        ('Completed', _when(order.completed_at)),
    ]
    content = render_receipt_pdf('Fuel Collection Receipt', lines, order.reference)
    logger.info(f"Receipt generated for depot order {order.pk} by {request.user.username}")
    return _pdf_response(content, f'receipt-{order.reference}.pdf')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def customer_order_receipt(request, pk):
    """Receipt for a delivered order; the customer, the driver or an admin"""
    order = get_object_or_404(
        Order.objects.select_related('customer__user', 'assigned_driver__user', 'fuel_type', 'delivery_address'), pk=pk
    )
    is_customer = order.customer.user_id == request.user.pk
    is_driver = order.assigned_driver is not None and order.assigned_driver.user_id == request.user.pk
    if not (is_customer or is_driver or is_admin(request.user)):
        return Response({'error': 'Not authorized to view this receipt'}, status=status.HTTP_403_FORBIDDEN)
    if order.state != 'delivered':
        return Response({'error': 'Receipts are only available for delivered orders'}, status=status.HTTP_400_BAD_REQUEST)

    currency = order.customer.user.currency
    lines = [
        ('Reference', order.reference),
        ('Customer', order.customer.user.display_name),
        ('Driver', order.assigned_driver.user.display_name if order.assigned_driver else '-'),
        ('Fuel', order.fuel_type.label),
        ('Litres', f'{order.litres}L'),
        ('Fuel price', format_cents(order.fuel_price_cents, currency)),
        ('Delivery fee', format_cents(order.delivery_fee_cents, currency)),
        ('Service fee', format_cents(order.service_fee_cents, currency)),
        ('Total', format_cents(order.total_cents, currency)),
        ('Delivered', _when(order.delivered_at)),
        ('Signed by', order.delivery_signature_name or '-'),
    ]
    content = render_receipt_pdf('Fuel Delivery Receipt', lines, order.reference)
    return _pdf_response(content, f'receipt-{order.reference}.pdf')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def admin_dashboard(request):
    if not is_admin(request.user):
        return Response({'error': 'Admin access required'}, status=status.HTTP_403_FORBIDDEN)
    return Response(build_admin_dashboard())


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def supplier_dashboard(request):
    supplier, error = require_supplier(request)
    if error:
        return error
    return Response(build_supplier_dashboard(supplier.pk))
