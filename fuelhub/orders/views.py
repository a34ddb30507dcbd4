import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from django.db.models import Q
from django.utils import timezone
from fuelhub.core.utils import create_audit_log, is_admin
from fuelhub.parties.permissions import require_customer, require_driver
from .filters import OrderFilter
from .models import Order, DispatchOffer
from .serializers import (
    OrderSerializer, OrderWriteSerializer, OrderUpdateSerializer, DispatchOfferSerializer,
    DriverOfferSerializer, QuoteSerializer, AcceptOfferSerializer, CompleteDeliverySerializer
)
from .services import (
    OrderError, create_order, update_order, cancel_order, accept_offer, decline_offer,
    submit_quote, reject_offer, start_delivery, mark_picked_up, complete_delivery, driver_stats,
    ACTIVE_DRIVER_STATES
)

logger = logging.getLogger('fuelhub.orders')

ORDER_RELATED = ['fuel_type', 'customer__user', 'assigned_driver__user', 'delivery_address', 'selected_depot']


def _error(exc):
    return Response({'error': str(exc)}, status=exc.status_code)


# Customer orders
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def customer_order_list_create(request):
    """List the customer's orders newest first, or place a new order"""
    customer, error = require_customer(request)
    if error:
        return error

    if request.method == 'GET':
        orders = Order.objects.filter(customer=customer).select_related(*ORDER_RELATED)
        state = request.query_params.get('state')
        if state:
            orders = orders.filter(state=state)
        return Response(OrderSerializer(orders, many=True).data)

    serializer = OrderWriteSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        order = create_order(customer, serializer.validated_data)
    except OrderError as e:
        return _error(e)
    create_audit_log(request, 'create', 'Order', order.pk, {'total_cents': order.total_cents}, object_reference=order.reference)
    return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def customer_order_detail(request, pk):
    customer, error = require_customer(request)
    if error:
        return error
    order = get_object_or_404(Order.objects.select_related(*ORDER_RELATED), pk=pk, customer=customer)

    if request.method == 'GET':
        data = OrderSerializer(order).data
        data['offers'] = DispatchOfferSerializer(
            order.offers.filter(state='pending_customer').select_related('driver__user'), many=True
        ).data
        return Response(data)

    serializer = OrderUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        order = update_order(order, serializer.validated_data)
    except OrderError as e:
        return _error(e)
    return Response(OrderSerializer(order).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def customer_order_cancel(request, pk):
    customer, error = require_customer(request)
    if error:
        return error
    order = get_object_or_404(Order, pk=pk, customer=customer)
    old_state = order.state
    try:
        order = cancel_order(order, cancelled_by=request.user)
    except OrderError as e:
        return _error(e)
    create_audit_log(request, 'status_change', 'Order', order.pk,
                     {'state': {'old': old_state, 'new': order.state}}, object_reference=order.reference)
    return Response(OrderSerializer(order).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def customer_order_offers(request, pk):
    """Driver quotes awaiting the customer's decision"""
    customer, error = require_customer(request)
    if error:
        return error
    order = get_object_or_404(Order, pk=pk, customer=customer)
    offers = order.offers.filter(state='pending_customer').select_related('driver__user', 'order')
    return Response(DispatchOfferSerializer(offers, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def customer_accept_offer(request, pk, offer_id):
    customer, error = require_customer(request)
    if error:
        return error
    order = get_object_or_404(Order, pk=pk, customer=customer)
    serializer = AcceptOfferSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        order, offer = accept_offer(order, offer_id, serializer.validated_data.get('confirmed_delivery_time'))
    except OrderError as e:
        return _error(e)
    create_audit_log(request, 'offer_accept', 'Order', order.pk,
                     {'offer_id': offer.pk, 'driver_id': offer.driver_id}, object_reference=order.reference)
    return Response(OrderSerializer(order).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def customer_decline_offer(request, pk, offer_id):
    customer, error = require_customer(request)
    if error:
        return error
    order = get_object_or_404(Order, pk=pk, customer=customer)
    try:
        offer = decline_offer(order, offer_id)
    except OrderError as e:
        return _error(e)
    return Response(DispatchOfferSerializer(offer).data)


# Driver offers
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def driver_offers(request):
    """
    Open offers for the driver. ``eligibility_issues`` explains why no new
    offers will arrive (no location, KYC not approved, offline).
    """
    driver, error = require_driver(request)
    if error:
        return error
    now = timezone.now()
    offers = DispatchOffer.objects.filter(
        Q(state='offered', expires_at__gt=now) | Q(state='pending_customer'),
        driver=driver, order__state__in=['created', 'awaiting_payment'],
    ).select_related('order__fuel_type', 'order__customer__user', 'order__delivery_address')

    issues = []
    if not driver.has_location:
        issues.append('Location not set. Share your location to receive delivery requests.')
    if driver.kyc_status != 'approved':
        issues.append('KYC not approved. Complete verification to receive delivery requests.')
    if driver.availability_status != 'available':
        issues.append('You are not marked as available.')

    return Response({
        'offers': DriverOfferSerializer(offers, many=True).data,
        'eligibility_issues': issues,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def driver_accept_offer(request, offer_id):
    """Accept a delivery request by sending a quote to the customer"""
    driver, error = require_driver(request)
    if error:
        return error
    serializer = QuoteSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    try:
        offer = submit_quote(
            driver, offer_id,
            proposed_delivery_time=data.get('proposed_delivery_time'),
            price_per_km_cents=data.get('price_per_km_cents'),
            notes=data.get('notes'),
        )
    except OrderError as e:
        return _error(e)
    return Response(DriverOfferSerializer(offer).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def driver_reject_offer(request, offer_id):
    driver, error = require_driver(request)
    if error:
        return error
    try:
        offer = reject_offer(driver, offer_id)
    except OrderError as e:
        return _error(e)
    return Response({'success': True, 'offer_id': offer.pk, 'state': offer.state})


# Driver deliveries
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def driver_assigned_orders(request):
    driver, error = require_driver(request)
    if error:
        return error
    orders = Order.objects.filter(assigned_driver=driver, state__in=ACTIVE_DRIVER_STATES).select_related(*ORDER_RELATED)
    return Response(OrderSerializer(orders, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def driver_completed_orders(request):
    driver, error = require_driver(request)
    if error:
        return error
    orders = Order.objects.filter(assigned_driver=driver, state='delivered').select_related(*ORDER_RELATED).order_by('-delivered_at')
    return Response(OrderSerializer(orders, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def driver_stats_view(request):
    driver, error = require_driver(request)
    if error:
        return error
    return Response(driver_stats(driver))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def driver_start_delivery(request, pk):
    driver, error = require_driver(request)
    if error:
        return error
    try:
        order = start_delivery(driver, pk)
    except OrderError as e:
        return _error(e)
    return Response(OrderSerializer(order).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def driver_pickup(request, pk):
    driver, error = require_driver(request)
    if error:
        return error
    try:
        order = mark_picked_up(driver, pk)
    except OrderError as e:
        return _error(e)
    return Response(OrderSerializer(order).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def driver_complete_delivery(request, pk):
    driver, error = require_driver(request)
    if error:
        return error
    serializer = CompleteDeliverySerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        order = complete_delivery(
            driver, pk,
            serializer.validated_data['signature_data'],
            serializer.validated_data.get('signature_name', ''),
        )
    except OrderError as e:
        return _error(e)
    create_audit_log(request, 'status_change', 'Order', order.pk,
                     {'state': {'old': 'picked_up', 'new': 'delivered'}}, object_reference=order.reference)
    return Response(OrderSerializer(order).data)


# Admin
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def admin_order_list(request):
    if not is_admin(request.user):
        return Response({'error': 'Admin access required'}, status=status.HTTP_403_FORBIDDEN)
    order_filter = OrderFilter(request.query_params, queryset=Order.objects.select_related(*ORDER_RELATED))
    if not order_filter.is_valid():
        return Response(order_filter.errors, status=status.HTTP_400_BAD_REQUEST)
    return Response(OrderSerializer(order_filter.qs, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def admin_order_detail(request, pk):
    if not is_admin(request.user):
        return Response({'error': 'Admin access required'}, status=status.HTTP_403_FORBIDDEN)
    order = get_object_or_404(Order.objects.select_related(*ORDER_RELATED), pk=pk)
    data = OrderSerializer(order).data
    data['offers'] = DispatchOfferSerializer(order.offers.select_related('driver__user'), many=True).data
    return Response(data)
