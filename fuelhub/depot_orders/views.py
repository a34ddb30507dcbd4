import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from fuelhub.catalog.models import FuelType
from fuelhub.core.utils import create_audit_log
from fuelhub.locations.models import Depot
from fuelhub.parties.permissions import require_driver, require_supplier, require_compliant_supplier
from .models import DriverDepotOrder
from .serializers import (
    DriverDepotOrderSerializer, DepotOrderCreateSerializer, PaymentSubmitSerializer, SignatureSerializer,
    RejectSerializer, ConfirmDeliverySerializer
)
from .services import (
    DepotOrderError, create_depot_order, cancel_depot_order, submit_payment, sign_as_driver, confirm_receipt,
    accept_depot_order, reject_depot_order, verify_payment, reject_payment, sign_as_supplier, release_fuel,
    confirm_delivery
)

logger = logging.getLogger('fuelhub.depot_orders')

RELATED = ['depot__supplier__owner', 'fuel_type', 'driver__user']


def _result(order, status_code=status.HTTP_200_OK):
    return Response(DriverDepotOrderSerializer(order).data, status=status_code)


def _error(exc):
    return Response({'error': str(exc)}, status=exc.status_code)


def _driver_order(request, pk):
    driver, error = require_driver(request)
    if error:
        return None, error
    order = DriverDepotOrder.objects.select_related(*RELATED).filter(pk=pk, driver=driver).first()
    if order is None:
        return None, Response({'error': 'Order not found'}, status=status.HTTP_404_NOT_FOUND)
    return order, None


def _supplier_order(request, pk):
    supplier, error = require_compliant_supplier(request)
    if error:
        return None, error
    order = DriverDepotOrder.objects.select_related(*RELATED).filter(pk=pk).first()
    if order is None:
        return None, Response({'error': 'Order not found'}, status=status.HTTP_404_NOT_FOUND)
    if order.depot.supplier_id != supplier.pk:
        logger.warning(f"Supplier {supplier.pk} attempted to access depot order {order.pk}")
        return None, Response({'error': 'This order does not belong to your depots'}, status=status.HTTP_403_FORBIDDEN)
    return order, None


# Driver
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def driver_depot_order_list_create(request):
    driver, error = require_driver(request)
    if error:
        return error

    if request.method == 'GET':
        orders = DriverDepotOrder.objects.filter(driver=driver).select_related(*RELATED)
        status_filter = request.query_params.get('status')
        if status_filter:
            orders = orders.filter(status=status_filter)
        return Response(DriverDepotOrderSerializer(orders, many=True).data)

    serializer = DepotOrderCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    depot = get_object_or_404(Depot.objects.select_related('supplier__owner'), pk=data['depot_id'])
    fuel_type = get_object_or_404(FuelType, pk=data['fuel_type_id'])
    try:
        order = create_depot_order(driver, depot, fuel_type, data['litres'], data['pickup_date'], data.get('notes', ''))
    except DepotOrderError as e:
        return _error(e)
    return _result(order, status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def driver_depot_order_detail(request, pk):
    order, error = _driver_order(request, pk)
    if error:
        return error
    return _result(order)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def driver_depot_order_cancel(request, pk):
    order, error = _driver_order(request, pk)
    if error:
        return error
    try:
        return _result(cancel_depot_order(order))
    except DepotOrderError as e:
        return _error(e)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def driver_depot_order_payment(request, pk):
    order, error = _driver_order(request, pk)
    if error:
        return error
    serializer = PaymentSubmitSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        order = submit_payment(
            order, serializer.validated_data['payment_method'], serializer.validated_data.get('payment_proof_url', '')
        )
    except DepotOrderError as e:
        return _error(e)
    return _result(order)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def driver_depot_order_signature(request, pk):
    order, error = _driver_order(request, pk)
    if error:
        return error
    serializer = SignatureSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    return _result(sign_as_driver(order, serializer.validated_data['signature_url']))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def driver_depot_order_confirm_receipt(request, pk):
    order, error = _driver_order(request, pk)
    if error:
        return error
    try:
        return _result(confirm_receipt(order))
    except DepotOrderError as e:
        return _error(e)


# Supplier
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def supplier_depot_order_list(request):
    """Driver orders placed at the supplier's depots, filterable by status and depot"""
    supplier, error = require_supplier(request)
    if error:
        return error
    orders = DriverDepotOrder.objects.filter(depot__supplier=supplier).select_related(*RELATED)
    status_filter = request.query_params.get('status')
    if status_filter:
        orders = orders.filter(status=status_filter)
    depot_id = request.query_params.get('depot')
    if depot_id:
        orders = orders.filter(depot_id=depot_id)
    return Response(DriverDepotOrderSerializer(orders, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def supplier_depot_order_accept(request, pk):
    order, error = _supplier_order(request, pk)
    if error:
        return error
    try:
        order = accept_depot_order(order)
    except DepotOrderError as e:
        return _error(e)
    create_audit_log(request, 'status_change', 'DriverDepotOrder', order.pk,
                     {'status': {'old': 'pending', 'new': order.status}}, object_reference=order.reference)
    return _result(order)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def supplier_depot_order_reject(request, pk):
    order, error = _supplier_order(request, pk)
    if error:
        return error
    serializer = RejectSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        order = reject_depot_order(order, serializer.validated_data.get('reason', ''))
    except DepotOrderError as e:
        return _error(e)
    create_audit_log(request, 'status_change', 'DriverDepotOrder', order.pk,
                     {'status': {'old': 'pending', 'new': order.status}}, object_reference=order.reference)
    return _result(order)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def supplier_depot_order_verify_payment(request, pk):
    order, error = _supplier_order(request, pk)
    if error:
        return error
    try:
        order = verify_payment(order, request.user)
    except DepotOrderError as e:
        return _error(e)
    create_audit_log(request, 'payment_verify', 'DriverDepotOrder', order.pk,
                     {'payment_status': order.payment_status}, object_reference=order.reference)
    return _result(order)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def supplier_depot_order_reject_payment(request, pk):
    order, error = _supplier_order(request, pk)
    if error:
        return error
    try:
        return _result(reject_payment(order))
    except DepotOrderError as e:
        return _error(e)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def supplier_depot_order_signature(request, pk):
    order, error = _supplier_order(request, pk)
    if error:
        return error
    serializer = SignatureSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        return _result(sign_as_supplier(order, serializer.validated_data['signature_url']))
    except DepotOrderError as e:
        return _error(e)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def supplier_depot_order_release(request, pk):
    order, error = _supplier_order(request, pk)
    if error:
        return error
    try:
        order = release_fuel(order)
    except DepotOrderError as e:
        return _error(e)
    create_audit_log(request, 'stock_change', 'DriverDepotOrder', order.pk,
                     {'released_litres': str(order.litres), 'fuel_type': order.fuel_type.code},
                     object_reference=order.reference)
    return _result(order)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def supplier_depot_order_confirm_delivery(request, pk):
    order, error = _supplier_order(request, pk)
    if error:
        return error
    serializer = ConfirmDeliverySerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        return _result(confirm_delivery(order, serializer.validated_data.get('actual_litres')))
    except DepotOrderError as e:
        return _error(e)
