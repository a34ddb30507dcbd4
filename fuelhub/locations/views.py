import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from django.db import transaction
from django.utils import timezone
from fuelhub.notifications.services import publish_event
from fuelhub.orders.models import Order
from fuelhub.parties.models import Driver
from fuelhub.parties.permissions import require_customer, require_driver, require_supplier, require_compliant_supplier
from fuelhub.pricing.services import build_depot_pricing
from .filters import DepotFilter
from .geo import haversine_km
from .models import Depot, DriverLocation
from .serializers import DepotSerializer, LocationUpdateSerializer, DriverLocationSerializer

logger = logging.getLogger('fuelhub.locations')

LOCATION_HISTORY_LIMIT = 100
TRACKABLE_ORDER_STATES = ['assigned', 'en_route', 'picked_up']


# Supplier depots
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def supplier_depot_list_create(request):
    """List the supplier's depots with pricing, or create a depot"""
    if request.method == 'GET':
        supplier, error = require_supplier(request)
        if error:
            return error
        depots = Depot.objects.filter(supplier=supplier)
        data = []
        for depot in depots:
            entry = DepotSerializer(depot).data
            entry['fuel_types'] = build_depot_pricing(depot)
            data.append(entry)
        return Response(data)

    supplier, error = require_compliant_supplier(request)
    if error:
        return error
    serializer = DepotSerializer(data=request.data)
    if serializer.is_valid():
        depot = serializer.save(supplier=supplier)
        logger.info(f"Depot '{depot.name}' created by supplier {supplier.pk}")
        return Response(DepotSerializer(depot).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def supplier_depot_detail(request, pk):
    """Retrieve, update or delete one of the supplier's depots"""
    if request.method == 'GET':
        supplier, error = require_supplier(request)
    else:
        supplier, error = require_compliant_supplier(request)
    if error:
        return error
    depot = get_object_or_404(Depot, pk=pk, supplier=supplier)

    if request.method == 'GET':
        data = DepotSerializer(depot).data
        data['fuel_types'] = build_depot_pricing(depot)
        return Response(data)
    elif request.method == 'PATCH':
        serializer = DepotSerializer(depot, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if depot.depot_orders.exists():
            # Keep order history intact
            depot.is_active = False
            depot.save(update_fields=['is_active', 'updated_at'])
            logger.info(f"Depot {depot.pk} has orders, deactivated instead of deleted")
            return Response(DepotSerializer(depot).data)
        depot.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Driver depot browser
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def driver_depot_list(request):
    """
    Active depots with pricing, filterable by fuel type, city, province and
    supplier. When the driver has a known position each depot carries
    ``distance_km`` and the list is sorted nearest first.
    """
    driver, error = require_driver(request)
    if error:
        return error

    queryset = Depot.objects.filter(is_active=True).select_related('supplier')
    depot_filter = DepotFilter(request.query_params, queryset=queryset)
    if not depot_filter.is_valid():
        return Response(depot_filter.errors, status=status.HTTP_400_BAD_REQUEST)

    data = []
    for depot in depot_filter.qs:
        entry = DepotSerializer(depot).data
        entry['fuel_types'] = build_depot_pricing(depot)
        if driver.has_location:
            entry['distance_km'] = round(haversine_km(driver.current_lat, driver.current_lng, depot.lat, depot.lng), 2)
        else:
            entry['distance_km'] = None
        data.append(entry)

    if driver.has_location:
        data.sort(key=lambda d: d['distance_km'])
    return Response(data)


# Driver location tracking
@api_view(['PUT', 'POST'])
@permission_classes([IsAuthenticated])
def update_location(request):
    """Store the driver's current position and append it to the history"""
    driver, error = require_driver(request)
    if error:
        return error
    serializer = LocationUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    with transaction.atomic():
        driver.current_lat = data['latitude']
        driver.current_lng = data['longitude']
        driver.location_updated_at = timezone.now()
        driver.save(update_fields=['current_lat', 'current_lng', 'location_updated_at', 'updated_at'])
        point = DriverLocation.objects.create(
            driver=driver,
            latitude=data['latitude'],
            longitude=data['longitude'],
            accuracy=data.get('accuracy'),
        )

    active_orders = Order.objects.filter(assigned_driver=driver, state__in=TRACKABLE_ORDER_STATES).select_related('customer__user')
    for order in active_orders:
        publish_event(order.customer.user, 'driver_location_updated', {
            'order_id': order.pk,
            'driver_id': driver.pk,
            'latitude': point.latitude,
            'longitude': point.longitude,
            'accuracy': point.accuracy,
        })

    return Response({
        'success': True,
        'latitude': driver.current_lat,
        'longitude': driver.current_lng,
        'accuracy': point.accuracy,
        'recorded_at': point.recorded_at,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def driver_location(request, driver_id):
    """Current position of a driver delivering one of the customer's orders"""
    customer, error = require_customer(request)
    if error:
        return error
    driver = get_object_or_404(Driver, pk=driver_id)
    has_active_order = Order.objects.filter(
        customer=customer, assigned_driver=driver, state__in=TRACKABLE_ORDER_STATES
    ).exists()
    if not has_active_order:
        logger.warning(f"Customer {customer.pk} requested location of unrelated driver {driver.pk}")
        return Response({'error': 'You can only track drivers assigned to your active orders'}, status=status.HTTP_403_FORBIDDEN)
    if not driver.has_location:
        return Response({'error': 'Driver location not available'}, status=status.HTTP_404_NOT_FOUND)
    return Response({
        'driver_id': driver.pk,
        'latitude': driver.current_lat,
        'longitude': driver.current_lng,
        'updated_at': driver.location_updated_at,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_location_history(request, order_id):
    """Driver positions recorded since the order was placed, oldest first"""
    customer, error = require_customer(request)
    if error:
        return error
    order = get_object_or_404(Order, pk=order_id, customer=customer)
    if order.assigned_driver_id is None:
        return Response([])
    points = DriverLocation.objects.filter(
        driver_id=order.assigned_driver_id, recorded_at__gte=order.created_at
    )
    if order.delivered_at:
        points = points.filter(recorded_at__lte=order.delivered_at)
    points = list(points.order_by('-recorded_at', '-id')[:LOCATION_HISTORY_LIMIT])
    points.reverse()
    return Response(DriverLocationSerializer(points, many=True).data)
