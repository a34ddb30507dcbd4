import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from fuelhub.catalog.models import FuelType
from fuelhub.core.utils import create_audit_log, is_admin
from fuelhub.locations.models import Depot
from fuelhub.parties.permissions import require_compliant_supplier, require_driver
from .models import DepotPrice, DriverPricing, PricingHistory
from .serializers import (
    DepotPriceSerializer, TierCreateSerializer, TierUpdateSerializer, StockUpdateSerializer,
    DriverPricingSerializer, DriverPricingUpdateSerializer, PricingHistorySerializer
)
from .services import (
    PricingError, build_depot_pricing, create_tier, update_tier, set_stock, set_driver_price
)

logger = logging.getLogger('fuelhub.pricing')


def _owned_depot(request, depot_id):
    """Depot belonging to the requesting (compliant) supplier"""
    supplier, error = require_compliant_supplier(request)
    if error:
        return None, error
    depot = Depot.objects.filter(pk=depot_id, supplier=supplier).first()
    if depot is None:
        return None, Response({'error': 'Depot not found'}, status=status.HTTP_404_NOT_FOUND)
    return depot, None


# Depot pricing tiers
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def depot_pricing(request, depot_id):
    """Fuel types with their tiers for a depot, or add a tier (supplier)"""
    if request.method == 'GET':
        depot = get_object_or_404(Depot, pk=depot_id)
        owns_depot = depot.supplier.owner_id == request.user.pk
        if not depot.is_active and not (owns_depot or is_admin(request.user)):
            return Response({'error': 'Depot not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response(build_depot_pricing(depot))

    depot, error = _owned_depot(request, depot_id)
    if error:
        return error
    serializer = TierCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    fuel_type = FuelType.objects.filter(pk=data['fuel_type_id'], active=True).first()
    if fuel_type is None:
        return Response({'error': 'Fuel type not found'}, status=status.HTTP_400_BAD_REQUEST)
    try:
        tier = create_tier(
            depot, fuel_type, data['price_cents'], data['min_litres'],
            available_litres=data.get('available_litres'), changed_by=request.user
        )
    except PricingError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(request, 'price_change', 'DepotPrice', tier.pk, {'price_cents': tier.price_cents, 'min_litres': str(tier.min_litres)})
    return Response(DepotPriceSerializer(tier).data, status=status.HTTP_201_CREATED)


@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def depot_pricing_tier(request, depot_id, pk):
    """Update or remove a single pricing tier"""
    depot, error = _owned_depot(request, depot_id)
    if error:
        return error
    tier = get_object_or_404(DepotPrice, pk=pk, depot=depot)

    if request.method == 'DELETE':
        logger.info(f"Tier {tier.pk} deleted from depot {depot.pk} by {request.user.username}")
        tier.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = TierUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    try:
        update_tier(
            tier,
            price_cents=data.get('price_cents'),
            min_litres=data.get('min_litres'),
            available_litres=data.get('available_litres'),
            stock_given='available_litres' in data,
            changed_by=request.user,
        )
    except PricingError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    if 'price_cents' in data:
        create_audit_log(request, 'price_change', 'DepotPrice', tier.pk, {'price_cents': tier.price_cents})
    return Response(DepotPriceSerializer(tier).data)


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def depot_stock(request, depot_id):
    """Set the shared stock level for one fuel type at a depot"""
    depot, error = _owned_depot(request, depot_id)
    if error:
        return error
    serializer = StockUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    fuel_type = get_object_or_404(FuelType, pk=serializer.validated_data['fuel_type_id'])
    tiers = set_stock(depot, fuel_type, serializer.validated_data['available_litres'])
    create_audit_log(request, 'stock_change', 'Depot', depot.pk,
                     {'fuel_type': fuel_type.code, 'available_litres': str(serializer.validated_data['available_litres'])})
    return Response(DepotPriceSerializer(tiers, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def depot_pricing_history(request, depot_id):
    depot, error = _owned_depot(request, depot_id)
    if error:
        return error
    history = PricingHistory.objects.filter(depot=depot).select_related('fuel_type', 'changed_by')[:100]
    return Response(PricingHistorySerializer(history, many=True).data)


# Driver pricing
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def driver_pricing_list(request):
    """Active fuel types with the driver's price per litre (null when unset)"""
    driver, error = require_driver(request)
    if error:
        return error
    pricing = {p.fuel_type_id: p for p in DriverPricing.objects.filter(driver=driver)}
    result = []
    for fuel_type in FuelType.objects.filter(active=True):
        entry = pricing.get(fuel_type.pk)
        result.append({
            'id': fuel_type.pk,
            'code': fuel_type.code,
            'label': fuel_type.label,
            'pricing': DriverPricingSerializer(entry).data if entry else None,
        })
    return Response(result)


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def driver_pricing_update(request, fuel_type_id):
    driver, error = require_driver(request)
    if error:
        return error
    fuel_type = get_object_or_404(FuelType, pk=fuel_type_id)
    serializer = DriverPricingUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    pricing = set_driver_price(
        driver, fuel_type, serializer.validated_data['fuel_price_per_litre_cents'],
        changed_by=request.user, notes=serializer.validated_data.get('notes', '')
    )
    return Response(DriverPricingSerializer(pricing).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def driver_pricing_history(request):
    driver, error = require_driver(request)
    if error:
        return error
    history = PricingHistory.objects.filter(driver=driver).select_related('fuel_type', 'changed_by')[:100]
    return Response(PricingHistorySerializer(history, many=True).data)
