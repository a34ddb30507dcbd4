import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from django.db.models.deletion import ProtectedError
from fuelhub.core.model_cache import get_cached_fuel_type_list, cache_fuel_type_list
from fuelhub.core.utils import is_admin
from .models import FuelType
from .serializers import FuelTypeSerializer

logger = logging.getLogger('fuelhub.catalog')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def fuel_type_list_create(request):
    """List active fuel types (admins may pass ?all=true) or create one"""
    if request.method == 'GET':
        if is_admin(request.user) and request.query_params.get('all') == 'true':
            serializer = FuelTypeSerializer(FuelType.objects.all(), many=True)
            return Response(serializer.data)

        cached_data = get_cached_fuel_type_list()
        if cached_data is not None:
            return Response(cached_data)
        serializer = FuelTypeSerializer(FuelType.objects.filter(active=True), many=True)
        data = serializer.data
        cache_fuel_type_list(data)
        return Response(data)

    if not is_admin(request.user):
        return Response({'error': 'Only administrators can manage fuel types'}, status=status.HTTP_403_FORBIDDEN)
    serializer = FuelTypeSerializer(data=request.data)
    if serializer.is_valid():
        fuel_type = serializer.save()
        logger.info(f"Fuel type '{fuel_type.code}' created by {request.user.username}")
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def fuel_type_detail(request, pk):
    """Retrieve, update or delete a fuel type"""
    fuel_type = get_object_or_404(FuelType, pk=pk)

    if request.method == 'GET':
        return Response(FuelTypeSerializer(fuel_type).data)

    if not is_admin(request.user):
        return Response({'error': 'Only administrators can manage fuel types'}, status=status.HTTP_403_FORBIDDEN)

    if request.method == 'PATCH':
        serializer = FuelTypeSerializer(fuel_type, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        try:
            fuel_type.delete()
        except ProtectedError:
            # Referenced by orders or pricing; retire it instead
            fuel_type.active = False
            fuel_type.save(update_fields=['active'])
            logger.info(f"Fuel type '{fuel_type.code}' is in use, deactivated instead of deleted")
            return Response(FuelTypeSerializer(fuel_type).data)
        return Response(status=status.HTTP_204_NO_CONTENT)
