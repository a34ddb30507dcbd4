import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from django.db import transaction
from fuelhub.core.utils import is_admin, role_forbidden, create_audit_log
from .models import Customer, Driver, Supplier, Vehicle, Document, DeliveryAddress, PaymentMethod
from .serializers import (
    CustomerSerializer, DriverSerializer, DriverPreferencesSerializer, SupplierSerializer,
    VehicleSerializer, DocumentSerializer, DeliveryAddressSerializer, PaymentMethodSerializer
)
from .services import (
    get_customer, get_driver, get_supplier,
    approve_driver, reject_driver, approve_supplier, reject_supplier, review_document
)
from .compliance import get_driver_compliance, get_supplier_compliance
from .geocoding import fill_coordinates

logger = logging.getLogger('fuelhub.parties')

KYC_DECISIONS = ('approve', 'reject')
LOCATION_FIELDS = {'address_street', 'address_city', 'address_province', 'address_postal_code', 'address_country'}


# Profile
@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def my_profile(request):
    """Role profile of the current user; PUT and PATCH both update only the fields sent"""
    user = request.user
    if user.role == 'customer':
        profile, serializer_class = get_customer(user), CustomerSerializer
    elif user.role == 'driver':
        profile, serializer_class = get_driver(user), DriverSerializer
    elif user.role == 'supplier':
        profile, serializer_class = get_supplier(user), SupplierSerializer
    else:
        return Response({'error': 'This account has no role profile'}, status=status.HTTP_404_NOT_FOUND)

    if profile is None:
        return Response({'error': 'Profile not found'}, status=status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return Response(serializer_class(profile).data)

    serializer = serializer_class(profile, data=request.data, partial=True)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# Delivery addresses
def _unset_other_defaults(customer, keep_id):
    DeliveryAddress.objects.filter(customer=customer, is_default=True).exclude(pk=keep_id).update(is_default=False)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def address_list_create(request):
    """List or create delivery addresses for the current customer"""
    customer = get_customer(request.user)
    if customer is None:
        return role_forbidden('customer')

    if request.method == 'GET':
        addresses = DeliveryAddress.objects.filter(customer=customer)
        return Response(DeliveryAddressSerializer(addresses, many=True).data)

    serializer = DeliveryAddressSerializer(data=request.data)
    if serializer.is_valid():
        address = DeliveryAddress(customer=customer, **serializer.validated_data)
        fill_coordinates(address)
        with transaction.atomic():
            address.save()
            if address.is_default:
                _unset_other_defaults(customer, address.pk)
        logger.info(f"Customer {customer.pk} added delivery address {address.pk}")
        return Response(DeliveryAddressSerializer(address).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def address_detail(request, pk):
    """Retrieve, update or delete one of the customer's addresses"""
    customer = get_customer(request.user)
    if customer is None:
        return role_forbidden('customer')
    address = get_object_or_404(DeliveryAddress, pk=pk, customer=customer)

    if request.method == 'GET':
        return Response(DeliveryAddressSerializer(address).data)
    elif request.method == 'PATCH':
        serializer = DeliveryAddressSerializer(address, data=request.data, partial=True)
        if serializer.is_valid():
            changes = serializer.validated_data
            coordinates = {}
            if LOCATION_FIELDS & set(changes) and 'lat' not in changes:
                moved = DeliveryAddress(**{f: changes.get(f, getattr(address, f)) for f in LOCATION_FIELDS})
                if fill_coordinates(moved):
                    coordinates = {'lat': moved.lat, 'lng': moved.lng}
            with transaction.atomic():
                address = serializer.save(**coordinates)
                if address.is_default:
                    _unset_other_defaults(customer, address.pk)
            return Response(DeliveryAddressSerializer(address).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        address.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Payment methods
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def payment_method_list_create(request):
    """List active payment methods or add a new one"""
    customer = get_customer(request.user)
    if customer is None:
        return role_forbidden('customer')

    if request.method == 'GET':
        methods = PaymentMethod.objects.filter(customer=customer, is_active=True)
        return Response(PaymentMethodSerializer(methods, many=True).data)

    serializer = PaymentMethodSerializer(data=request.data)
    if serializer.is_valid():
        with transaction.atomic():
            method = serializer.save(customer=customer)
            if method.is_default:
                PaymentMethod.objects.filter(customer=customer, is_default=True).exclude(pk=method.pk).update(is_default=False)
        return Response(PaymentMethodSerializer(method).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def payment_method_detail(request, pk):
    """Update (e.g. make default) or soft-delete a payment method"""
    customer = get_customer(request.user)
    if customer is None:
        return role_forbidden('customer')
    method = get_object_or_404(PaymentMethod, pk=pk, customer=customer, is_active=True)

    if request.method == 'PATCH':
        serializer = PaymentMethodSerializer(method, data=request.data, partial=True)
        if serializer.is_valid():
            with transaction.atomic():
                method = serializer.save()
                if method.is_default:
                    PaymentMethod.objects.filter(customer=customer, is_default=True).exclude(pk=method.pk).update(is_default=False)
            return Response(PaymentMethodSerializer(method).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        method.is_active = False
        method.is_default = False
        method.save(update_fields=['is_active', 'is_default'])
        return Response(status=status.HTTP_204_NO_CONTENT)


# Driver vehicles and preferences
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def vehicle_list_create(request):
    driver = get_driver(request.user)
    if driver is None:
        return role_forbidden('driver')

    if request.method == 'GET':
        return Response(VehicleSerializer(driver.vehicles.all(), many=True).data)

    serializer = VehicleSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save(driver=driver)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def vehicle_detail(request, pk):
    driver = get_driver(request.user)
    if driver is None:
        return role_forbidden('driver')
    vehicle = get_object_or_404(Vehicle, pk=pk, driver=driver)

    if request.method == 'GET':
        return Response(VehicleSerializer(vehicle).data)
    elif request.method == 'PATCH':
        serializer = VehicleSerializer(vehicle, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        vehicle.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def driver_preferences(request):
    """Job radius and availability used by dispatch"""
    driver = get_driver(request.user)
    if driver is None:
        return role_forbidden('driver')

    if request.method == 'GET':
        return Response(DriverPreferencesSerializer(driver).data)

    serializer = DriverPreferencesSerializer(driver, data=request.data, partial=True)
    if serializer.is_valid():
        serializer.save()
        logger.info(f"Driver {driver.pk} updated preferences: {serializer.validated_data}")
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# Documents and compliance
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def document_list_create(request):
    """List or upload the current user's KYC/KYB documents"""
    if request.method == 'GET':
        documents = Document.objects.filter(owner=request.user)
        return Response(DocumentSerializer(documents, many=True).data)

    if request.user.role not in ('customer', 'driver', 'supplier'):
        return Response({'error': 'Only customers, drivers and suppliers upload documents'}, status=status.HTTP_403_FORBIDDEN)

    serializer = DocumentSerializer(data=request.data)
    if serializer.is_valid():
        vehicle = serializer.validated_data.get('vehicle')
        owner_type = request.user.role
        if vehicle is not None:
            if vehicle.driver.user_id != request.user.pk:
                return Response({'error': 'Vehicle not found'}, status=status.HTTP_404_NOT_FOUND)
            owner_type = 'vehicle'
        document = serializer.save(owner=request.user, owner_type=owner_type)
        logger.info(f"User {request.user.username} uploaded document '{document.doc_type}'")
        return Response(DocumentSerializer(document).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def document_detail(request, pk):
    document = get_object_or_404(Document, pk=pk)
    if document.owner_id != request.user.pk and not is_admin(request.user):
        return Response({'error': 'Document not found'}, status=status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return Response(DocumentSerializer(document).data)
    if document.verification_status == 'verified' and not is_admin(request.user):
        return Response({'error': 'Verified documents can only be removed by an administrator'}, status=status.HTTP_400_BAD_REQUEST)
    document.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def compliance_status(request):
    """Document checklist and overall compliance state for drivers and suppliers"""
    if request.user.role == 'driver':
        driver = get_driver(request.user)
        if driver:
            return Response(get_driver_compliance(driver))
    elif request.user.role == 'supplier':
        supplier = get_supplier(request.user)
        if supplier:
            return Response(get_supplier_compliance(supplier))
    return Response({'error': 'Compliance applies to drivers and suppliers only'}, status=status.HTTP_404_NOT_FOUND)


# Admin: KYC/KYB review
def _admin_only(request):
    if not is_admin(request.user):
        logger.warning(f"User {request.user.username} attempted an admin KYC action")
        return Response({'error': 'Only administrators can perform this action'}, status=status.HTTP_403_FORBIDDEN)
    return None


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def admin_customer_list(request):
    denied = _admin_only(request)
    if denied:
        return denied
    customers = Customer.objects.select_related('user').order_by('-created_at')
    return Response(CustomerSerializer(customers, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def admin_driver_list(request):
    denied = _admin_only(request)
    if denied:
        return denied
    drivers = Driver.objects.select_related('user').order_by('-created_at')
    kyc_status = request.query_params.get('kyc_status')
    if kyc_status:
        drivers = drivers.filter(kyc_status=kyc_status)
    return Response(DriverSerializer(drivers, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def admin_supplier_list(request):
    denied = _admin_only(request)
    if denied:
        return denied
    suppliers = Supplier.objects.select_related('owner')
    kyb_status = request.query_params.get('kyb_status')
    if kyb_status:
        suppliers = suppliers.filter(kyb_status=kyb_status)
    return Response(SupplierSerializer(suppliers, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def admin_kyc_pending(request):
    """Drivers and suppliers waiting for review"""
    denied = _admin_only(request)
    if denied:
        return denied
    drivers = Driver.objects.select_related('user').filter(kyc_status='pending').order_by('created_at')
    suppliers = Supplier.objects.select_related('owner').filter(kyb_status='pending').order_by('created_at')
    return Response({
        'drivers': DriverSerializer(drivers, many=True).data,
        'suppliers': SupplierSerializer(suppliers, many=True).data,
    })


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def admin_driver_update(request, pk):
    """Admin-only driver fields (premium status)"""
    denied = _admin_only(request)
    if denied:
        return denied
    driver = get_object_or_404(Driver, pk=pk)
    premium_status = request.data.get('premium_status')
    if premium_status not in dict(Driver.PREMIUM_STATUS_CHOICES):
        return Response({'error': 'premium_status must be one of: active, inactive'}, status=status.HTTP_400_BAD_REQUEST)
    driver.premium_status = premium_status
    driver.save(update_fields=['premium_status', 'updated_at'])
    create_audit_log(request, 'update', 'Driver', driver.pk, {'premium_status': premium_status})
    return Response(DriverSerializer(driver).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def admin_driver_kyc_decision(request, pk, decision):
    denied = _admin_only(request)
    if denied:
        return denied
    if decision not in KYC_DECISIONS:
        return Response({'error': 'Decision must be approve or reject'}, status=status.HTTP_400_BAD_REQUEST)
    driver = get_object_or_404(Driver, pk=pk)
    if decision == 'approve':
        approve_driver(driver)
        create_audit_log(request, 'kyc_approve', 'Driver', driver.pk, object_reference=driver.user.username)
    else:
        reason = (request.data.get('reason') or '').strip()
        if not reason:
            return Response({'error': 'A rejection reason is required'}, status=status.HTTP_400_BAD_REQUEST)
        reject_driver(driver, reason)
        create_audit_log(request, 'kyc_reject', 'Driver', driver.pk, {'reason': reason}, object_reference=driver.user.username)
    return Response(DriverSerializer(driver).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def admin_supplier_kyc_decision(request, pk, decision):
    denied = _admin_only(request)
    if denied:
        return denied
    if decision not in KYC_DECISIONS:
        return Response({'error': 'Decision must be approve or reject'}, status=status.HTTP_400_BAD_REQUEST)
    supplier = get_object_or_404(Supplier, pk=pk)
    if decision == 'approve':
        approve_supplier(supplier)
        create_audit_log(request, 'kyc_approve', 'Supplier', supplier.pk, object_reference=supplier.name)
    else:
        reason = (request.data.get('reason') or '').strip()
        if not reason:
            return Response({'error': 'A rejection reason is required'}, status=status.HTTP_400_BAD_REQUEST)
        reject_supplier(supplier, reason)
        create_audit_log(request, 'kyc_reject', 'Supplier', supplier.pk, {'reason': reason}, object_reference=supplier.name)
    return Response(SupplierSerializer(supplier).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def admin_user_documents(request, user_id):
    denied = _admin_only(request)
    if denied:
        return denied
    documents = Document.objects.filter(owner_id=user_id)
    return Response(DocumentSerializer(documents, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def admin_document_review(request, pk):
    """Mark a document verified or rejected"""
    denied = _admin_only(request)
    if denied:
        return denied
    document = get_object_or_404(Document, pk=pk)
    verification_status = request.data.get('verification_status')
    if verification_status not in ('verified', 'rejected'):
        return Response({'error': 'verification_status must be verified or rejected'}, status=status.HTTP_400_BAD_REQUEST)
    reason = (request.data.get('reason') or '').strip()
    if verification_status == 'rejected' and not reason:
        return Response({'error': 'A rejection reason is required'}, status=status.HTTP_400_BAD_REQUEST)
    review_document(document, request.user, verification_status, reason)
    create_audit_log(request, 'document_review', 'Document', document.pk, {'verification_status': verification_status})
    return Response(DocumentSerializer(document).data)
