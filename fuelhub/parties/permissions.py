"""
Role lookups for views. Each helper returns ``(profile, error_response)``;
exactly one of the two is None.
"""
from rest_framework import status
from rest_framework.response import Response
from fuelhub.core.utils import role_forbidden
from .services import get_customer, get_driver, get_supplier


def require_customer(request):
    customer = get_customer(request.user)
    if customer is None:
        return None, role_forbidden('customer')
    return customer, None


def require_driver(request):
    driver = get_driver(request.user)
    if driver is None:
        return None, role_forbidden('driver')
    return driver, None


def require_supplier(request):
    supplier = get_supplier(request.user)
    if supplier is None:
        return None, role_forbidden('supplier')
    return supplier, None


def require_compliant_supplier(request):
    """Supplier whose account is active and compliance approved"""
    supplier, error = require_supplier(request)
    if error:
        return None, error
    if not supplier.is_compliant:
        return None, Response({
            'error': 'Your account must be approved before you can perform this action',
            'code': 'COMPLIANCE_REQUIRED',
            'status': supplier.status,
            'compliance_status': supplier.compliance_status,
        }, status=status.HTTP_403_FORBIDDEN)
    return supplier, None
