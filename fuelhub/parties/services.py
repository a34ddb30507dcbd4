import logging
from django.utils import timezone
from fuelhub.notifications.services import notify_safely
from .models import Customer, Driver, Supplier

logger = logging.getLogger('fuelhub.parties')


def create_role_profile(user, company_name='', supplier_name=''):
    """Create the profile row matching ``user.role``; admins have none"""
    if user.role == 'customer':
        return Customer.objects.create(user=user, company_name=company_name or '')
    if user.role == 'driver':
        return Driver.objects.create(user=user)
    if user.role == 'supplier':
        return Supplier.objects.create(owner=user, name=supplier_name or user.display_name)
    return None


def get_customer(user):
    return Customer.objects.filter(user=user).first()


def get_driver(user):
    return Driver.objects.filter(user=user).first()


def get_supplier(user):
    return Supplier.objects.filter(owner=user).first()


def serialize_role_profile(user):
    from .serializers import CustomerSerializer, DriverSerializer, SupplierSerializer

    if user.role == 'customer':
        profile = get_customer(user)
        return CustomerSerializer(profile).data if profile else None
    if user.role == 'driver':
        profile = get_driver(user)
        return DriverSerializer(profile).data if profile else None
    if user.role == 'supplier':
        profile = get_supplier(user)
        return SupplierSerializer(profile).data if profile else None
    return None


def approve_driver(driver):
    driver.kyc_status = 'approved'
    driver.status = 'active'
    driver.compliance_status = 'approved'
    driver.rejection_reason = ''
    driver.save(update_fields=['kyc_status', 'status', 'compliance_status', 'rejection_reason', 'updated_at'])
    logger.info(f"Driver {driver.pk} approved")
    notify_safely(
        driver.user, 'account_approved', 'Account approved',
        'Your driver account has been approved. You can now receive delivery offers.',
        data={'role': 'driver'}, priority='high'
    )
    return driver


def reject_driver(driver, reason):
    driver.kyc_status = 'rejected'
    driver.status = 'rejected'
    driver.compliance_status = 'rejected'
    driver.rejection_reason = reason
    driver.save(update_fields=['kyc_status', 'status', 'compliance_status', 'rejection_reason', 'updated_at'])
    logger.info(f"Driver {driver.pk} rejected: {reason}")
    notify_safely(
        driver.user, 'account_rejected', 'Account not approved',
        f'Your driver application was not approved: {reason}',
        data={'role': 'driver', 'reason': reason}, priority='high'
    )
    return driver


def approve_supplier(supplier):
    supplier.kyb_status = 'approved'
    supplier.status = 'active'
    supplier.compliance_status = 'approved'
    supplier.rejection_reason = ''
    supplier.save(update_fields=['kyb_status', 'status', 'compliance_status', 'rejection_reason', 'updated_at'])
    logger.info(f"Supplier {supplier.pk} approved")
    notify_safely(
        supplier.owner, 'account_approved', 'Account approved',
        'Your supplier account has been approved. You can now manage depots and pricing.',
        data={'role': 'supplier'}, priority='high'
    )
    return supplier


def reject_supplier(supplier, reason):
    supplier.kyb_status = 'rejected'
    supplier.status = 'rejected'
    supplier.compliance_status = 'rejected'
    supplier.rejection_reason = reason
    supplier.save(update_fields=['kyb_status', 'status', 'compliance_status', 'rejection_reason', 'updated_at'])
    logger.info(f"Supplier {supplier.pk} rejected: {reason}")
    notify_safely(
        supplier.owner, 'account_rejected', 'Account not approved',
        f'Your supplier application was not approved: {reason}',
        data={'role': 'supplier', 'reason': reason}, priority='high'
    )
    return supplier


def review_document(document, reviewer, verification_status, reason=''):
    document.verification_status = verification_status
    document.rejection_reason = reason if verification_status == 'rejected' else ''
    document.verified_by = reviewer
    document.verified_at = timezone.now()
    document.save(update_fields=['verification_status', 'rejection_reason', 'verified_by', 'verified_at'])
    logger.info(f"Document {document.pk} {verification_status} by {reviewer.username}")
    name = document.title or document.doc_type
    if verification_status == 'rejected':
        message = f'Your document "{name}" was rejected: {reason}'
    else:
        message = f'Your document "{name}" was {verification_status}.'
    notify_safely(
        document.owner, 'system_alert', 'Document reviewed', message,
        data={'document_id': document.pk, 'verification_status': verification_status},
        priority='high' if verification_status == 'rejected' else 'medium'
    )
    return document
