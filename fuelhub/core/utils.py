"""Audit logging and request helpers shared by every app"""
import logging

from rest_framework import status
from rest_framework.response import Response

from .models import AuditLog

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """First address in X-Forwarded-For, else REMOTE_ADDR"""
    meta = getattr(request, 'META', None)
    if not meta:
        return None
    forwarded = meta.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip() or None
    return meta.get('REMOTE_ADDR') or None


def is_admin(user):
    return bool(user and user.is_authenticated and (user.is_superuser or user.role == 'admin'))


def role_forbidden(role):
    """Standard 403 body for role-restricted endpoints"""
    return Response({'error': f'Only {role}s can perform this action'}, status=status.HTTP_403_FORBIDDEN)


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_reference=None):
    """
    Record an admin-visible trail entry for KYC decisions, price and stock
    changes, order transitions and settings edits.

    The acting user is ``user`` when given, else ``request.user``. Entries
    missing an action, model or object id are skipped. Failures are logged
    and never reach the caller.
    """
    if not action or not model_name or object_id is None:
        logger.warning(f"Audit log skipped: action={action} model={model_name} object_id={object_id}")
        return None

    actor = user or getattr(request, 'user', None)
    if actor is not None and not actor.is_authenticated:
        actor = None

    try:
        return AuditLog.objects.create(
            user=actor,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_reference=object_reference,
            changes=changes or {},
            ip_address=get_client_ip(request),
        )
    except Exception as e:
        logger.error(f"Failed to write audit log for {model_name} {object_id}: {e}")
        return None
