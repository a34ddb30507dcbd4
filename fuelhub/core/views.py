import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError, AuthenticationFailed
from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.shortcuts import get_object_or_404
from django.db import transaction
from django.db.models import Q
from .models import AppSetting, AuditLog
from .serializers import (
    UserSerializer, UserCreateSerializer, AdminUserUpdateSerializer,
    AppSettingSerializer, AuditLogSerializer
)
from .model_cache import get_cached_app_settings, cache_app_settings
from .utils import is_admin, create_audit_log

User = get_user_model()
logger = logging.getLogger('fuelhub.core')


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        data['user'] = UserSerializer(self.user).data
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['role'] = user.role
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh that answers 401 when the token's user has been deleted"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except (ObjectDoesNotExist, User.DoesNotExist):
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    serializer_class = CustomTokenRefreshSerializer


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """Register a customer, driver or supplier and return a token pair"""
    serializer = UserCreateSerializer(data=request.data)
    if serializer.is_valid():
        with transaction.atomic():
            user = serializer.save()
        logger.info(f"Registered {user.role} account '{user.username}'")
        token = CustomTokenObtainPairSerializer.get_token(user)
        return Response({
            'user': UserSerializer(user).data,
            'access': str(token.access_token),
            'refresh': str(token),
        }, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Current user with role profile and capability flags"""
    from fuelhub.parties.services import serialize_role_profile

    user = request.user
    user_data = UserSerializer(user).data
    user_data['profile'] = serialize_role_profile(user)
    user_data['is_admin'] = is_admin(user)
    user_data['is_customer'] = user.role == 'customer'
    user_data['is_driver'] = user.role == 'driver'
    user_data['is_supplier'] = user.role == 'supplier'
    return Response(user_data)


# User administration
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def user_list_create(request):
    """List users (optionally by role) or create a user with any role"""
    if not is_admin(request.user):
        return Response({'error': 'Only administrators can manage users'}, status=status.HTTP_403_FORBIDDEN)

    if request.method == 'GET':
        users = User.objects.all().order_by('-created_at')
        role = request.query_params.get('role')
        if role:
            users = users.filter(role=role)
        search = request.query_params.get('search')
        if search:
            users = users.filter(Q(username__icontains=search) | Q(full_name__icontains=search) | Q(email__icontains=search))
        serializer = UserSerializer(users, many=True)
        return Response(serializer.data)
    else:
        serializer = UserCreateSerializer(data=request.data, context={'allow_admin': True})
        if serializer.is_valid():
            with transaction.atomic():
                user = serializer.save()
            create_audit_log(request, 'create', 'User', user.id, {'role': user.role}, object_reference=user.username)
            logger.info(f"Admin {request.user.username} created {user.role} user '{user.username}'")
            return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def user_detail(request, pk):
    """Retrieve, update or delete a user"""
    from fuelhub.parties.services import serialize_role_profile

    if not is_admin(request.user):
        return Response({'error': 'Only administrators can manage users'}, status=status.HTTP_403_FORBIDDEN)
    user = get_object_or_404(User, pk=pk)

    if request.method == 'GET':
        data = UserSerializer(user).data
        data['profile'] = serialize_role_profile(user)
        return Response(data)
    elif request.method == 'PATCH':
        serializer = AdminUserUpdateSerializer(user, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request, 'update', 'User', user.id, dict(request.data), object_reference=user.username)
            return Response(UserSerializer(user).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if user.pk == request.user.pk:
            return Response({'error': 'You cannot delete your own account'}, status=status.HTTP_400_BAD_REQUEST)
        create_audit_log(request, 'delete', 'User', user.id, object_reference=user.username)
        user.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def app_settings(request):
    """Read marketplace settings; admins may update them"""
    if request.method == 'GET':
        cached_data = get_cached_app_settings()
        if cached_data:
            return Response(cached_data)
        data = AppSettingSerializer(AppSetting.load()).data
        cache_app_settings(data)
        return Response(data)

    if not is_admin(request.user):
        logger.warning(f"User {request.user.username} attempted to change app settings")
        return Response({'error': 'Only administrators can change settings'}, status=status.HTTP_403_FORBIDDEN)

    settings_obj = AppSetting.load()
    serializer = AppSettingSerializer(settings_obj, data=request.data, partial=True)
    if serializer.is_valid():
        serializer.save()
        create_audit_log(request, 'settings_change', 'AppSetting', settings_obj.pk, {k: str(v) for k, v in request.data.items()})
        logger.info(f"App settings updated by {request.user.username}: {list(request.data.keys())}")
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# AuditLog views (read-only)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_list(request):
    """List audit logs with filtering"""
    queryset = AuditLog.objects.select_related('user')

    if not is_admin(request.user):
        queryset = queryset.filter(user=request.user)

    action_filter = request.query_params.get('action', None)
    if action_filter:
        queryset = queryset.filter(action=action_filter)

    model_filter = request.query_params.get('model', None)
    if model_filter:
        queryset = queryset.filter(model_name=model_filter)

    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)
    if date_from:
        queryset = queryset.filter(created_at__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__lte=date_to)

    queryset = queryset.order_by('-created_at')[:500]
    serializer = AuditLogSerializer(queryset, many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_detail(request, pk):
    """Retrieve an audit log"""
    audit_log = get_object_or_404(AuditLog, pk=pk)

    if not is_admin(request.user) and audit_log.user != request.user:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    serializer = AuditLogSerializer(audit_log)
    return Response(serializer.data)
