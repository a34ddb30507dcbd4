from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User, AppSetting, AuditLog


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'full_name', 'phone', 'role', 'currency',
                  'is_active', 'created_at', 'updated_at']
        read_only_fields = ['role', 'created_at', 'updated_at']


class UserCreateSerializer(serializers.ModelSerializer):
    """Self-service registration; admins are created through the admin endpoints"""
    SELF_SERVICE_ROLES = ['customer', 'driver', 'supplier']

    password = serializers.CharField(write_only=True, validators=[validate_password])
    password_confirm = serializers.CharField(write_only=True)
    role = serializers.ChoiceField(choices=User.ROLE_CHOICES, default='customer')
    company_name = serializers.CharField(write_only=True, required=False, allow_blank=True)
    supplier_name = serializers.CharField(write_only=True, required=False, allow_blank=True)

    class Meta:
        model = User
        fields = ['username', 'email', 'password', 'password_confirm', 'full_name', 'phone',
                  'role', 'company_name', 'supplier_name']

    def validate_role(self, value):
        allow_admin = self.context.get('allow_admin', False)
        if value not in self.SELF_SERVICE_ROLES and not allow_admin:
            raise serializers.ValidationError("This role cannot be self-registered")
        return value

    def validate(self, attrs):
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({"password": "Passwords don't match"})
        return attrs

    def create(self, validated_data):
        from fuelhub.parties.services import create_role_profile

        validated_data.pop('password_confirm')
        password = validated_data.pop('password')
        profile_data = {
            'company_name': validated_data.pop('company_name', ''),
            'supplier_name': validated_data.pop('supplier_name', ''),
        }
        user = User.objects.create(**validated_data, is_active=True)
        user.set_password(password)
        if user.role == 'admin':
            user.is_staff = True
        user.save()
        create_role_profile(user, **profile_data)
        return user


class AdminUserUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'full_name', 'phone', 'role', 'currency', 'is_active']
        read_only_fields = ['id', 'username']


class AppSettingSerializer(serializers.ModelSerializer):
    class Meta:
        model = AppSetting
        fields = ['service_fee_percent', 'service_fee_min_cents', 'base_delivery_fee_cents',
                  'price_per_km_cents', 'default_price_per_litre_cents', 'premium_offer_minutes',
                  'regular_offer_minutes',
                  'updated_at']
        read_only_fields = ['updated_at']


class AuditLogSerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'action', 'model_name', 'object_id',
                  'object_reference', 'changes', 'ip_address', 'created_at']
