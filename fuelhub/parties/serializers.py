from rest_framework import serializers
from .models import Customer, Driver, Supplier, Vehicle, Document, DeliveryAddress, PaymentMethod


class CustomerSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source='user.username', read_only=True)
    full_name = serializers.CharField(source='user.full_name', read_only=True)
    email = serializers.EmailField(source='user.email', read_only=True)

    class Meta:
        model = Customer
        fields = ['id', 'username', 'full_name', 'email', 'company_name', 'vat_number', 'created_at']
        read_only_fields = ['created_at']


class DriverSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source='user.username', read_only=True)
    full_name = serializers.CharField(source='user.full_name', read_only=True)
    phone = serializers.CharField(source='user.phone', read_only=True)

    class Meta:
        model = Driver
        fields = ['id', 'username', 'full_name', 'phone', 'kyc_status', 'status', 'compliance_status',
                  'rejection_reason', 'premium_status', 'availability_status', 'current_lat', 'current_lng',
                  'location_updated_at', 'job_radius_preference_miles', 'license_number', 'created_at']
        read_only_fields = ['kyc_status', 'status', 'compliance_status', 'rejection_reason', 'premium_status',
                            'current_lat', 'current_lng', 'location_updated_at', 'created_at']


class DriverPreferencesSerializer(serializers.ModelSerializer):
    job_radius_preference_miles = serializers.IntegerField(min_value=1, max_value=500, required=False)

    class Meta:
        model = Driver
        fields = ['job_radius_preference_miles', 'availability_status']


class SupplierSerializer(serializers.ModelSerializer):
    owner_username = serializers.CharField(source='owner.username', read_only=True)
    owner_email = serializers.EmailField(source='owner.email', read_only=True)

    class Meta:
        model = Supplier
        fields = ['id', 'owner_username', 'owner_email', 'name', 'registered_name', 'cipc_number', 'vat_number',
                  'kyb_status', 'status', 'compliance_status', 'rejection_reason', 'created_at']
        read_only_fields = ['kyb_status', 'status', 'compliance_status', 'rejection_reason', 'created_at']


class VehicleSerializer(serializers.ModelSerializer):
    capacity_litres = serializers.IntegerField(min_value=1)

    class Meta:
        model = Vehicle
        fields = ['id', 'registration_number', 'make', 'model', 'year', 'capacity_litres',
                  'fuel_types', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_registration_number(self, value):
        return value.strip().upper()

    def validate_fuel_types(self, value):
        if not isinstance(value, list) or not all(isinstance(code, str) for code in value):
            raise serializers.ValidationError("Must be a list of fuel type codes")
        return value


class DocumentSerializer(serializers.ModelSerializer):
    owner_username = serializers.CharField(source='owner.username', read_only=True)

    class Meta:
        model = Document
        fields = ['id', 'owner', 'owner_username', 'owner_type', 'vehicle', 'doc_type', 'title', 'file_url',
                  'mime_type', 'document_number', 'expiry_date', 'verification_status', 'rejection_reason',
                  'verified_at', 'uploaded_at']
        read_only_fields = ['owner', 'owner_type', 'verification_status', 'rejection_reason',
                            'verified_at', 'uploaded_at']


class DeliveryAddressSerializer(serializers.ModelSerializer):
    lat = serializers.FloatField(min_value=-90, max_value=90, required=False, allow_null=True)
    lng = serializers.FloatField(min_value=-180, max_value=180, required=False, allow_null=True)
    full_address = serializers.CharField(read_only=True)

    class Meta:
        model = DeliveryAddress
        fields = ['id', 'label', 'address_street', 'address_city', 'address_province', 'address_postal_code',
                  'address_country', 'lat', 'lng', 'access_instructions', 'verification_status', 'is_default',
                  'full_address', 'created_at', 'updated_at']
        read_only_fields = ['verification_status', 'created_at', 'updated_at']


class PaymentMethodSerializer(serializers.ModelSerializer):
    account_number = serializers.CharField(write_only=True, required=False, allow_blank=True)
    masked_account_number = serializers.SerializerMethodField()

    class Meta:
        model = PaymentMethod
        fields = ['id', 'method_type', 'label', 'bank_name', 'account_holder_name', 'account_number',
                  'masked_account_number', 'branch_code', 'card_last_four', 'card_brand',
                  'card_expiry_month', 'card_expiry_year', 'is_default', 'is_active', 'created_at']
        read_only_fields = ['is_active', 'created_at']

    def get_masked_account_number(self, obj):
        if not obj.account_number:
            return None
        return f"****{obj.account_number[-4:]}"

    def validate(self, attrs):
        method_type = attrs.get('method_type')
        if method_type == 'bank_account':
            missing = [f for f in ('bank_name', 'account_holder_name', 'account_number') if not attrs.get(f)]
            if missing:
                raise serializers.ValidationError({f: "This field is required for bank accounts." for f in missing})
        elif method_type in ('credit_card', 'debit_card'):
            last_four = attrs.get('card_last_four', '')
            if not last_four or len(last_four) != 4 or not last_four.isdigit():
                raise serializers.ValidationError({'card_last_four': "Enter the last four digits of the card."})
        return attrs
