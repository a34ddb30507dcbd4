from decimal import Decimal
from rest_framework import serializers
from .models import DriverDepotOrder


class DriverDepotOrderSerializer(serializers.ModelSerializer):
    reference = serializers.CharField(read_only=True)
    depot_name = serializers.CharField(source='depot.name', read_only=True)
    depot_city = serializers.CharField(source='depot.address_city', read_only=True)
    fuel_type_code = serializers.CharField(source='fuel_type.code', read_only=True)
    fuel_type_label = serializers.CharField(source='fuel_type.label', read_only=True)
    driver_name = serializers.CharField(source='driver.user.display_name', read_only=True)
    driver_phone = serializers.CharField(source='driver.user.phone', read_only=True)

    class Meta:
        model = DriverDepotOrder
        fields = ['id', 'reference', 'driver', 'driver_name', 'driver_phone', 'depot', 'depot_name', 'depot_city',
                  'fuel_type', 'fuel_type_code', 'fuel_type_label', 'litres', 'price_per_litre_cents',
                  'total_price_cents', 'status', 'payment_status', 'payment_method', 'payment_proof_url',
                  'pickup_date', 'notes', 'driver_signature_url', 'driver_signed_at', 'supplier_signature_url',
                  'supplier_signed_at', 'actual_litres_delivered', 'payment_confirmed_at', 'released_at',
                  'completed_at', 'created_at', 'updated_at']
        read_only_fields = fields


class DepotOrderCreateSerializer(serializers.Serializer):
    depot_id = serializers.IntegerField()
    fuel_type_id = serializers.IntegerField()
    litres = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))
    pickup_date = serializers.DateTimeField()
    notes = serializers.CharField(required=False, allow_blank=True)


class PaymentSubmitSerializer(serializers.Serializer):
    payment_method = serializers.ChoiceField(choices=DriverDepotOrder.PAYMENT_METHOD_CHOICES)
    payment_proof_url = serializers.URLField(required=False, allow_blank=True, max_length=1000)


class SignatureSerializer(serializers.Serializer):
    signature_url = serializers.URLField(max_length=1000)


class RejectSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=1000)


class ConfirmDeliverySerializer(serializers.Serializer):
    actual_litres = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'),
                                             required=False, allow_null=True)
