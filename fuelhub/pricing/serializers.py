from decimal import Decimal
from rest_framework import serializers
from .models import DepotPrice, DriverPricing, PricingHistory


class DepotPriceSerializer(serializers.ModelSerializer):
    fuel_type_code = serializers.CharField(source='fuel_type.code', read_only=True)
    fuel_type_label = serializers.CharField(source='fuel_type.label', read_only=True)

    class Meta:
        model = DepotPrice
        fields = ['id', 'depot', 'fuel_type', 'fuel_type_code', 'fuel_type_label', 'price_cents',
                  'min_litres', 'available_litres', 'created_at', 'updated_at']
        read_only_fields = fields


class TierCreateSerializer(serializers.Serializer):
    fuel_type_id = serializers.IntegerField()
    price_cents = serializers.IntegerField(min_value=0)
    min_litres = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'), default=Decimal('0'))
    available_litres = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'),
                                                required=False, allow_null=True)


class TierUpdateSerializer(serializers.Serializer):
    price_cents = serializers.IntegerField(min_value=0, required=False)
    min_litres = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'), required=False)
    available_litres = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'),
                                                required=False, allow_null=True)


class StockUpdateSerializer(serializers.Serializer):
    fuel_type_id = serializers.IntegerField()
    available_litres = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'))


class DriverPricingSerializer(serializers.ModelSerializer):
    class Meta:
        model = DriverPricing
        fields = ['id', 'fuel_type', 'fuel_price_per_litre_cents', 'active', 'updated_at']
        read_only_fields = fields


class DriverPricingUpdateSerializer(serializers.Serializer):
    fuel_price_per_litre_cents = serializers.IntegerField(min_value=0)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=500)


class PricingHistorySerializer(serializers.ModelSerializer):
    fuel_type_label = serializers.CharField(source='fuel_type.label', read_only=True)
    changed_by_username = serializers.CharField(source='changed_by.username', read_only=True, default=None)

    class Meta:
        model = PricingHistory
        fields = ['id', 'entity_type', 'depot', 'driver', 'fuel_type', 'fuel_type_label', 'min_litres',
                  'old_price_cents', 'new_price_cents', 'notes', 'changed_by_username', 'created_at']
        read_only_fields = fields
