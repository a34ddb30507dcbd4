from decimal import Decimal
from rest_framework import serializers
from fuelhub.catalog.models import FuelType
from fuelhub.locations.models import Depot
from fuelhub.parties.models import DeliveryAddress, PaymentMethod
from .models import Order, DispatchOffer


class OrderSerializer(serializers.ModelSerializer):
    reference = serializers.CharField(read_only=True)
    fuel_type_code = serializers.CharField(source='fuel_type.code', read_only=True)
    fuel_type_label = serializers.CharField(source='fuel_type.label', read_only=True)
    delivery_address_text = serializers.SerializerMethodField()
    customer_name = serializers.CharField(source='customer.user.display_name', read_only=True)
    driver_name = serializers.SerializerMethodField()
    driver_phone = serializers.SerializerMethodField()
    depot_name = serializers.CharField(source='selected_depot.name', read_only=True, default=None)

    class Meta:
        model = Order
        fields = ['id', 'reference', 'customer', 'customer_name', 'fuel_type', 'fuel_type_code', 'fuel_type_label',
                  'litres', 'delivery_address', 'delivery_address_text', 'drop_lat', 'drop_lng', 'from_time',
                  'to_time', 'priority_level', 'access_instructions', 'vehicle_registration', 'equipment_type',
                  'tank_capacity', 'payment_method', 'terms_accepted', 'terms_accepted_at',
                  'price_per_litre_cents', 'fuel_price_cents', 'delivery_fee_cents', 'service_fee_cents',
                  'total_cents', 'selected_depot', 'depot_name', 'state', 'assigned_driver', 'driver_name',
                  'driver_phone', 'confirmed_delivery_time', 'assigned_at', 'paid_at', 'delivered_at',
                  'cancelled_at', 'delivery_signature_name', 'delivery_signed_at', 'created_at', 'updated_at']
        read_only_fields = fields

    def get_delivery_address_text(self, obj):
        return obj.delivery_address.full_address if obj.delivery_address else None

    def get_driver_name(self, obj):
        return obj.assigned_driver.user.display_name if obj.assigned_driver else None

    def get_driver_phone(self, obj):
        return obj.assigned_driver.user.phone if obj.assigned_driver else None


class OrderWriteSerializer(serializers.Serializer):
    """Fields a customer may set when placing or editing an order"""
    fuel_type = serializers.PrimaryKeyRelatedField(queryset=FuelType.objects.filter(active=True))
    litres = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))
    delivery_address = serializers.PrimaryKeyRelatedField(queryset=DeliveryAddress.objects.all())
    payment_method = serializers.PrimaryKeyRelatedField(queryset=PaymentMethod.objects.all(), required=False, allow_null=True)
    selected_depot = serializers.PrimaryKeyRelatedField(queryset=Depot.objects.filter(is_active=True), required=False, allow_null=True)
    from_time = serializers.DateTimeField(required=False, allow_null=True)
    to_time = serializers.DateTimeField(required=False, allow_null=True)
    priority_level = serializers.ChoiceField(choices=Order.PRIORITY_CHOICES, required=False)
    access_instructions = serializers.CharField(required=False, allow_blank=True)
    vehicle_registration = serializers.CharField(required=False, allow_blank=True, max_length=20)
    equipment_type = serializers.CharField(required=False, allow_blank=True, max_length=50)
    tank_capacity = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'),
                                             required=False, allow_null=True)
    terms_accepted = serializers.BooleanField(required=False, default=False)
    signature_data = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        from_time = attrs.get('from_time')
        to_time = attrs.get('to_time')
        if from_time and to_time and to_time <= from_time:
            raise serializers.ValidationError({'to_time': 'Delivery window must end after it starts'})
        return attrs


class OrderUpdateSerializer(OrderWriteSerializer):
    drop_lat = serializers.FloatField(required=False, min_value=-90, max_value=90)
    drop_lng = serializers.FloatField(required=False, min_value=-180, max_value=180)

    def __init__(self, *args, **kwargs):
        kwargs.setdefault('partial', True)
        super().__init__(*args, **kwargs)

    def validate(self, attrs):
        attrs = super().validate(attrs)
        attrs.pop('terms_accepted', None)
        return attrs


class DispatchOfferSerializer(serializers.ModelSerializer):
    driver_name = serializers.CharField(source='driver.user.display_name', read_only=True)
    driver_phone = serializers.CharField(source='driver.user.phone', read_only=True)
    order_reference = serializers.CharField(source='order.reference', read_only=True)

    class Meta:
        model = DispatchOffer
        fields = ['id', 'order', 'order_reference', 'driver', 'driver_name', 'driver_phone', 'state', 'is_premium',
                  'expires_at', 'proposed_delivery_time', 'proposed_price_per_km_cents',
                  'proposed_delivery_fee_cents', 'proposed_notes', 'responded_at', 'created_at']
        read_only_fields = fields


class DriverOfferSerializer(serializers.ModelSerializer):
    """Offer as seen by the driver, with the order summary"""
    order = OrderSerializer(read_only=True)

    class Meta:
        model = DispatchOffer
        fields = ['id', 'order', 'state', 'is_premium', 'expires_at', 'proposed_delivery_time',
                  'proposed_price_per_km_cents', 'proposed_delivery_fee_cents', 'proposed_notes', 'created_at']
        read_only_fields = fields


class QuoteSerializer(serializers.Serializer):
    proposed_delivery_time = serializers.DateTimeField(required=False, allow_null=True)
    price_per_km_cents = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=500)


class AcceptOfferSerializer(serializers.Serializer):
    confirmed_delivery_time = serializers.DateTimeField(required=False, allow_null=True)


class CompleteDeliverySerializer(serializers.Serializer):
    signature_data = serializers.CharField()
    signature_name = serializers.CharField(required=False, allow_blank=True, max_length=255)
