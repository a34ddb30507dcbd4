from rest_framework import serializers
from .models import Depot, DriverLocation


class DepotSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source='supplier.name', read_only=True)
    lat = serializers.FloatField(min_value=-90, max_value=90)
    lng = serializers.FloatField(min_value=-180, max_value=180)

    class Meta:
        model = Depot
        fields = ['id', 'supplier', 'supplier_name', 'name', 'address_street', 'address_city',
                  'address_province', 'address_postal_code', 'lat', 'lng', 'open_hours', 'notes',
                  'is_active', 'created_at', 'updated_at']
        read_only_fields = ['supplier', 'created_at', 'updated_at']

    def validate_open_hours(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("open_hours must be an object keyed by weekday")
        return value


class LocationUpdateSerializer(serializers.Serializer):
    latitude = serializers.FloatField(min_value=-90, max_value=90)
    longitude = serializers.FloatField(min_value=-180, max_value=180)
    accuracy = serializers.FloatField(min_value=0, required=False, allow_null=True)


class DriverLocationSerializer(serializers.ModelSerializer):
    class Meta:
        model = DriverLocation
        fields = ['id', 'latitude', 'longitude', 'accuracy', 'recorded_at']
