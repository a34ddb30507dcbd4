from rest_framework import serializers
from .models import FuelType


class FuelTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = FuelType
        fields = ['id', 'code', 'label', 'active', 'created_at']
        read_only_fields = ['created_at']

    def validate_code(self, value):
        return value.strip().lower()
