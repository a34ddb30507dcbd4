from rest_framework import serializers
from .models import Notification, RealtimeEvent


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ['id', 'type', 'title', 'message', 'data', 'priority', 'read', 'read_at', 'created_at']
        read_only_fields = fields


class RealtimeEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = RealtimeEvent
        fields = ['id', 'type', 'payload', 'created_at']
        read_only_fields = fields
