from rest_framework import serializers
from .models import ChatThread, ChatMessage


class ChatThreadSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source='customer_user.display_name', read_only=True)
    driver_name = serializers.CharField(source='driver_user.display_name', read_only=True)

    class Meta:
        model = ChatThread
        fields = ['id', 'order', 'customer_user', 'customer_name', 'driver_user', 'driver_name',
                  'closed', 'closed_at', 'created_at']
        read_only_fields = fields


class ChatMessageSerializer(serializers.ModelSerializer):
    sender_name = serializers.CharField(source='sender.display_name', read_only=True)

    class Meta:
        model = ChatMessage
        fields = ['id', 'thread', 'sender', 'sender_name', 'body', 'read_at', 'created_at']
        read_only_fields = ['id', 'thread', 'sender', 'sender_name', 'read_at', 'created_at']


class SendMessageSerializer(serializers.Serializer):
    body = serializers.CharField(max_length=2000, trim_whitespace=True)
