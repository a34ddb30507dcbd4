from django.contrib import admin
from .models import ChatThread, ChatMessage


@admin.register(ChatThread)
class ChatThreadAdmin(admin.ModelAdmin):
    list_display = ['id', 'order', 'customer_user', 'driver_user', 'closed', 'created_at']
    list_filter = ['closed']
    ordering = ['-created_at']


@admin.register(ChatMessage)
class ChatMessageAdmin(admin.ModelAdmin):
    list_display = ['id', 'thread', 'sender', 'read_at', 'created_at']
    search_fields = ['body', 'sender__username']
    ordering = ['-created_at']
