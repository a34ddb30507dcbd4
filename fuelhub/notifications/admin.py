from django.contrib import admin
from .models import Notification, RealtimeEvent


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['user', 'type', 'title', 'priority', 'read', 'created_at']
    list_filter = ['type', 'priority', 'read']
    search_fields = ['user__username', 'title', 'message']
    ordering = ['-created_at']


@admin.register(RealtimeEvent)
class RealtimeEventAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'type', 'created_at']
    list_filter = ['type']
    search_fields = ['user__username']
    ordering = ['-id']
