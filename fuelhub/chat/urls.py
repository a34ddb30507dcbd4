from django.urls import path
from .views import order_thread, thread_messages, thread_mark_read, thread_unread_count

urlpatterns = [
    path('chat/orders/<int:order_id>/thread/', order_thread, name='chat-order-thread'),
    path('chat/threads/<int:thread_id>/messages/', thread_messages, name='chat-thread-messages'),
    path('chat/threads/<int:thread_id>/read/', thread_mark_read, name='chat-thread-read'),
    path('chat/threads/<int:thread_id>/unread-count/', thread_unread_count, name='chat-thread-unread-count'),
]
