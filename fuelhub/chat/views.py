import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from fuelhub.orders.models import Order
from .models import ChatThread
from .serializers import ChatThreadSerializer, ChatMessageSerializer, SendMessageSerializer
from .services import ChatError, ensure_thread, send_message, mark_thread_read, unread_count, FINAL_ORDER_STATES

logger = logging.getLogger('fuelhub.chat')


def _participant_thread(request, thread_id):
    thread = get_object_or_404(ChatThread, pk=thread_id)
    if not thread.is_participant(request.user):
        logger.warning(f"User {request.user.username} denied access to chat thread {thread.pk}")
        return None, Response({'error': 'Not authorized to access this chat'}, status=status.HTTP_403_FORBIDDEN)
    return thread, None


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_thread(request, order_id):
    """Chat thread of an order, opened on demand once a driver is assigned"""
    order = get_object_or_404(Order.objects.select_related('customer__user', 'assigned_driver__user'), pk=order_id)
    is_customer = order.customer.user_id == request.user.pk
    is_driver = order.assigned_driver is not None and order.assigned_driver.user_id == request.user.pk
    if not (is_customer or is_driver):
        return Response({'error': 'Not authorized to access this chat'}, status=status.HTTP_403_FORBIDDEN)

    thread = ChatThread.objects.filter(order=order).first()
    if thread is None:
        if order.assigned_driver_id is None or order.state in FINAL_ORDER_STATES:
            return Response({'error': 'No chat is available for this order'}, status=status.HTTP_404_NOT_FOUND)
        try:
            thread = ensure_thread(order)
        except ChatError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    return Response(ChatThreadSerializer(thread).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def thread_messages(request, thread_id):
    thread, error = _participant_thread(request, thread_id)
    if error:
        return error

    if request.method == 'GET':
        messages = thread.messages.select_related('sender')
        return Response(ChatMessageSerializer(messages, many=True).data)

    serializer = SendMessageSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        message = send_message(thread, request.user, serializer.validated_data['body'])
    except ChatError as e:
        return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)
    return Response(ChatMessageSerializer(message).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def thread_mark_read(request, thread_id):
    thread, error = _participant_thread(request, thread_id)
    if error:
        return error
    updated = mark_thread_read(thread, request.user)
    return Response({'success': True, 'marked': updated})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def thread_unread_count(request, thread_id):
    thread, error = _participant_thread(request, thread_id)
    if error:
        return error
    return Response({'count': unread_count(thread, request.user)})
