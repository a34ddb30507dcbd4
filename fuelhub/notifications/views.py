import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from .models import Notification, RealtimeEvent
from .serializers import NotificationSerializer, RealtimeEventSerializer
from .services import notification_service

logger = logging.getLogger('fuelhub.notifications')

NOTIFICATION_LIST_LIMIT = 50
EVENT_BATCH_LIMIT = 100


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notification_list(request):
    """Latest notifications for the current user, newest first"""
    notifications = Notification.objects.filter(user=request.user)
    if request.query_params.get('unread') == 'true':
        notifications = notifications.filter(read=False)
    notifications = notifications.order_by('-created_at', '-id')[:NOTIFICATION_LIST_LIMIT]
    return Response(NotificationSerializer(notifications, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notification_unread_count(request):
    count = Notification.objects.filter(user=request.user, read=False).count()
    return Response({'count': count})


@api_view(['PATCH', 'POST'])
@permission_classes([IsAuthenticated])
def notification_mark_read(request, pk):
    notification = get_object_or_404(Notification, pk=pk, user=request.user)
    notification_service.mark_read(notification)
    return Response(NotificationSerializer(notification).data)


@api_view(['PATCH', 'POST'])
@permission_classes([IsAuthenticated])
def notification_mark_all_read(request):
    updated = notification_service.mark_all_read(request.user)
    logger.debug(f"User {request.user.username} marked {updated} notifications read")
    return Response({'success': True, 'updated': updated})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def realtime_events(request):
    """
    Realtime events newer than ``?after=<id>``, oldest first.

    Clients keep the id of the last event they processed and poll with it.
    Without ``after`` only the latest event id is returned so a new client
    can start from the current position.
    """
    after = request.query_params.get('after')
    events = RealtimeEvent.objects.filter(user=request.user)

    if after is None or after == '':
        latest = events.order_by('-id').values_list('id', flat=True).first()
        return Response({'events': [], 'last_id': latest or 0})

    try:
        after_id = int(after)
    except (TypeError, ValueError):
        return Response({'error': 'after must be an integer event id'}, status=status.HTTP_400_BAD_REQUEST)

    batch = list(events.filter(id__gt=after_id).order_by('id')[:EVENT_BATCH_LIMIT])
    last_id = batch[-1].id if batch else after_id
    return Response({
        'events': RealtimeEventSerializer(batch, many=True).data,
        'last_id': last_id,
    })
