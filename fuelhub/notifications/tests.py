"""
Test suite for the notifications module
Tests: notification creation, read state, and the polled realtime event feed
"""
from datetime import timedelta
from io import StringIO
from unittest.mock import patch
from django.core.management import call_command
from django.utils import timezone
from django.test import TestCase
from rest_framework import status
from fuelhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from .models import Notification, RealtimeEvent
from .services import notification_service, notify_safely, publish_event


class NotificationServiceTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()

    def test_create_mirrors_to_realtime_feed(self):
        notification = notification_service.create_and_send(self.user, 'system_alert', 'Hello', 'Body', {'a': 1}, 'high')
        event = RealtimeEvent.objects.get(user=self.user, type='notification')
        self.assertEqual(event.payload['id'], notification.pk)
        self.assertEqual(event.payload['priority'], 'high')

    def test_notify_safely_swallows_failures(self):
        with patch.object(notification_service, 'create_and_send', side_effect=RuntimeError('db down')):
            self.assertIsNone(notify_safely(self.user, 'system_alert', 'Hello', 'Body'))

    def test_notify_safely_without_user(self):
        self.assertIsNone(notify_safely(None, 'system_alert', 'Hello', 'Body'))
        self.assertFalse(Notification.objects.exists())

    def test_publish_event_swallows_failures(self):
        with patch.object(RealtimeEvent.objects, 'create', side_effect=RuntimeError('db down')):
            self.assertIsNone(publish_event(self.user, 'order_updated', {}))


class NotificationAPITests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user()
        self.other = TestDataFactory.create_user()
        for i in range(3):
            notification_service.create_and_send(self.user, 'system_alert', f'Title {i}', 'Body')
        notification_service.create_and_send(self.other, 'system_alert', 'Other', 'Body')
        self.client.authenticate_user(self.user)

    def test_list_newest_first(self):
        response = self.client.get('/api/v1/notifications/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([n['title'] for n in response.data], ['Title 2', 'Title 1', 'Title 0'])

    def test_mark_read_and_count(self):
        notification = Notification.objects.filter(user=self.user).first()
        self.assertEqual(self.client.get('/api/v1/notifications/unread-count/').data['count'], 3)
        response = self.client.post(f'/api/v1/notifications/{notification.pk}/read/')
        self.assertTrue(response.data['read'])
        self.assertEqual(self.client.get('/api/v1/notifications/unread-count/').data['count'], 2)
        self.assertEqual(len(self.client.get('/api/v1/notifications/', {'unread': 'true'}).data), 2)

    def test_mark_all_read(self):
        response = self.client.post('/api/v1/notifications/read-all/')
        self.assertEqual(response.data['updated'], 3)
        self.assertEqual(Notification.objects.filter(user=self.other, read=False).count(), 1)

    def test_cannot_mark_other_users_notification(self):
        notification = Notification.objects.get(user=self.other)
        response = self.client.post(f'/api/v1/notifications/{notification.pk}/read/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class RealtimeFeedTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user()
        self.client.authenticate_user(self.user)

    def test_initial_poll_returns_cursor_only(self):
        event = publish_event(self.user, 'order_updated', {'order_id': 1})
        response = self.client.get('/api/v1/events/')
        self.assertEqual(response.data['events'], [])
        self.assertEqual(response.data['last_id'], event.pk)

    def test_poll_after_cursor(self):
        first = publish_event(self.user, 'order_updated', {'order_id': 1})
        second = publish_event(self.user, 'order_cancelled', {'order_id': 1})
        publish_event(TestDataFactory.create_user(), 'order_updated', {'order_id': 2})
        response = self.client.get('/api/v1/events/', {'after': first.pk})
        self.assertEqual([e['type'] for e in response.data['events']], ['order_cancelled'])
        self.assertEqual(response.data['last_id'], second.pk)

    def test_empty_poll_keeps_cursor(self):
        response = self.client.get('/api/v1/events/', {'after': 42})
        self.assertEqual(response.data, {'events': [], 'last_id': 42})

    def test_invalid_cursor(self):
        response = self.client.get('/api/v1/events/', {'after': 'abc'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class PruneRealtimeEventsTests(TestCase):

    def test_deletes_only_old_events(self):
        user = TestDataFactory.create_user()
        old = publish_event(user, 'order_updated', {'order_id': 1})
        RealtimeEvent.objects.filter(pk=old.pk).update(created_at=timezone.now() - timedelta(hours=30))
        recent = publish_event(user, 'order_updated', {'order_id': 2})
        out = StringIO()
        call_command('prune_realtime_events', '--hours', '24', stdout=out)
        self.assertEqual(list(RealtimeEvent.objects.values_list('pk', flat=True)), [recent.pk])
        self.assertIn('Deleted 1', out.getvalue())
