"""
Test suite for the chat module
Tests: thread access, messaging, read tracking and closing on order completion
"""
from django.test import TestCase
from rest_framework import status
from fuelhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from fuelhub.notifications.models import Notification, RealtimeEvent
from .models import ChatThread, ChatMessage
from .services import ChatError, ensure_thread, close_thread, send_message


class ChatTestCase(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.customer = TestDataFactory.create_customer()
        self.driver = TestDataFactory.create_driver()
        self.fuel = TestDataFactory.create_fuel_type()
        self.order = TestDataFactory.create_order(self.customer, self.fuel, state='assigned', driver=self.driver)


class ThreadServiceTests(ChatTestCase):

    def test_ensure_thread_is_idempotent(self):
        first = ensure_thread(self.order)
        second = ensure_thread(self.order)
        self.assertEqual(first.pk, second.pk)
        self.assertEqual(first.customer_user, self.customer.user)
        self.assertEqual(first.driver_user, self.driver.user)

    def test_unassigned_order_has_no_thread(self):
        order = TestDataFactory.create_order(self.customer, self.fuel)
        with self.assertRaises(ChatError):
            ensure_thread(order)

    def test_closed_thread_rejects_messages(self):
        thread = ensure_thread(self.order)
        close_thread(self.order)
        thread.refresh_from_db()
        with self.assertRaises(ChatError):
            send_message(thread, self.customer.user, 'Hello?')

    def test_reopen_after_close(self):
        thread = ensure_thread(self.order)
        close_thread(self.order)
        reopened = ensure_thread(self.order)
        self.assertEqual(reopened.pk, thread.pk)
        self.assertFalse(reopened.closed)

    def test_message_notifies_other_participant(self):
        thread = ensure_thread(self.order)
        send_message(thread, self.customer.user, 'Gate code is 1234')
        self.assertTrue(Notification.objects.filter(user=self.driver.user, type='new_message').exists())
        self.assertTrue(RealtimeEvent.objects.filter(user=self.driver.user, type='chat_message').exists())
        self.assertFalse(Notification.objects.filter(user=self.customer.user, type='new_message').exists())


class ChatAPITests(ChatTestCase):

    def test_customer_opens_thread_for_assigned_order(self):
        self.client.authenticate_user(self.customer.user)
        response = self.client.get(f'/api/v1/chat/orders/{self.order.pk}/thread/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(ChatThread.objects.filter(order=self.order).exists())

    def test_unrelated_user_forbidden(self):
        self.client.authenticate_user(TestDataFactory.create_customer().user)
        response = self.client.get(f'/api/v1/chat/orders/{self.order.pk}/thread/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_no_thread_before_assignment(self):
        order = TestDataFactory.create_order(self.customer, self.fuel)
        self.client.authenticate_user(self.customer.user)
        response = self.client.get(f'/api/v1/chat/orders/{order.pk}/thread/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_exchange_and_read_messages(self):
        thread = ensure_thread(self.order)
        self.client.authenticate_user(self.customer.user)
        response = self.client.post(f'/api/v1/chat/threads/{thread.pk}/messages/', {'body': 'Hi'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        self.client.authenticate_user(self.driver.user)
        self.client.post(f'/api/v1/chat/threads/{thread.pk}/messages/', {'body': 'On my way'}, format='json')
        self.assertEqual(self.client.get(f'/api/v1/chat/threads/{thread.pk}/unread-count/').data['count'], 1)
        response = self.client.post(f'/api/v1/chat/threads/{thread.pk}/read/')
        self.assertEqual(response.data['marked'], 1)
        self.assertEqual(self.client.get(f'/api/v1/chat/threads/{thread.pk}/unread-count/').data['count'], 0)

        response = self.client.get(f'/api/v1/chat/threads/{thread.pk}/messages/')
        self.assertEqual([m['body'] for m in response.data], ['Hi', 'On my way'])

    def test_message_length_limit(self):
        thread = ensure_thread(self.order)
        self.client.authenticate_user(self.customer.user)
        response = self.client.post(f'/api/v1/chat/threads/{thread.pk}/messages/', {'body': 'x' * 2001}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(ChatMessage.objects.exists())

    def test_posting_to_closed_thread_conflicts(self):
        thread = ensure_thread(self.order)
        close_thread(self.order)
        self.client.authenticate_user(self.customer.user)
        response = self.client.post(f'/api/v1/chat/threads/{thread.pk}/messages/', {'body': 'Hi'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_non_participant_cannot_read_messages(self):
        thread = ensure_thread(self.order)
        self.client.authenticate_user(TestDataFactory.create_driver().user)
        response = self.client.get(f'/api/v1/chat/threads/{thread.pk}/messages/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
