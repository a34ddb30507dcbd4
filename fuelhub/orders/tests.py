"""
Test suite for the orders module
Tests: order placement and pricing, dispatch (premium head start, expiry),
driver quotes, customer acceptance, the delivery lifecycle and admin listing
"""
from datetime import timedelta
from decimal import Decimal
from io import StringIO
from django.core import mail
from django.core.cache import cache
from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from fuelhub.chat.models import ChatThread
from fuelhub.core.models import AuditLog
from fuelhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from fuelhub.locations.geo import haversine_km
from fuelhub.notifications.models import Notification
from fuelhub.pricing.tiers import round_cents
from .dispatch import create_dispatch_offers, release_regular_offers, expire_old_offers
from .models import Order, DispatchOffer
from .services import OrderError, submit_quote, accept_offer, decline_offer


class OrderTestCase(TestCase):
    """Common setup: a customer with an address near Johannesburg and a fuel type"""

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.customer = TestDataFactory.create_customer()
        self.address = TestDataFactory.create_address(self.customer)
        self.fuel = TestDataFactory.create_fuel_type(code='diesel_50ppm', label='Diesel 50ppm')

    def place_order(self, **overrides):
        payload = {
            'fuel_type': self.fuel.pk,
            'litres': '100',
            'delivery_address': self.address.pk,
            'terms_accepted': True,
        }
        payload.update(overrides)
        self.client.authenticate_user(self.customer.user)
        return self.client.post('/api/v1/customer/orders/', payload, format='json')


class OrderCreationTests(OrderTestCase):

    def test_create_prices_order_with_defaults(self):
        response = self.place_order()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        order = Order.objects.get(pk=response.data['id'])
        self.assertEqual(order.state, 'created')
        self.assertEqual(order.price_per_litre_cents, 2500)
        self.assertEqual(order.fuel_price_cents, 250000)
        self.assertEqual(order.delivery_fee_cents, 35000)
        self.assertEqual(order.service_fee_cents, 12500)
        self.assertEqual(order.total_cents, 297500)
        self.assertEqual(order.drop_lat, self.address.lat)
        self.assertTrue(AuditLog.objects.filter(model_name='Order', action='create').exists())

    def test_create_uses_depot_tier_price(self):
        depot = TestDataFactory.create_depot(TestDataFactory.create_supplier())
        TestDataFactory.create_tier(depot, self.fuel, price_cents=2000)
        TestDataFactory.create_tier(depot, self.fuel, price_cents=1800, min_litres='500')
        response = self.place_order(litres='600', selected_depot=depot.pk)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['price_per_litre_cents'], 1800)
        self.assertEqual(response.data['fuel_price_cents'], 1080000)

    def test_service_fee_minimum(self):
        response = self.place_order(litres='10')
        self.assertEqual(response.data['service_fee_cents'], 10000)

    def test_terms_required(self):
        response = self.place_order(terms_accepted=False)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Order.objects.exists())

    def test_other_customers_address_rejected(self):
        other_address = TestDataFactory.create_address(TestDataFactory.create_customer())
        response = self.place_order(delivery_address=other_address.pk)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_zero_litres_rejected(self):
        response = self.place_order(litres='0')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_tank_capacity_must_be_positive(self):
        for capacity in ('0', '-50'):
            response = self.place_order(tank_capacity=capacity)
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, capacity)
        self.assertFalse(Order.objects.exists())

    def test_delivery_window_must_be_ordered(self):
        start = timezone.now() + timedelta(hours=2)
        response = self.place_order(from_time=start.isoformat(), to_time=(start - timedelta(hours=1)).isoformat())
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_driver_cannot_place_orders(self):
        driver = TestDataFactory.create_driver()
        self.client.authenticate_user(driver.user)
        response = self.client.post('/api/v1/customer/orders/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_customer_lists_only_own_orders(self):
        TestDataFactory.create_order(self.customer, self.fuel)
        TestDataFactory.create_order(TestDataFactory.create_customer(), self.fuel)
        self.client.authenticate_user(self.customer.user)
        response = self.client.get('/api/v1/customer/orders/')
        self.assertEqual(len(response.data), 1)
        self.assertTrue(response.data[0]['reference'].startswith('ORD-'))


class DispatchTests(OrderTestCase):

    def test_nearby_driver_receives_offer(self):
        driver = TestDataFactory.create_driver()
        response = self.place_order()
        offer = DispatchOffer.objects.get(order_id=response.data['id'])
        self.assertEqual(offer.driver, driver)
        self.assertEqual(offer.state, 'offered')
        self.assertFalse(offer.is_premium)
        self.assertTrue(Notification.objects.filter(user=driver.user, type='dispatch_offer_received').exists())

    def test_ineligible_drivers_skipped(self):
        TestDataFactory.create_driver(approved=False)
        TestDataFactory.create_driver(available=False)
        TestDataFactory.create_driver(lat=None, lng=None)
        # Pretoria is well outside a 20 mile radius
        TestDataFactory.create_driver(lat=-25.7479, lng=28.2293)
        response = self.place_order()
        self.assertFalse(DispatchOffer.objects.filter(order_id=response.data['id']).exists())

    def test_radius_preference_respected(self):
        TestDataFactory.create_driver(lat=-25.7479, lng=28.2293, radius_miles=50)
        response = self.place_order()
        self.assertEqual(DispatchOffer.objects.filter(order_id=response.data['id']).count(), 1)

    def test_premium_drivers_get_head_start(self):
        premium = TestDataFactory.create_driver(premium=True)
        regular = TestDataFactory.create_driver()
        now = timezone.now()
        order = TestDataFactory.create_order(self.customer, self.fuel, address=self.address)
        offers = create_dispatch_offers(order, now=now)

        self.assertEqual([o.driver for o in offers], [premium])
        self.assertTrue(offers[0].is_premium)
        self.assertEqual(offers[0].expires_at, now + timedelta(minutes=5))
        order.refresh_from_db()
        self.assertEqual(order.regular_dispatch_at, now + timedelta(minutes=5))

        self.assertEqual(release_regular_offers(now=now + timedelta(minutes=1)), 0)
        self.assertEqual(release_regular_offers(now=now + timedelta(minutes=6)), 1)
        offer = DispatchOffer.objects.get(order=order, driver=regular)
        self.assertFalse(offer.is_premium)
        order.refresh_from_db()
        self.assertIsNone(order.regular_dispatch_at)

    def test_premium_only_does_not_defer(self):
        TestDataFactory.create_driver(premium=True)
        order = TestDataFactory.create_order(self.customer, self.fuel, address=self.address)
        create_dispatch_offers(order)
        order.refresh_from_db()
        self.assertIsNone(order.regular_dispatch_at)

    def test_release_skips_assigned_orders(self):
        TestDataFactory.create_driver()
        assigned_driver = TestDataFactory.create_driver()
        order = TestDataFactory.create_order(self.customer, self.fuel, address=self.address, state='assigned',
                                             driver=assigned_driver,
                                             regular_dispatch_at=timezone.now() - timedelta(minutes=1))
        self.assertEqual(release_regular_offers(), 0)
        self.assertFalse(order.offers.exists())

    def test_expire_old_offers_only_touches_unanswered(self):
        order = TestDataFactory.create_order(self.customer, self.fuel)
        stale = TestDataFactory.create_offer(order, TestDataFactory.create_driver(), minutes=-1)
        quoted = TestDataFactory.create_offer(order, TestDataFactory.create_driver(), state='pending_customer', minutes=-1)
        fresh = TestDataFactory.create_offer(order, TestDataFactory.create_driver())
        self.assertEqual(expire_old_offers(), 1)
        stale.refresh_from_db()
        quoted.refresh_from_db()
        fresh.refresh_from_db()
        self.assertEqual((stale.state, quoted.state, fresh.state), ('timeout', 'pending_customer', 'offered'))

    def test_process_dispatch_command(self):
        order = TestDataFactory.create_order(self.customer, self.fuel)
        TestDataFactory.create_offer(order, TestDataFactory.create_driver(), minutes=-1)
        out = StringIO()
        call_command('process_dispatch', stdout=out)
        self.assertIn('expired 1 offers', out.getvalue())


class OrderEditAndCancelTests(OrderTestCase):

    def test_update_litres_reprices(self):
        order = Order.objects.get(pk=self.place_order().data['id'])
        response = self.client.patch(f'/api/v1/customer/orders/{order.pk}/', {'litres': '200'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['fuel_price_cents'], 500000)
        self.assertEqual(response.data['total_cents'], 500000 + 35000 + 25000)

    def test_update_rejects_out_of_range_coordinates(self):
        order = Order.objects.get(pk=self.place_order().data['id'])
        for payload in ({'drop_lat': 91}, {'drop_lng': -181}):
            response = self.client.patch(f'/api/v1/customer/orders/{order.pk}/', payload, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, payload)
        order.refresh_from_db()
        self.assertEqual(order.drop_lat, self.address.lat)

    def test_update_moves_drop_point(self):
        order = Order.objects.get(pk=self.place_order().data['id'])
        response = self.client.patch(f'/api/v1/customer/orders/{order.pk}/', {'drop_lat': -26.3, 'drop_lng': 28.1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual((response.data['drop_lat'], response.data['drop_lng']), (-26.3, 28.1))

    def test_update_assigned_order_rejected(self):
        order = TestDataFactory.create_order(self.customer, self.fuel, state='assigned', driver=TestDataFactory.create_driver())
        self.client.authenticate_user(self.customer.user)
        response = self.client.patch(f'/api/v1/customer/orders/{order.pk}/', {'litres': '200'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_detail_includes_pending_quotes(self):
        order = TestDataFactory.create_order(self.customer, self.fuel)
        TestDataFactory.create_offer(order, TestDataFactory.create_driver(), state='pending_customer')
        TestDataFactory.create_offer(order, TestDataFactory.create_driver())
        self.client.authenticate_user(self.customer.user)
        response = self.client.get(f'/api/v1/customer/orders/{order.pk}/')
        self.assertEqual(len(response.data['offers']), 1)

    def test_cancel_withdraws_open_offers(self):
        driver = TestDataFactory.create_driver()
        order = TestDataFactory.create_order(self.customer, self.fuel)
        offer = TestDataFactory.create_offer(order, driver)
        self.client.authenticate_user(self.customer.user)
        response = self.client.post(f'/api/v1/customer/orders/{order.pk}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['state'], 'cancelled')
        offer.refresh_from_db()
        self.assertEqual(offer.state, 'timeout')
        self.assertTrue(Notification.objects.filter(user=driver.user, type='order_cancelled').exists())

    def test_cancel_assigned_order_closes_chat(self):
        driver = TestDataFactory.create_driver()
        order = TestDataFactory.create_order(self.customer, self.fuel, state='assigned', driver=driver)
        ChatThread.objects.create(order=order, customer_user=self.customer.user, driver_user=driver.user)
        self.client.authenticate_user(self.customer.user)
        response = self.client.post(f'/api/v1/customer/orders/{order.pk}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(ChatThread.objects.get(order=order).closed)

    def test_cannot_cancel_in_progress(self):
        for state in ('en_route', 'picked_up', 'delivered', 'cancelled'):
            order = TestDataFactory.create_order(self.customer, self.fuel, state=state)
            self.client.authenticate_user(self.customer.user)
            response = self.client.post(f'/api/v1/customer/orders/{order.pk}/cancel/')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, state)


class QuoteAndAcceptTests(OrderTestCase):

    def setUp(self):
        super().setUp()
        self.driver = TestDataFactory.create_driver()
        self.other_driver = TestDataFactory.create_driver()
        self.order = TestDataFactory.create_order(self.customer, self.fuel, address=self.address)
        self.offer = TestDataFactory.create_offer(self.order, self.driver)
        self.other_offer = TestDataFactory.create_offer(self.order, self.other_driver)

    def _quote(self, driver, offer, **data):
        self.client.authenticate_user(driver.user)
        return self.client.post(f'/api/v1/driver/offers/{offer.pk}/accept/', data, format='json')

    def test_driver_sees_open_offers(self):
        self.client.authenticate_user(self.driver.user)
        response = self.client.get('/api/v1/driver/offers/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['offers']), 1)
        self.assertEqual(response.data['eligibility_issues'], [])

    def test_offline_driver_gets_eligibility_issue(self):
        self.driver.availability_status = 'offline'
        self.driver.save()
        self.client.authenticate_user(self.driver.user)
        response = self.client.get('/api/v1/driver/offers/')
        self.assertEqual(response.data['eligibility_issues'], ['You are not marked as available.'])

    def test_quote_uses_base_fee_for_short_trips(self):
        response = self._quote(self.driver, self.offer)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.offer.refresh_from_db()
        self.assertEqual(self.offer.state, 'pending_customer')
        self.assertEqual(self.offer.proposed_price_per_km_cents, 5000)
        self.assertEqual(self.offer.proposed_delivery_fee_cents, 35000)
        self.assertTrue(Notification.objects.filter(user=self.customer.user, type='driver_quote_received').exists())

    def test_quote_distance_fee(self):
        self._quote(self.driver, self.offer, price_per_km_cents=10000, notes='Can come early')
        self.offer.refresh_from_db()
        distance = haversine_km(self.driver.current_lat, self.driver.current_lng, self.order.drop_lat, self.order.drop_lng)
        self.assertEqual(self.offer.proposed_delivery_fee_cents, round_cents(Decimal(str(distance)) * 10000))
        self.assertEqual(self.offer.proposed_notes, 'Can come early')

    def test_requote_keeps_previous_rate(self):
        self._quote(self.driver, self.offer, price_per_km_cents=9000)
        self._quote(self.driver, self.offer, notes='Updated')
        self.offer.refresh_from_db()
        self.assertEqual(self.offer.proposed_price_per_km_cents, 9000)

    def test_expired_offer_cannot_be_quoted(self):
        self.offer.expires_at = timezone.now() - timedelta(minutes=1)
        self.offer.save()
        response = self._quote(self.driver, self.offer)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_drivers_offer_not_found(self):
        response = self._quote(self.driver, self.other_offer)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_accept_assigns_driver(self):
        submit_quote(self.driver, self.offer.pk, price_per_km_cents=10000)
        submit_quote(self.other_driver, self.other_offer.pk)
        self.offer.refresh_from_db()
        mail.outbox = []

        self.client.authenticate_user(self.customer.user)
        response = self.client.post(f'/api/v1/customer/orders/{self.order.pk}/offers/{self.offer.pk}/accept/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.order.refresh_from_db()
        self.other_offer.refresh_from_db()
        self.assertEqual(self.order.state, 'assigned')
        self.assertEqual(self.order.assigned_driver, self.driver)
        self.assertEqual(self.order.delivery_fee_cents, self.offer.proposed_delivery_fee_cents)
        self.assertEqual(self.order.total_cents,
                         self.order.fuel_price_cents + self.order.delivery_fee_cents + self.order.service_fee_cents)
        self.assertEqual(self.other_offer.state, 'rejected')
        self.assertTrue(ChatThread.objects.filter(order=self.order, closed=False).exists())
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn(self.order.reference, mail.outbox[0].subject)
        self.assertTrue(Notification.objects.filter(user=self.other_driver.user, type='customer_declined_offer').exists())

    def test_second_acceptance_conflicts(self):
        submit_quote(self.driver, self.offer.pk)
        submit_quote(self.other_driver, self.other_offer.pk)
        accept_offer(self.order, self.offer.pk)
        with self.assertRaises(OrderError) as ctx:
            accept_offer(self.order, self.other_offer.pk)
        self.assertEqual(ctx.exception.status_code, 409)

    def test_quote_after_assignment_conflicts(self):
        submit_quote(self.driver, self.offer.pk)
        accept_offer(self.order, self.offer.pk)
        with self.assertRaises(OrderError) as ctx:
            submit_quote(self.other_driver, self.other_offer.pk)
        self.assertEqual(ctx.exception.status_code, 409)

    def test_accept_unquoted_offer_conflicts(self):
        self.client.authenticate_user(self.customer.user)
        response = self.client.post(f'/api/v1/customer/orders/{self.order.pk}/offers/{self.offer.pk}/accept/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_decline_quote(self):
        submit_quote(self.driver, self.offer.pk)
        self.client.authenticate_user(self.customer.user)
        response = self.client.post(f'/api/v1/customer/orders/{self.order.pk}/offers/{self.offer.pk}/decline/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.offer.refresh_from_db()
        self.assertEqual(self.offer.state, 'rejected')

    def test_decline_after_acceptance_conflicts(self):
        submit_quote(self.driver, self.offer.pk)
        stale_order = Order.objects.get(pk=self.order.pk)
        accept_offer(self.order, self.offer.pk)
        with self.assertRaises(OrderError) as ctx:
            decline_offer(stale_order, self.offer.pk)
        self.assertEqual(ctx.exception.status_code, 409)
        self.offer.refresh_from_db()
        self.assertEqual(self.offer.state, 'accepted')

    def test_driver_rejects_offer(self):
        self.client.authenticate_user(self.driver.user)
        response = self.client.post(f'/api/v1/driver/offers/{self.offer.pk}/reject/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['state'], 'rejected')
        response = self.client.post(f'/api/v1/driver/offers/{self.offer.pk}/reject/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class DeliveryLifecycleTests(OrderTestCase):

    def setUp(self):
        super().setUp()
        self.driver = TestDataFactory.create_driver()
        self.order = TestDataFactory.create_order(self.customer, self.fuel, state='assigned', driver=self.driver,
                                                  assigned_at=timezone.now())
        ChatThread.objects.create(order=self.order, customer_user=self.customer.user, driver_user=self.driver.user)
        self.client.authenticate_user(self.driver.user)

    def _post(self, action, data=None):
        return self.client.post(f'/api/v1/driver/orders/{self.order.pk}/{action}/', data or {}, format='json')

    def test_full_lifecycle(self):
        response = self._post('start')
        self.assertEqual(response.data['state'], 'en_route')
        self.driver.refresh_from_db()
        self.assertEqual(self.driver.availability_status, 'on_delivery')

        response = self._post('pickup')
        self.assertEqual(response.data['state'], 'picked_up')

        mail.outbox = []
        response = self._post('complete', {'signature_data': 'data:image/png;base64,AAAA', 'signature_name': 'J. Smith'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.order.refresh_from_db()
        self.assertEqual(self.order.state, 'delivered')
        self.assertIsNotNone(self.order.delivered_at)
        self.assertEqual(self.order.delivery_signature_name, 'J. Smith')
        self.driver.refresh_from_db()
        self.assertEqual(self.driver.availability_status, 'available')
        self.assertTrue(ChatThread.objects.get(order=self.order).closed)
        self.assertEqual(len(mail.outbox), 2)

    def test_out_of_order_transitions_conflict(self):
        self.assertEqual(self._post('pickup').status_code, status.HTTP_409_CONFLICT)
        response = self._post('complete', {'signature_data': 'sig'})
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_completion_requires_signature(self):
        self.order.state = 'picked_up'
        self.order.save()
        self.assertEqual(self._post('complete', {}).status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_driver_cannot_progress_order(self):
        self.client.authenticate_user(TestDataFactory.create_driver().user)
        self.assertEqual(self._post('start').status_code, status.HTTP_404_NOT_FOUND)

    def test_assigned_and_completed_lists(self):
        delivered = TestDataFactory.create_order(self.customer, self.fuel, state='delivered', driver=self.driver,
                                                 delivered_at=timezone.now())
        assigned = self.client.get('/api/v1/driver/orders/assigned/').data
        completed = self.client.get('/api/v1/driver/orders/completed/').data
        self.assertEqual([o['id'] for o in assigned], [self.order.pk])
        self.assertEqual([o['id'] for o in completed], [delivered.pk])

    def test_stats(self):
        TestDataFactory.create_order(self.customer, self.fuel, state='delivered', driver=self.driver,
                                     delivered_at=timezone.now())
        response = self.client.get('/api/v1/driver/stats/')
        self.assertEqual(response.data['active_jobs'], 1)
        self.assertEqual(response.data['completed_jobs'], 1)
        self.assertEqual(response.data['total_earnings_cents'], 35000)
        self.assertEqual(response.data['today_deliveries'], 1)


class AdminOrderTests(OrderTestCase):

    def test_admin_filters_by_state(self):
        TestDataFactory.create_order(self.customer, self.fuel, state='created')
        TestDataFactory.create_order(self.customer, self.fuel, state='cancelled')
        self.client.authenticate_user(TestDataFactory.create_admin())
        response = self.client.get('/api/v1/admin/orders/', {'state': 'cancelled'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_admin_detail_includes_all_offers(self):
        order = TestDataFactory.create_order(self.customer, self.fuel)
        TestDataFactory.create_offer(order, TestDataFactory.create_driver(), state='timeout')
        self.client.authenticate_user(TestDataFactory.create_admin())
        response = self.client.get(f'/api/v1/admin/orders/{order.pk}/')
        self.assertEqual(len(response.data['offers']), 1)

    def test_non_admin_forbidden(self):
        self.client.authenticate_user(self.customer.user)
        response = self.client.get('/api/v1/admin/orders/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
