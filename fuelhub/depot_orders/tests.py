"""
Test suite for the depot_orders module
Tests: placing depot orders, supplier acceptance, payment submission and
verification, fuel release with stock deduction, and receipt confirmation
"""
from datetime import timedelta
from decimal import Decimal
from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from fuelhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from fuelhub.notifications.models import Notification
from fuelhub.pricing.models import DepotPrice
from .models import DriverDepotOrder
from .services import DepotOrderError, accept_depot_order, release_fuel


class DepotOrderTestCase(TestCase):

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.driver = TestDataFactory.create_driver()
        self.supplier = TestDataFactory.create_supplier()
        self.depot = TestDataFactory.create_depot(self.supplier, name='Germiston')
        self.fuel = TestDataFactory.create_fuel_type(code='diesel', label='Diesel')
        TestDataFactory.create_tier(self.depot, self.fuel, price_cents=2000, available_litres='10000')
        TestDataFactory.create_tier(self.depot, self.fuel, price_cents=1850, min_litres='1000', available_litres='10000')

    def as_driver(self):
        self.client.authenticate_user(self.driver.user)

    def as_supplier(self):
        self.client.authenticate_user(self.supplier.owner)

    def place(self, litres='500', **overrides):
        payload = {
            'depot_id': self.depot.pk,
            'fuel_type_id': self.fuel.pk,
            'litres': litres,
            'pickup_date': (timezone.now() + timedelta(days=1)).isoformat(),
        }
        payload.update(overrides)
        self.as_driver()
        return self.client.post('/api/v1/driver/depot-orders/', payload, format='json')


class PlaceDepotOrderTests(DepotOrderTestCase):

    def test_place_order_uses_tier_price(self):
        response = self.place(litres='1200.50')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['price_per_litre_cents'], 1850)
        self.assertEqual(response.data['total_price_cents'], 2220925)
        self.assertEqual(response.data['status'], 'pending')
        self.assertTrue(response.data['reference'].startswith('DDO-'))
        self.assertTrue(Notification.objects.filter(user=self.supplier.owner, type='depot_order_placed').exists())

    def test_litres_must_be_below_stock(self):
        response = self.place(litres='10000')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Available stock', response.data['error'])

    def test_pickup_must_be_in_future(self):
        response = self.place(pickup_date=(timezone.now() - timedelta(hours=1)).isoformat())
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unpriced_fuel_rejected(self):
        other = TestDataFactory.create_fuel_type()
        response = self.place(fuel_type_id=other.pk)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_inactive_depot_rejected(self):
        self.depot.is_active = False
        self.depot.save()
        response = self.place()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_driver_cancels_pending_order(self):
        order_id = self.place().data['id']
        response = self.client.post(f'/api/v1/driver/depot-orders/{order_id}/cancel/')
        self.assertEqual(response.data['status'], 'cancelled')
        response = self.client.post(f'/api/v1/driver/depot-orders/{order_id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_driver_sees_only_own_orders(self):
        other = TestDataFactory.create_driver()
        order = TestDataFactory.create_depot_order(other, self.depot, self.fuel)
        self.as_driver()
        self.assertEqual(self.client.get('/api/v1/driver/depot-orders/').data, [])
        response = self.client.get(f'/api/v1/driver/depot-orders/{order.pk}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class SupplierDecisionTests(DepotOrderTestCase):

    def setUp(self):
        super().setUp()
        self.order = TestDataFactory.create_depot_order(self.driver, self.depot, self.fuel, notes='Morning pickup')
        self.as_supplier()

    def test_accept_moves_to_pending_payment(self):
        response = self.client.post(f'/api/v1/supplier/depot-orders/{self.order.pk}/accept/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'pending_payment')
        self.assertTrue(Notification.objects.filter(user=self.driver.user, type='depot_order_accepted').exists())

    def test_accept_from_stale_copy_rejected(self):
        stale = DriverDepotOrder.objects.get(pk=self.order.pk)
        accept_depot_order(self.order)
        with self.assertRaises(DepotOrderError):
            accept_depot_order(stale)
        self.assertEqual(Notification.objects.filter(user=self.driver.user, type='depot_order_accepted').count(), 1)

    def test_reject_appends_reason(self):
        response = self.client.post(f'/api/v1/supplier/depot-orders/{self.order.pk}/reject/',
                                    {'reason': 'Tank maintenance'}, format='json')
        self.assertEqual(response.data['status'], 'rejected')
        self.order.refresh_from_db()
        self.assertIn('Rejection reason: Tank maintenance', self.order.notes)
        self.assertTrue(self.order.notes.startswith('Morning pickup'))

    def test_accept_twice_rejected(self):
        self.client.post(f'/api/v1/supplier/depot-orders/{self.order.pk}/accept/')
        response = self.client.post(f'/api/v1/supplier/depot-orders/{self.order.pk}/accept/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_supplier_forbidden(self):
        other = TestDataFactory.create_supplier()
        self.client.authenticate_user(other.owner)
        response = self.client.post(f'/api/v1/supplier/depot-orders/{self.order.pk}/accept/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_unapproved_supplier_blocked(self):
        self.supplier.compliance_status = 'pending'
        self.supplier.save()
        response = self.client.post(f'/api/v1/supplier/depot-orders/{self.order.pk}/accept/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['code'], 'COMPLIANCE_REQUIRED')

    def test_supplier_list_filters(self):
        TestDataFactory.create_depot_order(self.driver, self.depot, self.fuel, status='completed')
        response = self.client.get('/api/v1/supplier/depot-orders/', {'status': 'pending'})
        self.assertEqual([o['id'] for o in response.data], [self.order.pk])


class PaymentTests(DepotOrderTestCase):

    def setUp(self):
        super().setUp()
        self.order = TestDataFactory.create_depot_order(self.driver, self.depot, self.fuel, status='pending_payment')

    def _pay(self, **data):
        self.as_driver()
        return self.client.post(f'/api/v1/driver/depot-orders/{self.order.pk}/payment/', data, format='json')

    def test_bank_transfer_requires_proof(self):
        response = self._pay(payment_method='bank_transfer')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_bank_transfer_then_supplier_verifies(self):
        response = self._pay(payment_method='bank_transfer', payment_proof_url='https://files.test/pop.pdf')
        self.assertEqual(response.data['status'], 'paid')
        self.assertEqual(response.data['payment_status'], 'paid')

        self.as_supplier()
        response = self.client.post(f'/api/v1/supplier/depot-orders/{self.order.pk}/verify-payment/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'ready_for_pickup')
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_confirmed_by, self.supplier.owner)

    def test_online_payment_is_verified_immediately(self):
        response = self._pay(payment_method='online_payment')
        self.assertEqual(response.data['status'], 'ready_for_pickup')
        self.assertEqual(response.data['payment_status'], 'payment_verified')
        self.as_supplier()
        response = self.client.post(f'/api/v1/supplier/depot-orders/{self.order.pk}/verify-payment/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_rejected_payment_returns_to_pending_payment(self):
        self._pay(payment_method='pay_outside_app')
        self.as_supplier()
        response = self.client.post(f'/api/v1/supplier/depot-orders/{self.order.pk}/reject-payment/')
        self.assertEqual(response.data['status'], 'pending_payment')
        self.assertEqual(response.data['payment_status'], 'payment_failed')
        response = self._pay(payment_method='pay_outside_app')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_payment_before_acceptance_rejected(self):
        self.order.status = 'pending'
        self.order.save()
        response = self._pay(payment_method='online_payment')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class ReleaseAndReceiptTests(DepotOrderTestCase):

    def setUp(self):
        super().setUp()
        self.order = TestDataFactory.create_depot_order(
            self.driver, self.depot, self.fuel, litres='500', status='ready_for_pickup',
            payment_status='payment_verified', payment_method='online_payment',
        )

    def test_release_deducts_shared_stock(self):
        self.as_supplier()
        response = self.client.post(f'/api/v1/supplier/depot-orders/{self.order.pk}/release/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'awaiting_signature')
        stock = set(DepotPrice.objects.filter(depot=self.depot).values_list('available_litres', flat=True))
        self.assertEqual(stock, {Decimal('9500')})
        self.assertFalse(Notification.objects.filter(type='stock_low').exists())

    def test_low_stock_notifies_supplier(self):
        DepotPrice.objects.filter(depot=self.depot).update(available_litres=Decimal('540'))
        self.as_supplier()
        self.client.post(f'/api/v1/supplier/depot-orders/{self.order.pk}/release/')
        self.assertTrue(Notification.objects.filter(user=self.supplier.owner, type='stock_low').exists())

    def test_repeated_release_deducts_stock_once(self):
        first = DriverDepotOrder.objects.get(pk=self.order.pk)
        second = DriverDepotOrder.objects.get(pk=self.order.pk)
        release_fuel(first)
        with self.assertRaises(DepotOrderError):
            release_fuel(second)
        stock = set(DepotPrice.objects.filter(depot=self.depot).values_list('available_litres', flat=True))
        self.assertEqual(stock, {Decimal('9500')})
        self.assertEqual(Notification.objects.filter(user=self.driver.user, type='fuel_released').count(), 1)

    def test_release_requires_ready_order(self):
        self.order.status = 'paid'
        self.order.save()
        self.as_supplier()
        response = self.client.post(f'/api/v1/supplier/depot-orders/{self.order.pk}/release/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_driver_confirms_receipt(self):
        self.as_supplier()
        self.client.post(f'/api/v1/supplier/depot-orders/{self.order.pk}/release/')
        self.client.post(f'/api/v1/supplier/depot-orders/{self.order.pk}/confirm-delivery/',
                         {'actual_litres': '498.5'}, format='json')
        self.as_driver()
        self.client.post(f'/api/v1/driver/depot-orders/{self.order.pk}/signature/',
                         {'signature_url': 'https://files.test/sig.png'}, format='json')
        response = self.client.post(f'/api/v1/driver/depot-orders/{self.order.pk}/confirm-receipt/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, 'completed')
        self.assertIsNotNone(self.order.completed_at)
        self.assertEqual(self.order.actual_litres_delivered, Decimal('498.5'))
        self.assertEqual(self.order.driver_signature_url, 'https://files.test/sig.png')

    def test_confirm_receipt_before_release(self):
        self.as_driver()
        response = self.client.post(f'/api/v1/driver/depot-orders/{self.order.pk}/confirm-receipt/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_supplier_signature_requires_verified_payment(self):
        order = TestDataFactory.create_depot_order(self.driver, self.depot, self.fuel, status='paid',
                                                   payment_status='pending', payment_method='bank_transfer')
        self.as_supplier()
        response = self.client.post(f'/api/v1/supplier/depot-orders/{order.pk}/signature/',
                                    {'signature_url': 'https://files.test/s.png'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
