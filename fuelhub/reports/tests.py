"""
Test suite for the reports module
Tests: PDF receipts for delivered orders and completed depot orders, and the
admin and supplier dashboards
"""
from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from fuelhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from .receipt import render_receipt_pdf, format_cents


class ReceiptRenderingTests(TestCase):

    def test_renders_pdf(self):
        content = render_receipt_pdf('Receipt', [('Reference', 'ORD-000001'), ('Total', 'R 100.00')], 'ORD-000001')
        self.assertTrue(content.startswith(b'%PDF'))

    def test_format_cents(self):
        self.assertEqual(format_cents(297500, 'ZAR'), 'ZAR 2,975.00')
        self.assertEqual(format_cents(5, 'USD'), 'USD 0.05')


class ReceiptAPITests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.customer = TestDataFactory.create_customer()
        self.driver = TestDataFactory.create_driver()
        self.supplier = TestDataFactory.create_supplier()
        self.fuel = TestDataFactory.create_fuel_type()
        self.depot = TestDataFactory.create_depot(self.supplier)

    def test_customer_downloads_delivery_receipt(self):
        order = TestDataFactory.create_order(self.customer, self.fuel, state='delivered', driver=self.driver,
                                             delivered_at=timezone.now(), delivery_signature_name='J. Smith')
        self.client.authenticate_user(self.customer.user)
        response = self.client.get(f'/api/v1/receipts/orders/{order.pk}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertIn(order.reference, response['Content-Disposition'])
        self.assertTrue(response.content.startswith(b'%PDF'))

    def test_undelivered_order_has_no_receipt(self):
        order = TestDataFactory.create_order(self.customer, self.fuel, state='assigned', driver=self.driver)
        self.client.authenticate_user(self.customer.user)
        response = self.client.get(f'/api/v1/receipts/orders/{order.pk}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unrelated_user_cannot_download(self):
        order = TestDataFactory.create_order(self.customer, self.fuel, state='delivered', driver=self.driver)
        self.client.authenticate_user(TestDataFactory.create_customer().user)
        response = self.client.get(f'/api/v1/receipts/orders/{order.pk}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_depot_order_receipt_for_driver_and_supplier(self):
        order = TestDataFactory.create_depot_order(self.driver, self.depot, self.fuel, status='completed',
                                                   payment_method='online_payment', completed_at=timezone.now())
        for user in (self.driver.user, self.supplier.owner):
            self.client.authenticate_user(user)
            response = self.client.get(f'/api/v1/receipts/depot-orders/{order.pk}/')
            self.assertEqual(response.status_code, status.HTTP_200_OK)
            self.assertTrue(response.content.startswith(b'%PDF'))

    def test_incomplete_depot_order_has_no_receipt(self):
        order = TestDataFactory.create_depot_order(self.driver, self.depot, self.fuel, status='awaiting_signature')
        self.client.authenticate_user(self.driver.user)
        response = self.client.get(f'/api/v1/receipts/depot-orders/{order.pk}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class DashboardTests(TestCase):

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.admin = TestDataFactory.create_admin()
        self.customer = TestDataFactory.create_customer()
        self.fuel = TestDataFactory.create_fuel_type()

    def test_admin_dashboard(self):
        TestDataFactory.create_driver(approved=False)
        TestDataFactory.create_order(self.customer, self.fuel, state='delivered')
        TestDataFactory.create_order(self.customer, self.fuel, state='created')
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/admin/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['orders_by_state'], {'created': 1, 'delivered': 1})
        self.assertEqual(response.data['pending_kyc']['drivers'], 1)
        self.assertEqual(response.data['revenue_cents'], 297500)

    def test_admin_dashboard_refreshes_after_order_change(self):
        self.client.authenticate_user(self.admin)
        self.assertEqual(self.client.get('/api/v1/admin/dashboard/').data['orders_by_state'], {})
        TestDataFactory.create_order(self.customer, self.fuel)
        self.assertEqual(self.client.get('/api/v1/admin/dashboard/').data['orders_by_state'], {'created': 1})

    def test_admin_dashboard_refreshes_after_kyc_and_signup(self):
        driver = TestDataFactory.create_driver(approved=False)
        self.client.authenticate_user(self.admin)
        data = self.client.get('/api/v1/admin/dashboard/').data
        self.assertEqual(data['pending_kyc']['drivers'], 1)
        self.assertEqual(data['users_by_role'].get('supplier', 0), 0)

        response = self.client.post(f'/api/v1/admin/drivers/{driver.pk}/approve/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        TestDataFactory.create_supplier()
        data = self.client.get('/api/v1/admin/dashboard/').data
        self.assertEqual(data['pending_kyc']['drivers'], 0)
        self.assertEqual(data['users_by_role']['supplier'], 1)

    def test_admin_dashboard_forbidden_for_customers(self):
        self.client.authenticate_user(self.customer.user)
        response = self.client.get('/api/v1/admin/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_supplier_dashboard(self):
        supplier = TestDataFactory.create_supplier()
        depot = TestDataFactory.create_depot(supplier)
        driver = TestDataFactory.create_driver()
        TestDataFactory.create_depot_order(driver, depot, self.fuel, litres='500', status='completed')
        TestDataFactory.create_depot_order(driver, depot, self.fuel, status='pending')
        self.client.authenticate_user(supplier.owner)
        response = self.client.get('/api/v1/supplier/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['depot_count'], 1)
        self.assertEqual(response.data['pending_orders'], 1)
        self.assertEqual(response.data['revenue_cents'], 1000000)

    def test_supplier_dashboard_refreshes_after_depot_order_change(self):
        supplier = TestDataFactory.create_supplier()
        depot = TestDataFactory.create_depot(supplier)
        order = TestDataFactory.create_depot_order(TestDataFactory.create_driver(), depot, self.fuel)
        self.client.authenticate_user(supplier.owner)
        self.assertEqual(self.client.get('/api/v1/supplier/dashboard/').data['pending_orders'], 1)
        order.status = 'pending_payment'
        order.save()
        self.assertEqual(self.client.get('/api/v1/supplier/dashboard/').data['pending_orders'], 0)
