"""
Test suite for the catalog module
Tests: fuel type listing, caching, admin management and deactivation of used fuel types
"""
from io import StringIO
from django.core.cache import cache
from django.core.management import call_command
from django.test import TestCase
from rest_framework import status
from fuelhub.catalog.models import FuelType
from fuelhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class FuelTypeAPITests(TestCase):

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.admin = TestDataFactory.create_admin()
        self.customer = TestDataFactory.create_customer()
        self.diesel = TestDataFactory.create_fuel_type(code='diesel', label='Diesel')
        self.retired = FuelType.objects.create(code='leaded', label='Leaded', active=False)

    def test_list_returns_active_only(self):
        self.client.authenticate_user(self.customer.user)
        response = self.client.get('/api/v1/fuel-types/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        codes = [f['code'] for f in response.data]
        self.assertIn('diesel', codes)
        self.assertNotIn('leaded', codes)

    def test_admin_can_list_all(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/fuel-types/', {'all': 'true'})
        codes = [f['code'] for f in response.data]
        self.assertIn('leaded', codes)

    def test_created_fuel_type_appears_in_cached_list(self):
        self.client.authenticate_user(self.admin)
        self.client.get('/api/v1/fuel-types/')
        response = self.client.post('/api/v1/fuel-types/', {'code': 'petrol_95', 'label': 'Petrol 95'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.get('/api/v1/fuel-types/')
        self.assertIn('petrol_95', [f['code'] for f in response.data])

    def test_non_admin_cannot_create(self):
        self.client.authenticate_user(self.customer.user)
        response = self.client.post('/api/v1/fuel-types/', {'code': 'x', 'label': 'X'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_unused_fuel_type(self):
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/fuel-types/{self.diesel.pk}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(FuelType.objects.filter(pk=self.diesel.pk).exists())

    def test_delete_used_fuel_type_deactivates(self):
        supplier = TestDataFactory.create_supplier()
        depot = TestDataFactory.create_depot(supplier)
        TestDataFactory.create_tier(depot, self.diesel)
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/fuel-types/{self.diesel.pk}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.diesel.refresh_from_db()
        self.assertFalse(self.diesel.active)


class SeedFuelTypesCommandTests(TestCase):

    def test_seed_is_idempotent(self):
        call_command('seed_fuel_types', stdout=StringIO())
        count = FuelType.objects.count()
        self.assertGreater(count, 0)
        call_command('seed_fuel_types', stdout=StringIO())
        self.assertEqual(FuelType.objects.count(), count)
