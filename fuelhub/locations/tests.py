"""
Test suite for the locations module
Tests: distance helpers, supplier depots, the driver depot browser and
driver location tracking
"""
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from fuelhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient, JHB_LAT, JHB_LNG
from fuelhub.notifications.models import RealtimeEvent
from .geo import haversine_km, haversine_miles
from .models import Depot, DriverLocation


class GeoTests(TestCase):

    def test_zero_distance(self):
        self.assertEqual(haversine_km(JHB_LAT, JHB_LNG, JHB_LAT, JHB_LNG), 0)

    def test_johannesburg_to_pretoria(self):
        distance = haversine_km(-26.2041, 28.0473, -25.7479, 28.2293)
        self.assertAlmostEqual(distance, 53.7, delta=1.5)

    def test_miles_and_km_agree(self):
        km = haversine_km(-26.2041, 28.0473, -25.7479, 28.2293)
        miles = haversine_miles(-26.2041, 28.0473, -25.7479, 28.2293)
        self.assertAlmostEqual(km / miles, 1.609, places=2)


class SupplierDepotTests(TestCase):

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.supplier = TestDataFactory.create_supplier()
        self.client.authenticate_user(self.supplier.owner)

    def _payload(self, **overrides):
        payload = {'name': 'North Depot', 'address_city': 'Johannesburg', 'lat': JHB_LAT, 'lng': JHB_LNG}
        payload.update(overrides)
        return payload

    def test_create_depot(self):
        response = self.client.post('/api/v1/supplier/depots/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Depot.objects.get(pk=response.data['id']).supplier, self.supplier)

    def test_unapproved_supplier_cannot_create(self):
        supplier = TestDataFactory.create_supplier(approved=False)
        self.client.authenticate_user(supplier.owner)
        response = self.client.post('/api/v1/supplier/depots/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['code'], 'COMPLIANCE_REQUIRED')

    def test_unapproved_supplier_can_still_list(self):
        supplier = TestDataFactory.create_supplier(approved=False)
        self.client.authenticate_user(supplier.owner)
        response = self.client.get('/api/v1/supplier/depots/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_list_includes_pricing(self):
        depot = TestDataFactory.create_depot(self.supplier)
        fuel = TestDataFactory.create_fuel_type(code='diesel')
        TestDataFactory.create_tier(depot, fuel, price_cents=2100)
        response = self.client.get('/api/v1/supplier/depots/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        fuel_entry = response.data[0]['fuel_types'][0]
        self.assertEqual(fuel_entry['code'], 'diesel')
        self.assertEqual(fuel_entry['pricing_tiers'][0]['price_cents'], 2100)

    def test_invalid_open_hours(self):
        response = self.client.post('/api/v1/supplier/depots/', self._payload(open_hours=['mon']), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_suppliers_depot_not_found(self):
        depot = TestDataFactory.create_depot(TestDataFactory.create_supplier())
        response = self.client.patch(f'/api/v1/supplier/depots/{depot.pk}/', {'name': 'Mine'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_with_orders_deactivates(self):
        depot = TestDataFactory.create_depot(self.supplier)
        fuel = TestDataFactory.create_fuel_type()
        TestDataFactory.create_depot_order(TestDataFactory.create_driver(), depot, fuel)
        response = self.client.delete(f'/api/v1/supplier/depots/{depot.pk}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        depot.refresh_from_db()
        self.assertFalse(depot.is_active)

    def test_delete_unused_depot(self):
        depot = TestDataFactory.create_depot(self.supplier)
        response = self.client.delete(f'/api/v1/supplier/depots/{depot.pk}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Depot.objects.filter(pk=depot.pk).exists())


class DriverDepotBrowserTests(TestCase):

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.supplier = TestDataFactory.create_supplier()
        self.near = TestDataFactory.create_depot(self.supplier, name='Near', lat=-26.16, lng=28.05)
        self.far = TestDataFactory.create_depot(self.supplier, name='Far', lat=-25.75, lng=28.23)
        TestDataFactory.create_depot(self.supplier, name='Closed', is_active=False)

    def test_sorted_by_distance(self):
        driver = TestDataFactory.create_driver(lat=-25.76, lng=28.22)
        self.client.authenticate_user(driver.user)
        response = self.client.get('/api/v1/driver/depots/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([d['name'] for d in response.data], ['Far', 'Near'])
        self.assertLess(response.data[0]['distance_km'], response.data[1]['distance_km'])

    def test_driver_without_location_has_no_distance(self):
        driver = TestDataFactory.create_driver(lat=None, lng=None)
        self.client.authenticate_user(driver.user)
        response = self.client.get('/api/v1/driver/depots/')
        self.assertEqual(len(response.data), 2)
        self.assertIsNone(response.data[0]['distance_km'])

    def test_filter_by_fuel_type(self):
        fuel = TestDataFactory.create_fuel_type()
        TestDataFactory.create_tier(self.near, fuel)
        driver = TestDataFactory.create_driver()
        self.client.authenticate_user(driver.user)
        response = self.client.get('/api/v1/driver/depots/', {'fuel_type': fuel.pk})
        self.assertEqual([d['name'] for d in response.data], ['Near'])

    def test_customer_forbidden(self):
        customer = TestDataFactory.create_customer()
        self.client.authenticate_user(customer.user)
        response = self.client.get('/api/v1/driver/depots/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class LocationTrackingTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.driver = TestDataFactory.create_driver()
        self.customer = TestDataFactory.create_customer()
        self.fuel = TestDataFactory.create_fuel_type()

    def test_update_location_records_history(self):
        self.client.authenticate_user(self.driver.user)
        response = self.client.post('/api/v1/driver/location/', {'latitude': -26.1, 'longitude': 28.1, 'accuracy': 8}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.driver.refresh_from_db()
        self.assertEqual(self.driver.current_lat, -26.1)
        self.assertIsNotNone(self.driver.location_updated_at)
        self.assertEqual(DriverLocation.objects.filter(driver=self.driver).count(), 1)

    def test_update_location_validates_range(self):
        self.client.authenticate_user(self.driver.user)
        response = self.client.post('/api/v1/driver/location/', {'latitude': -126.1, 'longitude': 28.1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_publishes_to_customers_with_active_orders(self):
        TestDataFactory.create_order(self.customer, self.fuel, state='en_route', driver=self.driver)
        self.client.authenticate_user(self.driver.user)
        self.client.post('/api/v1/driver/location/', {'latitude': -26.1, 'longitude': 28.1}, format='json')
        self.assertTrue(RealtimeEvent.objects.filter(user=self.customer.user, type='driver_location_updated').exists())

    def test_customer_tracks_assigned_driver(self):
        TestDataFactory.create_order(self.customer, self.fuel, state='assigned', driver=self.driver)
        self.client.authenticate_user(self.customer.user)
        response = self.client.get(f'/api/v1/drivers/{self.driver.pk}/location/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['driver_id'], self.driver.pk)

    def test_customer_cannot_track_unrelated_driver(self):
        self.client.authenticate_user(self.customer.user)
        response = self.client.get(f'/api/v1/drivers/{self.driver.pk}/location/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_tracking_ends_after_delivery(self):
        TestDataFactory.create_order(self.customer, self.fuel, state='delivered', driver=self.driver)
        self.client.authenticate_user(self.customer.user)
        response = self.client.get(f'/api/v1/drivers/{self.driver.pk}/location/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_order_location_history(self):
        order = TestDataFactory.create_order(self.customer, self.fuel, state='en_route', driver=self.driver)
        DriverLocation.objects.create(driver=self.driver, latitude=-26.15, longitude=28.05)
        DriverLocation.objects.create(driver=self.driver, latitude=-26.17, longitude=28.05)
        self.client.authenticate_user(self.customer.user)
        response = self.client.get(f'/api/v1/orders/{order.pk}/location-history/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p['latitude'] for p in response.data], [-26.15, -26.17])

    def test_history_empty_without_driver(self):
        order = TestDataFactory.create_order(self.customer, self.fuel)
        self.client.authenticate_user(self.customer.user)
        response = self.client.get(f'/api/v1/orders/{order.pk}/location-history/')
        self.assertEqual(response.data, [])
