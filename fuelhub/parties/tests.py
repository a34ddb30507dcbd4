"""
Test suite for the parties module
Tests: delivery addresses (with geocoding), payment methods, vehicles, driver
preferences, documents, compliance checklists and admin KYC review
"""
from unittest.mock import patch, MagicMock
import requests
from django.db import connection
from django.test import TestCase
from rest_framework import status
from fuelhub.core.models import AuditLog
from fuelhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from fuelhub.notifications.models import Notification
from .compliance import DRIVER_REQUIRED_DOCUMENTS, SUPPLIER_REQUIRED_DOCUMENTS, get_driver_compliance
from .geocoding import geocode_address, GeocodingError
from .models import DeliveryAddress, PaymentMethod, Vehicle, Document


def _geocoder_response(results):
    response = MagicMock()
    response.json.return_value = results
    response.raise_for_status.return_value = None
    return response


class GeocodingTests(TestCase):

    @patch('fuelhub.parties.geocoding.requests.get')
    def test_returns_first_match(self, mock_get):
        mock_get.return_value = _geocoder_response([{'lat': '-26.2', 'lon': '28.04'}])
        self.assertEqual(geocode_address('1 Main Street, Johannesburg'), (-26.2, 28.04))

    @patch('fuelhub.parties.geocoding.requests.get')
    def test_no_match_returns_none(self, mock_get):
        mock_get.return_value = _geocoder_response([])
        self.assertIsNone(geocode_address('Nowhere'))

    @patch('fuelhub.parties.geocoding.requests.get')
    def test_transport_error_raises(self, mock_get):
        mock_get.side_effect = requests.ConnectionError('down')
        with self.assertRaises(GeocodingError):
            geocode_address('1 Main Street')


class ProfileTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_supplier_put_updates_sent_fields(self):
        supplier = TestDataFactory.create_supplier()
        self.client.authenticate_user(supplier.owner)
        response = self.client.put('/api/v1/profile/', {'name': 'New Name'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'New Name')
        supplier.refresh_from_db()
        self.assertEqual(supplier.name, 'New Name')
        self.assertEqual(supplier.compliance_status, 'approved')

    def test_driver_patch_cannot_change_kyc_status(self):
        driver = TestDataFactory.create_driver(approved=False)
        self.client.authenticate_user(driver.user)
        response = self.client.patch('/api/v1/profile/', {'license_number': 'DL-1', 'kyc_status': 'approved'},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        driver.refresh_from_db()
        self.assertEqual(driver.license_number, 'DL-1')
        self.assertEqual(driver.kyc_status, 'pending')

    def test_admin_has_no_profile(self):
        self.client.authenticate_user(TestDataFactory.create_admin())
        response = self.client.get('/api/v1/profile/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class DeliveryAddressTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.customer = TestDataFactory.create_customer()
        self.client.authenticate_user(self.customer.user)

    def _payload(self, **overrides):
        payload = {
            'label': 'Farm',
            'address_street': '12 Long Road',
            'address_city': 'Pretoria',
            'address_province': 'Gauteng',
            'address_postal_code': '0002',
        }
        payload.update(overrides)
        return payload

    @patch('fuelhub.parties.geocoding.requests.get')
    def test_create_geocodes_missing_coordinates(self, mock_get):
        mock_get.return_value = _geocoder_response([{'lat': '-25.7479', 'lon': '28.2293'}])
        response = self.client.post('/api/v1/customer/addresses/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertAlmostEqual(response.data['lat'], -25.7479)
        self.assertAlmostEqual(response.data['lng'], 28.2293)

    @patch('fuelhub.parties.geocoding.requests.get')
    def test_create_with_coordinates_skips_geocoding(self, mock_get):
        response = self.client.post('/api/v1/customer/addresses/', self._payload(lat=-26.1, lng=28.1), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        mock_get.assert_not_called()

    @patch('fuelhub.parties.geocoding.requests.get')
    def test_geocoding_failure_still_saves(self, mock_get):
        mock_get.side_effect = requests.Timeout('slow')
        response = self.client.post('/api/v1/customer/addresses/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['lat'])

    def test_new_default_unsets_previous_default(self):
        first = TestDataFactory.create_address(self.customer, is_default=True)
        response = self.client.post('/api/v1/customer/addresses/',
                                    self._payload(lat=-26.1, lng=28.1, is_default=True), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        first.refresh_from_db()
        self.assertFalse(first.is_default)

    def test_out_of_range_latitude_rejected(self):
        response = self.client.post('/api/v1/customer/addresses/', self._payload(lat=95, lng=28.1), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @patch('fuelhub.parties.geocoding.requests.get')
    def test_patch_keeps_coordinates_when_geocoding_fails(self, mock_get):
        mock_get.return_value = _geocoder_response([])
        address = TestDataFactory.create_address(self.customer, lat=-26.2, lng=28.0)
        response = self.client.patch(f'/api/v1/customer/addresses/{address.pk}/',
                                     {'address_street': '99 Other Street'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        address.refresh_from_db()
        self.assertEqual(address.address_street, '99 Other Street')
        self.assertAlmostEqual(address.lat, -26.2)

    @patch('fuelhub.parties.geocoding.requests.get')
    def test_geocoding_runs_outside_transaction(self, mock_get):
        baseline = len(connection.savepoint_ids)
        depths = []

        def respond(*args, **kwargs):
            depths.append(len(connection.savepoint_ids))
            return _geocoder_response([{'lat': '-25.7479', 'lon': '28.2293'}])

        mock_get.side_effect = respond
        self.client.post('/api/v1/customer/addresses/', self._payload(), format='json')
        self.assertEqual(depths, [baseline])

    @patch('fuelhub.parties.geocoding.requests.get')
    def test_patch_geocodes_changed_location(self, mock_get):
        mock_get.return_value = _geocoder_response([{'lat': '-33.9249', 'lon': '18.4241'}])
        address = TestDataFactory.create_address(self.customer, lat=-26.2, lng=28.0)
        response = self.client.patch(f'/api/v1/customer/addresses/{address.pk}/',
                                     {'address_city': 'Cape Town'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        address.refresh_from_db()
        self.assertAlmostEqual(address.lat, -33.9249)
        self.assertAlmostEqual(address.lng, 18.4241)
        self.assertIn('Cape Town', mock_get.call_args.kwargs['params']['q'])

    def test_other_customers_address_not_found(self):
        other = TestDataFactory.create_customer()
        address = TestDataFactory.create_address(other)
        response = self.client.get(f'/api/v1/customer/addresses/{address.pk}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_driver_cannot_manage_addresses(self):
        driver = TestDataFactory.create_driver()
        self.client.authenticate_user(driver.user)
        response = self.client.get('/api/v1/customer/addresses/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete(self):
        address = TestDataFactory.create_address(self.customer)
        response = self.client.delete(f'/api/v1/customer/addresses/{address.pk}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(DeliveryAddress.objects.filter(pk=address.pk).exists())


class PaymentMethodTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.customer = TestDataFactory.create_customer()
        self.client.authenticate_user(self.customer.user)

    def test_bank_account_requires_details(self):
        response = self.client.post('/api/v1/customer/payment-methods/', {
            'method_type': 'bank_account', 'label': 'Bank',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('account_number', response.data)

    def test_account_number_is_masked(self):
        response = self.client.post('/api/v1/customer/payment-methods/', {
            'method_type': 'bank_account',
            'label': 'Bank',
            'bank_name': 'Test Bank',
            'account_holder_name': 'Holder',
            'account_number': '62001234567',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['masked_account_number'], '****4567')
        self.assertNotIn('account_number', response.data)

    def test_card_requires_last_four_digits(self):
        response = self.client.post('/api/v1/customer/payment-methods/', {
            'method_type': 'credit_card', 'label': 'Card', 'card_last_four': '12a4',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_deactivates(self):
        method = TestDataFactory.create_payment_method(self.customer)
        response = self.client.delete(f'/api/v1/customer/payment-methods/{method.pk}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        method.refresh_from_db()
        self.assertFalse(method.is_active)
        self.assertTrue(PaymentMethod.objects.filter(pk=method.pk).exists())


class VehicleAndPreferenceTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.driver = TestDataFactory.create_driver()
        self.client.authenticate_user(self.driver.user)

    def test_create_vehicle_normalises_registration(self):
        response = self.client.post('/api/v1/driver/vehicles/', {
            'registration_number': ' ca 123-456 ',
            'capacity_litres': 5000,
            'fuel_types': ['diesel_50ppm'],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Vehicle.objects.get(driver=self.driver).registration_number, 'CA 123-456')

    def test_fuel_types_must_be_codes(self):
        response = self.client.post('/api/v1/driver/vehicles/', {
            'registration_number': 'CA1', 'capacity_litres': 5000, 'fuel_types': [1, 2],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_preferences(self):
        response = self.client.patch('/api/v1/driver/preferences/', {
            'job_radius_preference_miles': 35, 'availability_status': 'offline',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.driver.refresh_from_db()
        self.assertEqual(self.driver.job_radius_preference_miles, 35)
        self.assertEqual(self.driver.availability_status, 'offline')

    def test_radius_must_be_positive(self):
        response = self.client.patch('/api/v1/driver/preferences/', {'job_radius_preference_miles': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class DocumentAndComplianceTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.driver = TestDataFactory.create_driver(approved=False)
        self.client.authenticate_user(self.driver.user)

    def test_upload_document_sets_owner(self):
        response = self.client.post('/api/v1/documents/', {
            'doc_type': 'drivers_license',
            'file_url': 'https://files.test/licence.pdf',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        document = Document.objects.get(pk=response.data['id'])
        self.assertEqual(document.owner, self.driver.user)
        self.assertEqual(document.owner_type, 'driver')
        self.assertEqual(document.verification_status, 'pending')

    def test_vehicle_document_of_other_driver_rejected(self):
        other = TestDataFactory.create_driver()
        vehicle = Vehicle.objects.create(driver=other, registration_number='X1', capacity_litres=1000)
        response = self.client.post('/api/v1/documents/', {
            'doc_type': 'vehicle_registration',
            'file_url': 'https://files.test/reg.pdf',
            'vehicle': vehicle.pk,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_verified_document_cannot_be_deleted_by_owner(self):
        document = TestDataFactory.create_document(self.driver.user, 'driver', 'prdp', verification_status='verified')
        response = self.client.delete(f'/api/v1/documents/{document.pk}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_checklist_reports_missing_documents(self):
        response = self.client.get('/api/v1/compliance/status/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['overall_status'], 'incomplete')
        self.assertFalse(response.data['can_access_platform'])
        self.assertEqual(response.data['checklist']['missing'], DRIVER_REQUIRED_DOCUMENTS)

    def test_passport_satisfies_identity_requirement(self):
        TestDataFactory.create_document(self.driver.user, 'driver', 'passport', verification_status='pending')
        compliance = get_driver_compliance(self.driver)
        self.assertNotIn('za_id', compliance['checklist']['missing'])

    def test_vehicle_adds_vehicle_documents(self):
        Vehicle.objects.create(driver=self.driver, registration_number='V1', capacity_litres=1000)
        compliance = get_driver_compliance(self.driver)
        self.assertIn('roadworthy_certificate', compliance['checklist']['missing'])

    def test_all_documents_awaiting_review_is_pending(self):
        for doc_type in DRIVER_REQUIRED_DOCUMENTS:
            TestDataFactory.create_document(self.driver.user, 'driver', doc_type)
        self.assertEqual(get_driver_compliance(self.driver)['overall_status'], 'pending')

    def test_supplier_checklist(self):
        supplier = TestDataFactory.create_supplier(approved=False)
        self.client.authenticate_user(supplier.owner)
        response = self.client.get('/api/v1/compliance/status/')
        self.assertEqual(response.data['checklist']['missing'], SUPPLIER_REQUIRED_DOCUMENTS)

    def test_customer_has_no_compliance(self):
        customer = TestDataFactory.create_customer()
        self.client.authenticate_user(customer.user)
        response = self.client.get('/api/v1/compliance/status/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class AdminKycTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.admin = TestDataFactory.create_admin()
        self.driver = TestDataFactory.create_driver(approved=False)
        self.supplier = TestDataFactory.create_supplier(approved=False)
        self.client.authenticate_user(self.admin)

    def test_pending_queue(self):
        response = self.client.get('/api/v1/admin/kyc/pending/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['drivers']), 1)
        self.assertEqual(len(response.data['suppliers']), 1)

    def test_approve_driver(self):
        response = self.client.post(f'/api/v1/admin/drivers/{self.driver.pk}/approve/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.driver.refresh_from_db()
        self.assertEqual(self.driver.kyc_status, 'approved')
        self.assertEqual(self.driver.status, 'active')
        self.assertTrue(Notification.objects.filter(user=self.driver.user, type='account_approved').exists())
        self.assertTrue(AuditLog.objects.filter(action='kyc_approve', model_name='Driver').exists())

    def test_reject_driver_requires_reason(self):
        response = self.client.post(f'/api/v1/admin/drivers/{self.driver.pk}/reject/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post(f'/api/v1/admin/drivers/{self.driver.pk}/reject/',
                                    {'reason': 'Licence expired'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.driver.refresh_from_db()
        self.assertEqual(self.driver.kyc_status, 'rejected')
        self.assertEqual(self.driver.rejection_reason, 'Licence expired')

    def test_unknown_decision(self):
        response = self.client.post(f'/api/v1/admin/drivers/{self.driver.pk}/suspend/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_approve_supplier_grants_compliance(self):
        response = self.client.post(f'/api/v1/admin/suppliers/{self.supplier.pk}/approve/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.supplier.refresh_from_db()
        self.assertTrue(self.supplier.is_compliant)

    def test_premium_status_update(self):
        response = self.client.patch(f'/api/v1/admin/drivers/{self.driver.pk}/', {'premium_status': 'active'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.driver.refresh_from_db()
        self.assertEqual(self.driver.premium_status, 'active')
        response = self.client.patch(f'/api/v1/admin/drivers/{self.driver.pk}/', {'premium_status': 'gold'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_document_review(self):
        document = TestDataFactory.create_document(self.driver.user, 'driver', 'prdp', verification_status='pending')
        response = self.client.post(f'/api/v1/admin/documents/{document.pk}/review/',
                                    {'verification_status': 'rejected'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post(f'/api/v1/admin/documents/{document.pk}/review/',
                                    {'verification_status': 'verified'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        document.refresh_from_db()
        self.assertEqual(document.verification_status, 'verified')
        self.assertEqual(document.verified_by, self.admin)

    def test_document_review_notifies_owner(self):
        document = TestDataFactory.create_document(self.driver.user, 'driver', 'prdp', verification_status='pending')
        response = self.client.post(f'/api/v1/admin/documents/{document.pk}/review/',
                                    {'verification_status': 'rejected', 'reason': 'Expired'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        notification = Notification.objects.get(user=self.driver.user)
        self.assertEqual(notification.data['verification_status'], 'rejected')
        self.assertIn('Expired', notification.message)

    def test_non_admin_forbidden(self):
        self.client.authenticate_user(self.driver.user)
        response = self.client.post(f'/api/v1/admin/drivers/{self.driver.pk}/approve/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
