"""
Test suite for the core module
Tests: registration, JWT auth, current user, user administration, app settings and audit logs
"""
from decimal import Decimal
from io import StringIO
from django.core.management import call_command
from django.core.management.base import CommandError
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from rest_framework_simplejwt.tokens import RefreshToken
from fuelhub.core.models import AppSetting, AuditLog, User
from fuelhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from fuelhub.core.utils import create_audit_log
from fuelhub.parties.models import Customer, Driver, Supplier


class RegistrationTests(TestCase):
    """Self-service registration creates the user and the role profile"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def _payload(self, **overrides):
        payload = {
            'username': 'newuser',
            'email': 'newuser@test.com',
            'password': 'Str0ng-pass-123',
            'password_confirm': 'Str0ng-pass-123',
            'full_name': 'New User',
        }
        payload.update(overrides)
        return payload

    def test_register_customer_creates_profile(self):
        response = self.client.post('/api/v1/auth/register/', self._payload(role='customer', company_name='Acme'), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        user = User.objects.get(username='newuser')
        self.assertEqual(user.role, 'customer')
        self.assertEqual(Customer.objects.get(user=user).company_name, 'Acme')

    def test_register_driver_creates_profile(self):
        response = self.client.post('/api/v1/auth/register/', self._payload(role='driver'), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        driver = Driver.objects.get(user__username='newuser')
        self.assertEqual(driver.kyc_status, 'pending')
        self.assertEqual(driver.job_radius_preference_miles, 20)

    def test_register_supplier_uses_supplier_name(self):
        response = self.client.post('/api/v1/auth/register/', self._payload(role='supplier', supplier_name='Fuel Co'), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Supplier.objects.get(owner__username='newuser').name, 'Fuel Co')

    def test_admin_role_cannot_self_register(self):
        response = self.client.post('/api/v1/auth/register/', self._payload(role='admin'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('role', response.data)
        self.assertFalse(User.objects.filter(username='newuser').exists())

    def test_password_mismatch(self):
        response = self.client.post('/api/v1/auth/register/', self._payload(password_confirm='different-123'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class AuthTests(TestCase):
    """Login and token refresh"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user(username='driver1', role='driver', password='testpass123')

    def test_login_returns_tokens_and_user(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'driver1', 'password': 'testpass123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertEqual(response.data['user']['role'], 'driver')

    def test_login_wrong_password(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'driver1', 'password': 'wrong'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_disabled_user_cannot_log_in(self):
        self.user.is_active = False
        self.user.save()
        response = self.client.post('/api/v1/auth/login/', {'username': 'driver1', 'password': 'testpass123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertNotIn('access', response.data)

    def test_refresh_with_deleted_user(self):
        refresh = RefreshToken.for_user(self.user)
        self.user.delete()
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': str(refresh)}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_unauthenticated_request_rejected(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class UserMeTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_me_includes_profile_and_flags(self):
        customer = TestDataFactory.create_customer(company_name='Acme')
        self.client.authenticate_user(customer.user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_customer'])
        self.assertFalse(response.data['is_admin'])
        self.assertEqual(response.data['profile']['company_name'], 'Acme')

    def test_me_for_admin_has_no_profile(self):
        admin = TestDataFactory.create_admin()
        self.client.authenticate_user(admin)
        response = self.client.get('/api/v1/auth/me/')
        self.assertTrue(response.data['is_admin'])
        self.assertIsNone(response.data['profile'])


class UserAdministrationTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.admin = TestDataFactory.create_admin()

    def test_non_admin_forbidden(self):
        customer = TestDataFactory.create_customer()
        self.client.authenticate_user(customer.user)
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_filters_by_role(self):
        TestDataFactory.create_driver()
        TestDataFactory.create_customer()
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/users/', {'role': 'driver'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['role'], 'driver')

    def test_admin_can_create_admin(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/users/', {
            'username': 'admin2',
            'email': 'admin2@test.com',
            'password': 'Str0ng-pass-123',
            'password_confirm': 'Str0ng-pass-123',
            'role': 'admin',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(User.objects.get(username='admin2').is_staff)
        self.assertTrue(AuditLog.objects.filter(model_name='User', action='create').exists())

    def test_admin_cannot_delete_self(self):
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/users/{self.admin.pk}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class AppSettingTests(TestCase):

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.admin = TestDataFactory.create_admin()
        self.customer = TestDataFactory.create_customer()

    def test_load_is_singleton(self):
        first = AppSetting.load()
        second = AppSetting.load()
        self.assertEqual(first.pk, 1)
        self.assertEqual(second.pk, 1)
        self.assertEqual(AppSetting.objects.count(), 1)

    def test_defaults(self):
        settings_obj = AppSetting.load()
        self.assertEqual(settings_obj.service_fee_percent, Decimal('5.00'))
        self.assertEqual(settings_obj.base_delivery_fee_cents, 35000)
        self.assertEqual(settings_obj.price_per_km_cents, 5000)

    def test_any_user_can_read(self):
        self.client.authenticate_user(self.customer.user)
        response = self.client.get('/api/v1/settings/app/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['price_per_km_cents'], 5000)

    def test_exposes_only_settings_in_use(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/settings/app/')
        self.assertEqual(set(response.data), {
            'service_fee_percent', 'service_fee_min_cents', 'base_delivery_fee_cents', 'price_per_km_cents',
            'default_price_per_litre_cents', 'premium_offer_minutes', 'regular_offer_minutes', 'updated_at',
        })

    def test_only_admin_can_update(self):
        self.client.authenticate_user(self.customer.user)
        response = self.client.patch('/api/v1/settings/app/', {'price_per_km_cents': 6000}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_update_invalidates_cached_settings(self):
        self.client.authenticate_user(self.admin)
        self.client.get('/api/v1/settings/app/')
        response = self.client.patch('/api/v1/settings/app/', {'price_per_km_cents': 6000}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.get('/api/v1/settings/app/')
        self.assertEqual(response.data['price_per_km_cents'], 6000)
        self.assertTrue(AuditLog.objects.filter(action='settings_change').exists())

    def test_negative_values_rejected(self):
        self.client.authenticate_user(self.admin)
        response = self.client.patch('/api/v1/settings/app/', {'service_fee_min_cents': -1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.patch('/api/v1/settings/app/', {'service_fee_percent': '-1.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class AuditLogTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.admin = TestDataFactory.create_admin()
        self.user = TestDataFactory.create_user()

    def test_create_audit_log_requires_fields(self):
        self.assertIsNone(create_audit_log(user=self.user, action='update', model_name='Order', object_id=None))

    def test_create_audit_log_with_user(self):
        log = create_audit_log(user=self.user, action='update', model_name='Order', object_id=5, changes={'a': 1})
        self.assertIsNotNone(log)
        self.assertEqual(log.object_id, '5')

    def test_users_see_only_their_logs(self):
        create_audit_log(user=self.user, action='update', model_name='Order', object_id=1)
        create_audit_log(user=self.admin, action='update', model_name='Order', object_id=2)
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(len(response.data), 1)
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(len(response.data), 2)

    def test_detail_forbidden_for_other_users(self):
        log = create_audit_log(user=self.admin, action='update', model_name='Order', object_id=2)
        self.client.authenticate_user(self.user)
        response = self.client.get(f'/api/v1/audit-logs/{log.pk}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class CreateAdminCommandTests(TestCase):

    def test_creates_admin(self):
        call_command('create_admin', 'ops', '--password', 'S3cure-pass!', '--full-name', 'Ops Team', stdout=StringIO())
        user = User.objects.get(username='ops')
        self.assertEqual(user.role, 'admin')
        self.assertTrue(user.is_staff)
        self.assertTrue(user.check_password('S3cure-pass!'))

    def test_promotes_existing_user(self):
        user = TestDataFactory.create_user()
        call_command('create_admin', user.username, stdout=StringIO())
        user.refresh_from_db()
        self.assertEqual(user.role, 'admin')

    def test_new_user_needs_password(self):
        with self.assertRaises(CommandError):
            call_command('create_admin', 'nobody', stdout=StringIO())
