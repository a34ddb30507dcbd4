"""
Test utilities and factories for creating test data
"""
from datetime import timedelta
from decimal import Decimal
import random
import string
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from fuelhub.catalog.models import FuelType
from fuelhub.core.models import AppSetting
from fuelhub.depot_orders.models import DriverDepotOrder
from fuelhub.locations.models import Depot
from fuelhub.orders.models import Order, DispatchOffer
from fuelhub.parties.models import Customer, Driver, Supplier, DeliveryAddress, PaymentMethod, Document
from fuelhub.pricing.models import DepotPrice

User = get_user_model()

# Johannesburg CBD and a point roughly 5km north of it
JHB_LAT, JHB_LNG = -26.2041, 28.0473
NEARBY_LAT, NEARBY_LNG = -26.1590, 28.0473


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', role='customer', full_name=None, **extra):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            role=role,
            full_name=full_name or username,
            **extra
        )

    @staticmethod
    def create_admin(username=None):
        return TestDataFactory.create_user(username=username, role='admin', is_staff=True)

    @staticmethod
    def create_customer(user=None, company_name=''):
        """Create a customer with its user"""
        user = user or TestDataFactory.create_user(role='customer')
        return Customer.objects.create(user=user, company_name=company_name)

    @staticmethod
    def create_driver(user=None, approved=True, available=True, lat=NEARBY_LAT, lng=NEARBY_LNG,
                      premium=False, radius_miles=20):
        """Create a driver; approved, available and located near Johannesburg by default"""
        user = user or TestDataFactory.create_user(role='driver')
        return Driver.objects.create(
            user=user,
            kyc_status='approved' if approved else 'pending',
            status='active' if approved else 'pending',
            compliance_status='approved' if approved else 'pending',
            availability_status='available' if available else 'offline',
            premium_status='active' if premium else 'inactive',
            current_lat=lat,
            current_lng=lng,
            location_updated_at=timezone.now() if lat is not None else None,
            job_radius_preference_miles=radius_miles,
        )

    @staticmethod
    def create_supplier(user=None, name=None, approved=True):
        """Create a supplier; compliance approved by default"""
        user = user or TestDataFactory.create_user(role='supplier')
        return Supplier.objects.create(
            owner=user,
            name=name or f'Supplier_{TestDataFactory.random_string(6)}',
            kyb_status='approved' if approved else 'pending',
            status='active' if approved else 'pending',
            compliance_status='approved' if approved else 'pending',
        )

    @staticmethod
    def create_fuel_type(code=None, label=None):
        if not code:
            code = f'fuel_{TestDataFactory.random_string(6).lower()}'
        return FuelType.objects.create(code=code, label=label or code.replace('_', ' ').title())

    @staticmethod
    def create_address(customer, lat=JHB_LAT, lng=JHB_LNG, is_default=False):
        return DeliveryAddress.objects.create(
            customer=customer,
            label='Site',
            address_street='1 Main Street',
            address_city='Johannesburg',
            address_province='Gauteng',
            address_postal_code='2001',
            lat=lat,
            lng=lng,
            is_default=is_default,
        )

    @staticmethod
    def create_payment_method(customer):
        return PaymentMethod.objects.create(
            customer=customer,
            method_type='bank_account',
            label='Business account',
            bank_name='Test Bank',
            account_holder_name='Test Holder',
            account_number='1234567890',
            branch_code='250655',
        )

    @staticmethod
    def create_depot(supplier, name=None, lat=JHB_LAT, lng=JHB_LNG, is_active=True):
        return Depot.objects.create(
            supplier=supplier,
            name=name or f'Depot_{TestDataFactory.random_string(6)}',
            address_city='Johannesburg',
            address_province='Gauteng',
            lat=lat,
            lng=lng,
            is_active=is_active,
        )

    @staticmethod
    def create_tier(depot, fuel_type, price_cents=2000, min_litres='0', available_litres=None):
        return DepotPrice.objects.create(
            depot=depot,
            fuel_type=fuel_type,
            price_cents=price_cents,
            min_litres=Decimal(min_litres),
            available_litres=Decimal(available_litres) if available_litres is not None else None,
        )

    @staticmethod
    def create_document(owner, owner_type, doc_type, verification_status='verified', vehicle=None):
        return Document.objects.create(
            owner=owner,
            owner_type=owner_type,
            vehicle=vehicle,
            doc_type=doc_type,
            file_url=f'https://files.test/{TestDataFactory.random_string(8)}.pdf',
            verification_status=verification_status,
        )

    @staticmethod
    def create_order(customer, fuel_type, litres='100', state='created', address=None, driver=None, **extra):
        """Create an order directly, bypassing pricing and dispatch"""
        address = address or TestDataFactory.create_address(customer)
        return Order.objects.create(
            customer=customer,
            fuel_type=fuel_type,
            litres=Decimal(litres),
            delivery_address=address,
            drop_lat=address.lat,
            drop_lng=address.lng,
            terms_accepted=True,
            terms_accepted_at=timezone.now(),
            price_per_litre_cents=2500,
            fuel_price_cents=250000,
            delivery_fee_cents=35000,
            service_fee_cents=12500,
            total_cents=297500,
            state=state,
            assigned_driver=driver,
            **extra
        )

    @staticmethod
    def create_offer(order, driver, state='offered', minutes=15, **extra):
        return DispatchOffer.objects.create(
            order=order,
            driver=driver,
            state=state,
            expires_at=timezone.now() + timedelta(minutes=minutes),
            **extra
        )

    @staticmethod
    def create_depot_order(driver, depot, fuel_type, litres='500', status='pending', **extra):
        litres = Decimal(litres)
        return DriverDepotOrder.objects.create(
            driver=driver,
            depot=depot,
            fuel_type=fuel_type,
            litres=litres,
            price_per_litre_cents=2000,
            total_price_cents=int(litres * 2000),
            status=status,
            pickup_date=timezone.now() + timedelta(days=1),
            **extra
        )

    @staticmethod
    def app_settings(**overrides):
        """Load the settings singleton, applying overrides"""
        settings_obj = AppSetting.load()
        for field, value in overrides.items():
            setattr(settings_obj, field, value)
        if overrides:
            settings_obj.save()
        return settings_obj


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
