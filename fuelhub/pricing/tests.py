"""
Test suite for the pricing module
Tests: tier selection and ranges, order quotes, depot tier management,
shared stock and driver fuel prices
"""
from decimal import Decimal
from types import SimpleNamespace
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from fuelhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from .models import DepotPrice, DriverPricing, PricingHistory
from .services import price_per_litre_for_order, reduce_stock, build_depot_pricing
from .tiers import select_tier, tier_ranges, quote_order, round_cents


def _tier(min_litres, price_cents):
    return SimpleNamespace(min_litres=Decimal(min_litres), price_cents=price_cents)


class TierSelectionTests(TestCase):

    def setUp(self):
        self.tiers = [_tier('1000', 1900), _tier('0', 2100), _tier('500', 2000)]

    def test_highest_applicable_minimum(self):
        self.assertEqual(select_tier(self.tiers, '750').price_cents, 2000)
        self.assertEqual(select_tier(self.tiers, '1000').price_cents, 1900)
        self.assertEqual(select_tier(self.tiers, '20').price_cents, 2100)

    def test_below_every_minimum_uses_lowest_tier(self):
        tiers = [_tier('100', 2000), _tier('500', 1800)]
        self.assertEqual(select_tier(tiers, '10').price_cents, 2000)

    def test_empty(self):
        self.assertIsNone(select_tier([], '10'))

    def test_ranges(self):
        labels = [label for _, _, label in tier_ranges(self.tiers)]
        self.assertEqual(labels, ['0L - 499L', '500L - 999L', '1000L+'])
        self.assertIsNone(tier_ranges(self.tiers)[-1][1])


class QuoteTests(TestCase):

    def _settings(self, percent='5.00', minimum=5000, base=35000):
        return SimpleNamespace(service_fee_percent=Decimal(percent), service_fee_min_cents=minimum,
                               base_delivery_fee_cents=base)

    def test_quote_breakdown(self):
        quote = quote_order(Decimal('1000'), 2000, self._settings())
        self.assertEqual(quote['fuel_price_cents'], 2000000)
        self.assertEqual(quote['delivery_fee_cents'], 35000)
        self.assertEqual(quote['service_fee_cents'], 100000)
        self.assertEqual(quote['total_cents'], 2135000)

    def test_service_fee_floor(self):
        quote = quote_order(Decimal('10'), 2000, self._settings())
        self.assertEqual(quote['service_fee_cents'], 5000)

    def test_half_cents_round_up(self):
        self.assertEqual(round_cents(Decimal('10.5')), 11)
        quote = quote_order(Decimal('0.25'), 2002, self._settings(minimum=0))
        self.assertEqual(quote['fuel_price_cents'], 501)


class PricePerLitreTests(TestCase):

    def setUp(self):
        supplier = TestDataFactory.create_supplier()
        self.fuel = TestDataFactory.create_fuel_type()
        self.depot_a = TestDataFactory.create_depot(supplier)
        self.depot_b = TestDataFactory.create_depot(supplier)
        TestDataFactory.create_tier(self.depot_a, self.fuel, price_cents=2200)
        TestDataFactory.create_tier(self.depot_b, self.fuel, price_cents=2300)
        TestDataFactory.create_tier(self.depot_b, self.fuel, price_cents=2050, min_litres='500')

    def test_selected_depot_tier(self):
        self.assertEqual(price_per_litre_for_order(self.fuel, Decimal('100'), depot=self.depot_b), 2300)

    def test_cheapest_applicable_tier_across_depots(self):
        self.assertEqual(price_per_litre_for_order(self.fuel, Decimal('100')), 2200)
        self.assertEqual(price_per_litre_for_order(self.fuel, Decimal('600')), 2050)

    def test_inactive_depots_ignored(self):
        self.depot_a.is_active = False
        self.depot_a.save()
        self.assertEqual(price_per_litre_for_order(self.fuel, Decimal('100')), 2300)

    def test_default_when_unpriced(self):
        other = TestDataFactory.create_fuel_type()
        self.assertEqual(price_per_litre_for_order(other, Decimal('100'), default_cents=2500), 2500)


class StockTests(TestCase):

    def setUp(self):
        cache.clear()
        self.depot = TestDataFactory.create_depot(TestDataFactory.create_supplier())
        self.fuel = TestDataFactory.create_fuel_type()

    def test_reduce_stock_updates_every_tier(self):
        TestDataFactory.create_tier(self.depot, self.fuel, available_litres='1000')
        TestDataFactory.create_tier(self.depot, self.fuel, min_litres='500', available_litres='1000')
        before, after = reduce_stock(self.depot, self.fuel, Decimal('300'))
        self.assertEqual((before, after), (Decimal('1000'), Decimal('700')))
        self.assertEqual(set(DepotPrice.objects.values_list('available_litres', flat=True)), {Decimal('700')})

    def test_reduce_stock_floors_at_zero(self):
        TestDataFactory.create_tier(self.depot, self.fuel, available_litres='100')
        _, after = reduce_stock(self.depot, self.fuel, Decimal('300'))
        self.assertEqual(after, Decimal('0'))

    def test_untracked_stock(self):
        TestDataFactory.create_tier(self.depot, self.fuel)
        self.assertEqual(reduce_stock(self.depot, self.fuel, Decimal('300')), (None, None))

    def test_pricing_cache_refreshed_after_tier_change(self):
        tier = TestDataFactory.create_tier(self.depot, self.fuel, price_cents=2000)
        self.assertEqual(build_depot_pricing(self.depot)[0]['pricing_tiers'][0]['price_cents'], 2000)
        tier.price_cents = 2400
        tier.save()
        self.assertEqual(build_depot_pricing(self.depot)[0]['pricing_tiers'][0]['price_cents'], 2400)


class DepotPricingAPITests(TestCase):

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.supplier = TestDataFactory.create_supplier()
        self.depot = TestDataFactory.create_depot(self.supplier)
        self.fuel = TestDataFactory.create_fuel_type()
        self.client.authenticate_user(self.supplier.owner)

    def test_create_tier_records_history(self):
        response = self.client.post(f'/api/v1/depots/{self.depot.pk}/pricing/', {
            'fuel_type_id': self.fuel.pk, 'price_cents': 2100, 'min_litres': '0', 'available_litres': '5000',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        history = PricingHistory.objects.get(depot=self.depot)
        self.assertIsNone(history.old_price_cents)
        self.assertEqual(history.new_price_cents, 2100)

    def test_duplicate_minimum_rejected(self):
        TestDataFactory.create_tier(self.depot, self.fuel, min_litres='0')
        response = self.client.post(f'/api/v1/depots/{self.depot.pk}/pricing/', {
            'fuel_type_id': self.fuel.pk, 'price_cents': 2100, 'min_litres': '0',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_new_tier_inherits_shared_stock(self):
        TestDataFactory.create_tier(self.depot, self.fuel, available_litres='800')
        response = self.client.post(f'/api/v1/depots/{self.depot.pk}/pricing/', {
            'fuel_type_id': self.fuel.pk, 'price_cents': 1900, 'min_litres': '500',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['available_litres']), Decimal('800'))

    def test_update_price_records_old_and_new(self):
        tier = TestDataFactory.create_tier(self.depot, self.fuel, price_cents=2000)
        response = self.client.patch(f'/api/v1/depots/{self.depot.pk}/pricing/{tier.pk}/', {'price_cents': 2200}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        history = PricingHistory.objects.get(depot=self.depot)
        self.assertEqual((history.old_price_cents, history.new_price_cents), (2000, 2200))

    def test_update_to_clashing_minimum_rejected(self):
        TestDataFactory.create_tier(self.depot, self.fuel, min_litres='0')
        tier = TestDataFactory.create_tier(self.depot, self.fuel, price_cents=1800, min_litres='500')
        response = self.client.patch(f'/api/v1/depots/{self.depot.pk}/pricing/{tier.pk}/', {'min_litres': '0'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        tier.refresh_from_db()
        self.assertEqual(tier.min_litres, Decimal('500'))

    def test_stock_sent_with_tier_update_applies_to_all_tiers(self):
        TestDataFactory.create_tier(self.depot, self.fuel, min_litres='0', available_litres='1000')
        tier = TestDataFactory.create_tier(self.depot, self.fuel, price_cents=1800, min_litres='500', available_litres='1000')
        other_fuel = TestDataFactory.create_fuel_type()
        TestDataFactory.create_tier(self.depot, other_fuel, available_litres='300')
        response = self.client.patch(f'/api/v1/depots/{self.depot.pk}/pricing/{tier.pk}/',
                                     {'available_litres': '4200'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        stock = set(DepotPrice.objects.filter(depot=self.depot, fuel_type=self.fuel).values_list('available_litres', flat=True))
        self.assertEqual(stock, {Decimal('4200')})
        self.assertEqual(DepotPrice.objects.get(depot=self.depot, fuel_type=other_fuel).available_litres, Decimal('300'))

    def test_listing_follows_fuel_type_changes(self):
        TestDataFactory.create_tier(self.depot, self.fuel)
        url = f'/api/v1/depots/{self.depot.pk}/pricing/'
        self.assertEqual(len(self.client.get(url).data), 1)

        self.fuel.label = 'Renamed Diesel'
        self.fuel.save()
        self.assertEqual(self.client.get(url).data[0]['label'], 'Renamed Diesel')

        self.fuel.active = False
        self.fuel.save()
        self.assertEqual(self.client.get(url).data, [])

    def test_negative_price_rejected(self):
        tier = TestDataFactory.create_tier(self.depot, self.fuel)
        response = self.client.patch(f'/api/v1/depots/{self.depot.pk}/pricing/{tier.pk}/', {'price_cents': -1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_set_stock_creates_default_tier(self):
        response = self.client.put(f'/api/v1/depots/{self.depot.pk}/pricing/stock/', {
            'fuel_type_id': self.fuel.pk, 'available_litres': '2500',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        tier = DepotPrice.objects.get(depot=self.depot, fuel_type=self.fuel)
        self.assertEqual(tier.available_litres, Decimal('2500'))
        self.assertEqual(tier.min_litres, Decimal('0'))

    def test_other_supplier_cannot_edit(self):
        other = TestDataFactory.create_supplier()
        self.client.authenticate_user(other.owner)
        response = self.client.post(f'/api/v1/depots/{self.depot.pk}/pricing/', {
            'fuel_type_id': self.fuel.pk, 'price_cents': 2100,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_anyone_can_read_active_depot_pricing(self):
        TestDataFactory.create_tier(self.depot, self.fuel)
        driver = TestDataFactory.create_driver()
        self.client.authenticate_user(driver.user)
        response = self.client.get(f'/api/v1/depots/{self.depot.pk}/pricing/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data[0]['pricing_tiers']), 1)


class DriverPricingTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.driver = TestDataFactory.create_driver()
        self.fuel = TestDataFactory.create_fuel_type()
        self.client.authenticate_user(self.driver.user)

    def test_list_shows_unset_prices(self):
        response = self.client.get('/api/v1/driver/pricing/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data[0]['pricing'])

    def test_set_and_update_price(self):
        url = f'/api/v1/driver/pricing/{self.fuel.pk}/'
        self.client.put(url, {'fuel_price_per_litre_cents': 2300}, format='json')
        response = self.client.put(url, {'fuel_price_per_litre_cents': 2400, 'notes': 'Diesel up'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(DriverPricing.objects.get(driver=self.driver).fuel_price_per_litre_cents, 2400)
        history = self.client.get('/api/v1/driver/pricing/history/').data
        self.assertEqual(len(history), 2)
        self.assertEqual(PricingHistory.objects.filter(driver=self.driver, old_price_cents=2300).count(), 1)
