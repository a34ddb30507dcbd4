from django.core.management.base import BaseCommand
from fuelhub.catalog.models import FuelType
from fuelhub.core.cache_signals import suspend_cache_signals
from fuelhub.core.model_cache import invalidate_fuel_type_cache


DEFAULT_FUEL_TYPES = [
    ('diesel', 'Diesel 50ppm'),
    ('diesel_500', 'Diesel 500ppm'),
    ('petrol_93', 'Petrol 93'),
    ('petrol_95', 'Petrol 95'),
    ('paraffin', 'Paraffin'),
]


class Command(BaseCommand):
    help = 'Create the default fuel types if they do not exist'

    def handle(self, *args, **options):
        created_count = 0
        with suspend_cache_signals():
            for code, label in DEFAULT_FUEL_TYPES:
                _, created = FuelType.objects.get_or_create(code=code, defaults={'label': label})
                if created:
                    created_count += 1
                    self.stdout.write(f'Created fuel type: {label}')
                else:
                    self.stdout.write(f'Fuel type already exists: {label}')
        invalidate_fuel_type_cache()

        self.stdout.write(self.style.SUCCESS(f'\nFuel types ready ({created_count} created)'))
