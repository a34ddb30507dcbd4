import time
from django.core.management.base import BaseCommand
from fuelhub.orders.dispatch import release_regular_offers, expire_old_offers


class Command(BaseCommand):
    help = 'Release deferred offers to regular drivers and expire unanswered offers'

    def add_arguments(self, parser):
        parser.add_argument(
            '--loop',
            action='store_true',
            help='Keep running, processing every --interval seconds',
        )
        parser.add_argument(
            '--interval',
            type=int,
            default=30,
            help='Seconds between runs when looping',
        )

    def handle(self, *args, **options):
        while True:
            released = release_regular_offers()
            expired = expire_old_offers()
            self.stdout.write(self.style.SUCCESS(f'Released {released} offers, expired {expired} offers'))
            if not options['loop']:
                break
            time.sleep(options['interval'])
