from datetime import timedelta
from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone
from fuelhub.notifications.models import RealtimeEvent


class Command(BaseCommand):
    help = 'Delete realtime events older than the retention window'

    def add_arguments(self, parser):
        parser.add_argument(
            '--hours',
            type=int,
            default=settings.REALTIME_EVENT_RETENTION_HOURS,
            help='Retention window in hours',
        )

    def handle(self, *args, **options):
        cutoff = timezone.now() - timedelta(hours=options['hours'])
        deleted, _ = RealtimeEvent.objects.filter(created_at__lt=cutoff).delete()
        self.stdout.write(self.style.SUCCESS(f'Deleted {deleted} realtime events older than {options["hours"]}h'))
