from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError


class Command(BaseCommand):
    help = 'Create an admin user, or promote an existing user to admin'

    def add_arguments(self, parser):
        parser.add_argument('username')
        parser.add_argument('--email', default='')
        parser.add_argument('--password', help='Required when the user does not exist yet')
        parser.add_argument('--full-name', default='')

    def handle(self, *args, **options):
        User = get_user_model()
        username = options['username']
        user = User.objects.filter(username=username).first()

        if user is None:
            if not options['password']:
                raise CommandError(f'User {username} does not exist; pass --password to create it')
            user = User.objects.create_user(
                username=username,
                email=options['email'],
                password=options['password'],
                full_name=options['full_name'],
                role='admin',
                is_staff=True,
            )
            self.stdout.write(self.style.SUCCESS(f'Created admin user {username}'))
            return

        user.role = 'admin'
        user.is_staff = True
        if options['full_name']:
            user.full_name = options['full_name']
        user.save(update_fields=['role', 'is_staff', 'full_name', 'updated_at'])
        self.stdout.write(self.style.SUCCESS(f'{username} is now an admin'))
