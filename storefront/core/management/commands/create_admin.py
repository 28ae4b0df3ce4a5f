"""
Create an admin user, or promote an existing one
Usage: python manage.py create_admin --email admin@example.com --password secret
"""
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

User = get_user_model()


class Command(BaseCommand):
    help = 'Create a user with the admin role (or promote an existing user to admin)'

    def add_arguments(self, parser):
        parser.add_argument('--email', required=True, help='Login email of the admin')
        parser.add_argument('--password', help='Password (required when the user does not exist yet)')
        parser.add_argument('--name', default='Admin', help='Display name for a new user')

    def handle(self, *args, **options):
        email = options['email'].strip().lower()
        user = User.objects.filter(email__iexact=email).first()

        if user:
            user.role = 'admin'
            if options['password']:
                user.set_password(options['password'])
            user.save()
            self.stdout.write(self.style.SUCCESS(f'✓ Promoted existing user to admin: {user.email}'))
            return

        if not options['password']:
            raise CommandError('--password is required to create a new admin')

        user = User.objects.create_user(
            username=email,
            email=email,
            password=options['password'],
            name=options['name'],
            role='admin',
        )
        self.stdout.write(self.style.SUCCESS(f'✓ Created admin: {user.email}'))
