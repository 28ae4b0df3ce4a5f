"""
Create or update a runtime Config entry
Usage: python manage.py set_config stripePrivateKey sk_live_...
"""
from django.core.management.base import BaseCommand

from storefront.core.models import Config


class Command(BaseCommand):
    help = 'Create or update a runtime configuration value (e.g. payment keys)'

    def add_arguments(self, parser):
        parser.add_argument('key')
        parser.add_argument('value')
        parser.add_argument('--description', default=None)

    def handle(self, *args, **options):
        defaults = {'value': options['value']}
        if options['description'] is not None:
            defaults['description'] = options['description']

        entry, created = Config.objects.update_or_create(key=options['key'], defaults=defaults)
        if created:
            self.stdout.write(self.style.SUCCESS(f'✓ Created config: {entry.key}'))
        else:
            self.stdout.write(f'  Updated config: {entry.key}')
