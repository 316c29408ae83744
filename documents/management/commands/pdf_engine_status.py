"""
Management command to show PDF engine availability.

Usage:
    python manage.py pdf_engine_status
    python manage.py pdf_engine_status --reprobe
"""

from django.core.management.base import BaseCommand

from documents.printing import config, engines


class Command(BaseCommand):
    help = 'Show which PDF engines are available and the order they are tried in'

    def add_arguments(self, parser):
        parser.add_argument(
            '--reprobe',
            action='store_true',
            help='Re-check every engine before reporting',
        )

    def handle(self, *args, **options):
        registry = engines.get_default_registry()
        if options['reprobe']:
            self.stdout.write('Probing PDF engines...')
            registry.probe()

        preference = config.get_preferred_engine()
        self.stdout.write(f'Preferred engine: {preference}')

        for name, status in registry.status().items():
            line = f'  {status["priority"]}. {name:<11} {status["description"]}'
            if status['available']:
                self.stdout.write(self.style.SUCCESS(f'{line} [available]'))
            else:
                self.stdout.write(self.style.WARNING(f'{line} [unavailable]'))

        order = [descriptor.name for descriptor in registry.ordered(preference)]
        self.stdout.write(f'Fallback order: {" -> ".join(order)}')
