"""Attach historical touchpoints to prospects, then merge duplicate prospects.

Usage:
    python manage.py migrate_prospects
    python manage.py migrate_prospects --dry-run
    python manage.py migrate_prospects --skip-merge
"""

from django.core.management.base import BaseCommand

from config.logging_filters import new_correlation_id, set_correlation_id
from crm.services import ProspectManagementService


class Command(BaseCommand):
    help = 'Link unlinked contact requests, session registrations and needs analyses to prospects'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run', action='store_true',
            help='Count what would be linked without writing anything',
        )
        parser.add_argument(
            '--skip-merge', action='store_true',
            help='Do not merge duplicate prospects after linking',
        )

    def handle(self, *args, **options):
        set_correlation_id(new_correlation_id())
        dry_run = options['dry_run']
        service = ProspectManagementService()

        results = service.link_unlinked_touchpoints(dry_run=dry_run)

        prefix = '[DRY RUN] ' if dry_run else ''
        verb = 'to link' if dry_run else 'linked'
        self.stdout.write(f'\n{"=" * 60}')
        self.stdout.write(f'{prefix}PROSPECT MIGRATION')
        self.stdout.write(f'{"=" * 60}')
        self.stdout.write(f'Contact requests {verb}:        {results["contact_requests"]}')
        self.stdout.write(f'Session registrations {verb}:   {results["session_registrations"]}')
        self.stdout.write(f'Needs analyses {verb}:          {results["needs_analysis_requests"]}')
        if results['errors']:
            self.stdout.write(self.style.WARNING(f'Errors:                         {results["errors"]}'))

        if dry_run:
            duplicates = len(service.find_duplicate_emails())
            self.stdout.write(f'Duplicate email groups:         {duplicates}')
            return

        if not options['skip_merge']:
            merged = service.merge_duplicate_prospects()
            self.stdout.write(f'Duplicate prospects merged:     {merged}')

        self.stdout.write(self.style.SUCCESS('\nMigration complete.'))
