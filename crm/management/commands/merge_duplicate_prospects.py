"""Merge prospects that share the same email address into the oldest record.

Usage:
    python manage.py merge_duplicate_prospects
    python manage.py merge_duplicate_prospects --dry-run
"""

from django.core.management.base import BaseCommand

from crm.models import Prospect
from crm.services import ProspectManagementService


class Command(BaseCommand):
    help = 'Merge prospects sharing an email address into the oldest prospect'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run', action='store_true',
            help='List duplicate groups without merging anything',
        )

    def handle(self, *args, **options):
        service = ProspectManagementService()
        emails = service.find_duplicate_emails()

        self.stdout.write(f'\n{"=" * 60}')
        self.stdout.write('DUPLICATE PROSPECT MERGE')
        self.stdout.write(f'{"=" * 60}')
        self.stdout.write(f'Email groups with duplicates: {len(emails)}')

        if options['dry_run']:
            for email in emails:
                prospects = Prospect.objects.filter(email=email).order_by('created_at', 'pk')
                target = prospects.first()
                self.stdout.write(
                    f'  {email:<40} {prospects.count()} records, keeps id={target.pk} ({target.status})'
                )
            self.stdout.write('\n[DRY RUN] Nothing merged.')
            return

        merged = service.merge_duplicate_prospects()
        self.stdout.write(self.style.SUCCESS(f'\nMerged {merged} duplicate prospect(s).'))
