"""Print a summary of the prospect base: totals, sources and touchpoint linking."""

from django.core.management.base import BaseCommand

from crm.models import Prospect
from crm.services import ProspectManagementService


class Command(BaseCommand):
    help = 'Show prospect counts by status and source, and touchpoint linking coverage'

    def handle(self, *args, **options):
        summary = ProspectManagementService().get_prospect_summary()
        status_labels = dict(Prospect.Status.choices)
        source_labels = dict(Prospect.Source.choices)

        self.stdout.write(f'\n{"=" * 60}')
        self.stdout.write('PROSPECT SUMMARY')
        self.stdout.write(f'{"=" * 60}')
        self.stdout.write(f'Total prospects:          {summary["total"]}')
        self.stdout.write(f'Created in last 24h:      {summary["created_last_24h"]}')
        self.stdout.write(f'Duplicate email groups:   {summary["duplicate_emails"]}')

        self.stdout.write(f'{"─" * 60}')
        self.stdout.write('By status:')
        for status, total in sorted(summary['by_status'].items(), key=lambda item: -item[1]):
            self.stdout.write(f'  {status_labels.get(status, status):<28} {total}')

        self.stdout.write('By source:')
        for source, total in sorted(summary['by_source'].items(), key=lambda item: -item[1]):
            self.stdout.write(f'  {source_labels.get(source, source or "-"):<28} {total}')

        self.stdout.write(f'{"─" * 60}')
        self.stdout.write('Touchpoints (linked / unlinked):')
        for key, label in (
            ('contact_requests', 'Contact requests'),
            ('session_registrations', 'Session registrations'),
            ('needs_analysis_requests', 'Needs analyses'),
        ):
            self.stdout.write(f'  {label:<28} {summary["linked"][key]} / {summary["unlinked"][key]}')
