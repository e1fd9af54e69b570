"""
Tests for the CRM management commands.
"""

from io import StringIO

import pytest
from django.core.management import call_command

from crm.models import ContactRequest, Prospect


@pytest.mark.django_db
class TestMigrateProspects:

    def test_dry_run_writes_nothing(self, make_contact_request):
        make_contact_request()
        out = StringIO()

        call_command('migrate_prospects', '--dry-run', stdout=out)

        output = out.getvalue()
        assert '[DRY RUN]' in output
        assert 'Contact requests to link:        1' in output
        assert Prospect.objects.count() == 0

    def test_links_and_merges(self, make_prospect, make_contact_request):
        make_prospect(email='dup@example.com')
        make_prospect(email='dup@example.com')
        request = make_contact_request()
        out = StringIO()

        call_command('migrate_prospects', stdout=out)

        assert ContactRequest.objects.get(pk=request.pk).prospect is not None
        assert Prospect.objects.filter(email='dup@example.com').count() == 1
        assert 'Migration complete.' in out.getvalue()

    def test_skip_merge(self, make_prospect):
        make_prospect(email='dup@example.com')
        make_prospect(email='dup@example.com')

        call_command('migrate_prospects', '--skip-merge', stdout=StringIO())

        assert Prospect.objects.filter(email='dup@example.com').count() == 2


@pytest.mark.django_db
class TestMergeDuplicateProspectsCommand:

    def test_dry_run_lists_groups(self, make_prospect):
        keeper = make_prospect(email='dup@example.com')
        make_prospect(email='dup@example.com')
        out = StringIO()

        call_command('merge_duplicate_prospects', '--dry-run', stdout=out)

        assert f'keeps id={keeper.pk}' in out.getvalue()
        assert Prospect.objects.count() == 2

    def test_merges(self, make_prospect):
        make_prospect(email='dup@example.com')
        make_prospect(email='dup@example.com')
        out = StringIO()

        call_command('merge_duplicate_prospects', stdout=out)

        assert 'Merged 1 duplicate prospect(s).' in out.getvalue()
        assert Prospect.objects.count() == 1


@pytest.mark.django_db
def test_prospect_summary_command(make_prospect, make_contact_request):
    make_prospect()
    make_contact_request(email='bob@example.com')
    out = StringIO()

    call_command('prospect_summary', stdout=out)

    output = out.getvalue()
    assert 'Total prospects:          1' in output
    assert 'Contact requests' in output
