"""
Tests for the ProspectNote query layer.
"""

from datetime import timedelta

import pytest
from django.utils import timezone

from crm.models import ProspectNote


@pytest.fixture
def prospect(make_prospect):
    return make_prospect()


@pytest.fixture
def make_note(prospect):
    def _make(**kwargs):
        defaults = {'prospect': prospect, 'title': 'Note', 'content': 'Contenu'}
        defaults.update(kwargs)
        return ProspectNote.objects.create(**defaults)
    return _make


@pytest.mark.django_db
class TestFilters:

    def test_for_prospect_newest_first(self, make_note, make_prospect):
        now = timezone.now()
        old = make_note(created_at=now - timedelta(days=2))
        new = make_note(created_at=now)
        make_note(prospect=make_prospect(email='other@example.com'))

        notes = list(ProspectNote.objects.for_prospect(old.prospect))

        assert notes == [new, old]

    def test_with_status_orders_scheduled_first(self, make_note):
        now = timezone.now()
        unscheduled = make_note(status=ProspectNote.Status.PENDING)
        later = make_note(status=ProspectNote.Status.PENDING, scheduled_at=now + timedelta(days=2))
        sooner = make_note(status=ProspectNote.Status.PENDING, scheduled_at=now + timedelta(days=1))
        make_note(status=ProspectNote.Status.COMPLETED)

        assert list(ProspectNote.objects.pending()) == [sooner, later, unscheduled]

    def test_overdue(self, make_note):
        now = timezone.now()
        late = make_note(status=ProspectNote.Status.PENDING, scheduled_at=now - timedelta(hours=2))
        make_note(status=ProspectNote.Status.PENDING, scheduled_at=now + timedelta(hours=2))
        make_note(status=ProspectNote.Status.COMPLETED, scheduled_at=now - timedelta(hours=2))

        assert list(ProspectNote.objects.overdue()) == [late]
        assert late.is_overdue

    def test_created_by_user_and_important(self, make_note, staff_user):
        mine = make_note(created_by=staff_user, is_important=True)
        make_note()
        assert list(ProspectNote.objects.created_by_user(staff_user)) == [mine]
        assert list(ProspectNote.objects.important()) == [mine]

    def test_of_type(self, make_note):
        call = make_note(type=ProspectNote.Type.CALL)
        make_note(type=ProspectNote.Type.EMAIL)
        assert list(ProspectNote.objects.of_type(ProspectNote.Type.CALL)) == [call]

    def test_in_date_range(self, make_note):
        now = timezone.now()
        inside = make_note(created_at=now - timedelta(days=3))
        make_note(created_at=now - timedelta(days=20))
        notes = ProspectNote.objects.in_date_range(now - timedelta(days=7), now)
        assert list(notes) == [inside]

    def test_scheduled_for_today(self, make_note):
        today = timezone.localtime().replace(hour=12, minute=0, second=0, microsecond=0)
        noon = make_note(scheduled_at=today)
        make_note(scheduled_at=today + timedelta(days=1))
        assert list(ProspectNote.objects.scheduled_for_today()) == [noon]

    def test_recent_activity_limit(self, make_note):
        now = timezone.now()
        for i in range(5):
            make_note(created_at=now - timedelta(hours=i))
        make_note(created_at=now - timedelta(days=10))

        recent = ProspectNote.objects.recent_activity(days=7, limit=3)

        assert len(recent) == 3
        assert recent[0].created_at > recent[2].created_at

    def test_search_title_and_content(self, make_note):
        by_title = make_note(title='Devis OPCO')
        by_content = make_note(content='Parler du devis la semaine prochaine')
        make_note(title='Autre')
        assert set(ProspectNote.objects.search('devis')) == {by_title, by_content}


@pytest.mark.django_db
class TestStatistics:

    def test_counts(self, make_note):
        make_note(type=ProspectNote.Type.CALL)
        make_note(type=ProspectNote.Type.CALL, status=ProspectNote.Status.PENDING,
                  scheduled_at=timezone.now() + timedelta(days=1))
        make_note(type=ProspectNote.Type.EMAIL)

        assert ProspectNote.objects.count_by_type() == {'call': 2, 'email': 1}
        assert ProspectNote.objects.count_by_status() == {'completed': 2, 'pending': 1}

    def test_prospect_statistics(self, make_note, prospect):
        now = timezone.now()
        make_note(created_at=now - timedelta(days=1))
        last = make_note(status=ProspectNote.Status.PENDING, created_at=now)

        stats = ProspectNote.objects.prospect_statistics(prospect)

        assert stats['total'] == 2
        assert stats['pending'] == 1
        assert stats['completed'] == 1
        assert stats['last_note_date'] == last.created_at

    def test_activity_statistics(self, make_note):
        make_note(status=ProspectNote.Status.PENDING, scheduled_at=timezone.now() - timedelta(days=1))
        make_note(created_at=timezone.now() - timedelta(days=30))

        stats = ProspectNote.objects.activity_statistics()

        assert stats['total'] == 2
        assert stats['pending_tasks'] == 1
        assert stats['overdue'] == 1
        assert stats['recent'] == 1

    def test_daily_activity(self, make_note):
        now = timezone.now()
        make_note(created_at=now)
        make_note(created_at=now)
        make_note(created_at=now - timedelta(days=40))

        activity = ProspectNote.objects.daily_activity(days=30)

        assert sum(activity.values()) == 2
        assert len(activity) == 1


@pytest.mark.django_db
def test_mark_completed(make_note):
    note = make_note(status=ProspectNote.Status.PENDING, scheduled_at=timezone.now() - timedelta(days=1))
    note.mark_completed()
    note.refresh_from_db()
    assert note.status == ProspectNote.Status.COMPLETED
    assert note.completed_at is not None
    assert not note.is_overdue


@pytest.mark.django_db
def test_notes_deleted_with_prospect(make_note, prospect):
    make_note()
    prospect.delete()
    assert ProspectNote.objects.count() == 0
