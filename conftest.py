"""
Root conftest for the EPROFOS back office test suite.

Handles:
- Django settings configuration (in-memory SQLite via config.test_settings)
- Shared fixtures: staff user, catalogue entries, prospects and touchpoints
"""

import os
from datetime import timedelta

import pytest
from django.utils import timezone

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.test_settings')


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

@pytest.fixture
def staff_user(db):
    """Back-office commercial user."""
    from core.models import User
    return User.objects.create_user(
        username='commercial',
        password='pass-commercial-1',
        email='commercial@eprofos.test',
        first_name='Claire',
        last_name='Martin',
        is_staff=True,
    )


@pytest.fixture
def staff_client(client, staff_user):
    client.force_login(staff_user)
    return client


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------

@pytest.fixture
def formation(db):
    from catalog.models import Formation
    return Formation.objects.create(title='Management d\'équipe', slug='management-equipe')


@pytest.fixture
def other_formation(db):
    from catalog.models import Formation
    return Formation.objects.create(title='Excel avancé', slug='excel-avance')


@pytest.fixture
def service_offer(db):
    from catalog.models import Service
    return Service.objects.create(title='Bilan de compétences', slug='bilan-competences')


@pytest.fixture
def session(formation):
    from catalog.models import Session
    return Session.objects.create(
        formation=formation,
        name='Session de mars',
        start_date=timezone.localdate() + timedelta(days=30),
    )


# ---------------------------------------------------------------------------
# CRM factories
# ---------------------------------------------------------------------------

@pytest.fixture
def make_prospect(db):
    """Factory for prospects; created_at can be backdated for ordering tests."""
    from crm.models import Prospect

    def _make(email='alice@example.com', **kwargs):
        defaults = {
            'first_name': 'Alice',
            'last_name': 'Durand',
        }
        defaults.update(kwargs)
        return Prospect.objects.create(email=email, **defaults)

    return _make


@pytest.fixture
def make_contact_request(db):
    from crm.models import ContactRequest

    def _make(email='alice@example.com', type=ContactRequest.Type.INFORMATION, **kwargs):
        defaults = {
            'first_name': 'Alice',
            'last_name': 'Durand',
            'message': 'Je souhaite des informations.',
        }
        defaults.update(kwargs)
        return ContactRequest.objects.create(email=email, type=type, **defaults)

    return _make


@pytest.fixture
def make_session_registration(db):
    from crm.models import SessionRegistration

    def _make(email='alice@example.com', **kwargs):
        defaults = {
            'first_name': 'Alice',
            'last_name': 'Durand',
        }
        defaults.update(kwargs)
        return SessionRegistration.objects.create(email=email, **defaults)

    return _make


@pytest.fixture
def make_needs_analysis(db):
    from crm.models import NeedsAnalysisRequest

    def _make(recipient_email='alice@example.com', type=NeedsAnalysisRequest.Type.COMPANY, **kwargs):
        defaults = {
            'recipient_name': 'Alice Durand',
        }
        defaults.update(kwargs)
        return NeedsAnalysisRequest.objects.create(recipient_email=recipient_email, type=type, **defaults)

    return _make


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------

@pytest.fixture
def mentor_data():
    """Valid mentor creation payload."""
    return {
        'email': 'paul.mentor@acme.fr',
        'first_name': 'Paul',
        'last_name': 'Bernard',
        'phone': '0601020304',
        'position': 'Responsable technique',
        'company_name': 'ACME Industries',
        'company_siret': '12345678901234',
        'expertise_domains': ['informatique', 'management'],
        'experience_years': 12,
        'education_level': 'bac+5',
    }


@pytest.fixture
def make_mentor(db):
    from accounts.models import Mentor

    counter = {'n': 0}

    def _make(password='secret-pass-1', **kwargs):
        counter['n'] += 1
        n = counter['n']
        defaults = {
            'email': f'mentor{n}@acme.fr',
            'first_name': 'Paul',
            'last_name': f'Mentor{n}',
            'company_name': 'ACME Industries',
            'company_siret': f'{n:014d}',
            'expertise_domains': ['informatique'],
            'experience_years': 5,
            'education_level': 'bac+3',
            'email_verified': True,
        }
        defaults.update(kwargs)
        mentor = Mentor(**defaults)
        mentor.set_password(password)
        mentor.save()
        return mentor

    return _make
