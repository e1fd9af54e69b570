from decimal import Decimal

import pytest

from alternance.models import ProgressAssessment, Student


@pytest.fixture
def make_student(db):
    counter = {'n': 0}

    def _make(**kwargs):
        counter['n'] += 1
        defaults = {
            'first_name': 'Léa',
            'last_name': f'Apprentie{counter["n"]}',
            'email': f'apprenti{counter["n"]}@example.com',
        }
        defaults.update(kwargs)
        return Student.objects.create(**defaults)

    return _make


@pytest.fixture
def assess(db):
    """Create an assessment; overall progression equals `center` when `company` is omitted."""
    def _make(student, period, center, company=None, **kwargs):
        return ProgressAssessment.objects.create(
            student=student,
            period=period,
            center_progression=Decimal(str(center)),
            company_progression=Decimal(str(center if company is None else company)),
            **kwargs,
        )
    return _make
