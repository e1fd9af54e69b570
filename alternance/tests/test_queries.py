"""
Tests for the ProgressAssessment and Student reporting queries.
"""

from datetime import date, timedelta

import pytest
from django.urls import reverse
from django.utils import timezone

from alternance.models import ProgressAssessment, Student


@pytest.fixture
def today():
    return timezone.localdate()


@pytest.mark.django_db
class TestLatestAndRisk:

    def test_latest_for_student(self, make_student, assess):
        student = make_student()
        assess(student, date(2024, 1, 1), 50)
        latest = assess(student, date(2024, 3, 1), 60)
        assess(student, date(2024, 2, 1), 70)
        assert ProgressAssessment.objects.latest_for_student(student) == latest

    def test_at_risk_uses_latest_assessment_only(self, make_student, assess):
        recovered = make_student()
        assess(recovered, date(2024, 1, 1), 20)
        assess(recovered, date(2024, 2, 1), 90)
        struggling = make_student()
        assess(struggling, date(2024, 2, 1), 30)

        at_risk = list(ProgressAssessment.objects.at_risk())

        assert [a.student for a in at_risk] == [struggling]
        assert at_risk[0].risk_level == 3

    def test_with_risk_level(self, make_student, assess):
        student = make_student()
        low = assess(student, date(2024, 1, 1), 90)
        assess(student, date(2024, 2, 1), 30)
        assert list(ProgressAssessment.objects.with_risk_level(1)) == [low]

    def test_top_performing(self, make_student, assess):
        best, middle, worst = make_student(), make_student(), make_student()
        assess(best, date(2024, 2, 1), 95)
        assess(middle, date(2024, 2, 1), 70)
        assess(worst, date(2024, 2, 1), 40)
        top = ProgressAssessment.objects.top_performing(limit=2)
        assert [a.student for a in top] == [best, middle]

    def test_for_student_between(self, make_student, assess):
        student = make_student()
        assess(student, date(2024, 1, 1), 50)
        feb = assess(student, date(2024, 2, 1), 50)
        mar = assess(student, date(2024, 3, 1), 50)
        between = ProgressAssessment.objects.for_student_between(student, date(2024, 2, 1), date(2024, 3, 31))
        assert list(between) == [feb, mar]


@pytest.mark.django_db
class TestReports:

    def test_progression_report(self, make_student, assess):
        first, second = make_student(), make_student()
        assess(first, date(2024, 1, 15), 80)
        assess(first, date(2024, 2, 15), 40)
        assess(second, date(2024, 2, 15), 95)
        assess(second, date(2023, 6, 1), 10)

        report = ProgressAssessment.objects.progression_report(date(2024, 1, 1), date(2024, 12, 31))

        assert report['total_assessments'] == 3
        assert report['students_assessed'] == 2
        assert report['average_overall_progression'] == round((80 + 40 + 95) / 3, 2)
        assert report['risk_distribution'][1] == 2
        assert report['risk_distribution'][3] == 1
        assert report['at_risk_count'] == 1
        assert report['progression_distribution']['excellent'] == 1
        assert report['progression_distribution']['satisfactory'] == 1
        assert report['progression_distribution']['needs_improvement'] == 1

    def test_average_progression_by_period(self, make_student, assess):
        student = make_student()
        assess(student, date(2024, 1, 5), 60)
        assess(make_student(), date(2024, 1, 20), 80)
        assess(student, date(2024, 2, 5), 50)

        monthly = ProgressAssessment.objects.average_progression_by_period(date(2024, 1, 1), date(2024, 2, 28))

        assert list(monthly) == ['2024-01', '2024-02']
        assert monthly['2024-01']['count'] == 2
        assert monthly['2024-01']['overall_progression'] == 70.0

    def test_declining_progression(self, make_student, assess, today):
        falling = make_student()
        assess(falling, today - timedelta(days=45), 80)
        assess(falling, today - timedelta(days=5), 60)
        steady = make_student()
        assess(steady, today - timedelta(days=45), 70)
        assess(steady, today - timedelta(days=5), 68)

        declining = ProgressAssessment.objects.declining_progression()

        assert [item['student'] for item in declining] == [falling]
        assert declining[0]['decline'] == 20.0

    def test_progression_trend(self, make_student, assess, today):
        student = make_student()
        assess(student, today - timedelta(days=400), 10)
        assess(student, today - timedelta(days=60), 50)
        assess(student, today - timedelta(days=10), 70)

        trend = ProgressAssessment.objects.progression_trend(student)

        assert [point['overall_progression'] for point in trend] == [50.0, 70.0]

    def test_detailed_risk_analysis(self, make_student, assess):
        assess(make_student(), date(2024, 2, 1), 90)
        critical = make_student()
        assess(critical, date(2024, 2, 1), 20, difficulties=[{'severity': 5}, {'severity': 4}])

        analysis = ProgressAssessment.objects.detailed_risk_analysis()

        assert analysis['total_students'] == 2
        assert analysis['by_level'][1] == 1
        assert analysis['by_level'][5] == 1
        assert analysis['high_risk'][0]['student'] == critical
        assert analysis['common_factors'] == {'low_progression': 1, 'severe_difficulties': 1}

    def test_skills_matrix_evolution(self, make_student, assess):
        student = make_student()
        assess(student, date(2024, 1, 1), 50, skills_matrix={'excel': {'level': 8}})
        assess(student, date(2024, 2, 1), 50, skills_matrix={'excel': {'level': 12}, 'oral': 9})

        evolution = ProgressAssessment.objects.skills_matrix_evolution(student)

        assert [point['level'] for point in evolution['excel']] == [8, 12]
        assert evolution['oral'] == [{'period': date(2024, 2, 1), 'level': 9}]


@pytest.mark.django_db
def test_students_requiring_update(make_student, assess, today):
    up_to_date = make_student()
    assess(up_to_date, today - timedelta(days=3), 60)
    stale = make_student()
    assess(stale, today - timedelta(days=90), 60)
    never = make_student()
    make_student(is_active=False)

    students = Student.objects.requiring_update(today - timedelta(days=30))

    assert set(students) == {stale, never}


@pytest.mark.django_db
class TestViews:

    def test_dashboard(self, staff_client, make_student, assess, today):
        assess(make_student(), today - timedelta(days=10), 30)
        response = staff_client.get(reverse('alternance:progress-dashboard'))
        assert response.status_code == 200
        assert response.context['report']['total_assessments'] == 1
        assert len(response.context['at_risk']) == 1

    def test_student_progress(self, staff_client, make_student, assess, today):
        student = make_student()
        assess(student, today - timedelta(days=10), 30)
        response = staff_client.get(reverse('alternance:student-progress', args=[student.pk]))
        assert response.status_code == 200
        assert response.context['latest'].student == student
        assert response.context['risk_factors'][0]['factor'] == 'low_progression'
