"""
Apprentice follow-up: students and their periodic progress assessments.

An assessment scores progression at the training centre and in the company,
lists objectives, difficulties and support needs, and carries a skills
matrix. Overall progression and risk level are derived on save.
"""
from collections import Counter
from datetime import timedelta
from decimal import Decimal

from django.db import models
from django.db.models import Avg, Count, Max, OuterRef, Q, Subquery
from django.db.models.functions import TruncMonth
from django.utils import timezone

from accounts.models import Mentor

CENTER_WEIGHT = Decimal('0.6')
COMPANY_WEIGHT = Decimal('0.4')

# Lower bound of each progression band, best first
PROGRESSION_BANDS = [
    (90, 'excellent'),
    (75, 'satisfactory'),
    (50, 'average'),
    (25, 'needs_improvement'),
    (0, 'critical'),
]

MASTERED_LEVEL = 16
IN_PROGRESS_LEVEL = 8
DECLINE_THRESHOLD = 5


def progression_status_for(value):
    value = float(value or 0)
    for lower_bound, status in PROGRESSION_BANDS:
        if value >= lower_bound:
            return status
    return 'critical'


def skill_trend(entry):
    """'improving', 'declining' or 'stable' for one skills-matrix entry."""
    if not isinstance(entry, dict):
        return 'stable'
    if entry.get('trend') in ('improving', 'declining', 'stable'):
        return entry['trend']
    level, previous = entry.get('level'), entry.get('previous_level')
    if level is None or previous is None:
        return 'stable'
    if level > previous:
        return 'improving'
    if level < previous:
        return 'declining'
    return 'stable'


class StudentQuerySet(models.QuerySet):

    def requiring_update(self, cutoff):
        """Active students with no assessment for a period on or after `cutoff`."""
        return self.filter(is_active=True).annotate(
            last_period=Max('progress_assessments__period'),
        ).filter(
            Q(last_period__lt=cutoff) | Q(last_period__isnull=True)
        ).order_by('last_name', 'first_name')


class Student(models.Model):
    """Apprentice following a work-study programme."""

    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField(max_length=180, unique=True)
    mentor = models.ForeignKey(
        Mentor,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='apprentices',
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = StudentQuerySet.as_manager()

    class Meta:
        db_table = 'alternance_student'
        ordering = ['last_name', 'first_name']

    def __str__(self):
        return self.full_name

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()


class ProgressAssessmentQuerySet(models.QuerySet):
    """Reporting queries over progress assessments."""

    def latest_for_student(self, student):
        return self.filter(student=student).order_by('-period', '-pk').first()

    def latest_per_student(self):
        latest = self.model.objects.filter(
            student=OuterRef('student'),
        ).order_by('-period', '-pk').values('pk')[:1]
        return self.filter(pk=Subquery(latest))

    def at_risk(self, threshold=3):
        """Latest assessment of each student whose risk level is at least `threshold`."""
        return (
            self.latest_per_student()
            .filter(risk_level__gte=threshold)
            .select_related('student')
            .order_by('-risk_level', 'overall_progression')
        )

    def with_risk_level(self, level):
        return self.filter(risk_level=level).select_related('student').order_by('-period')

    def for_student_between(self, student, start, end):
        return self.filter(student=student, period__gte=start, period__lte=end).order_by('period')

    def top_performing(self, limit=10):
        return (
            self.latest_per_student()
            .select_related('student')
            .order_by('-overall_progression')[:limit]
        )

    def progression_trend(self, student, months_back=6):
        since = timezone.localdate() - timedelta(days=30 * months_back)
        return [
            {
                'period': assessment.period,
                'center_progression': float(assessment.center_progression),
                'company_progression': float(assessment.company_progression),
                'overall_progression': float(assessment.overall_progression),
                'risk_level': assessment.risk_level,
            }
            for assessment in self.filter(student=student, period__gte=since).order_by('period')
        ]

    def progression_report(self, start, end):
        assessments = self.filter(period__gte=start, period__lte=end)
        totals = assessments.aggregate(
            total=Count('id'),
            students=Count('student', distinct=True),
            avg_center=Avg('center_progression'),
            avg_company=Avg('company_progression'),
            avg_overall=Avg('overall_progression'),
        )

        risk_distribution = {level: 0 for level in range(1, 6)}
        for row in assessments.order_by().values('risk_level').annotate(total=Count('id')):
            risk_distribution[row['risk_level']] = row['total']

        progression_distribution = {status: 0 for _, status in PROGRESSION_BANDS}
        for overall in assessments.values_list('overall_progression', flat=True):
            progression_distribution[progression_status_for(overall)] += 1

        return {
            'period': {'start': start, 'end': end},
            'total_assessments': totals['total'],
            'students_assessed': totals['students'],
            'average_center_progression': round(float(totals['avg_center'] or 0), 2),
            'average_company_progression': round(float(totals['avg_company'] or 0), 2),
            'average_overall_progression': round(float(totals['avg_overall'] or 0), 2),
            'risk_distribution': risk_distribution,
            'progression_distribution': progression_distribution,
            'at_risk_count': sum(count for level, count in risk_distribution.items() if level >= 3),
        }

    def declining_progression(self):
        """
        Students whose latest assessment of the past month is more than
        DECLINE_THRESHOLD points below their latest one from 1-3 months ago.
        """
        today = timezone.localdate()
        month_ago = today - timedelta(days=30)
        three_months_ago = today - timedelta(days=90)

        declining = []
        student_ids = self.filter(period__gte=month_ago).values_list('student', flat=True).distinct()
        for student in Student.objects.filter(pk__in=student_ids):
            recent = self.filter(student=student, period__gte=month_ago).order_by('-period', '-pk').first()
            previous = self.filter(
                student=student, period__gte=three_months_ago, period__lt=month_ago,
            ).order_by('-period', '-pk').first()
            if recent is None or previous is None:
                continue
            decline = previous.overall_progression - recent.overall_progression
            if decline > DECLINE_THRESHOLD:
                declining.append({
                    'student': student,
                    'recent': recent,
                    'previous': previous,
                    'decline': float(decline),
                })
        declining.sort(key=lambda item: item['decline'], reverse=True)
        return declining

    def average_progression_by_period(self, start, end):
        rows = (
            self.filter(period__gte=start, period__lte=end)
            .annotate(month=TruncMonth('period'))
            .order_by('month')
            .values('month')
            .annotate(
                count=Count('id'),
                center=Avg('center_progression'),
                company=Avg('company_progression'),
                overall=Avg('overall_progression'),
            )
        )
        return {
            row['month'].strftime('%Y-%m'): {
                'count': row['count'],
                'center_progression': round(float(row['center'] or 0), 2),
                'company_progression': round(float(row['company'] or 0), 2),
                'overall_progression': round(float(row['overall'] or 0), 2),
            }
            for row in rows
        }

    def detailed_risk_analysis(self):
        latest = list(self.latest_per_student().select_related('student'))
        by_level = Counter(assessment.risk_level for assessment in latest)
        factor_counts = Counter()
        high_risk = []
        for assessment in latest:
            factors = assessment.risk_factors_analysis()
            factor_counts.update(factor['factor'] for factor in factors)
            if assessment.risk_level >= 4:
                high_risk.append({
                    'student': assessment.student,
                    'assessment': assessment,
                    'risk_level': assessment.risk_level,
                    'factors': factors,
                })
        high_risk.sort(key=lambda item: item['risk_level'], reverse=True)
        return {
            'total_students': len(latest),
            'by_level': {level: by_level.get(level, 0) for level in range(1, 6)},
            'high_risk': high_risk,
            'common_factors': dict(factor_counts.most_common()),
        }

    def skills_matrix_evolution(self, student):
        """Per skill, the level recorded at each assessment period."""
        evolution = {}
        for assessment in self.filter(student=student).order_by('period'):
            for skill, entry in (assessment.skills_matrix or {}).items():
                level = entry.get('level') if isinstance(entry, dict) else entry
                evolution.setdefault(skill, []).append({'period': assessment.period, 'level': level})
        return evolution


class ProgressAssessment(models.Model):
    """Periodic progress assessment of an apprentice."""

    student = models.ForeignKey(
        Student,
        on_delete=models.CASCADE,
        related_name='progress_assessments',
    )
    period = models.DateField()
    center_progression = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0'))
    company_progression = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0'))
    overall_progression = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0'))
    completed_objectives = models.JSONField(default=list, blank=True)
    pending_objectives = models.JSONField(default=list, blank=True)
    upcoming_objectives = models.JSONField(default=list, blank=True)
    difficulties = models.JSONField(default=list, blank=True, help_text='[{"area", "description", "severity" 1-5}]')
    support_needed = models.JSONField(default=list, blank=True, help_text='[{"type", "description", "urgency" 1-5}]')
    skills_matrix = models.JSONField(default=dict, blank=True, help_text='{skill: {"level" 0-20, "previous_level", "trend"}}')
    next_steps = models.TextField(blank=True)
    risk_level = models.PositiveSmallIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ProgressAssessmentQuerySet.as_manager()

    class Meta:
        db_table = 'alternance_progress_assessment'
        ordering = ['-period']

    def __str__(self):
        return f"{self.student} - {self.period:%m/%Y}"

    def save(self, *args, **kwargs):
        self.calculate_overall_progression()
        self.calculate_risk_level()
        super().save(*args, **kwargs)

    def calculate_overall_progression(self):
        overall = (
            Decimal(self.center_progression or 0) * CENTER_WEIGHT
            + Decimal(self.company_progression or 0) * COMPANY_WEIGHT
        )
        self.overall_progression = overall.quantize(Decimal('0.01'))
        return self.overall_progression

    @property
    def progression_status(self):
        return progression_status_for(self.overall_progression)

    def objectives_completion_rate(self):
        completed = len(self.completed_objectives or [])
        total = completed + len(self.pending_objectives or [])
        if total == 0:
            return 0.0
        return round(completed * 100 / total, 1)

    def _skill_trends(self):
        return Counter(skill_trend(entry) for entry in (self.skills_matrix or {}).values())

    def risk_factors_analysis(self):
        """Each contributing risk factor with its label and weight."""
        factors = []
        overall = float(self.overall_progression or 0)
        if overall < 50:
            factors.append({'factor': 'low_progression', 'label': 'Progression globale insuffisante', 'weight': 2})
        elif overall < 75:
            factors.append({'factor': 'moderate_progression', 'label': 'Progression globale moyenne', 'weight': 1})

        difficulties = self.difficulties or []
        severe = [d for d in difficulties if isinstance(d, dict) and (d.get('severity') or 0) >= 4]
        if len(severe) >= 2:
            factors.append({'factor': 'severe_difficulties', 'label': 'Difficultés importantes multiples', 'weight': 2})
        elif len(difficulties) >= 3:
            factors.append({'factor': 'multiple_difficulties', 'label': 'Nombreuses difficultés signalées', 'weight': 1})

        if any(isinstance(s, dict) and (s.get('urgency') or 0) >= 4 for s in (self.support_needed or [])):
            factors.append({'factor': 'urgent_support', 'label': "Besoin d'accompagnement urgent", 'weight': 1})

        has_objectives = bool(self.completed_objectives or self.pending_objectives)
        if has_objectives and self.objectives_completion_rate() < 50:
            factors.append({'factor': 'low_objectives_completion', 'label': "Taux d'atteinte des objectifs faible", 'weight': 1})

        trends = self._skill_trends()
        if trends['declining'] > trends['improving']:
            factors.append({'factor': 'declining_skills', 'label': 'Compétences en régression', 'weight': 1})

        return factors

    def calculate_risk_level(self):
        """Risk from 1 (none) to 5 (critical): one plus the weight of every factor, capped."""
        weight = sum(factor['weight'] for factor in self.risk_factors_analysis())
        self.risk_level = max(1, min(5, weight + 1))
        return self.risk_level

    def skills_matrix_summary(self):
        levels = []
        for entry in (self.skills_matrix or {}).values():
            level = entry.get('level') if isinstance(entry, dict) else entry
            if level is not None:
                levels.append(float(level))
        trends = self._skill_trends()
        return {
            'total': len(levels),
            'mastered': sum(1 for level in levels if level >= MASTERED_LEVEL),
            'in_progress': sum(1 for level in levels if IN_PROGRESS_LEVEL <= level < MASTERED_LEVEL),
            'to_develop': sum(1 for level in levels if level < IN_PROGRESS_LEVEL),
            'average_level': round(sum(levels) / len(levels), 2) if levels else 0.0,
            'improving': trends['improving'],
            'declining': trends['declining'],
        }
