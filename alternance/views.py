"""
Apprentice progress dashboard.
"""

from datetime import timedelta

from django.contrib.auth.mixins import LoginRequiredMixin
from django.utils import timezone
from django.views.generic import DetailView, TemplateView

from .models import ProgressAssessment, Student


class ProgressDashboardView(LoginRequiredMixin, TemplateView):
    template_name = 'alternance/progress_dashboard.html'

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        today = timezone.localdate()
        year_ago = today - timedelta(days=365)
        assessments = ProgressAssessment.objects

        context['report'] = assessments.progression_report(year_ago, today)
        context['at_risk'] = assessments.at_risk()
        context['top_performing'] = assessments.top_performing()
        context['declining'] = assessments.declining_progression()
        context['monthly'] = assessments.average_progression_by_period(year_ago, today)
        context['students_to_update'] = Student.objects.requiring_update(today - timedelta(days=30))
        return context


class StudentProgressView(LoginRequiredMixin, DetailView):
    model = Student
    template_name = 'alternance/student_progress.html'
    context_object_name = 'student'

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        latest = ProgressAssessment.objects.latest_for_student(self.object)
        context['latest'] = latest
        context['trend'] = ProgressAssessment.objects.progression_trend(self.object)
        context['skills_evolution'] = ProgressAssessment.objects.skills_matrix_evolution(self.object)
        if latest is not None:
            context['risk_factors'] = latest.risk_factors_analysis()
            context['skills_summary'] = latest.skills_matrix_summary()
        return context
