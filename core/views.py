"""
Core views for the EPROFOS back office.
Handles staff authentication and the dashboard.
"""

from django.shortcuts import redirect
from django.views.generic import TemplateView
from django.contrib.auth.mixins import LoginRequiredMixin
from django.contrib.auth.views import LoginView as DjangoLoginView, LogoutView as DjangoLogoutView
from django.contrib import messages
from django.urls import reverse_lazy

from accounts.services import MentorService, TeacherService
from crm.models import ProspectNote
from crm.services import ProspectManagementService


class HomeView(TemplateView):
    """Entry point: staff go to the dashboard, everybody else to the login page."""

    def get(self, request, *args, **kwargs):
        if request.user.is_authenticated:
            return redirect('core:dashboard')
        return redirect('core:login')


class DashboardView(LoginRequiredMixin, TemplateView):
    """Main dashboard showing CRM and account summary stats."""
    template_name = 'core/dashboard.html'
    login_url = reverse_lazy('core:login')

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['prospect_summary'] = ProspectManagementService().get_prospect_summary()
        context['note_activity'] = ProspectNote.objects.activity_statistics()
        context['overdue_notes'] = ProspectNote.objects.overdue().select_related('prospect')[:10]
        context['mentor_stats'] = MentorService().get_dashboard_statistics()
        context['teacher_stats'] = TeacherService().get_statistics()
        return context


class CustomLoginView(DjangoLoginView):
    """Staff login using Django's built-in authentication."""
    template_name = 'core/login.html'
    redirect_authenticated_user = True

    def get_success_url(self):
        return reverse_lazy('core:dashboard')

    def form_valid(self, form):
        user = form.get_user()
        messages.success(self.request, f'Bienvenue, {user.get_full_name() or user.username} !')
        return super().form_valid(form)


class CustomLogoutView(DjangoLogoutView):
    next_page = reverse_lazy('core:login')

    def dispatch(self, request, *args, **kwargs):
        if request.user.is_authenticated:
            messages.info(request, 'Vous avez été déconnecté.')
        return super().dispatch(request, *args, **kwargs)
