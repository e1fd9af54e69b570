"""
Views for mentor and teacher accounts.

Staff screens (lists, activation toggles) require the back-office login.
Mentor login, email verification and password reset pages are public.
"""

from django.contrib import messages
from django.contrib.auth.mixins import LoginRequiredMixin
from django.core.exceptions import ValidationError
from django.shortcuts import get_object_or_404, redirect, render
from django.views import View
from django.views.generic import ListView

from .authentication import MentorAuthenticationService
from .exceptions import AccountDisabledError
from .forms import MentorLoginForm, PasswordResetRequestForm, SetPasswordForm
from .models import EXPERTISE_DOMAINS, Mentor, Teacher
from .services import MentorService, TeacherService


# ---------------------------------------------------------------------------
# Staff screens
# ---------------------------------------------------------------------------

class MentorListView(LoginRequiredMixin, ListView):
    model = Mentor
    template_name = 'accounts/mentor_list.html'
    context_object_name = 'mentors'
    paginate_by = 25

    def get_queryset(self):
        queryset = Mentor.objects.all()
        status = self.request.GET.get('status')
        if status == 'active':
            queryset = queryset.filter(is_active=True)
        elif status == 'inactive':
            queryset = queryset.filter(is_active=False)
        return queryset

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['stats'] = MentorService().get_dashboard_statistics()
        context['expertise_domains'] = EXPERTISE_DOMAINS
        return context


class MentorToggleActiveView(LoginRequiredMixin, View):
    """Deactivate an active mentor or reactivate an inactive one."""

    def post(self, request, pk):
        mentor = get_object_or_404(Mentor, pk=pk)
        service = MentorAuthenticationService()
        if mentor.is_active:
            service.deactivate_mentor(mentor, reason=request.POST.get('reason'))
            messages.success(request, f'Le mentor {mentor.full_name} a été désactivé.')
        else:
            service.reactivate_mentor(mentor)
            messages.success(request, f'Le mentor {mentor.full_name} a été réactivé.')
        return redirect('accounts:mentor-list')


class TeacherListView(LoginRequiredMixin, ListView):
    model = Teacher
    template_name = 'accounts/teacher_list.html'
    context_object_name = 'teachers'
    paginate_by = 25

    def get_queryset(self):
        return TeacherService().find_teachers_by_criteria({
            'search': self.request.GET.get('q', '').strip(),
        })

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['stats'] = TeacherService().get_statistics()
        return context


class TeacherToggleActiveView(LoginRequiredMixin, View):

    def post(self, request, pk):
        teacher = get_object_or_404(Teacher, pk=pk)
        service = TeacherService()
        if teacher.is_active:
            service.deactivate_teacher(teacher)
            messages.success(request, f'Le formateur {teacher.full_name} a été désactivé.')
        else:
            service.activate_teacher(teacher)
            messages.success(request, f'Le formateur {teacher.full_name} a été activé.')
        return redirect('accounts:teacher-list')


# ---------------------------------------------------------------------------
# Mentor space (public)
# ---------------------------------------------------------------------------

class MentorLoginView(View):
    template_name = 'accounts/mentor_login.html'

    def get(self, request):
        return render(request, self.template_name, {'form': MentorLoginForm()})

    def post(self, request):
        form = MentorLoginForm(request.POST)
        if form.is_valid():
            service = MentorAuthenticationService()
            try:
                mentor = service.authenticate_mentor(
                    form.cleaned_data['email'], form.cleaned_data['password']
                )
            except AccountDisabledError:
                form.add_error(None, 'Votre compte est désactivé. Contactez EPROFOS.')
            else:
                if mentor is not None:
                    service.login_mentor(mentor, request)
                    return redirect('accounts:mentor-dashboard')
                form.add_error(None, 'Email ou mot de passe incorrect.')
        return render(request, self.template_name, {'form': form}, status=400)


class MentorLogoutView(View):

    def post(self, request):
        MentorAuthenticationService().logout_mentor(request)
        return redirect('accounts:mentor-login')


class MentorDashboardView(View):
    """Landing page of the mentor space: account setup progress and apprentices."""

    def get(self, request):
        service = MentorAuthenticationService()
        mentor = service.get_logged_in_mentor(request)
        if mentor is None:
            return redirect('accounts:mentor-login')
        return render(request, 'accounts/mentor_dashboard.html', {
            'mentor': mentor,
            'setup': service.get_account_setup_completion(mentor),
            'apprentices': mentor.apprentices.filter(is_active=True),
            'can_supervise': service.mentor_service.can_supervise_new_apprentice(mentor),
        })


class MentorVerifyEmailView(View):

    def get(self, request, token):
        mentor = MentorAuthenticationService().verify_email(token)
        return render(request, 'accounts/verify_email_result.html', {
            'account': mentor,
            'success': mentor is not None,
        }, status=200 if mentor else 404)


class MentorPasswordResetRequestView(View):
    template_name = 'accounts/password_reset_request.html'

    def get(self, request):
        return render(request, self.template_name, {'form': PasswordResetRequestForm()})

    def post(self, request):
        form = PasswordResetRequestForm(request.POST)
        if not form.is_valid():
            return render(request, self.template_name, {'form': form}, status=400)
        if MentorAuthenticationService().initiate_password_reset(form.cleaned_data['email']):
            messages.success(request, 'Si un compte existe pour cette adresse, un email vous a été envoyé.')
        else:
            messages.error(request, 'Ce compte est désactivé. Contactez EPROFOS.')
        return redirect('accounts:mentor-login')


class PasswordResetConfirmView(View):
    """Choose a new password from an emailed reset token."""
    template_name = 'accounts/password_reset_confirm.html'
    success_url_name = 'accounts:mentor-login'

    def reset(self, token, new_password):
        raise NotImplementedError

    def get(self, request, token):
        return render(request, self.template_name, {'form': SetPasswordForm(), 'token': token})

    def post(self, request, token):
        form = SetPasswordForm(request.POST)
        if form.is_valid():
            try:
                done = self.reset(token, form.cleaned_data['new_password'])
            except ValidationError as e:
                form.add_error('new_password', e)
            else:
                if done:
                    messages.success(request, 'Votre mot de passe a été modifié.')
                    return redirect(self.success_url_name)
                form.add_error(None, 'Ce lien de réinitialisation est invalide ou a expiré.')
        return render(request, self.template_name, {'form': form, 'token': token}, status=400)


class MentorPasswordResetConfirmView(PasswordResetConfirmView):

    def reset(self, token, new_password):
        return MentorAuthenticationService().reset_password(token, new_password)


# ---------------------------------------------------------------------------
# Teacher account links (public)
# ---------------------------------------------------------------------------

class TeacherVerifyEmailView(View):

    def get(self, request, token):
        teacher = TeacherService().verify_email(token)
        return render(request, 'accounts/verify_email_result.html', {
            'account': teacher,
            'success': teacher is not None,
        }, status=200 if teacher else 404)


class TeacherPasswordResetConfirmView(PasswordResetConfirmView):
    success_url_name = 'core:login'

    def reset(self, token, new_password):
        return TeacherService().reset_password(token, new_password)
