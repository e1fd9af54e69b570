from django.contrib import admin, messages
from django.http import HttpResponse

from .authentication import MentorAuthenticationService
from .models import Mentor, Teacher
from .services import MentorService


@admin.register(Mentor)
class MentorAdmin(admin.ModelAdmin):
    list_display = ['email', 'first_name', 'last_name', 'company_name', 'education_level', 'is_active', 'email_verified', 'created_at']
    list_filter = ['is_active', 'email_verified', 'education_level']
    search_fields = ['email', 'first_name', 'last_name', 'company_name', 'company_siret']
    readonly_fields = ['password', 'email_verification_token', 'password_reset_token',
                       'password_reset_token_expires_at', 'last_login_at', 'created_at', 'updated_at']
    actions = ['export_csv', 'reset_credentials']

    @admin.action(description='Exporter en CSV')
    def export_csv(self, request, queryset):
        response = HttpResponse(MentorService().export_to_csv(queryset), content_type='text/csv; charset=utf-8')
        response['Content-Disposition'] = 'attachment; filename="mentors.csv"'
        return response

    @admin.action(description='Générer et envoyer de nouveaux identifiants')
    def reset_credentials(self, request, queryset):
        service = MentorAuthenticationService()
        sent = sum(1 for mentor in queryset if service.reset_credentials(mentor))
        self.message_user(request, f'{sent} email(s) d\'identifiants envoyé(s).', messages.SUCCESS)


@admin.register(Teacher)
class TeacherAdmin(admin.ModelAdmin):
    list_display = ['email', 'first_name', 'last_name', 'specialty', 'is_active', 'email_verified', 'created_at']
    list_filter = ['is_active', 'email_verified']
    search_fields = ['email', 'first_name', 'last_name', 'specialty']
    readonly_fields = ['password', 'email_verification_token', 'password_reset_token',
                       'password_reset_token_expires_at', 'last_login_at', 'created_at', 'updated_at']
