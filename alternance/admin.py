from django.contrib import admin
from .models import ProgressAssessment, Student


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ['last_name', 'first_name', 'email', 'mentor', 'is_active']
    list_filter = ['is_active']
    search_fields = ['first_name', 'last_name', 'email', 'mentor__company_name']
    raw_id_fields = ['mentor']


@admin.register(ProgressAssessment)
class ProgressAssessmentAdmin(admin.ModelAdmin):
    list_display = ['student', 'period', 'center_progression', 'company_progression',
                    'overall_progression', 'risk_level']
    list_filter = ['risk_level', 'period']
    search_fields = ['student__first_name', 'student__last_name', 'student__email']
    date_hierarchy = 'period'
    raw_id_fields = ['student']
    readonly_fields = ['overall_progression', 'risk_level', 'created_at', 'updated_at']
