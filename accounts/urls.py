"""
URL configuration for the accounts app (mentors and teachers).
"""

from django.urls import path
from . import views

app_name = 'accounts'

urlpatterns = [
    # Staff screens
    path('mentors/', views.MentorListView.as_view(), name='mentor-list'),
    path('mentors/<int:pk>/toggle/', views.MentorToggleActiveView.as_view(), name='mentor-toggle'),
    path('teachers/', views.TeacherListView.as_view(), name='teacher-list'),
    path('teachers/<int:pk>/toggle/', views.TeacherToggleActiveView.as_view(), name='teacher-toggle'),

    # Mentor space
    path('mentor/login/', views.MentorLoginView.as_view(), name='mentor-login'),
    path('mentor/logout/', views.MentorLogoutView.as_view(), name='mentor-logout'),
    path('mentor/', views.MentorDashboardView.as_view(), name='mentor-dashboard'),
    path('mentor/verify/<str:token>/', views.MentorVerifyEmailView.as_view(), name='mentor-verify-email'),
    path('mentor/password-reset/', views.MentorPasswordResetRequestView.as_view(), name='mentor-password-reset'),
    path('mentor/password-reset/<str:token>/', views.MentorPasswordResetConfirmView.as_view(),
         name='mentor-password-reset-confirm'),

    # Teacher links
    path('teacher/verify/<str:token>/', views.TeacherVerifyEmailView.as_view(), name='teacher-verify-email'),
    path('teacher/password-reset/<str:token>/', views.TeacherPasswordResetConfirmView.as_view(),
         name='teacher-password-reset-confirm'),
]
