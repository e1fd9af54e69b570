from django.urls import path
from . import views

app_name = 'alternance'

urlpatterns = [
    path('progress/', views.ProgressDashboardView.as_view(), name='progress-dashboard'),
    path('students/<int:pk>/', views.StudentProgressView.as_view(), name='student-progress'),
]
