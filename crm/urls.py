"""
URL configuration for the CRM app.
"""

from django.urls import path
from . import views

app_name = 'crm'

urlpatterns = [
    path('prospects/', views.ProspectListView.as_view(), name='prospect-list'),
    path('prospects/<int:pk>/', views.ProspectDetailView.as_view(), name='prospect-detail'),
    path('prospects/<int:pk>/notes/', views.ProspectNoteCreateView.as_view(), name='note-create'),
    path('prospects/merge-duplicates/', views.MergeDuplicatesView.as_view(), name='merge-duplicates'),
    path('notes/', views.NoteActivityView.as_view(), name='note-activity'),
    path('notes/<int:pk>/complete/', views.ProspectNoteCompleteView.as_view(), name='note-complete'),
]
