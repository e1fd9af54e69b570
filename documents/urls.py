from django.urls import path
from . import views

app_name = 'documents'

urlpatterns = [
    path('types/', views.DocumentTypeListView.as_view(), name='type-list'),
    path('types/<int:pk>/toggle/', views.DocumentTypeToggleView.as_view(), name='type-toggle'),
    path('types/<int:pk>/delete/', views.DocumentTypeDeleteView.as_view(), name='type-delete'),
]
