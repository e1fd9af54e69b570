"""
Views for document types.
"""

from django.contrib import messages
from django.contrib.auth.mixins import LoginRequiredMixin
from django.shortcuts import get_object_or_404, redirect, render
from django.views import View

from .models import DocumentType
from .services import DocumentTypeService


class DocumentTypeListView(LoginRequiredMixin, View):

    def get(self, request):
        return render(request, 'documents/documenttype_list.html', {
            'rows': DocumentTypeService().get_document_types_with_stats(),
        })


class DocumentTypeToggleView(LoginRequiredMixin, View):

    def post(self, request, pk):
        document_type = get_object_or_404(DocumentType, pk=pk)
        result = DocumentTypeService().toggle_active_status(document_type)
        messages.success(request, result['message'])
        return redirect('documents:type-list')


class DocumentTypeDeleteView(LoginRequiredMixin, View):

    def post(self, request, pk):
        document_type = get_object_or_404(DocumentType, pk=pk)
        result = DocumentTypeService().delete_document_type(document_type)
        if result['success']:
            messages.success(request, result['message'])
        else:
            messages.error(request, result['error'])
        return redirect('documents:type-list')
