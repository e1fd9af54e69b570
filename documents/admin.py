from django.contrib import admin
from .models import Document, DocumentType


@admin.register(DocumentType)
class DocumentTypeAdmin(admin.ModelAdmin):
    list_display = ['name', 'code', 'is_active', 'requires_approval', 'allow_multiple_published', 'sort_order']
    list_filter = ['is_active', 'requires_approval', 'generates_pdf']
    search_fields = ['name', 'code', 'description']
    ordering = ['sort_order', 'name']


@admin.register(Document)
class DocumentAdmin(admin.ModelAdmin):
    list_display = ['title', 'document_type', 'status', 'published_at', 'created_at']
    list_filter = ['status', 'document_type']
    search_fields = ['title', 'content']
    raw_id_fields = ['document_type']
