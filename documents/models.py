from django.db import models


def default_allowed_statuses():
    return ['draft', 'under_review', 'published', 'archived']


def default_configuration():
    return {
        'auto_version': True,
        'track_downloads': True,
        'enable_comments': False,
        'require_review': False,
    }


class DocumentType(models.Model):
    """Kind of document managed by the back office (CGV, règlement intérieur, ...)."""

    code = models.CharField(max_length=100, unique=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    icon = models.CharField(max_length=100, blank=True)
    color = models.CharField(max_length=20, blank=True)
    requires_approval = models.BooleanField(default=False)
    allow_multiple_published = models.BooleanField(default=True)
    has_expiration = models.BooleanField(default=False)
    generates_pdf = models.BooleanField(default=False)
    allowed_statuses = models.JSONField(default=default_allowed_statuses, blank=True)
    required_metadata = models.JSONField(default=list, blank=True)
    configuration = models.JSONField(default=default_configuration, blank=True)
    is_active = models.BooleanField(default=True)
    sort_order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'documents_document_type'
        ordering = ['sort_order', 'name']

    def __str__(self):
        return self.name


class Document(models.Model):

    class Status(models.TextChoices):
        DRAFT = 'draft', 'Brouillon'
        UNDER_REVIEW = 'under_review', 'En révision'
        PUBLISHED = 'published', 'Publié'
        ARCHIVED = 'archived', 'Archivé'

    title = models.CharField(max_length=255)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)
    document_type = models.ForeignKey(
        DocumentType,
        on_delete=models.PROTECT,
        related_name='documents',
    )
    content = models.TextField(blank=True)
    published_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'documents_document'
        ordering = ['-created_at']

    def __str__(self):
        return self.title
