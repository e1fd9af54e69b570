"""
Training catalogue: formations, services and scheduled sessions.

Prospects express interest in formations/services; session registrations
point at a session, which belongs to a formation.
"""
from django.db import models


class Formation(models.Model):
    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'catalog_formation'
        ordering = ['title']

    def __str__(self):
        return self.title


class Service(models.Model):
    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'catalog_service'
        ordering = ['title']

    def __str__(self):
        return self.title


class Session(models.Model):
    """A dated run of a formation."""

    formation = models.ForeignKey(
        Formation,
        on_delete=models.CASCADE,
        related_name='sessions',
    )
    name = models.CharField(max_length=255)
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    location = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'catalog_session'
        ordering = ['-start_date']

    def __str__(self):
        return f"{self.name} ({self.formation.title})"
