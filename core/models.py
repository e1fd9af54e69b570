from django.db import models
from django.contrib.auth.models import AbstractUser


class User(AbstractUser):
    """Back-office staff account (commercial team, pedagogy team, admins)."""

    class Role(models.TextChoices):
        ADMIN = 'admin', 'Administrateur'
        COMMERCIAL = 'commercial', 'Commercial'
        PEDAGOGY = 'pedagogy', 'Pédagogie'

    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.COMMERCIAL,
    )
    phone = models.CharField(max_length=20, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'core_user'
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        ordering = ['-created_at']

    def __str__(self):
        full_name = self.get_full_name()
        return f"{self.username} ({full_name})" if full_name else self.username
