"""
Django system checks for required configuration.

Runs automatically on `manage.py runserver`, `migrate`, and `check`.
"""
import os

from django.conf import settings
from django.core.checks import Error, Warning, register


@register()
def check_required_settings(app_configs, **kwargs):
    errors = []

    # E001: DATABASE_URL required in production
    if not settings.DEBUG and not os.environ.get("DATABASE_URL"):
        errors.append(Error(
            "DATABASE_URL not set in production.",
            hint="Set DATABASE_URL for the PostgreSQL connection.",
            id="eprofos.E001",
        ))

    # E002: Insecure SECRET_KEY in production
    if not settings.DEBUG and "insecure" in settings.SECRET_KEY:
        errors.append(Error(
            "SECRET_KEY contains 'insecure' and is not safe for production.",
            hint="Generate a secure SECRET_KEY.",
            id="eprofos.E002",
        ))

    # W001: outgoing mail needs a sender
    if not getattr(settings, 'DEFAULT_FROM_EMAIL', ''):
        errors.append(Warning(
            "DEFAULT_FROM_EMAIL is not configured.",
            hint="Set DEFAULT_FROM_EMAIL so account emails carry a sender.",
            id="eprofos.W001",
        ))

    # W002: new mentor notifications go nowhere without an admin address
    if not getattr(settings, 'ADMIN_NOTIFICATION_EMAIL', ''):
        errors.append(Warning(
            "ADMIN_NOTIFICATION_EMAIL is not configured.",
            hint="Set ADMIN_NOTIFICATION_EMAIL to receive new mentor notifications.",
            id="eprofos.W002",
        ))

    return errors
