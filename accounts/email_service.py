"""
Email service for mentor and teacher account notifications.

Renders plain-text templates from templates/accounts/emails/ and sends them
through Django's mail backend. Sending never raises: transport failures are
logged and reported as False so that account workflows can carry on.
"""

import logging
from smtplib import SMTPException
from typing import Optional

from django.conf import settings
from django.core.mail import BadHeaderError, send_mail
from django.template.loader import render_to_string
from django.urls import reverse

logger = logging.getLogger(__name__)


class AccountEmailService:
    """Send templated account emails."""

    def __init__(self, from_email: Optional[str] = None):
        self.from_email = from_email or settings.DEFAULT_FROM_EMAIL or None

    def build_url(self, url_name: str, *args) -> str:
        """Absolute URL for links embedded in emails."""
        return f"{settings.SITE_URL.rstrip('/')}{reverse(url_name, args=args)}"

    def send(self, template: str, subject: str, recipient: str, context: dict) -> bool:
        """
        Render `accounts/emails/<template>.txt` and send it to `recipient`.

        Returns:
            True if the backend accepted the message, False otherwise
        """
        if not recipient:
            logger.warning(f"Email '{template}' not sent: no recipient")
            return False

        context = {
            'organisation_name': settings.EPROFOS_CONFIG['organisation_name'],
            **context,
        }
        body = render_to_string(f'accounts/emails/{template}.txt', context)

        try:
            sent = send_mail(
                subject=subject,
                message=body,
                from_email=self.from_email,
                recipient_list=[recipient],
                fail_silently=False,
            )
        except (SMTPException, BadHeaderError, OSError) as e:
            logger.error(f"Failed to send '{template}' email to {recipient}: {e}")
            return False

        if sent:
            logger.info(f"Sent '{template}' email to {recipient}")
        return bool(sent)
