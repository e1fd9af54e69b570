"""Clear expired mentor password reset tokens.

Usage:
    python manage.py cleanup_mentor_tokens
"""

from django.core.management.base import BaseCommand

from accounts.services import MentorService


class Command(BaseCommand):
    help = 'Clear expired mentor password reset tokens'

    def handle(self, *args, **options):
        cleaned = MentorService().cleanup_expired_tokens()
        self.stdout.write(self.style.SUCCESS(f'Cleared {cleaned} expired token(s).'))
