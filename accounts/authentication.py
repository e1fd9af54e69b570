"""
Mentor authentication and credential management.

Mentors sign in to their own space (session based, separate from the
back-office staff login). This service covers account creation, login,
email verification, password reset/change and admin-side credential
operations.
"""

import logging
import secrets
import string
from datetime import timedelta
from typing import Optional

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from .exceptions import AccountDisabledError
from .models import Mentor
from .services import MentorService

logger = logging.getLogger(__name__)

SESSION_KEY = '_mentor_id'

# Fields that must be filled for a mentor account to count as fully set up
SETUP_FIELDS = {
    'email_verified': 'Adresse email vérifiée',
    'phone': 'Téléphone',
    'position': 'Poste',
    'company_name': 'Entreprise',
    'company_siret': 'SIRET',
    'expertise_domains': "Domaines d'expertise",
    'education_level': "Niveau d'études",
}

MENTOR_FIELDS = (
    'first_name', 'last_name', 'phone', 'position', 'company_name',
    'company_siret', 'expertise_domains', 'experience_years', 'education_level',
)

# Stored as validated, i.e. without surrounding whitespace
STRIPPED_FIELDS = ('first_name', 'last_name', 'phone', 'position', 'company_name', 'company_siret')


class MentorAuthenticationService:
    """Mentor credentials, sessions and account state."""

    def __init__(
        self,
        mentor_service: Optional[MentorService] = None,
        log: Optional[logging.Logger] = None,
    ):
        self.mentor_service = mentor_service or MentorService()
        self.logger = log or logger

    @property
    def min_password_length(self) -> int:
        return settings.EPROFOS_CONFIG['password_min_length']

    def _check_password_strength(self, password: Optional[str]) -> None:
        if len(password or '') < self.min_password_length:
            raise ValidationError(
                f'Le mot de passe doit contenir au moins {self.min_password_length} caractères.',
                code='password_too_short',
            )

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def authenticate_mentor(self, email: str, password: str) -> Optional[Mentor]:
        """
        Return the mentor for valid credentials, None otherwise.

        Raises:
            AccountDisabledError: the credentials match a deactivated account
        """
        mentor = Mentor.objects.filter(email=email).first()
        if mentor is None or not mentor.check_password(password):
            self.logger.info(f"Mentor authentication failed for email={email}")
            return None
        if not mentor.is_active:
            self.logger.warning(f"Login attempt on deactivated mentor id={mentor.pk}")
            raise AccountDisabledError(mentor)

        mentor.update_last_login()
        mentor.save(update_fields=['last_login_at', 'updated_at'])
        self.logger.info(f"Mentor id={mentor.pk} authenticated")
        return mentor

    def login_mentor(self, mentor: Mentor, request) -> None:
        request.session.cycle_key()
        request.session[SESSION_KEY] = mentor.pk
        self.logger.debug(f"Mentor id={mentor.pk} logged in")

    def logout_mentor(self, request) -> None:
        request.session.pop(SESSION_KEY, None)

    def get_logged_in_mentor(self, request) -> Optional[Mentor]:
        mentor_id = request.session.get(SESSION_KEY)
        if mentor_id is None:
            return None
        return Mentor.objects.filter(pk=mentor_id, is_active=True).first()

    # ------------------------------------------------------------------
    # Account creation and verification
    # ------------------------------------------------------------------

    def create_mentor_account(self, data: dict) -> Mentor:
        """
        Validate, create and notify a new mentor.

        Emails (welcome, verification, admin notification) are sent after
        the account is saved; failing to send them does not undo creation.

        Raises:
            ValidationError: with a field -> message dict when data is invalid
        """
        errors = self.mentor_service.validate_mentor_data(data)
        password = data.get('password')
        if password and len(password) < self.min_password_length:
            errors['password'] = (
                f'Le mot de passe doit contenir au moins {self.min_password_length} caractères.'
            )
        if errors:
            self.logger.info(f"Mentor account creation rejected: {sorted(errors)}")
            raise ValidationError(errors)

        generated = not password
        plain_password = password or self.generate_secure_password()

        with transaction.atomic():
            mentor = Mentor(email=data['email'].strip())
            for field in MENTOR_FIELDS:
                if field in data:
                    value = data[field]
                    if field in STRIPPED_FIELDS and isinstance(value, str):
                        value = value.strip()
                    setattr(mentor, field, value)
            mentor.set_password(plain_password)
            mentor.generate_email_verification_token()
            mentor.save()
        self.logger.info(f"Created mentor id={mentor.pk} company={mentor.company_name}")

        if not self.mentor_service.send_welcome_email(mentor, plain_password if generated else None):
            self.logger.warning(f"Welcome email not delivered to mentor id={mentor.pk}")
        if not self.mentor_service.send_email_verification(mentor):
            self.logger.warning(f"Verification email not delivered to mentor id={mentor.pk}")
        self.mentor_service.send_admin_notification_for_new_mentor(mentor)

        return mentor

    def verify_email(self, token: Optional[str]) -> Optional[Mentor]:
        if not token:
            return None
        mentor = Mentor.objects.filter(email_verification_token=token).first()
        if mentor is None:
            self.logger.warning("Mentor email verification with unknown token")
            return None
        mentor.mark_email_verified()
        mentor.save(update_fields=['email_verified', 'email_verified_at', 'email_verification_token', 'updated_at'])
        self.logger.info(f"Mentor id={mentor.pk} verified email")
        return mentor

    # ------------------------------------------------------------------
    # Passwords
    # ------------------------------------------------------------------

    def initiate_password_reset(self, email: str) -> bool:
        """
        Start a password reset.

        Unknown emails report success so that callers cannot probe which
        addresses have an account; deactivated accounts return False.
        """
        mentor = Mentor.objects.filter(email=email).first()
        if mentor is None:
            self.logger.info(f"Password reset requested for unknown email={email}")
            return True
        if not mentor.is_active:
            self.logger.warning(f"Password reset requested for deactivated mentor id={mentor.pk}")
            return False

        mentor.generate_password_reset_token()
        mentor.save(update_fields=['password_reset_token', 'password_reset_token_expires_at', 'updated_at'])
        self.mentor_service.send_password_reset_email(mentor)
        return True

    def reset_password(self, token: Optional[str], new_password: str) -> bool:
        """Returns False when the token is unknown or expired."""
        self._check_password_strength(new_password)
        mentor = Mentor.objects.filter(password_reset_token=token).first() if token else None
        if mentor is None or not mentor.is_password_reset_token_valid():
            self.logger.info("Password reset with invalid or expired token")
            return False

        mentor.set_password(new_password)
        mentor.clear_password_reset_token()
        mentor.save()
        self.logger.info(f"Mentor id={mentor.pk} reset password")
        return True

    def change_password(self, mentor: Mentor, current_password: str, new_password: str) -> bool:
        if not mentor.check_password(current_password):
            raise ValidationError('Le mot de passe actuel est incorrect.', code='wrong_password')
        self._check_password_strength(new_password)
        if current_password == new_password:
            raise ValidationError(
                "Le nouveau mot de passe doit être différent de l'ancien.",
                code='password_unchanged',
            )
        mentor.set_password(new_password)
        mentor.save(update_fields=['password', 'updated_at'])
        self.logger.info(f"Mentor id={mentor.pk} changed password")
        return True

    def generate_secure_password(self, length: int = 12) -> str:
        """Random password with at least one lowercase, uppercase, digit and symbol."""
        length = max(self.min_password_length, length)
        symbols = '!@#$%^&*'
        required = [
            secrets.choice(string.ascii_lowercase),
            secrets.choice(string.ascii_uppercase),
            secrets.choice(string.digits),
            secrets.choice(symbols),
        ]
        alphabet = string.ascii_letters + string.digits + symbols
        rest = [secrets.choice(alphabet) for _ in range(length - len(required))]
        chars = required + rest
        secrets.SystemRandom().shuffle(chars)
        return ''.join(chars)

    # ------------------------------------------------------------------
    # Account state
    # ------------------------------------------------------------------

    def get_account_setup_completion(self, mentor: Mentor) -> dict:
        missing = [label for field, label in SETUP_FIELDS.items() if not getattr(mentor, field)]
        total = len(SETUP_FIELDS)
        completed = total - len(missing)
        return {
            'percentage': round(completed * 100 / total),
            'completed': completed,
            'total': total,
            'missing': missing,
        }

    def is_account_setup_complete(self, mentor: Mentor) -> bool:
        return not self.get_account_setup_completion(mentor)['missing']

    def deactivate_mentor(self, mentor: Mentor, reason: Optional[str] = None) -> Mentor:
        mentor.is_active = False
        mentor.clear_password_reset_token()
        mentor.save(update_fields=['is_active', 'password_reset_token', 'password_reset_token_expires_at', 'updated_at'])
        self.logger.info(f"Deactivated mentor id={mentor.pk} reason={reason or '-'}")
        return mentor

    def reactivate_mentor(self, mentor: Mentor) -> Mentor:
        mentor.is_active = True
        mentor.save(update_fields=['is_active', 'updated_at'])
        self.logger.info(f"Reactivated mentor id={mentor.pk}")
        return mentor

    def perform_security_check(self, mentor: Mentor) -> dict:
        issues = []
        if not mentor.email_verified:
            issues.append('Adresse email non vérifiée')
        if mentor.last_login_at is None:
            issues.append('Aucune connexion enregistrée')
        elif mentor.last_login_at < timezone.now() - timedelta(days=90):
            issues.append('Aucune connexion depuis plus de 90 jours')
        if mentor.password_reset_token and not mentor.is_password_reset_token_valid():
            issues.append('Jeton de réinitialisation expiré non nettoyé')
        if not mentor.password:
            issues.append('Aucun mot de passe défini')
        return {
            'mentor_id': mentor.pk,
            'is_active': mentor.is_active,
            'email_verified': mentor.email_verified,
            'has_pending_reset': mentor.is_password_reset_token_valid(),
            'last_login_at': mentor.last_login_at,
            'issues': issues,
            'is_secure': not issues,
        }

    def generate_credentials(self, mentor: Mentor) -> dict:
        """Set a fresh random password and return the login/password pair."""
        password = self.generate_secure_password()
        mentor.set_password(password)
        mentor.save(update_fields=['password', 'updated_at'])
        self.logger.info(f"Generated new credentials for mentor id={mentor.pk}")
        return {'email': mentor.email, 'password': password}

    def reset_credentials(self, mentor: Mentor) -> bool:
        """Generate new credentials and email them. Returns whether the email went out."""
        credentials = self.generate_credentials(mentor)
        return self.mentor_service.send_new_password_email(mentor, credentials['password'])
