"""
Mentor and teacher account services.

MentorService and TeacherService own account emails, data validation,
lookups and statistics. Credential workflows for mentors (login, password
reset, email verification) live in accounts.authentication.
"""

import csv
import io
import logging
import re
import secrets
import string
from datetime import timedelta
from typing import Dict, List, Optional

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import transaction
from django.db.models import Avg, Count, Q, QuerySet
from django.utils import timezone

from .email_service import AccountEmailService
from .models import EXPERTISE_DOMAINS, Mentor, Teacher

logger = logging.getLogger(__name__)

PASSWORD_ALPHABET = string.ascii_letters + string.digits + '!@#$%^&*'
SIRET_PATTERN = re.compile(r'^\d{14}$')


def generate_password(length: int = 12) -> str:
    """Random password from letters, digits and symbols; length clamped to 8..128."""
    length = max(8, min(128, length))
    return ''.join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


class MentorService:
    """Mentor notifications, validation, matching and reporting."""

    def __init__(
        self,
        email_service: Optional[AccountEmailService] = None,
        log: Optional[logging.Logger] = None,
    ):
        self.emails = email_service or AccountEmailService()
        self.logger = log or logger

    # ------------------------------------------------------------------
    # Emails
    # ------------------------------------------------------------------

    def send_welcome_email(self, mentor: Mentor, plain_password: Optional[str] = None) -> bool:
        return self.emails.send(
            'mentor_welcome',
            f"Bienvenue sur l'espace mentor {settings.EPROFOS_CONFIG['organisation_name']}",
            mentor.email,
            {
                'mentor': mentor,
                'plain_password': plain_password,
                'login_url': self.emails.build_url('accounts:mentor-login'),
            },
        )

    def send_email_verification(self, mentor: Mentor) -> bool:
        if not mentor.email_verification_token:
            mentor.generate_email_verification_token()
            mentor.save(update_fields=['email_verification_token', 'updated_at'])
        return self.emails.send(
            'mentor_email_verification',
            'Vérifiez votre adresse email',
            mentor.email,
            {
                'mentor': mentor,
                'verification_url': self.emails.build_url(
                    'accounts:mentor-verify-email', mentor.email_verification_token
                ),
            },
        )

    def send_password_reset_email(self, mentor: Mentor) -> bool:
        if not mentor.is_password_reset_token_valid():
            self.logger.warning(f"Password reset email for mentor id={mentor.pk} skipped: no valid token")
            return False
        return self.emails.send(
            'mentor_password_reset',
            'Réinitialisation de votre mot de passe',
            mentor.email,
            {
                'mentor': mentor,
                'reset_url': self.emails.build_url(
                    'accounts:mentor-password-reset-confirm', mentor.password_reset_token
                ),
                'expires_at': mentor.password_reset_token_expires_at,
            },
        )

    def send_new_password_email(self, mentor: Mentor, new_password: str) -> bool:
        return self.emails.send(
            'mentor_new_password',
            'Vos nouveaux identifiants',
            mentor.email,
            {
                'mentor': mentor,
                'new_password': new_password,
                'login_url': self.emails.build_url('accounts:mentor-login'),
            },
        )

    def send_admin_notification_for_new_mentor(self, mentor: Mentor) -> bool:
        admin_email = getattr(settings, 'ADMIN_NOTIFICATION_EMAIL', '')
        if not admin_email:
            self.logger.warning(f"No ADMIN_NOTIFICATION_EMAIL set; new mentor id={mentor.pk} not notified")
            return False
        return self.emails.send(
            'admin_new_mentor',
            f'Nouveau mentor inscrit : {mentor.full_name}',
            admin_email,
            {'mentor': mentor, 'expertise_labels': mentor.get_expertise_domains_labels()},
        )

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_mentor_data(self, data: dict, mentor: Optional[Mentor] = None) -> Dict[str, str]:
        """
        Validate mentor creation/update data.

        Args:
            data: dict of submitted fields
            mentor: the mentor being updated (excluded from uniqueness checks)

        Returns:
            dict of field name -> error message (empty when valid)
        """
        errors = {}
        others = Mentor.objects.all()
        if mentor is not None and mentor.pk:
            others = others.exclude(pk=mentor.pk)

        email = (data.get('email') or '').strip()
        if not email:
            errors['email'] = "L'adresse email est obligatoire."
        else:
            try:
                validate_email(email)
            except ValidationError:
                errors['email'] = "L'adresse email n'est pas valide."
            else:
                if others.filter(email=email).exists():
                    errors['email'] = 'Un mentor avec cette adresse email existe déjà.'

        siret = (data.get('company_siret') or '').strip()
        if not siret:
            errors['company_siret'] = 'Le SIRET est obligatoire.'
        elif not SIRET_PATTERN.match(siret):
            errors['company_siret'] = 'Le SIRET doit contenir exactement 14 chiffres.'
        elif others.filter(company_siret=siret).exists():
            errors['company_siret'] = 'Un mentor avec ce SIRET existe déjà.'

        for field, message in (
            ('first_name', 'Le prénom est obligatoire.'),
            ('last_name', 'Le nom est obligatoire.'),
            ('company_name', "Le nom de l'entreprise est obligatoire."),
        ):
            if not (data.get(field) or '').strip():
                errors[field] = message

        education_level = data.get('education_level')
        if not education_level:
            errors['education_level'] = "Le niveau d'études est obligatoire."
        elif education_level not in Mentor.EducationLevel.values:
            errors['education_level'] = "Le niveau d'études n'est pas valide."

        domains = data.get('expertise_domains') or []
        if not domains:
            errors['expertise_domains'] = "Au moins un domaine d'expertise est requis."
        elif any(domain not in EXPERTISE_DOMAINS for domain in domains):
            errors['expertise_domains'] = "Un domaine d'expertise n'est pas valide."

        experience = data.get('experience_years', 0)
        try:
            if int(experience) < 0:
                errors['experience_years'] = "L'expérience ne peut pas être négative."
        except (TypeError, ValueError):
            errors['experience_years'] = "L'expérience doit être un nombre d'années."

        return errors

    # ------------------------------------------------------------------
    # Matching and reporting
    # ------------------------------------------------------------------

    def find_available_mentors_for_matching(self, criteria: Optional[dict] = None) -> List[Mentor]:
        """
        Active, verified mentors matching the given criteria.

        Supported criteria keys: expertise_domains (any overlap),
        min_experience, education_level, company_name (contains).
        """
        criteria = criteria or {}
        queryset = Mentor.objects.filter(is_active=True, email_verified=True)

        if criteria.get('min_experience') is not None:
            queryset = queryset.filter(experience_years__gte=criteria['min_experience'])
        if criteria.get('education_level'):
            queryset = queryset.filter(education_level=criteria['education_level'])
        if criteria.get('company_name'):
            queryset = queryset.filter(company_name__icontains=criteria['company_name'])

        queryset = queryset.annotate(
            active_apprentices=Count('apprentices', filter=Q(apprentices__is_active=True))
        ).order_by('active_apprentices', '-experience_years')

        wanted = set(criteria.get('expertise_domains') or [])
        max_apprentices = settings.EPROFOS_CONFIG['max_apprentices_per_mentor']
        return [
            mentor for mentor in queryset
            if mentor.active_apprentices < max_apprentices
            and (not wanted or wanted.intersection(mentor.expertise_domains))
        ]

    def get_company_statistics(self) -> List[dict]:
        rows = (
            Mentor.objects.order_by()
            .values('company_name', 'company_siret')
            .annotate(
                mentor_count=Count('id'),
                active_count=Count('id', filter=Q(is_active=True)),
                average_experience=Avg('experience_years'),
            )
            .order_by('-mentor_count', 'company_name')
        )
        return [
            {**row, 'average_experience': round(row['average_experience'] or 0, 1)}
            for row in rows
        ]

    def can_supervise_new_apprentice(self, mentor: Mentor) -> bool:
        if not mentor.is_active or not mentor.email_verified:
            return False
        current = mentor.apprentices.filter(is_active=True).count()
        return current < settings.EPROFOS_CONFIG['max_apprentices_per_mentor']

    def get_dashboard_statistics(self) -> dict:
        month_ago = timezone.now() - timedelta(days=30)
        totals = Mentor.objects.aggregate(
            total=Count('id'),
            active=Count('id', filter=Q(is_active=True)),
            verified=Count('id', filter=Q(email_verified=True)),
            recent=Count('id', filter=Q(created_at__gte=month_ago)),
            recently_logged_in=Count('id', filter=Q(last_login_at__gte=month_ago)),
        )
        by_education = (
            Mentor.objects.order_by().values('education_level').annotate(total=Count('id'))
        )
        by_expertise = {}
        for domains in Mentor.objects.filter(is_active=True).values_list('expertise_domains', flat=True):
            for domain in domains:
                by_expertise[domain] = by_expertise.get(domain, 0) + 1

        return {
            **totals,
            'unverified': totals['total'] - totals['verified'],
            'by_education_level': {row['education_level']: row['total'] for row in by_education},
            'by_expertise_domain': by_expertise,
        }

    def cleanup_expired_tokens(self) -> int:
        """Clear expired password reset tokens. Returns the number of mentors cleaned."""
        cleaned = Mentor.objects.filter(
            password_reset_token_expires_at__lt=timezone.now(),
        ).exclude(password_reset_token='').update(
            password_reset_token='',
            password_reset_token_expires_at=None,
            updated_at=timezone.now(),
        )
        self.logger.info(f"Cleared {cleaned} expired mentor password reset token(s)")
        return cleaned

    def export_to_csv(self, mentors=None) -> str:
        """CSV export (French headers) of the given mentors, or all mentors."""
        mentors = mentors if mentors is not None else Mentor.objects.all()
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow([
            'ID', 'Prénom', 'Nom', 'Email', 'Téléphone', 'Poste', 'Entreprise', 'SIRET',
            "Domaines d'expertise", "Années d'expérience", "Niveau d'études",
            'Actif', 'Email vérifié', 'Créé le', 'Dernière connexion',
        ])
        for mentor in mentors:
            writer.writerow([
                mentor.pk,
                mentor.first_name,
                mentor.last_name,
                mentor.email,
                mentor.phone,
                mentor.position,
                mentor.company_name,
                mentor.company_siret,
                ', '.join(mentor.get_expertise_domains_labels()),
                mentor.experience_years,
                mentor.get_education_level_display(),
                'Oui' if mentor.is_active else 'Non',
                'Oui' if mentor.email_verified else 'Non',
                timezone.localtime(mentor.created_at).strftime('%d/%m/%Y %H:%M') if mentor.created_at else '',
                timezone.localtime(mentor.last_login_at).strftime('%d/%m/%Y %H:%M') if mentor.last_login_at else '',
            ])
        return output.getvalue()


class TeacherService:
    """Teacher account lifecycle, notifications and lookups."""

    UPDATABLE_FIELDS = (
        'first_name', 'last_name', 'phone', 'specialty', 'title',
        'years_of_experience', 'biography', 'qualifications',
    )

    def __init__(
        self,
        email_service: Optional[AccountEmailService] = None,
        log: Optional[logging.Logger] = None,
    ):
        self.emails = email_service or AccountEmailService()
        self.logger = log or logger

    def send_password_reset_email(self, teacher: Teacher) -> bool:
        if not teacher.is_password_reset_token_valid():
            teacher.generate_password_reset_token()
            teacher.save(update_fields=['password_reset_token', 'password_reset_token_expires_at', 'updated_at'])
        return self.emails.send(
            'teacher_password_reset',
            'Réinitialisation de votre mot de passe',
            teacher.email,
            {
                'teacher': teacher,
                'reset_url': self.emails.build_url(
                    'accounts:teacher-password-reset-confirm', teacher.password_reset_token
                ),
            },
        )

    def send_email_verification(self, teacher: Teacher) -> bool:
        if not teacher.email_verification_token:
            teacher.generate_email_verification_token()
            teacher.save(update_fields=['email_verification_token', 'updated_at'])
        return self.emails.send(
            'teacher_email_verification',
            'Vérifiez votre adresse email',
            teacher.email,
            {
                'teacher': teacher,
                'verification_url': self.emails.build_url(
                    'accounts:teacher-verify-email', teacher.email_verification_token
                ),
            },
        )

    def send_welcome_email(self, teacher: Teacher, plain_password: Optional[str] = None) -> bool:
        return self.emails.send(
            'teacher_welcome',
            f"Bienvenue dans l'équipe pédagogique {settings.EPROFOS_CONFIG['organisation_name']}",
            teacher.email,
            {'teacher': teacher, 'plain_password': plain_password},
        )

    def generate_temporary_password(self, length: int = 12) -> str:
        return generate_password(length)

    def create_teacher(self, data: dict, send_emails: bool = True) -> Teacher:
        """
        Create a teacher account.

        A temporary password is generated when `data` carries none; it is
        sent in the welcome email.
        """
        email = (data.get('email') or '').strip()
        errors = {}
        try:
            validate_email(email)
        except ValidationError:
            errors['email'] = "L'adresse email n'est pas valide."
        else:
            if self.email_exists(email):
                errors['email'] = 'Un formateur avec cette adresse email existe déjà.'
        for field in ('first_name', 'last_name'):
            if not (data.get(field) or '').strip():
                errors[field] = 'Ce champ est obligatoire.'
        if errors:
            raise ValidationError(errors)

        plain_password = data.get('password') or self.generate_temporary_password()
        with transaction.atomic():
            teacher = Teacher(email=email)
            for field in self.UPDATABLE_FIELDS:
                if field in data:
                    setattr(teacher, field, data[field])
            teacher.set_password(plain_password)
            teacher.generate_email_verification_token()
            teacher.save()
        self.logger.info(f"Created teacher id={teacher.pk} email={teacher.email}")

        if send_emails:
            self.send_welcome_email(teacher, plain_password if not data.get('password') else None)
            self.send_email_verification(teacher)
        return teacher

    def update_teacher(self, teacher: Teacher, data: dict) -> Teacher:
        changed = []
        for field in self.UPDATABLE_FIELDS:
            if field in data and getattr(teacher, field) != data[field]:
                setattr(teacher, field, data[field])
                changed.append(field)
        if data.get('password'):
            teacher.set_password(data['password'])
            changed.append('password')
        if changed:
            teacher.save(update_fields=[*changed, 'updated_at'])
            self.logger.info(f"Updated teacher id={teacher.pk}: {', '.join(changed)}")
        return teacher

    def deactivate_teacher(self, teacher: Teacher) -> Teacher:
        teacher.is_active = False
        teacher.save(update_fields=['is_active', 'updated_at'])
        self.logger.info(f"Deactivated teacher id={teacher.pk}")
        return teacher

    def activate_teacher(self, teacher: Teacher) -> Teacher:
        teacher.is_active = True
        teacher.save(update_fields=['is_active', 'updated_at'])
        self.logger.info(f"Activated teacher id={teacher.pk}")
        return teacher

    def verify_email(self, token: Optional[str]) -> Optional[Teacher]:
        if not token:
            return None
        teacher = Teacher.objects.filter(email_verification_token=token).first()
        if teacher is None:
            self.logger.warning("Teacher email verification with unknown token")
            return None
        teacher.mark_email_verified()
        teacher.save(update_fields=['email_verified', 'email_verified_at', 'email_verification_token', 'updated_at'])
        self.logger.info(f"Teacher id={teacher.pk} verified email")
        return teacher

    def reset_password(self, token: Optional[str], new_password: str) -> bool:
        """Set a new password from a reset token. Returns False when the token is unknown or expired."""
        min_length = settings.EPROFOS_CONFIG['password_min_length']
        if len(new_password or '') < min_length:
            raise ValidationError(f'Le mot de passe doit contenir au moins {min_length} caractères.')
        teacher = Teacher.objects.filter(password_reset_token=token).first() if token else None
        if teacher is None or not teacher.is_password_reset_token_valid():
            return False
        teacher.set_password(new_password)
        teacher.clear_password_reset_token()
        teacher.save()
        self.logger.info(f"Teacher id={teacher.pk} reset password")
        return True

    def get_statistics(self) -> Dict[str, int]:
        return Teacher.objects.aggregate(
            total=Count('id'),
            active=Count('id', filter=Q(is_active=True)),
            verified=Count('id', filter=Q(email_verified=True)),
        )

    def find_teachers_by_criteria(self, criteria: Optional[dict] = None) -> QuerySet:
        criteria = criteria or {}
        queryset = Teacher.objects.all()
        if criteria.get('search'):
            term = criteria['search']
            queryset = queryset.filter(
                Q(first_name__icontains=term)
                | Q(last_name__icontains=term)
                | Q(email__icontains=term)
                | Q(specialty__icontains=term)
            )
        if criteria.get('specialty'):
            queryset = queryset.filter(specialty__icontains=criteria['specialty'])
        if criteria.get('is_active') is not None:
            queryset = queryset.filter(is_active=criteria['is_active'])
        return queryset.order_by('last_name', 'first_name')

    def find_by_email(self, email: str) -> Optional[Teacher]:
        return Teacher.objects.filter(email=email).first()

    def email_exists(self, email: str) -> bool:
        return Teacher.objects.filter(email=email).exists()
