"""
Mentor and teacher accounts.

Both live outside Django's staff `User` table: mentors are company tutors
supervising apprentices, teachers are training-centre staff. They share
the credential and token lifecycle defined on `AccountBase`.
"""
import secrets
from datetime import timedelta

from django.conf import settings
from django.contrib.auth.hashers import check_password, make_password
from django.db import models
from django.utils import timezone


EXPERTISE_DOMAINS = {
    'informatique': 'Informatique / Numérique',
    'gestion': 'Gestion / Administration',
    'commercial': 'Commercial / Vente',
    'marketing': 'Marketing / Communication',
    'rh': 'Ressources Humaines',
    'finance': 'Finance / Comptabilité',
    'logistique': 'Logistique / Supply Chain',
    'production': 'Production / Industrie',
    'juridique': 'Juridique',
    'technique': 'Technique / Ingénierie',
    'management': 'Management / Direction',
    'formation': 'Formation / Pédagogie',
    'autre': 'Autre',
}


def generate_account_token():
    return secrets.token_hex(32)


class AccountBase(models.Model):
    email = models.EmailField(max_length=180, unique=True)
    password = models.CharField(max_length=128)
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    phone = models.CharField(max_length=20, blank=True)
    is_active = models.BooleanField(default=True)
    email_verified = models.BooleanField(default=False)
    email_verified_at = models.DateTimeField(null=True, blank=True)
    email_verification_token = models.CharField(max_length=64, blank=True, db_index=True)
    password_reset_token = models.CharField(max_length=64, blank=True, db_index=True)
    password_reset_token_expires_at = models.DateTimeField(null=True, blank=True)
    last_login_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ['last_name', 'first_name']

    def __str__(self):
        return f"{self.full_name} <{self.email}>"

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def set_password(self, raw_password):
        self.password = make_password(raw_password)

    def check_password(self, raw_password):
        return bool(self.password) and check_password(raw_password, self.password)

    def generate_email_verification_token(self):
        self.email_verification_token = generate_account_token()
        return self.email_verification_token

    def generate_password_reset_token(self):
        lifetime = settings.EPROFOS_CONFIG['password_reset_token_lifetime']
        self.password_reset_token = generate_account_token()
        self.password_reset_token_expires_at = timezone.now() + timedelta(seconds=lifetime)
        return self.password_reset_token

    def is_password_reset_token_valid(self):
        return (
            bool(self.password_reset_token)
            and self.password_reset_token_expires_at is not None
            and self.password_reset_token_expires_at > timezone.now()
        )

    def clear_password_reset_token(self):
        self.password_reset_token = ''
        self.password_reset_token_expires_at = None

    def mark_email_verified(self):
        self.email_verified = True
        self.email_verified_at = timezone.now()
        self.email_verification_token = ''

    def update_last_login(self):
        self.last_login_at = timezone.now()


class Mentor(AccountBase):
    """Company tutor supervising one or more apprentices."""

    class EducationLevel(models.TextChoices):
        BAC = 'bac', 'Baccalauréat'
        BAC_2 = 'bac+2', 'Bac+2 (BTS, DUT)'
        BAC_3 = 'bac+3', 'Bac+3 (Licence)'
        BAC_5 = 'bac+5', 'Bac+5 (Master, Ingénieur)'
        BAC_8 = 'bac+8', 'Bac+8 (Doctorat)'

    position = models.CharField(max_length=150, blank=True)
    company_name = models.CharField(max_length=200)
    company_siret = models.CharField(max_length=14, unique=True)
    expertise_domains = models.JSONField(default=list, blank=True)
    experience_years = models.PositiveIntegerField(default=0)
    education_level = models.CharField(max_length=10, choices=EducationLevel.choices, blank=True)

    class Meta(AccountBase.Meta):
        db_table = 'accounts_mentor'
        verbose_name = 'Mentor'
        verbose_name_plural = 'Mentors'

    def get_expertise_domains_labels(self):
        return [EXPERTISE_DOMAINS.get(domain, domain) for domain in self.expertise_domains]


class Teacher(AccountBase):
    """Training-centre teacher."""

    specialty = models.CharField(max_length=150, blank=True)
    title = models.CharField(max_length=100, blank=True)
    years_of_experience = models.PositiveIntegerField(null=True, blank=True)
    biography = models.TextField(blank=True)
    qualifications = models.TextField(blank=True)

    class Meta(AccountBase.Meta):
        db_table = 'accounts_teacher'
        verbose_name = 'Teacher'
        verbose_name_plural = 'Teachers'
