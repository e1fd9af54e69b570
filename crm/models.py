"""
CRM models: prospects, the touchpoints that feed them, and follow-up notes.

A Prospect is the single identity record for a person, keyed by email.
Touchpoints (contact requests, session registrations, needs analyses) are
immutable business facts that each point at most at one Prospect.
"""
import secrets
from datetime import timedelta

from django.conf import settings
from django.db import models
from django.db.models import Count, F, Max, Q
from django.db.models.functions import TruncDate
from django.utils import timezone

from catalog.models import Formation, Service, Session


STATUS_RANKS = {
    'lost': 0,
    'lead': 1,
    'prospect': 2,
    'qualified': 3,
    'negotiation': 4,
    'customer': 5,
}

# Lead score weights
STATUS_SCORES = {
    'lead': 10,
    'prospect': 20,
    'qualified': 40,
    'negotiation': 60,
    'customer': 100,
    'lost': 0,
}
CONTACT_TYPE_SCORES = {
    'quote': 50,
    'advice': 30,
    'information': 20,
    'quick_registration': 60,
}
DEFAULT_CONTACT_SCORE = 15
SESSION_REGISTRATION_SCORE = 80
NEEDS_ANALYSIS_COMPLETED_SCORE = 60
NEEDS_ANALYSIS_PENDING_SCORE = 30
FORMATION_INTEREST_SCORE = 20
COMPANY_EMAIL_SCORE = 10


def generate_token():
    return secrets.token_urlsafe(32)


class Prospect(models.Model):
    """Unified identity record for a person who interacted with EPROFOS."""

    class Status(models.TextChoices):
        LEAD = 'lead', 'Lead'
        PROSPECT = 'prospect', 'Prospect'
        QUALIFIED = 'qualified', 'Qualifié'
        NEGOTIATION = 'negotiation', 'Négociation'
        CUSTOMER = 'customer', 'Client'
        LOST = 'lost', 'Perdu'

        @property
        def rank(self):
            return STATUS_RANKS[self.value]

        @classmethod
        def highest(cls, *statuses):
            """Return the highest-ranked of the given status values."""
            return max((cls(s) for s in statuses), key=lambda s: s.rank)

    class Priority(models.TextChoices):
        LOW = 'low', 'Faible'
        MEDIUM = 'medium', 'Moyenne'
        HIGH = 'high', 'Élevée'
        URGENT = 'urgent', 'Urgente'

    class Source(models.TextChoices):
        WEBSITE = 'website', 'Site web'
        REFERRAL = 'referral', 'Recommandation'
        SOCIAL_MEDIA = 'social_media', 'Réseaux sociaux'
        EMAIL_CAMPAIGN = 'email_campaign', 'Campagne email'
        PHONE_CALL = 'phone_call', 'Appel téléphonique'
        EVENT = 'event', 'Événement'
        ADVERTISING = 'advertising', 'Publicité'
        QUOTE_REQUEST = 'quote_request', 'Demande de devis'
        CONSULTATION_REQUEST = 'consultation_request', 'Demande de conseil'
        INFORMATION_REQUEST = 'information_request', "Demande d'information"
        QUICK_REGISTRATION = 'quick_registration', 'Inscription rapide'
        CONTACT_FORM = 'contact_form', 'Formulaire de contact'
        SESSION_REGISTRATION = 'session_registration', 'Inscription session'
        NEEDS_ANALYSIS = 'needs_analysis', 'Analyse de besoins'
        OTHER = 'other', 'Autre'

    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    # Indexed but not unique: legacy duplicates are folded by the merge job.
    email = models.EmailField(max_length=180, db_index=True)
    phone = models.CharField(max_length=20, blank=True)
    company = models.CharField(max_length=150, blank=True)
    position = models.CharField(max_length=100, blank=True)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.LEAD,
    )
    priority = models.CharField(
        max_length=20,
        choices=Priority.choices,
        default=Priority.MEDIUM,
    )
    source = models.CharField(
        max_length=30,
        choices=Source.choices,
        default=Source.WEBSITE,
        blank=True,
    )
    description = models.TextField(blank=True, help_text='Timestamped touchpoint log')
    estimated_budget = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    expected_closure_date = models.DateField(null=True, blank=True)
    last_contact_date = models.DateTimeField(null=True, blank=True)
    next_follow_up_date = models.DateTimeField(null=True, blank=True)
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_prospects',
    )
    interested_formations = models.ManyToManyField(
        Formation,
        blank=True,
        related_name='interested_prospects',
    )
    interested_services = models.ManyToManyField(
        Service,
        blank=True,
        related_name='interested_prospects',
    )
    custom_fields = models.JSONField(default=dict, blank=True)
    tags = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'crm_prospect'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='crm_prospect_status_idx'),
            models.Index(fields=['next_follow_up_date'], name='crm_prospect_followup_idx'),
        ]

    def __str__(self):
        return f"{self.full_name} <{self.email}>"

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def status_rank(self):
        return self.Status(self.status).rank

    def needs_follow_up(self):
        return self.next_follow_up_date is not None and self.next_follow_up_date <= timezone.now()

    def is_overdue_for_follow_up(self):
        if self.next_follow_up_date is None:
            return False
        overdue_days = settings.EPROFOS_CONFIG['follow_up_overdue_days']
        return self.next_follow_up_date < timezone.now() - timedelta(days=overdue_days)

    def days_since_last_contact(self):
        if self.last_contact_date is None:
            return None
        return (timezone.now() - self.last_contact_date).days

    def days_until_follow_up(self):
        """Days until the next follow-up; negative when it is already past."""
        if self.next_follow_up_date is None:
            return None
        return (self.next_follow_up_date - timezone.now()).days

    def get_all_interactions(self):
        """All touchpoints for this prospect, most recent first."""
        interactions = []
        for contact_request in self.contact_requests.all():
            interactions.append({
                'type': 'contact_request',
                'object': contact_request,
                'date': contact_request.created_at,
                'title': contact_request.get_type_display(),
                'description': contact_request.subject or contact_request.message,
            })
        for registration in self.session_registrations.select_related('session__formation'):
            interactions.append({
                'type': 'session_registration',
                'object': registration,
                'date': registration.created_at,
                'title': 'Inscription session',
                'description': str(registration.session) if registration.session_id else '',
            })
        for analysis in self.needs_analysis_requests.all():
            interactions.append({
                'type': 'needs_analysis',
                'object': analysis,
                'date': analysis.created_at,
                'title': 'Analyse de besoins',
                'description': analysis.get_type_display(),
            })
        interactions.sort(key=lambda item: item['date'], reverse=True)
        return interactions

    def lead_score(self):
        score = STATUS_SCORES.get(self.status, 5)

        for contact_type in self.contact_requests.values_list('type', flat=True):
            score += CONTACT_TYPE_SCORES.get(contact_type, DEFAULT_CONTACT_SCORE)

        score += self.session_registrations.count() * SESSION_REGISTRATION_SCORE

        for analysis_status in self.needs_analysis_requests.values_list('status', flat=True):
            if analysis_status == NeedsAnalysisRequest.Status.COMPLETED:
                score += NEEDS_ANALYSIS_COMPLETED_SCORE
            else:
                score += NEEDS_ANALYSIS_PENDING_SCORE

        score += self.interested_formations.count() * FORMATION_INTEREST_SCORE

        if self.company and '@' in self.email:
            domain = self.email.rsplit('@', 1)[1].lower()
            if domain not in settings.EPROFOS_CONFIG['free_email_domains']:
                score += COMPANY_EMAIL_SCORE

        return min(score, settings.EPROFOS_CONFIG['lead_score_cap'])

    def add_tag(self, tag):
        if tag not in self.tags:
            self.tags = [*self.tags, tag]

    def remove_tag(self, tag):
        self.tags = [t for t in self.tags if t != tag]

    def has_tag(self, tag):
        return tag in self.tags


class ContactRequest(models.Model):
    """A message submitted through one of the website contact forms."""

    class Type(models.TextChoices):
        QUOTE = 'quote', 'Demande de devis'
        ADVICE = 'advice', 'Demande de conseil'
        INFORMATION = 'information', "Demande d'information"
        QUICK_REGISTRATION = 'quick_registration', 'Inscription rapide'
        OTHER = 'other', 'Autre'

    class Status(models.TextChoices):
        PENDING = 'pending', 'En attente'
        IN_PROGRESS = 'in_progress', 'En cours'
        COMPLETED = 'completed', 'Terminé'
        CANCELLED = 'cancelled', 'Annulé'

    type = models.CharField(max_length=30, choices=Type.choices, default=Type.OTHER)
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField(max_length=180, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    company = models.CharField(max_length=150, blank=True)
    subject = models.CharField(max_length=255, blank=True)
    message = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    admin_notes = models.TextField(blank=True)
    formation = models.ForeignKey(
        Formation,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='contact_requests',
    )
    service = models.ForeignKey(
        Service,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='contact_requests',
    )
    prospect = models.ForeignKey(
        Prospect,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='contact_requests',
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'crm_contact_request'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.get_type_display()} - {self.first_name} {self.last_name}"


class SessionRegistration(models.Model):
    """A registration to a scheduled formation session."""

    class Status(models.TextChoices):
        PENDING = 'pending', 'En attente'
        CONFIRMED = 'confirmed', 'Confirmée'
        CANCELLED = 'cancelled', 'Annulée'
        ATTENDED = 'attended', 'Présent'
        NO_SHOW = 'no_show', 'Absent'

    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField(max_length=180, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    company = models.CharField(max_length=150, blank=True)
    position = models.CharField(max_length=100, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    notes = models.TextField(blank=True)
    special_requirements = models.TextField(blank=True)
    session = models.ForeignKey(
        Session,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='registrations',
    )
    prospect = models.ForeignKey(
        Prospect,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='session_registrations',
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'crm_session_registration'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.first_name} {self.last_name} - {self.session or 'sans session'}"


class NeedsAnalysisRequest(models.Model):
    """A needs-analysis questionnaire sent to a company or an individual."""

    class Type(models.TextChoices):
        COMPANY = 'company', 'Entreprise'
        INDIVIDUAL = 'individual', 'Particulier'

    class Status(models.TextChoices):
        PENDING = 'pending', 'En attente'
        SENT = 'sent', 'Envoyée'
        COMPLETED = 'completed', 'Complétée'
        EXPIRED = 'expired', 'Expirée'
        CANCELLED = 'cancelled', 'Annulée'

    type = models.CharField(max_length=20, choices=Type.choices)
    token = models.CharField(max_length=64, unique=True, default=generate_token)
    recipient_email = models.EmailField(max_length=180, blank=True)
    recipient_name = models.CharField(max_length=200, blank=True)
    company_name = models.CharField(max_length=200, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    admin_notes = models.TextField(blank=True)
    formation = models.ForeignKey(
        Formation,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='needs_analysis_requests',
    )
    prospect = models.ForeignKey(
        Prospect,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='needs_analysis_requests',
    )
    created_at = models.DateTimeField(default=timezone.now)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'crm_needs_analysis_request'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.get_type_display()} - {self.recipient_name or self.recipient_email}"


class ProspectNoteQuerySet(models.QuerySet):
    """Query layer for prospect notes used by the CRM screens and dashboard."""

    def for_prospect(self, prospect):
        return self.filter(prospect=prospect).select_related('created_by').order_by('-created_at')

    def of_type(self, note_type):
        return self.filter(type=note_type).order_by('-created_at')

    def with_status(self, status):
        return self.filter(status=status).order_by(
            F('scheduled_at').asc(nulls_last=True), '-created_at'
        )

    def pending(self):
        return self.with_status(ProspectNote.Status.PENDING)

    def overdue(self):
        """Pending notes whose scheduled time has passed."""
        return self.filter(
            status=ProspectNote.Status.PENDING,
            scheduled_at__lt=timezone.now(),
        ).order_by('scheduled_at')

    def created_by_user(self, user):
        return self.filter(created_by=user).order_by('-created_at')

    def important(self):
        return self.filter(is_important=True).order_by('-created_at')

    def in_date_range(self, start, end):
        return self.filter(created_at__gte=start, created_at__lte=end).order_by('-created_at')

    def scheduled_for_today(self):
        start = timezone.localtime().replace(hour=0, minute=0, second=0, microsecond=0)
        end = start + timedelta(days=1)
        return self.filter(scheduled_at__gte=start, scheduled_at__lt=end).order_by('scheduled_at')

    def recent_activity(self, days=7, limit=20):
        since = timezone.now() - timedelta(days=days)
        return (
            self.filter(created_at__gte=since)
            .select_related('prospect', 'created_by')
            .order_by('-created_at')[:limit]
        )

    def search(self, query):
        return self.filter(
            Q(title__icontains=query) | Q(content__icontains=query)
        ).order_by('-created_at')

    # Aggregates

    def count_by_type(self):
        rows = self.order_by().values('type').annotate(total=Count('id'))
        return {row['type']: row['total'] for row in rows}

    def count_by_status(self):
        rows = self.order_by().values('status').annotate(total=Count('id'))
        return {row['status']: row['total'] for row in rows}

    def prospect_statistics(self, prospect):
        notes = self.filter(prospect=prospect)
        return {
            'total': notes.count(),
            'pending': notes.filter(status=ProspectNote.Status.PENDING).count(),
            'completed': notes.filter(status=ProspectNote.Status.COMPLETED).count(),
            'by_type': notes.count_by_type(),
            'last_note_date': notes.aggregate(last=Max('created_at'))['last'],
        }

    def activity_statistics(self):
        week_ago = timezone.now() - timedelta(days=7)
        return {
            'total': self.count(),
            'pending_tasks': self.filter(status=ProspectNote.Status.PENDING).count(),
            'overdue': self.overdue().count(),
            'today': self.scheduled_for_today().count(),
            'recent': self.filter(created_at__gte=week_ago).count(),
        }

    def daily_activity(self, days=30):
        """Number of notes created per day over the last `days` days, keyed by ISO date."""
        since = timezone.now() - timedelta(days=days)
        rows = (
            self.filter(created_at__gte=since)
            .annotate(day=TruncDate('created_at'))
            .order_by('day')
            .values('day')
            .annotate(total=Count('id'))
        )
        return {row['day'].isoformat(): row['total'] for row in rows}


class ProspectNote(models.Model):
    """A follow-up note, call log or scheduled task attached to a prospect."""

    class Type(models.TextChoices):
        CALL = 'call', 'Appel téléphonique'
        EMAIL = 'email', 'Email'
        MEETING = 'meeting', 'Rendez-vous'
        DEMO = 'demo', 'Démonstration'
        PROPOSAL = 'proposal', 'Proposition commerciale'
        FOLLOW_UP = 'follow_up', 'Relance'
        GENERAL = 'general', 'Note générale'
        TASK = 'task', 'Tâche'
        REMINDER = 'reminder', 'Rappel'

    class Status(models.TextChoices):
        PENDING = 'pending', 'En attente'
        COMPLETED = 'completed', 'Terminé'
        CANCELLED = 'cancelled', 'Annulé'

    title = models.CharField(max_length=255)
    content = models.TextField()
    type = models.CharField(max_length=20, choices=Type.choices, default=Type.GENERAL)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.COMPLETED)
    prospect = models.ForeignKey(
        Prospect,
        on_delete=models.CASCADE,
        related_name='notes',
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='prospect_notes',
    )
    metadata = models.JSONField(default=dict, blank=True)
    is_important = models.BooleanField(default=False)
    is_private = models.BooleanField(default=False)
    scheduled_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ProspectNoteQuerySet.as_manager()

    class Meta:
        db_table = 'crm_prospect_note'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.get_type_display()}: {self.title}"

    @property
    def is_overdue(self):
        return (
            self.status == self.Status.PENDING
            and self.scheduled_at is not None
            and self.scheduled_at < timezone.now()
        )

    def mark_completed(self):
        self.status = self.Status.COMPLETED
        self.completed_at = timezone.now()
        self.save(update_fields=['status', 'completed_at', 'updated_at'])
