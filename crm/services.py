"""
Prospect management service.

Turns every inbound touchpoint (contact request, session registration,
needs analysis) into a single Prospect per email address, and folds
duplicate prospects sharing an email into one record.
"""

import logging
from datetime import timedelta
from typing import Dict, List, Optional

from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import transaction
from django.db.models import Count
from django.utils import timezone

from catalog.models import Formation, Service
from config.alerting import send_alert
from .models import (
    ContactRequest,
    NeedsAnalysisRequest,
    Prospect,
    ProspectNote,
    SessionRegistration,
)

logger = logging.getLogger(__name__)

PLACEHOLDER_FIRST_NAME = 'Prénom'
PLACEHOLDER_LAST_NAME = 'Nom'
MERGE_SEPARATOR = '\n\n--- Fusionné ---\n'
NOTE_SEPARATOR = '\n\n'
NOTE_DATE_FORMAT = '%d/%m/%Y'

CONTACT_TYPE_SOURCES = {
    ContactRequest.Type.QUOTE: Prospect.Source.QUOTE_REQUEST,
    ContactRequest.Type.ADVICE: Prospect.Source.CONSULTATION_REQUEST,
    ContactRequest.Type.INFORMATION: Prospect.Source.INFORMATION_REQUEST,
    ContactRequest.Type.QUICK_REGISTRATION: Prospect.Source.QUICK_REGISTRATION,
}

# Fields copied from a duplicate or a touchpoint only when the prospect has none
FILLABLE_FIELDS = ('phone', 'company', 'position')


class ProspectManagementService:
    """
    Unify touchpoints into prospects.

    Every public operation that writes runs in one transaction; database
    errors propagate to the caller unchanged.
    """

    def __init__(self, log: Optional[logging.Logger] = None):
        self.logger = log or logger

    # ------------------------------------------------------------------
    # Identity resolution
    # ------------------------------------------------------------------

    def find_or_create_prospect_from_email(
        self, email: str, first_name: Optional[str] = None, last_name: Optional[str] = None
    ) -> Prospect:
        """
        Return the prospect registered under `email`, creating a lead if none exists.

        The lookup is an exact string match. An existing prospect is returned
        untouched; names are only used when a new record is created.
        """
        try:
            validate_email(email)
        except ValidationError:
            raise ValidationError(f"Adresse email invalide : {email!r}", code='invalid_email')

        prospect = Prospect.objects.filter(email=email).order_by('created_at', 'pk').first()
        if prospect is not None:
            self.logger.debug(f"Found existing prospect id={prospect.pk} email={email}")
            return prospect

        prospect = Prospect.objects.create(
            email=email,
            first_name=first_name or PLACEHOLDER_FIRST_NAME,
            last_name=last_name or PLACEHOLDER_LAST_NAME,
            status=Prospect.Status.LEAD,
            priority=Prospect.Priority.MEDIUM,
            source=Prospect.Source.WEBSITE,
        )
        self.logger.info(f"Created prospect id={prospect.pk} email={email}")
        return prospect

    # ------------------------------------------------------------------
    # Touchpoint ingestion
    # ------------------------------------------------------------------

    def create_prospect_from_contact_request(self, contact_request: ContactRequest) -> Prospect:
        if not contact_request.email:
            raise ValidationError(
                "La demande de contact ne contient pas d'adresse email.",
                code='missing_email',
            )

        with transaction.atomic():
            prospect = self.find_or_create_prospect_from_email(
                contact_request.email,
                contact_request.first_name,
                contact_request.last_name,
            )
            if contact_request.prospect_id == prospect.pk:
                self.logger.info(
                    f"Contact request id={contact_request.pk} already linked to prospect id={prospect.pk}"
                )
                return prospect

            self._fill_empty_fields(prospect, phone=contact_request.phone, company=contact_request.company)
            self._append_note(
                prospect,
                contact_request.created_at,
                f"{contact_request.get_type_display()}: {contact_request.message}",
            )
            self._apply_source(
                prospect,
                CONTACT_TYPE_SOURCES.get(contact_request.type, Prospect.Source.CONTACT_FORM),
            )
            if contact_request.type == ContactRequest.Type.QUOTE:
                self._escalate(prospect, (Prospect.Status.LEAD,), Prospect.Status.PROSPECT)
            prospect.save()

            if contact_request.formation_id:
                self.update_prospect_interests(prospect, formation=contact_request.formation)
            if contact_request.service_id:
                self.update_prospect_interests(prospect, service=contact_request.service)

            contact_request.prospect = prospect
            contact_request.save(update_fields=['prospect'])

        self.logger.info(
            f"Linked contact request id={contact_request.pk} type={contact_request.type} "
            f"to prospect id={prospect.pk} status={prospect.status}"
        )
        return prospect

    def create_prospect_from_session_registration(self, registration: SessionRegistration) -> Prospect:
        if not registration.email:
            raise ValidationError(
                "L'inscription ne contient pas d'adresse email.",
                code='missing_email',
            )

        session = registration.session
        formation = session.formation if session is not None else None

        with transaction.atomic():
            prospect = self.find_or_create_prospect_from_email(
                registration.email,
                registration.first_name,
                registration.last_name,
            )
            if registration.prospect_id == prospect.pk:
                self.logger.info(
                    f"Session registration id={registration.pk} already linked to prospect id={prospect.pk}"
                )
                return prospect

            self._fill_empty_fields(
                prospect,
                phone=registration.phone,
                company=registration.company,
                position=registration.position,
            )
            note = (
                f"Inscription session: {session.name if session else 'N/A'}"
                f" - {formation.title if formation else 'N/A'}"
            )
            if registration.special_requirements:
                note += f"\nBesoins spécifiques: {registration.special_requirements}"
            self._append_note(prospect, registration.created_at, note)
            self._apply_source(prospect, Prospect.Source.SESSION_REGISTRATION)
            self._escalate(
                prospect,
                (Prospect.Status.LEAD, Prospect.Status.PROSPECT),
                Prospect.Status.QUALIFIED,
            )
            prospect.save()

            if formation is not None:
                self.update_prospect_interests(prospect, formation=formation)

            registration.prospect = prospect
            registration.save(update_fields=['prospect'])

        self.logger.info(
            f"Linked session registration id={registration.pk} to prospect id={prospect.pk} "
            f"status={prospect.status}"
        )
        return prospect

    def create_prospect_from_needs_analysis(self, analysis_request: NeedsAnalysisRequest) -> Prospect:
        if not analysis_request.recipient_email:
            raise ValidationError(
                "L'analyse de besoins ne contient pas d'adresse email destinataire.",
                code='missing_email',
            )

        first_name, last_name = self._split_name(analysis_request.recipient_name)

        with transaction.atomic():
            prospect = self.find_or_create_prospect_from_email(
                analysis_request.recipient_email,
                first_name,
                last_name,
            )
            if analysis_request.prospect_id == prospect.pk:
                self.logger.info(
                    f"Needs analysis id={analysis_request.pk} already linked to prospect id={prospect.pk}"
                )
                return prospect

            self._fill_empty_fields(prospect, company=analysis_request.company_name)
            note = f"Analyse de besoins ({analysis_request.get_type_display()}) envoyée"
            if analysis_request.admin_notes:
                note += f"\nNotes admin: {analysis_request.admin_notes}"
            self._append_note(prospect, analysis_request.created_at, note)
            self._apply_source(prospect, Prospect.Source.NEEDS_ANALYSIS)
            self._escalate(
                prospect,
                (Prospect.Status.LEAD, Prospect.Status.PROSPECT),
                Prospect.Status.QUALIFIED,
            )
            prospect.save()

            if analysis_request.formation_id:
                self.update_prospect_interests(prospect, formation=analysis_request.formation)

            analysis_request.prospect = prospect
            analysis_request.save(update_fields=['prospect'])

        self.logger.info(
            f"Linked needs analysis id={analysis_request.pk} to prospect id={prospect.pk} "
            f"status={prospect.status}"
        )
        return prospect

    def update_prospect_interests(
        self, prospect: Prospect, formation: Optional[Formation] = None, service: Optional[Service] = None
    ) -> Prospect:
        """
        Add a formation and/or service to the prospect's interests if absent.

        The membership check runs against a fresh load of the prospect row.
        """
        if prospect.pk is None:
            raise ValueError("Le prospect doit être enregistré avant de modifier ses intérêts.")
        if formation is not None and formation.pk is None:
            raise ValueError("La formation doit être enregistrée avant d'être ajoutée.")
        if service is not None and service.pk is None:
            raise ValueError("Le service doit être enregistré avant d'être ajouté.")

        current = Prospect.objects.get(pk=prospect.pk)

        if formation is not None and not current.interested_formations.filter(pk=formation.pk).exists():
            current.interested_formations.add(formation)
            self.logger.debug(f"Prospect id={current.pk} interested in formation id={formation.pk}")
        if service is not None and not current.interested_services.filter(pk=service.pk).exists():
            current.interested_services.add(service)
            self.logger.debug(f"Prospect id={current.pk} interested in service id={service.pk}")

        return current

    # ------------------------------------------------------------------
    # Duplicate merge
    # ------------------------------------------------------------------

    def find_duplicate_emails(self) -> List[str]:
        """Emails shared by more than one prospect, in alphabetical order."""
        return list(
            Prospect.objects.order_by()
            .values('email')
            .annotate(total=Count('id'))
            .filter(total__gt=1)
            .order_by('email')
            .values_list('email', flat=True)
        )

    def merge_duplicate_prospects(self) -> int:
        """
        Fold every group of prospects sharing an email into the oldest one.

        Each email group commits on its own. A group that fails is logged,
        alerted and skipped; groups already merged stay merged.

        Returns:
            Number of prospects merged away (deleted).
        """
        merged = 0
        emails = self.find_duplicate_emails()
        self.logger.info(f"Duplicate merge started: {len(emails)} email group(s)")

        for email in emails:
            try:
                with transaction.atomic():
                    prospects = list(Prospect.objects.filter(email=email).order_by('created_at', 'pk'))
                    target, duplicates = prospects[0], prospects[1:]
                    for duplicate in duplicates:
                        self.merge_prospects(target, duplicate)
            except Exception as e:
                self.logger.exception(f"Duplicate merge failed for email={email}")
                send_alert("warning", "Prospect merge failed", f"email={email}: {e}")
                continue
            merged += len(duplicates)
            self.logger.info(f"Merged {len(duplicates)} duplicate(s) into prospect id={target.pk}")

        self.logger.info(f"Duplicate merge finished: {merged} prospect(s) merged")
        return merged

    def merge_prospects(self, target: Prospect, source: Prospect) -> Prospect:
        """Move everything `source` owns onto `target`, then delete `source`."""
        if target.pk == source.pk:
            raise ValueError("Impossible de fusionner un prospect avec lui-même.")

        with transaction.atomic():
            for field in FILLABLE_FIELDS:
                if not getattr(target, field) and getattr(source, field):
                    setattr(target, field, getattr(source, field))

            if source.description:
                target.description = f"{target.description}{MERGE_SEPARATOR}{source.description}"

            SessionRegistration.objects.filter(prospect=source).update(prospect=target)
            ContactRequest.objects.filter(prospect=source).update(prospect=target)
            NeedsAnalysisRequest.objects.filter(prospect=source).update(prospect=target)
            ProspectNote.objects.filter(prospect=source).update(prospect=target)

            target.interested_formations.add(*source.interested_formations.all())
            target.interested_services.add(*source.interested_services.all())
            for tag in source.tags:
                target.add_tag(tag)

            if source.last_contact_date and (
                target.last_contact_date is None or source.last_contact_date > target.last_contact_date
            ):
                target.last_contact_date = source.last_contact_date

            if source.next_follow_up_date and (
                target.next_follow_up_date is None or source.next_follow_up_date < target.next_follow_up_date
            ):
                target.next_follow_up_date = source.next_follow_up_date

            target.status = Prospect.Status.highest(target.status, source.status).value

            target.save()
            source_pk = source.pk
            source.delete()

        self.logger.debug(f"Merged prospect id={source_pk} into id={target.pk}")
        return target

    # ------------------------------------------------------------------
    # Backfill and reporting
    # ------------------------------------------------------------------

    def link_unlinked_touchpoints(self, dry_run: bool = False) -> Dict[str, int]:
        """
        Run ingestion for every touchpoint that has no prospect yet.

        Returns a dict of counts per touchpoint kind plus an error count.
        In dry-run mode nothing is written; the counts are what would be linked.
        """
        sources = [
            ('contact_requests', ContactRequest.objects.filter(prospect__isnull=True).exclude(email=''),
             self.create_prospect_from_contact_request),
            ('session_registrations', SessionRegistration.objects.filter(prospect__isnull=True).exclude(email=''),
             self.create_prospect_from_session_registration),
            ('needs_analysis_requests',
             NeedsAnalysisRequest.objects.filter(prospect__isnull=True).exclude(recipient_email=''),
             self.create_prospect_from_needs_analysis),
        ]
        results = {'errors': 0}

        for key, queryset, ingest in sources:
            if dry_run:
                results[key] = queryset.count()
                continue
            linked = 0
            for touchpoint in queryset.order_by('created_at', 'pk').iterator():
                try:
                    ingest(touchpoint)
                except Exception as e:
                    results['errors'] += 1
                    self.logger.exception(f"Could not link {key} id={touchpoint.pk}")
                    send_alert("warning", "Touchpoint linking failed", f"{key} id={touchpoint.pk}: {e}")
                    continue
                linked += 1
            results[key] = linked

        self.logger.info(f"Touchpoint linking finished (dry_run={dry_run}): {results}")
        return results

    def get_prospect_summary(self) -> dict:
        since = timezone.now() - timedelta(hours=24)
        by_status = Prospect.objects.order_by().values('status').annotate(total=Count('id'))
        by_source = Prospect.objects.order_by().values('source').annotate(total=Count('id'))
        return {
            'total': Prospect.objects.count(),
            'by_status': {row['status']: row['total'] for row in by_status},
            'by_source': {row['source']: row['total'] for row in by_source},
            'linked': {
                'contact_requests': ContactRequest.objects.filter(prospect__isnull=False).count(),
                'session_registrations': SessionRegistration.objects.filter(prospect__isnull=False).count(),
                'needs_analysis_requests': NeedsAnalysisRequest.objects.filter(prospect__isnull=False).count(),
            },
            'unlinked': {
                'contact_requests': ContactRequest.objects.filter(prospect__isnull=True).count(),
                'session_registrations': SessionRegistration.objects.filter(prospect__isnull=True).count(),
                'needs_analysis_requests': NeedsAnalysisRequest.objects.filter(prospect__isnull=True).count(),
            },
            'created_last_24h': Prospect.objects.filter(created_at__gte=since).count(),
            'duplicate_emails': len(self.find_duplicate_emails()),
        }

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _fill_empty_fields(self, prospect: Prospect, **values) -> None:
        for field, value in values.items():
            if value and not getattr(prospect, field):
                setattr(prospect, field, value)

    def _append_note(self, prospect: Prospect, when, text: str) -> None:
        when = when or timezone.now()
        local = timezone.localtime(when) if timezone.is_aware(when) else when
        entry = f"[{local.strftime(NOTE_DATE_FORMAT)}] {text}"
        prospect.description = f"{prospect.description}{NOTE_SEPARATOR}{entry}" if prospect.description else entry
        prospect.last_contact_date = when

    def _apply_source(self, prospect: Prospect, source: str) -> None:
        if not prospect.source or prospect.source == Prospect.Source.WEBSITE:
            prospect.source = source

    def _escalate(self, prospect: Prospect, from_statuses: tuple, to_status: str) -> None:
        if prospect.status in from_statuses:
            self.logger.debug(f"Prospect id={prospect.pk} status {prospect.status} -> {to_status}")
            prospect.status = to_status

    @staticmethod
    def _split_name(full_name: Optional[str]) -> tuple[Optional[str], str]:
        parts = (full_name or '').strip().split(' ', 1)
        first_name = parts[0] or None
        last_name = parts[1].strip() if len(parts) > 1 and parts[1].strip() else PLACEHOLDER_LAST_NAME
        return first_name, last_name
