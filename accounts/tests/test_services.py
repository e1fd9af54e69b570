"""
Tests for MentorService, TeacherService and the account email service.
"""

import csv
import io
from datetime import timedelta
from smtplib import SMTPException
from unittest.mock import MagicMock, patch

import pytest
from django.core import mail
from django.core.exceptions import ValidationError
from django.utils import timezone

from accounts.email_service import AccountEmailService
from accounts.models import Mentor, Teacher
from accounts.services import MentorService, TeacherService, generate_password
from alternance.models import Student


# ==========================================================================
# Passwords and emails
# ==========================================================================

class TestGeneratePassword:

    @pytest.mark.parametrize('requested,expected', [(12, 12), (3, 8), (500, 128)])
    def test_length_clamped(self, requested, expected):
        assert len(generate_password(requested)) == expected

    def test_random(self):
        assert generate_password() != generate_password()


@pytest.mark.django_db
class TestAccountEmailService:

    def test_sends_rendered_template(self, make_mentor):
        mentor = make_mentor()
        sent = AccountEmailService().send(
            'mentor_new_password', 'Identifiants', mentor.email,
            {'mentor': mentor, 'new_password': 'a&b<c', 'login_url': 'http://testserver/x/'},
        )
        assert sent is True
        assert mail.outbox[0].from_email == 'noreply@eprofos.test'
        assert 'a&b<c' in mail.outbox[0].body

    @pytest.mark.parametrize('error', [SMTPException('refused'), OSError('no route')])
    def test_transport_failure_returns_false(self, make_mentor, error):
        mentor = make_mentor()
        with patch('accounts.email_service.send_mail', side_effect=error):
            sent = AccountEmailService().send(
                'mentor_new_password', 'Identifiants', mentor.email,
                {'mentor': mentor, 'new_password': 'x', 'login_url': ''},
            )
        assert sent is False

    def test_missing_recipient(self):
        assert AccountEmailService().send('mentor_welcome', 'x', '', {}) is False

    def test_build_url(self):
        url = AccountEmailService().build_url('accounts:mentor-verify-email', 'abc')
        assert url == 'http://testserver/accounts/mentor/verify/abc/'


# ==========================================================================
# MentorService
# ==========================================================================

@pytest.mark.django_db
class TestValidateMentorData:

    def test_valid(self, mentor_data):
        assert MentorService().validate_mentor_data(mentor_data) == {}

    def test_required_fields(self):
        errors = MentorService().validate_mentor_data({})
        assert set(errors) == {
            'email', 'company_siret', 'first_name', 'last_name',
            'company_name', 'education_level', 'expertise_domains',
        }

    def test_bad_values(self, mentor_data):
        errors = MentorService().validate_mentor_data({
            **mentor_data,
            'email': 'pas-un-email',
            'education_level': 'cap',
            'expertise_domains': ['astrologie'],
            'experience_years': -2,
        })
        assert set(errors) == {'email', 'education_level', 'expertise_domains', 'experience_years'}

    def test_update_excludes_self_from_uniqueness(self, mentor_data, make_mentor):
        mentor = make_mentor(email=mentor_data['email'], company_siret=mentor_data['company_siret'])
        service = MentorService()
        assert service.validate_mentor_data(mentor_data, mentor=mentor) == {}
        assert set(service.validate_mentor_data(mentor_data)) == {'email', 'company_siret'}


@pytest.mark.django_db
class TestMentorMatching:

    def _student(self, mentor, n, active=True):
        return Student.objects.create(
            first_name='Léa', last_name=f'Apprentie{n}', email=f'lea{n}@example.com',
            mentor=mentor, is_active=active,
        )

    def test_filters_unverified_inactive_and_full(self, make_mentor):
        available = make_mentor(expertise_domains=['informatique'])
        make_mentor(email_verified=False)
        make_mentor(is_active=False)
        full = make_mentor()
        for n in range(3):
            self._student(full, n)

        mentors = MentorService().find_available_mentors_for_matching()

        assert mentors == [available]

    def test_inactive_apprentices_do_not_count(self, make_mentor):
        mentor = make_mentor()
        for n in range(3):
            self._student(mentor, n, active=False)
        assert MentorService().find_available_mentors_for_matching() == [mentor]
        assert MentorService().can_supervise_new_apprentice(mentor)

    def test_expertise_overlap_and_experience(self, make_mentor):
        it_senior = make_mentor(expertise_domains=['informatique', 'management'], experience_years=15)
        make_mentor(expertise_domains=['informatique'], experience_years=2)
        make_mentor(expertise_domains=['finance'], experience_years=20)

        mentors = MentorService().find_available_mentors_for_matching({
            'expertise_domains': ['management', 'rh'],
            'min_experience': 10,
        })

        assert mentors == [it_senior]

    def test_can_supervise_respects_capacity(self, make_mentor):
        mentor = make_mentor()
        for n in range(2):
            self._student(mentor, n)
        service = MentorService()
        assert service.can_supervise_new_apprentice(mentor)
        self._student(mentor, 3)
        assert not service.can_supervise_new_apprentice(mentor)

    def test_unverified_cannot_supervise(self, make_mentor):
        assert not MentorService().can_supervise_new_apprentice(make_mentor(email_verified=False))


@pytest.mark.django_db
class TestMentorReporting:

    def test_dashboard_statistics(self, make_mentor):
        make_mentor(expertise_domains=['informatique', 'rh'])
        make_mentor(expertise_domains=['rh'], email_verified=False)
        make_mentor(is_active=False)

        stats = MentorService().get_dashboard_statistics()

        assert stats['total'] == 3
        assert stats['active'] == 2
        assert stats['unverified'] == 1
        assert stats['by_expertise_domain'] == {'informatique': 1, 'rh': 2}
        assert stats['by_education_level'] == {'bac+3': 3}

    def test_company_statistics(self, make_mentor):
        make_mentor(company_name='ACME', experience_years=4)
        make_mentor(company_name='ACME', experience_years=6)
        make_mentor(company_name='Globex')

        stats = MentorService().get_company_statistics()

        acme = [row for row in stats if row['company_name'] == 'ACME']
        assert len(stats) == 3
        assert sum(row['mentor_count'] for row in acme) == 2

    def test_cleanup_expired_tokens(self, make_mentor):
        expired = make_mentor()
        expired.generate_password_reset_token()
        expired.password_reset_token_expires_at = timezone.now() - timedelta(minutes=1)
        expired.save()
        valid = make_mentor()
        valid.generate_password_reset_token()
        valid.save()

        assert MentorService().cleanup_expired_tokens() == 1

        expired.refresh_from_db()
        valid.refresh_from_db()
        assert expired.password_reset_token == ''
        assert valid.password_reset_token != ''

    def test_export_to_csv(self, make_mentor):
        make_mentor(first_name='Zoé', expertise_domains=['rh'])

        rows = list(csv.reader(io.StringIO(MentorService().export_to_csv())))

        assert rows[0][:3] == ['ID', 'Prénom', 'Nom']
        assert rows[1][1] == 'Zoé'
        assert rows[1][8] == 'Ressources Humaines'
        assert rows[1][11] == 'Oui'

    def test_admin_notification_without_address(self, make_mentor, settings):
        settings.ADMIN_NOTIFICATION_EMAIL = ''
        assert MentorService().send_admin_notification_for_new_mentor(make_mentor()) is False
        assert len(mail.outbox) == 0

    def test_password_reset_email_needs_valid_token(self, make_mentor):
        emails = MagicMock()
        assert MentorService(email_service=emails).send_password_reset_email(make_mentor()) is False
        emails.send.assert_not_called()


# ==========================================================================
# TeacherService
# ==========================================================================

@pytest.fixture
def teacher_service():
    return TeacherService()


@pytest.fixture
def teacher(teacher_service):
    return teacher_service.create_teacher({
        'email': 'prof@eprofos.fr',
        'first_name': 'Anne',
        'last_name': 'Leroy',
        'specialty': 'Comptabilité',
        'password': 'mot-de-passe-1',
    }, send_emails=False)


@pytest.mark.django_db
class TestTeacherService:

    def test_create_sends_welcome_and_verification(self, teacher_service):
        teacher = teacher_service.create_teacher({
            'email': 'new@eprofos.fr', 'first_name': 'Marc', 'last_name': 'Petit',
        })
        assert teacher.email_verification_token
        assert len(mail.outbox) == 2
        welcome = next(m for m in mail.outbox if 'Bienvenue' in m.subject)
        assert 'Mot de passe' in welcome.body

    def test_create_validation(self, teacher_service, teacher):
        with pytest.raises(ValidationError) as excinfo:
            teacher_service.create_teacher({'email': teacher.email, 'first_name': '', 'last_name': 'X'})
        assert set(excinfo.value.message_dict) == {'email', 'first_name'}

    def test_update(self, teacher_service, teacher):
        teacher_service.update_teacher(teacher, {'specialty': 'Paie', 'password': 'autre-mdp-12'})
        teacher.refresh_from_db()
        assert teacher.specialty == 'Paie'
        assert teacher.check_password('autre-mdp-12')

    def test_activation(self, teacher_service, teacher):
        teacher_service.deactivate_teacher(teacher)
        assert not Teacher.objects.get(pk=teacher.pk).is_active
        teacher_service.activate_teacher(teacher)
        assert Teacher.objects.get(pk=teacher.pk).is_active

    def test_verify_email(self, teacher_service, teacher):
        assert teacher_service.verify_email(teacher.email_verification_token).pk == teacher.pk
        assert Teacher.objects.get(pk=teacher.pk).email_verified

    def test_password_reset(self, teacher_service, teacher):
        assert teacher_service.send_password_reset_email(teacher)
        teacher.refresh_from_db()
        assert teacher.is_password_reset_token_valid()

        assert teacher_service.reset_password(teacher.password_reset_token, 'nouveau-mdp-1')
        assert Teacher.objects.get(pk=teacher.pk).check_password('nouveau-mdp-1')
        assert not teacher_service.reset_password('inconnu', 'nouveau-mdp-1')

    def test_reset_password_too_short(self, teacher_service):
        with pytest.raises(ValidationError):
            teacher_service.reset_password('token', 'court')

    def test_lookups_and_statistics(self, teacher_service, teacher):
        assert teacher_service.email_exists('prof@eprofos.fr')
        assert teacher_service.find_by_email('prof@eprofos.fr') == teacher
        assert list(teacher_service.find_teachers_by_criteria({'search': 'compta'})) == [teacher]
        assert list(teacher_service.find_teachers_by_criteria({'is_active': False})) == []
        assert teacher_service.get_statistics() == {'total': 1, 'active': 1, 'verified': 0}

    def test_temporary_password_length(self, teacher_service):
        assert len(teacher_service.generate_temporary_password()) == 12


@pytest.mark.django_db
def test_cleanup_mentor_tokens_command(make_mentor):
    from io import StringIO
    from django.core.management import call_command

    mentor = make_mentor()
    mentor.generate_password_reset_token()
    mentor.password_reset_token_expires_at = timezone.now() - timedelta(hours=2)
    mentor.save()
    out = StringIO()

    call_command('cleanup_mentor_tokens', stdout=out)

    assert 'Cleared 1 expired token(s).' in out.getvalue()
    assert Mentor.objects.get(pk=mentor.pk).password_reset_token == ''
