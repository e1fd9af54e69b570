"""
Tests for account views: staff lists and toggles, mentor space pages.
"""

import pytest
from django.core import mail
from django.urls import reverse

from accounts.authentication import SESSION_KEY
from accounts.models import Mentor


@pytest.mark.django_db
class TestStaffScreens:

    def test_mentor_list_requires_login(self, client):
        assert client.get(reverse('accounts:mentor-list')).status_code == 302

    def test_mentor_list_filters_inactive(self, staff_client, make_mentor):
        make_mentor()
        inactive = make_mentor(is_active=False)

        response = staff_client.get(reverse('accounts:mentor-list'), {'status': 'inactive'})

        assert response.status_code == 200
        assert list(response.context['mentors']) == [inactive]
        assert response.context['stats']['total'] == 2

    def test_toggle_mentor(self, staff_client, make_mentor):
        mentor = make_mentor()
        staff_client.post(reverse('accounts:mentor-toggle', args=[mentor.pk]), {'reason': 'fin de contrat'})
        assert not Mentor.objects.get(pk=mentor.pk).is_active
        staff_client.post(reverse('accounts:mentor-toggle', args=[mentor.pk]))
        assert Mentor.objects.get(pk=mentor.pk).is_active

    def test_teacher_list(self, staff_client):
        response = staff_client.get(reverse('accounts:teacher-list'))
        assert response.status_code == 200


@pytest.mark.django_db
class TestMentorSpace:

    def test_login_and_dashboard(self, client, make_mentor):
        mentor = make_mentor(password='bon-mot-de-passe')

        response = client.post(reverse('accounts:mentor-login'), {
            'email': mentor.email, 'password': 'bon-mot-de-passe',
        })

        assert response.status_code == 302
        assert client.session[SESSION_KEY] == mentor.pk
        dashboard = client.get(reverse('accounts:mentor-dashboard'))
        assert dashboard.status_code == 200
        assert dashboard.context['mentor'] == mentor

    def test_bad_credentials(self, client, make_mentor):
        mentor = make_mentor()
        response = client.post(reverse('accounts:mentor-login'), {'email': mentor.email, 'password': 'faux'})
        assert response.status_code == 400
        assert SESSION_KEY not in client.session

    def test_deactivated_account_message(self, client, make_mentor):
        mentor = make_mentor(password='bon-mot-de-passe', is_active=False)
        response = client.post(reverse('accounts:mentor-login'), {
            'email': mentor.email, 'password': 'bon-mot-de-passe',
        })
        assert response.status_code == 400
        assert 'désactivé' in response.content.decode()

    def test_dashboard_redirects_anonymous(self, client):
        response = client.get(reverse('accounts:mentor-dashboard'))
        assert response.status_code == 302
        assert response.url == reverse('accounts:mentor-login')

    def test_verify_email_link(self, client, make_mentor):
        mentor = make_mentor(email_verified=False)
        token = mentor.generate_email_verification_token()
        mentor.save()

        assert client.get(reverse('accounts:mentor-verify-email', args=[token])).status_code == 200
        assert Mentor.objects.get(pk=mentor.pk).email_verified
        assert client.get(reverse('accounts:mentor-verify-email', args=['inconnu'])).status_code == 404

    def test_password_reset_flow(self, client, make_mentor):
        mentor = make_mentor()

        response = client.post(reverse('accounts:mentor-password-reset'), {'email': mentor.email})
        assert response.status_code == 302
        assert len(mail.outbox) == 1

        token = Mentor.objects.get(pk=mentor.pk).password_reset_token
        url = reverse('accounts:mentor-password-reset-confirm', args=[token])
        mismatch = client.post(url, {'new_password': 'nouveau-mdp-1', 'confirm_password': 'autre'})
        assert mismatch.status_code == 400

        response = client.post(url, {'new_password': 'nouveau-mdp-1', 'confirm_password': 'nouveau-mdp-1'})
        assert response.status_code == 302
        assert Mentor.objects.get(pk=mentor.pk).check_password('nouveau-mdp-1')

    def test_reset_confirm_short_password(self, client, make_mentor):
        mentor = make_mentor()
        token = mentor.generate_password_reset_token()
        mentor.save()
        response = client.post(
            reverse('accounts:mentor-password-reset-confirm', args=[token]),
            {'new_password': 'court', 'confirm_password': 'court'},
        )
        assert response.status_code == 400
        assert '8 caractères' in response.content.decode()
