"""
Tests for staff login, the dashboard and the health endpoints.
"""

import pytest
from django.urls import reverse


@pytest.mark.django_db
class TestAuthentication:

    def test_home_redirects_anonymous_to_login(self, client):
        response = client.get(reverse('core:home'))
        assert response.status_code == 302
        assert response.url == reverse('core:login')

    def test_home_redirects_staff_to_dashboard(self, staff_client):
        response = staff_client.get(reverse('core:home'))
        assert response.url == reverse('core:dashboard')

    def test_login(self, client, staff_user):
        response = client.post(reverse('core:login'), {
            'username': 'commercial',
            'password': 'pass-commercial-1',
        })
        assert response.status_code == 302
        assert response.url == reverse('core:dashboard')

    def test_logout(self, staff_client):
        response = staff_client.post(reverse('core:logout'))
        assert response.status_code == 302
        assert response.url == reverse('core:login')


@pytest.mark.django_db
class TestDashboard:

    def test_requires_login(self, client):
        response = client.get(reverse('core:dashboard'))
        assert response.status_code == 302
        assert reverse('core:login') in response.url

    def test_context(self, staff_client, make_prospect, make_mentor):
        make_prospect()
        make_prospect()
        make_mentor()

        response = staff_client.get(reverse('core:dashboard'))

        assert response.status_code == 200
        assert response.context['prospect_summary']['total'] == 2
        assert response.context['prospect_summary']['duplicate_emails'] == 1
        assert response.context['mentor_stats']['total'] == 1
        assert response.context['teacher_stats']['total'] == 0


@pytest.mark.django_db
class TestHealth:

    def test_liveness(self, client):
        response = client.get(reverse('health'))
        assert response.status_code == 200
        assert response.json() == {'status': 'ok'}

    def test_readiness(self, client, make_prospect):
        make_prospect()
        response = client.get(reverse('health-ready'))
        body = response.json()
        assert response.status_code == 200
        assert body['status'] == 'ready'
        assert body['checks']['database'] == 'ok'
        assert body['checks']['prospect_count'] == 1

    def test_readiness_degraded_without_sender(self, client, settings):
        settings.DEFAULT_FROM_EMAIL = ''
        response = client.get(reverse('health-ready'))
        assert response.status_code == 503
        assert response.json()['status'] == 'degraded'
