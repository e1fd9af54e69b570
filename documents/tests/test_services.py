"""
Tests for DocumentTypeService.
"""

import pytest
from django.urls import reverse

from documents.models import Document, DocumentType
from documents.services import DocumentTypeService


@pytest.fixture
def service():
    return DocumentTypeService()


@pytest.fixture
def cgv(service):
    return service.create_document_type({'name': 'Conditions générales de vente', 'code': 'cgv'})['document_type']


@pytest.mark.django_db
class TestCreate:

    def test_defaults_applied(self, service):
        result = service.create_document_type({'name': 'Règlement intérieur', 'code': 'reglement'})

        assert result['success']
        assert result['message'] == 'Le type de document a été créé avec succès.'
        document_type = result['document_type']
        assert document_type.pk is not None
        assert document_type.allowed_statuses == ['draft', 'under_review', 'published', 'archived']
        assert document_type.configuration['auto_version'] is True
        assert document_type.sort_order == 1

    def test_sort_order_increments(self, service, cgv):
        second = service.create_document_type({'name': 'Livret', 'code': 'livret'})['document_type']
        assert second.sort_order == cgv.sort_order + 1

    def test_code_generated_from_name(self, service, cgv):
        first = service.create_document_type({'name': 'Politique de confidentialité'})['document_type']
        second = service.create_document_type({'name': 'Politique de confidentialité'})['document_type']
        assert first.code == 'politique_de_confidentialite'
        assert second.code == 'politique_de_confidentialite_1'

    def test_duplicate_code_rejected(self, service, cgv):
        result = service.create_document_type({'name': 'Autre', 'code': 'cgv'})
        assert not result['success']
        assert result['error'] == 'Un type de document avec ce code existe déjà.'

    def test_invalid_code_rejected(self, service):
        result = service.create_document_type({'name': 'X', 'code': 'Mauvais-Code'})
        assert not result['success']
        assert DocumentType.objects.count() == 0

    def test_missing_name_rejected(self, service):
        result = service.create_document_type({'code': 'sans_nom'})
        assert not result['success']
        assert 'Le nom est obligatoire.' in result['errors']


@pytest.mark.django_db
class TestUpdateDelete:

    def test_update(self, service, cgv):
        result = service.update_document_type(cgv, {'name': 'CGV 2025', 'requires_approval': True})
        assert result['success']
        cgv.refresh_from_db()
        assert cgv.name == 'CGV 2025'
        assert cgv.requires_approval

    def test_update_code_collision(self, service, cgv):
        other = service.create_document_type({'name': 'Livret', 'code': 'livret'})['document_type']
        result = service.update_document_type(other, {'code': 'cgv'})
        assert not result['success']

    def test_single_published_constraint(self, service, cgv):
        Document.objects.create(title='v1', document_type=cgv, status=Document.Status.PUBLISHED)
        Document.objects.create(title='v2', document_type=cgv, status=Document.Status.PUBLISHED)

        result = service.update_document_type(cgv, {'allow_multiple_published': False})

        assert not result['success']
        assert '2 le sont actuellement' in result['error']

    def test_rejected_update_leaves_instance_unchanged(self, service, cgv):
        result = service.update_document_type(cgv, {'name': '  ', 'requires_approval': True})

        assert not result['success']
        assert 'Le nom est obligatoire.' in result['errors']
        assert cgv.name == 'Conditions générales de vente'
        assert cgv.requires_approval is False

    def test_delete_refused_when_documents_attached(self, service, cgv):
        Document.objects.create(title='v1', document_type=cgv)
        result = service.delete_document_type(cgv)
        assert not result['success']
        assert '1 document(s)' in result['error']
        assert DocumentType.objects.filter(pk=cgv.pk).exists()

    def test_delete(self, service, cgv):
        assert service.delete_document_type(cgv)['success']
        assert not DocumentType.objects.exists()

    def test_toggle(self, service, cgv):
        result = service.toggle_active_status(cgv)
        assert result['message'] == 'Le type de document a été désactivé avec succès.'
        assert not DocumentType.objects.get(pk=cgv.pk).is_active
        result = service.toggle_active_status(cgv)
        assert result['message'] == 'Le type de document a été activé avec succès.'


@pytest.mark.django_db
def test_types_with_stats(service, cgv):
    Document.objects.create(title='v1', document_type=cgv, status=Document.Status.PUBLISHED)
    Document.objects.create(title='v2', document_type=cgv)
    service.create_document_type({'name': 'Livret', 'code': 'livret'})

    rows = service.get_document_types_with_stats()

    assert [row['document_type'].code for row in rows] == ['cgv', 'livret']
    assert rows[0]['document_count'] == 2
    assert rows[0]['published_count'] == 1
    assert rows[1]['document_count'] == 0


@pytest.mark.django_db
class TestViews:

    def test_list(self, staff_client, cgv):
        response = staff_client.get(reverse('documents:type-list'))
        assert response.status_code == 200
        assert len(response.context['rows']) == 1

    def test_delete_view_keeps_protected_type(self, staff_client, cgv):
        Document.objects.create(title='v1', document_type=cgv)
        response = staff_client.post(reverse('documents:type-delete', args=[cgv.pk]))
        assert response.status_code == 302
        assert DocumentType.objects.filter(pk=cgv.pk).exists()

    def test_toggle_view(self, staff_client, cgv):
        staff_client.post(reverse('documents:type-toggle', args=[cgv.pk]))
        assert not DocumentType.objects.get(pk=cgv.pk).is_active
