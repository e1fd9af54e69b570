"""
Document type management.

Operations return result dicts ({'success': bool, 'error' | 'message': str,
'document_type': obj}) that the admin screens display directly.
"""

import logging
import re
from typing import List

from django.db.models import Count, Max, Q
from django.utils.text import slugify

from .models import Document, DocumentType, default_allowed_statuses, default_configuration

logger = logging.getLogger(__name__)

CODE_PATTERN = re.compile(r'^[a-z0-9_]+$')

EDITABLE_FIELDS = (
    'code', 'name', 'description', 'icon', 'color', 'requires_approval',
    'allow_multiple_published', 'has_expiration', 'generates_pdf',
    'allowed_statuses', 'required_metadata', 'configuration', 'is_active', 'sort_order',
)


class DocumentTypeService:
    """Create, update, validate and report on document types."""

    def create_document_type(self, data: dict) -> dict:
        name = (data.get('name') or '').strip()
        code = (data.get('code') or '').strip()

        if code and DocumentType.objects.filter(code=code).exists():
            logger.info(f"Document type creation rejected: duplicate code={code}")
            return {'success': False, 'error': 'Un type de document avec ce code existe déjà.'}

        document_type = DocumentType(
            configuration=default_configuration(),
            allowed_statuses=default_allowed_statuses(),
            sort_order=self.get_next_sort_order(),
        )
        self._apply(document_type, data)
        document_type.name = name
        document_type.code = code or self._generate_unique_code(name)

        errors = self.validate_document_type(document_type)
        if errors:
            return {'success': False, 'error': ' '.join(errors), 'errors': errors}

        document_type.save()
        logger.info(f"Created document type id={document_type.pk} code={document_type.code}")
        return {
            'success': True,
            'message': 'Le type de document a été créé avec succès.',
            'document_type': document_type,
        }

    def update_document_type(self, document_type: DocumentType, data: dict) -> dict:
        new_code = (data.get('code') or document_type.code).strip()
        if new_code != document_type.code and DocumentType.objects.filter(code=new_code).exists():
            return {'success': False, 'error': 'Un type de document avec ce code existe déjà.'}

        self._apply(document_type, data)
        document_type.code = new_code

        errors = self.validate_document_type(document_type)
        if errors:
            # Rejected changes must not linger on the caller's instance
            document_type.refresh_from_db()
            return {'success': False, 'error': ' '.join(errors), 'errors': errors}

        document_type.save()
        logger.info(f"Updated document type id={document_type.pk}")
        return {
            'success': True,
            'message': 'Le type de document a été modifié avec succès.',
            'document_type': document_type,
        }

    def delete_document_type(self, document_type: DocumentType) -> dict:
        document_count = document_type.documents.count()
        if document_count:
            return {
                'success': False,
                'error': (
                    f'Impossible de supprimer ce type : {document_count} document(s) y sont rattachés.'
                ),
            }
        pk = document_type.pk
        document_type.delete()
        logger.info(f"Deleted document type id={pk}")
        return {'success': True, 'message': 'Le type de document a été supprimé avec succès.'}

    def get_document_types_with_stats(self) -> List[dict]:
        document_types = DocumentType.objects.annotate(
            document_count=Count('documents'),
            published_count=Count('documents', filter=Q(documents__status=Document.Status.PUBLISHED)),
        ).order_by('sort_order', 'name')
        return [
            {
                'document_type': document_type,
                'document_count': document_type.document_count,
                'published_count': document_type.published_count,
            }
            for document_type in document_types
        ]

    def validate_document_type(self, document_type: DocumentType) -> List[str]:
        """Return a list of error messages (empty when valid)."""
        errors = []
        if not (document_type.name or '').strip():
            errors.append('Le nom est obligatoire.')
        if not document_type.code:
            errors.append('Le code est obligatoire.')
        elif not CODE_PATTERN.match(document_type.code):
            errors.append(
                'Le code ne peut contenir que des lettres minuscules, des chiffres et des underscores.'
            )

        if document_type.pk and not document_type.allow_multiple_published:
            published = document_type.documents.filter(status=Document.Status.PUBLISHED).count()
            if published > 1:
                errors.append(
                    f'Ce type n\'autorise qu\'un seul document publié, mais {published} le sont actuellement.'
                )
        return errors

    def toggle_active_status(self, document_type: DocumentType) -> dict:
        document_type.is_active = not document_type.is_active
        document_type.save(update_fields=['is_active', 'updated_at'])
        state = 'activé' if document_type.is_active else 'désactivé'
        logger.info(f"Document type id={document_type.pk} {state}")
        return {
            'success': True,
            'message': f'Le type de document a été {state} avec succès.',
            'document_type': document_type,
        }

    def get_next_sort_order(self) -> int:
        current = DocumentType.objects.aggregate(highest=Max('sort_order'))['highest']
        return (current or 0) + 1

    def _apply(self, document_type: DocumentType, data: dict) -> None:
        for field in EDITABLE_FIELDS:
            if field in data and field != 'code':
                setattr(document_type, field, data[field])

    def _generate_unique_code(self, name: str) -> str:
        base = slugify(name).replace('-', '_') or 'document_type'
        code = base
        suffix = 1
        while DocumentType.objects.filter(code=code).exists():
            code = f'{base}_{suffix}'
            suffix += 1
        return code
