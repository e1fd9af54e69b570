"""
Forms for the CRM app.
"""

from django import forms
from .models import Prospect, ProspectNote

INPUT_CLASSES = 'w-full px-4 py-2 border border-gray-300 rounded-lg focus:ring-2 focus:ring-primary-500 focus:border-transparent'


class ProspectNoteForm(forms.ModelForm):
    """Form for logging a call, meeting or task against a prospect."""

    class Meta:
        model = ProspectNote
        fields = ['title', 'content', 'type', 'status', 'scheduled_at', 'is_important', 'is_private']
        widgets = {
            'title': forms.TextInput(attrs={
                'class': INPUT_CLASSES,
                'placeholder': 'ex. Appel de qualification',
            }),
            'content': forms.Textarea(attrs={'class': INPUT_CLASSES, 'rows': 4}),
            'type': forms.Select(attrs={'class': INPUT_CLASSES}),
            'status': forms.Select(attrs={'class': INPUT_CLASSES}),
            'scheduled_at': forms.DateTimeInput(attrs={'type': 'datetime-local', 'class': INPUT_CLASSES}),
        }

    def clean(self):
        cleaned_data = super().clean()
        if cleaned_data.get('status') == ProspectNote.Status.PENDING and not cleaned_data.get('scheduled_at'):
            self.add_error('scheduled_at', 'Une tâche en attente doit avoir une date prévue.')
        return cleaned_data


class ProspectFilterForm(forms.Form):
    q = forms.CharField(required=False, widget=forms.TextInput(attrs={
        'class': INPUT_CLASSES,
        'placeholder': 'Nom, email, entreprise…',
    }))
    status = forms.ChoiceField(
        required=False,
        choices=[('', 'Tous les statuts')] + list(Prospect.Status.choices),
        widget=forms.Select(attrs={'class': INPUT_CLASSES}),
    )
