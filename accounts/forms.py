"""
Forms for mentor and teacher account pages.
"""

from django import forms

INPUT_CLASSES = 'w-full px-4 py-2 border border-gray-300 rounded-lg focus:ring-2 focus:ring-primary-500 focus:border-transparent'


class MentorLoginForm(forms.Form):
    email = forms.EmailField(widget=forms.EmailInput(attrs={
        'class': INPUT_CLASSES,
        'placeholder': 'vous@entreprise.fr',
    }))
    password = forms.CharField(widget=forms.PasswordInput(attrs={'class': INPUT_CLASSES}))


class PasswordResetRequestForm(forms.Form):
    email = forms.EmailField(widget=forms.EmailInput(attrs={'class': INPUT_CLASSES}))


class SetPasswordForm(forms.Form):
    """New password + confirmation. Length rules are enforced by the services."""

    new_password = forms.CharField(
        label='Nouveau mot de passe',
        widget=forms.PasswordInput(attrs={'class': INPUT_CLASSES}),
    )
    confirm_password = forms.CharField(
        label='Confirmation',
        widget=forms.PasswordInput(attrs={'class': INPUT_CLASSES}),
    )

    def clean(self):
        cleaned_data = super().clean()
        if cleaned_data.get('new_password') != cleaned_data.get('confirm_password'):
            self.add_error('confirm_password', 'Les mots de passe ne correspondent pas.')
        return cleaned_data
