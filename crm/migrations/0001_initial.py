import crm.models
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('catalog', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Prospect',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('first_name', models.CharField(max_length=100)),
                ('last_name', models.CharField(max_length=100)),
                ('email', models.EmailField(db_index=True, max_length=180)),
                ('phone', models.CharField(blank=True, max_length=20)),
                ('company', models.CharField(blank=True, max_length=150)),
                ('position', models.CharField(blank=True, max_length=100)),
                ('status', models.CharField(choices=[('lead', 'Lead'), ('prospect', 'Prospect'), ('qualified', 'Qualifié'), ('negotiation', 'Négociation'), ('customer', 'Client'), ('lost', 'Perdu')], default='lead', max_length=20)),
                ('priority', models.CharField(choices=[('low', 'Faible'), ('medium', 'Moyenne'), ('high', 'Élevée'), ('urgent', 'Urgente')], default='medium', max_length=20)),
                ('source', models.CharField(blank=True, choices=[('website', 'Site web'), ('referral', 'Recommandation'), ('social_media', 'Réseaux sociaux'), ('email_campaign', 'Campagne email'), ('phone_call', 'Appel téléphonique'), ('event', 'Événement'), ('advertising', 'Publicité'), ('quote_request', 'Demande de devis'), ('consultation_request', 'Demande de conseil'), ('information_request', "Demande d'information"), ('quick_registration', 'Inscription rapide'), ('contact_form', 'Formulaire de contact'), ('session_registration', 'Inscription session'), ('needs_analysis', 'Analyse de besoins'), ('other', 'Autre')], default='website', max_length=30)),
                ('description', models.TextField(blank=True, help_text='Timestamped touchpoint log')),
                ('estimated_budget', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('expected_closure_date', models.DateField(blank=True, null=True)),
                ('last_contact_date', models.DateTimeField(blank=True, null=True)),
                ('next_follow_up_date', models.DateTimeField(blank=True, null=True)),
                ('custom_fields', models.JSONField(blank=True, default=dict)),
                ('tags', models.JSONField(blank=True, default=list)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('assigned_to', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_prospects', to=settings.AUTH_USER_MODEL)),
                ('interested_formations', models.ManyToManyField(blank=True, related_name='interested_prospects', to='catalog.formation')),
                ('interested_services', models.ManyToManyField(blank=True, related_name='interested_prospects', to='catalog.service')),
            ],
            options={
                'db_table': 'crm_prospect',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status'], name='crm_prospect_status_idx'),
                    models.Index(fields=['next_follow_up_date'], name='crm_prospect_followup_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ContactRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('quote', 'Demande de devis'), ('advice', 'Demande de conseil'), ('information', "Demande d'information"), ('quick_registration', 'Inscription rapide'), ('other', 'Autre')], default='other', max_length=30)),
                ('first_name', models.CharField(max_length=100)),
                ('last_name', models.CharField(max_length=100)),
                ('email', models.EmailField(blank=True, max_length=180)),
                ('phone', models.CharField(blank=True, max_length=20)),
                ('company', models.CharField(blank=True, max_length=150)),
                ('subject', models.CharField(blank=True, max_length=255)),
                ('message', models.TextField(blank=True)),
                ('status', models.CharField(choices=[('pending', 'En attente'), ('in_progress', 'En cours'), ('completed', 'Terminé'), ('cancelled', 'Annulé')], default='pending', max_length=20)),
                ('admin_notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('formation', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='contact_requests', to='catalog.formation')),
                ('service', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='contact_requests', to='catalog.service')),
                ('prospect', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='contact_requests', to='crm.prospect')),
            ],
            options={
                'db_table': 'crm_contact_request',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='SessionRegistration',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('first_name', models.CharField(max_length=100)),
                ('last_name', models.CharField(max_length=100)),
                ('email', models.EmailField(blank=True, max_length=180)),
                ('phone', models.CharField(blank=True, max_length=20)),
                ('company', models.CharField(blank=True, max_length=150)),
                ('position', models.CharField(blank=True, max_length=100)),
                ('status', models.CharField(choices=[('pending', 'En attente'), ('confirmed', 'Confirmée'), ('cancelled', 'Annulée'), ('attended', 'Présent'), ('no_show', 'Absent')], default='pending', max_length=20)),
                ('notes', models.TextField(blank=True)),
                ('special_requirements', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('session', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='registrations', to='catalog.session')),
                ('prospect', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='session_registrations', to='crm.prospect')),
            ],
            options={
                'db_table': 'crm_session_registration',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='NeedsAnalysisRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('company', 'Entreprise'), ('individual', 'Particulier')], max_length=20)),
                ('token', models.CharField(default=crm.models.generate_token, max_length=64, unique=True)),
                ('recipient_email', models.EmailField(blank=True, max_length=180)),
                ('recipient_name', models.CharField(blank=True, max_length=200)),
                ('company_name', models.CharField(blank=True, max_length=200)),
                ('status', models.CharField(choices=[('pending', 'En attente'), ('sent', 'Envoyée'), ('completed', 'Complétée'), ('expired', 'Expirée'), ('cancelled', 'Annulée')], default='pending', max_length=20)),
                ('admin_notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('formation', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='needs_analysis_requests', to='catalog.formation')),
                ('prospect', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='needs_analysis_requests', to='crm.prospect')),
            ],
            options={
                'db_table': 'crm_needs_analysis_request',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='ProspectNote',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=255)),
                ('content', models.TextField()),
                ('type', models.CharField(choices=[('call', 'Appel téléphonique'), ('email', 'Email'), ('meeting', 'Rendez-vous'), ('demo', 'Démonstration'), ('proposal', 'Proposition commerciale'), ('follow_up', 'Relance'), ('general', 'Note générale'), ('task', 'Tâche'), ('reminder', 'Rappel')], default='general', max_length=20)),
                ('status', models.CharField(choices=[('pending', 'En attente'), ('completed', 'Terminé'), ('cancelled', 'Annulé')], default='completed', max_length=20)),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('is_important', models.BooleanField(default=False)),
                ('is_private', models.BooleanField(default=False)),
                ('scheduled_at', models.DateTimeField(blank=True, null=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('prospect', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notes', to='crm.prospect')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='prospect_notes', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'crm_prospect_note',
                'ordering': ['-created_at'],
            },
        ),
    ]
