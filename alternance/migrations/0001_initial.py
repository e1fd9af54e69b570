import django.db.models.deletion
from decimal import Decimal
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('accounts', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Student',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('first_name', models.CharField(max_length=100)),
                ('last_name', models.CharField(max_length=100)),
                ('email', models.EmailField(max_length=180, unique=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('mentor', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='apprentices', to='accounts.mentor')),
            ],
            options={
                'db_table': 'alternance_student',
                'ordering': ['last_name', 'first_name'],
            },
        ),
        migrations.CreateModel(
            name='ProgressAssessment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('period', models.DateField()),
                ('center_progression', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=5)),
                ('company_progression', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=5)),
                ('overall_progression', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=5)),
                ('completed_objectives', models.JSONField(blank=True, default=list)),
                ('pending_objectives', models.JSONField(blank=True, default=list)),
                ('upcoming_objectives', models.JSONField(blank=True, default=list)),
                ('difficulties', models.JSONField(blank=True, default=list, help_text='[{"area", "description", "severity" 1-5}]')),
                ('support_needed', models.JSONField(blank=True, default=list, help_text='[{"type", "description", "urgency" 1-5}]')),
                ('skills_matrix', models.JSONField(blank=True, default=dict, help_text='{skill: {"level" 0-20, "previous_level", "trend"}}')),
                ('next_steps', models.TextField(blank=True)),
                ('risk_level', models.PositiveSmallIntegerField(default=1)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='progress_assessments', to='alternance.student')),
            ],
            options={
                'db_table': 'alternance_progress_assessment',
                'ordering': ['-period'],
            },
        ),
    ]
