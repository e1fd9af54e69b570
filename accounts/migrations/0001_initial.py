from django.db import migrations, models


def account_fields():
    return [
        ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
        ('email', models.EmailField(max_length=180, unique=True)),
        ('password', models.CharField(max_length=128)),
        ('first_name', models.CharField(max_length=100)),
        ('last_name', models.CharField(max_length=100)),
        ('phone', models.CharField(blank=True, max_length=20)),
        ('is_active', models.BooleanField(default=True)),
        ('email_verified', models.BooleanField(default=False)),
        ('email_verified_at', models.DateTimeField(blank=True, null=True)),
        ('email_verification_token', models.CharField(blank=True, db_index=True, max_length=64)),
        ('password_reset_token', models.CharField(blank=True, db_index=True, max_length=64)),
        ('password_reset_token_expires_at', models.DateTimeField(blank=True, null=True)),
        ('last_login_at', models.DateTimeField(blank=True, null=True)),
        ('created_at', models.DateTimeField(auto_now_add=True)),
        ('updated_at', models.DateTimeField(auto_now=True)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Mentor',
            fields=account_fields() + [
                ('position', models.CharField(blank=True, max_length=150)),
                ('company_name', models.CharField(max_length=200)),
                ('company_siret', models.CharField(max_length=14, unique=True)),
                ('expertise_domains', models.JSONField(blank=True, default=list)),
                ('experience_years', models.PositiveIntegerField(default=0)),
                ('education_level', models.CharField(blank=True, choices=[('bac', 'Baccalauréat'), ('bac+2', 'Bac+2 (BTS, DUT)'), ('bac+3', 'Bac+3 (Licence)'), ('bac+5', 'Bac+5 (Master, Ingénieur)'), ('bac+8', 'Bac+8 (Doctorat)')], max_length=10)),
            ],
            options={
                'verbose_name': 'Mentor',
                'verbose_name_plural': 'Mentors',
                'db_table': 'accounts_mentor',
                'ordering': ['last_name', 'first_name'],
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='Teacher',
            fields=account_fields() + [
                ('specialty', models.CharField(blank=True, max_length=150)),
                ('title', models.CharField(blank=True, max_length=100)),
                ('years_of_experience', models.PositiveIntegerField(blank=True, null=True)),
                ('biography', models.TextField(blank=True)),
                ('qualifications', models.TextField(blank=True)),
            ],
            options={
                'verbose_name': 'Teacher',
                'verbose_name_plural': 'Teachers',
                'db_table': 'accounts_teacher',
                'ordering': ['last_name', 'first_name'],
                'abstract': False,
            },
        ),
    ]
