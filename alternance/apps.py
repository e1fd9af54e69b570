from django.apps import AppConfig


class AlternanceConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'alternance'
    verbose_name = 'Alternance'
