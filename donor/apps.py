from django.apps import AppConfig


class DonorConfig(AppConfig):
    name = 'donor'
    default_auto_field = 'django.db.models.BigAutoField'
