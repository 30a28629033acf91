from django.apps import AppConfig


class MatchingConfig(AppConfig):
    name = 'matching'
    verbose_name = 'Donor Matching'
    default_auto_field = 'django.db.models.BigAutoField'
