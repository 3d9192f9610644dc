from django.apps import AppConfig


class CpstatsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'cpstats'
    verbose_name = 'CP statistics'
