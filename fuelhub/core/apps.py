from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'fuelhub.core'

    def ready(self):
        """Import signals when app is ready"""
        import fuelhub.core.cache_signals  # noqa: F401
