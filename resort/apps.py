from django.apps import AppConfig


class ResortConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'resort'
    verbose_name = 'Resort Back-Office'
    
    def ready(self):
        """Import signals when app is ready."""
        import resort.signals  # noqa
