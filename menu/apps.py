from django.apps import AppConfig


class MenuConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'menu'
    verbose_name = 'Menu'

    def ready(self):
        """Import signals when app is ready."""
        import menu.signals  # noqa
