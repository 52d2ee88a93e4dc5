from django.apps import AppConfig


class IntegrationsConfig(AppConfig):
    """
    Dispatch backend REST client and its health monitor.
    """

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.integrations"
    verbose_name = "Integrations"
