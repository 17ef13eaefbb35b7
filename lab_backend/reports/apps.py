# reports/apps.py

from django.apps import AppConfig


class ReportsConfig(AppConfig):
    """Read-only stock projections. No models of its own."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "reports"
    verbose_name = "Reports"
