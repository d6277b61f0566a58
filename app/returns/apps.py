"""
Django app configuration for the returns application.
"""

from django.apps import AppConfig


class ReturnsConfig(AppConfig):
    """Configuration for the returns application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "returns"
    verbose_name = "Returns"
