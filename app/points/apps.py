"""
Django app configuration for the points application.
"""

from django.apps import AppConfig


class PointsConfig(AppConfig):
    """Configuration for the points application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "points"
    verbose_name = "Loyalty Points"
