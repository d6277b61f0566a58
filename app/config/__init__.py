# =============================================================================
# Django Project Configuration Package
# =============================================================================
# Settings, URLs, WSGI application and Celery configuration.
#
# Import Celery app to ensure it's loaded when Django starts, so that
# shared_task decorators bind to it and tasks are auto-discovered.
# =============================================================================

from config.celery import app as celery_app

__all__ = ("celery_app",)
