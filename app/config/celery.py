"""
Celery configuration for the Django application.

Celery runs the work that must stay off the request path:
- Return decision notifications (queued on transaction commit)
- Periodic store credit expiry (django-celery-beat)

Tasks are auto-discovered from the tasks.py module of every installed app.

For more information, see:
https://docs.celeryq.dev/en/stable/django/first-steps-with-django.html
"""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("config")

# All Celery settings are prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

app.autodiscover_tasks()
