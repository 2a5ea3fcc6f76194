"""
Celery configuration for the marketplace backend.

Celery runs the background side of settlement:
- The daily release of held vendor funds (orders.tasks.release_pending_funds)
- Ad-hoc sweeps triggered from the admin API

This configuration uses Redis as both the message broker and result backend.
Tasks are auto-discovered from all installed Django apps; periodic schedules
are stored in the database by django-celery-beat.

Usage:
    from orders.tasks import release_pending_funds

    release_pending_funds.delay()

For more information, see:
https://docs.celeryq.dev/en/stable/django/first-steps-with-django.html
"""

import os

from celery import Celery

# Set the default Django settings module for the Celery worker
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("config")

# All Celery settings are prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

# Celery will look for a tasks.py module in each installed app
app.autodiscover_tasks()
