"""
Celery application.

Workers run the periodic jobs declared in CELERY_BEAT_SCHEDULE
(config/settings.py):
- payments.tasks.reconcile_pending_payments: poll the gateway for orders
  whose callback never arrived
- entitlements.tasks.expire_course_entitlements: flag lapsed course windows

Run locally with:
    celery -A config worker -l info
    celery -A config beat -l info
"""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("lms")

# CELERY_-prefixed Django settings become Celery configuration
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()
