import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("contributions")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Re-verify deposits stuck in PENDING - every 15 minutes
    "verify-stale-pending-transactions": {
        "task": "finances.verify_stale_pending_transactions",
        "schedule": crontab(minute="*/15"),
        "options": {"expires": 600},
    },
}

app.conf.timezone = "Africa/Accra"
