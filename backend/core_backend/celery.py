import os

from celery import Celery
from celery.schedules import crontab

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "core_backend.settings")

app = Celery("core_backend")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()

app.conf.beat_schedule = {
    # Materialize recurring bills/incomes every day at 03:00 server time
    "materialize-recurring-transactions": {
        "task": "finance.tasks.materialize_recurring_transactions",
        "schedule": crontab(minute=0, hour=3),
    },
}
