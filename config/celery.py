import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("booking_engine")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()

# Per-booking expiry is scheduled with an ETA when the cart is created;
# the sweep below catches holds whose ETA task was lost.
app.conf.beat_schedule = {
    "sweep-expired-carts": {
        "task": "bookings.abandon_expired_carts",
        "schedule": 60.0,
        "options": {"expires": 50},
    },
    "complete-past-stays": {
        "task": "bookings.complete_checked_out_bookings",
        "schedule": crontab(minute=15),
    },
}
