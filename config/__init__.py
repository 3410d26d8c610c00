"""Django project configuration for the booking engine.

Importing the Celery app here registers the cart expiry and stay
completion tasks whenever Django starts.
"""

from .celery import app as celery_app  # noqa: F401
