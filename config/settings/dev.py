"""Local development settings.

Debug on, any host, and the booking widget may be served from any
origin. Never deploy with these.
"""

from .base import *  # noqa: F401,F403

DEBUG = True

ALLOWED_HOSTS = ['*']

# Guest widget is usually run from a separate dev server
CORS_ALLOW_ALL_ORIGINS = True

# Short holds make the cart expiry task easy to watch locally
BOOKING_ENGINE['PENDING_HOLD_MINUTES'] = int(  # noqa: F405
    os.environ.get('BOOKING_PENDING_HOLD_MINUTES', 5)  # noqa: F405
)

LOGGING['loggers']['apps']['level'] = 'DEBUG'  # noqa: F405
