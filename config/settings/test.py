"""Test settings: in-memory database, eager Celery, fast hashing."""

from .base import *  # noqa: F401,F403

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

STORAGES = {
    'default': {
        'BACKEND': 'django.core.files.storage.FileSystemStorage',
    },
    'staticfiles': {
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}

BOOKING_ENGINE = {
    'RATE_LOOKUP_FAIL_CLOSED': False,
    'MAX_RETRY_COUNT': 3,
    'PENDING_HOLD_MINUTES': 30,
    'PRICE_CHANGE_TOLERANCE': '1.00',
}

LOGGING['loggers']['apps']['level'] = 'WARNING'  # noqa: F405
