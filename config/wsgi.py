"""WSGI entry point for the booking engine API.

Production servers should set DJANGO_SETTINGS_MODULE to
``config.settings.prod``.
"""

import os
from django.core.wsgi import get_wsgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.dev')

application = get_wsgi_application()
