"""WSGI config for the eventdesk project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "eventdesk.settings")

application = get_wsgi_application()
