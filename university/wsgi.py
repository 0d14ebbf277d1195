"""WSGI config for the university records project."""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "university.settings")

application = get_wsgi_application()
