"""
WSGI config for the fuelhub project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'fuelhub.config.settings')

application = get_wsgi_application()
