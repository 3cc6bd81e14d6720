"""
WSGI config for marine_poi project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "marine_poi.settings")

application = get_wsgi_application()
