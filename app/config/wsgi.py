"""
WSGI entry point (gunicorn or any WSGI server).

Uvicorn serves config.asgi in the default deployment; this module is for
hosts that only speak WSGI.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
