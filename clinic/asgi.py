"""
ASGI config for the clinic project.

The API is plain request/response, so the ASGI entrypoint is Django's own
HTTP application.
"""
import os

from django.core.asgi import get_asgi_application  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "clinic.settings")

application = get_asgi_application()
