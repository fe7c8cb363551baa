"""Overriding settings used in development and tests."""

from server.settings.components.common import SECRET_KEY

DEBUG = True

SECRET_KEY = SECRET_KEY or 'django-insecure-development-only'  # noqa: S105

ALLOWED_HOSTS = [
    'localhost',
    '0.0.0.0',  # noqa: S104
    '127.0.0.1',
    '[::1]',
    'testserver',
]
