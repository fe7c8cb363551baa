"""Django settings shared by every environment."""

from typing import Final

from server.settings.components import config

SECRET_KEY = config('DJANGO_SECRET_KEY', default='')

INSTALLED_APPS: Final = (
    'server.apps.files',
)

MIDDLEWARE: Final = (
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
)

ROOT_URLCONF = 'server.urls'

WSGI_APPLICATION = 'server.wsgi.application'

# No database: all state lives on the filesystem
DATABASES: Final[dict[str, dict[str, str]]] = {}

LANGUAGE_CODE = 'en-us'

USE_I18N = False

TIME_ZONE = 'UTC'

USE_TZ = True

# Uploads
# https://docs.djangoproject.com/en/5.1/ref/settings/#data-upload-max-number-files

DATA_UPLOAD_MAX_NUMBER_FILES = config(
    'DATA_UPLOAD_MAX_NUMBER_FILES',
    cast=int,
    default=100,
)

# Larger uploads are spooled to a temporary file and moved into place
FILE_UPLOAD_MAX_MEMORY_SIZE = config(
    'FILE_UPLOAD_MAX_MEMORY_SIZE',
    cast=int,
    default=2621440,  # 2.5 MB
)

APPEND_SLASH = False
