"""Cloud drive settings: storage root, quota and server."""

from pathlib import Path

from server.settings.components import BASE_DIR, config

# Every file operation is confined to this directory
CLOUD_STORAGE_ROOT = config(
    'CLOUD_STORAGE_ROOT',
    cast=Path,
    default=str(BASE_DIR.joinpath('storage')),
)

# Quota: 100 GB by default, advisory unless enforcement is on
CLOUD_QUOTA_BYTES = config(
    'CLOUD_QUOTA_BYTES',
    cast=int,
    default=100 * 1024 * 1024 * 1024,
)
CLOUD_ENFORCE_QUOTA = config('CLOUD_ENFORCE_QUOTA', cast=bool, default=False)

# Server host, port and worker threads
CLOUD_HOST = config('CLOUD_HOST', default='0.0.0.0')  # noqa: S104
CLOUD_PORT = config('CLOUD_PORT', cast=int, default=5000)
CLOUD_SERVER_THREADS = config('CLOUD_SERVER_THREADS', cast=int, default=10)
