"""Shared fixtures for files app tests."""

import pytest
from django.core.files.base import ContentFile

from server.apps.files.logic.file_operations import FileStore


@pytest.fixture
def storage_root(tmp_path):
    """Create an empty storage root.

    Returns:
        Path of the storage root directory.
    """
    root = tmp_path / 'storage'
    root.mkdir()
    return root


@pytest.fixture
def outside_dir(tmp_path):
    """Create a sibling directory that must never be touched.

    Returns:
        Path next to the storage root.
    """
    outside = tmp_path / 'outside'
    outside.mkdir()
    (outside / 'secret.txt').write_bytes(b'secret')
    return outside


@pytest.fixture
def file_store(storage_root):
    """Create FileStore on the storage root.

    Returns:
        FileStore instance.
    """
    return FileStore(storage_root)


@pytest.fixture
def populated_root(storage_root):
    """Fill storage root with a small tree.

    Layout::

        a.txt            10 bytes
        docs/b.txt        5 bytes
        docs/empty/

    Returns:
        Path of the storage root.
    """
    (storage_root / 'a.txt').write_bytes(b'0123456789')
    docs = storage_root / 'docs'
    docs.mkdir()
    (docs / 'b.txt').write_bytes(b'hello')
    (docs / 'empty').mkdir()
    return storage_root


@pytest.fixture
def cloud_settings(settings, storage_root):
    """Point Django settings at the test storage root.

    Returns:
        Overridden settings.
    """
    settings.CLOUD_STORAGE_ROOT = storage_root
    settings.CLOUD_QUOTA_BYTES = 100 * 1024 * 1024 * 1024
    settings.CLOUD_ENFORCE_QUOTA = False
    return settings


@pytest.fixture
def sample_file_content():
    """Sample file content for testing.

    Returns:
        ContentFile with test data.
    """
    return ContentFile(b'test file content', name='test.txt')
