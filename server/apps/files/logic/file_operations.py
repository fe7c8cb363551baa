"""Business logic for file operations."""

import logging
import os
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any, BinaryIO, final

from django.conf import settings
from django.core.files.base import File as DjangoFile

from server.apps.files.entities import DEFAULT_QUOTA_BYTES, Entry
from server.apps.files.exceptions import (
    EntryExistsError,
    EntryNotFoundError,
    OperationFailedError,
)
from server.apps.files.infrastructure.archive import stream_directory
from server.apps.files.infrastructure.metadata import (
    extract_filename,
    get_content_size,
    get_file_size,
)
from server.apps.files.infrastructure.paths import (
    PathResolver,
    validate_name,
    validate_rename_target,
    validate_upload_name,
)
from server.apps.files.infrastructure.storage import FileStorage
from server.apps.files.logic.quota_operations import check_quota

logger = logging.getLogger(__name__)

_Content = BinaryIO | DjangoFile


@final
class FileStore:
    """Path-safe CRUD over a directory tree rooted at a single folder.

    The store keeps no state between calls besides its configuration:
    every operation reads or mutates the filesystem directly. All client
    paths are validated and resolved through PathResolver before use.
    """

    def __init__(
        self,
        root: Path | str,
        quota_bytes: int = DEFAULT_QUOTA_BYTES,
        *,
        enforce_quota: bool = False,
    ) -> None:
        """Initialize the store and make sure the root exists.

        Args:
            root: Storage root directory.
            quota_bytes: Advisory storage budget for the whole root.
            enforce_quota: Reject uploads that would exceed the quota.
        """
        root_path = Path(root)
        root_path.mkdir(parents=True, exist_ok=True)

        self._resolver = PathResolver(root_path)
        self._storage = FileStorage(location=str(self._resolver.root))
        self.quota_bytes = quota_bytes
        self.enforce_quota = enforce_quota

    @classmethod
    def from_settings(cls) -> 'FileStore':
        """Build a store from CLOUD_* Django settings.

        Returns:
            FileStore configured for this process.
        """
        return cls(
            settings.CLOUD_STORAGE_ROOT,
            quota_bytes=settings.CLOUD_QUOTA_BYTES,
            enforce_quota=settings.CLOUD_ENFORCE_QUOTA,
        )

    @property
    def root(self) -> Path:
        """Get the resolved storage root."""
        return self._resolver.root

    def list_directory(self, rel_path: str = '') -> list[Entry]:
        """List direct children of a directory.

        Args:
            rel_path: Folder path relative to root ('' lists the root).

        Returns:
            Entries sorted by name.

        Raises:
            InvalidPathError: If path escapes the root.
            EntryNotFoundError: If folder does not exist.
            OperationFailedError: If the folder cannot be read.
        """
        directory = self._resolver.resolve(rel_path)
        logger.debug('Listing directory: %s', directory)

        if not directory.is_dir():
            raise EntryNotFoundError(f'Folder not found: {rel_path!r}')

        try:
            with os.scandir(directory) as scanner:
                entries = [
                    Entry(name=item.name, is_directory=item.is_dir())
                    for item in scanner
                ]
        except OSError as error:
            logger.exception('Failed to list directory: %s', directory)
            raise OperationFailedError(
                f'Failed to read folder: {rel_path!r}',
            ) from error

        return sorted(entries, key=lambda entry: entry.name)

    def unique_name(self, rel_dir: str, proposed_name: str) -> str:
        """Get a file name that does not collide in the given folder.

        The check is advisory: store_file re-checks while writing.

        Args:
            rel_dir: Folder path relative to root.
            proposed_name: Desired file name.

        Returns:
            proposed_name if free, else the first free 'base(n)ext'.

        Raises:
            InvalidPathError: If path or name is invalid.
        """
        validate_upload_name(proposed_name)
        self._resolver.resolve(rel_dir, proposed_name)
        storage_name = self._resolver.join_paths(rel_dir, proposed_name)
        available = self._storage.get_available_name(storage_name)
        return extract_filename(available)

    def store_file(
        self,
        rel_dir: str,
        file_name: str,
        content: _Content,
    ) -> str:
        """Write uploaded content into a folder under a free name.

        Args:
            rel_dir: Target folder relative to root.
            file_name: Desired file name (client path parts are dropped).
            content: File-like object to store.

        Returns:
            Name the file was actually stored under.

        Raises:
            InvalidPathError: If path or name is invalid.
            EntryNotFoundError: If target folder does not exist.
            QuotaExceededError: If quota enforcement rejects the upload.
            OperationFailedError: If writing fails.
        """
        file_name = extract_filename(file_name)
        validate_upload_name(file_name)
        target_dir = self._resolver.resolve(rel_dir)
        if not target_dir.is_dir():
            raise EntryNotFoundError(f'Folder not found: {rel_dir!r}')
        self._resolver.resolve(rel_dir, file_name)

        if self.enforce_quota:
            check_quota(self, get_content_size(content))

        storage_name = self._resolver.join_paths(rel_dir, file_name)
        try:
            saved_name = self._storage.save(storage_name, content)
        except OSError as error:
            raise OperationFailedError(
                f'Failed to store file: {file_name!r}',
            ) from error

        stored_name = extract_filename(saved_name)
        logger.info('Stored file %s in folder %r', stored_name, rel_dir)
        return stored_name

    def store_files(
        self,
        rel_dir: str,
        files: Iterable[Any],
    ) -> list[str]:
        """Store a batch of uploads into one folder.

        Files are written one by one, so duplicates inside the batch get
        distinct names as well.

        Args:
            rel_dir: Target folder relative to root.
            files: Django File objects (name taken from ``.name``).

        Returns:
            Stored names in upload order.
        """
        return [
            self.store_file(rel_dir, upload.name, upload)
            for upload in files
        ]

    def make_directory(self, rel_path: str, name: str) -> None:
        """Create a single sub-folder.

        Args:
            rel_path: Parent folder relative to root.
            name: Folder name (single segment).

        Raises:
            InvalidPathError: If path or name is invalid.
            EntryExistsError: If an entry with that name exists.
            OperationFailedError: If the folder cannot be created.
        """
        validate_name(name)
        target = self._resolver.resolve_entry(rel_path, name)

        if os.path.lexists(target):
            raise EntryExistsError(f'Already exists: {name!r}')

        try:
            target.mkdir()
        except FileExistsError as error:
            raise EntryExistsError(f'Already exists: {name!r}') from error
        except OSError as error:
            logger.exception('Failed to create folder: %s', target)
            raise OperationFailedError(
                f'Failed to create folder: {name!r}',
            ) from error

        logger.info('Created folder: %s', target)

    def rename_entry(self, rel_path: str, old_name: str, new_name: str) -> None:
        """Rename a file or folder.

        A symlink is renamed itself, its target stays where it is.

        Args:
            rel_path: Folder holding the entry, relative to root.
            old_name: Current name.
            new_name: New name; may point into an existing sub-folder.

        Raises:
            InvalidPathError: If path or names are invalid.
            EntryNotFoundError: If the entry does not exist.
            OperationFailedError: If the rename fails (target exists,
                cross-device move, permissions).
        """
        validate_rename_target(old_name)
        validate_rename_target(new_name)
        source = self._resolver.resolve_entry(rel_path, old_name)
        destination = self._resolver.resolve_entry(rel_path, new_name)

        if not os.path.lexists(source):
            raise EntryNotFoundError(f'Not found: {old_name!r}')

        try:
            self._storage.move(
                self._resolver.to_relative(source),
                self._resolver.to_relative(destination),
            )
        except OSError as error:
            raise OperationFailedError(
                f'Failed to rename {old_name!r} to {new_name!r}',
            ) from error

    def delete_file(self, rel_path: str, name: str) -> None:
        """Delete one file (or an empty folder).

        A symlink is removed itself, never the entry it points to.

        Args:
            rel_path: Folder holding the entry, relative to root.
            name: File name (single segment).

        Raises:
            InvalidPathError: If path or name is invalid.
            EntryNotFoundError: If the file does not exist.
            OperationFailedError: If deletion fails (e.g. folder not empty).
        """
        validate_name(name)
        target = self._resolver.resolve_entry(rel_path, name)

        if not os.path.lexists(target):
            raise EntryNotFoundError(f'File not found: {name!r}')

        try:
            self._storage.delete(self._resolver.to_relative(target))
        except OSError as error:
            raise OperationFailedError(
                f'Failed to delete: {name!r}',
            ) from error

    def size_of(self, rel_path: str = '') -> int:
        """Sum sizes of all regular files under a folder.

        Symlinks are neither followed nor counted.

        Args:
            rel_path: Folder relative to root ('' for the whole root).

        Returns:
            Total size in bytes.

        Raises:
            InvalidPathError: If path escapes the root.
            EntryNotFoundError: If path does not exist.
        """
        target = self._resolver.resolve(rel_path)
        if not os.path.lexists(target):
            raise EntryNotFoundError(f'Not found: {rel_path!r}')
        if target.is_file():
            return get_file_size(target)
        return _directory_size(target)

    def locate(self, rel_path: str, name: str = '') -> Path:
        """Resolve an existing file or folder for download.

        Args:
            rel_path: Folder relative to root.
            name: Entry name inside that folder.

        Returns:
            Absolute path of the entry.

        Raises:
            InvalidPathError: If path escapes the root.
            EntryNotFoundError: If the entry does not exist.
        """
        target = self._resolver.resolve(rel_path, name)
        if not target.exists():
            raise EntryNotFoundError(f'File not found: {name or rel_path!r}')
        return target

    def archive_directory(self, rel_path: str, name: str = '') -> Iterator[bytes]:
        """Stream a zip archive of a folder's full contents.

        Args:
            rel_path: Folder relative to root.
            name: Optional child folder name.

        Returns:
            Iterator over zip archive chunks.

        Raises:
            InvalidPathError: If path escapes the root.
            EntryNotFoundError: If the folder does not exist.
        """
        directory = self.locate(rel_path, name)
        if not directory.is_dir():
            raise EntryNotFoundError(f'Folder not found: {name or rel_path!r}')
        return stream_directory(directory)


def _directory_size(directory: Path) -> int:
    """Recursively sum regular file sizes below a directory.

    Args:
        directory: Absolute folder path.

    Returns:
        Total size in bytes.
    """
    total = 0
    try:
        with os.scandir(directory) as scanner:
            items = list(scanner)
    except FileNotFoundError:
        # Removed while walking
        return 0

    for item in items:
        try:
            if item.is_file(follow_symlinks=False):
                total += item.stat(follow_symlinks=False).st_size
            elif item.is_dir(follow_symlinks=False):
                total += _directory_size(Path(item.path))
        except FileNotFoundError:
            continue
    return total
