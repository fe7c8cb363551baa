"""Custom storage backend for the local storage root."""

import logging
import os
from typing import Any, final

from typing_extensions import override

from django.core.files.storage import FileSystemStorage

from server.apps.files.infrastructure.metadata import split_extension

logger = logging.getLogger(__name__)


@final
class FileStorage(FileSystemStorage):
    """Local filesystem storage for user files.

    Extends Django's FileSystemStorage with:
    - Collision-free names in the form 'name(1).ext', 'name(2).ext'
    - Enhanced error logging
    - Rename support

    Writes go through FileSystemStorage._save, which creates the file
    with O_EXCL and asks get_available_name for a fresh name whenever
    the create loses a race.
    """

    @override
    def get_available_name(
        self,
        name: str,
        max_length: int | None = None,
    ) -> str:
        """Return a name that is free in the target directory.

        Args:
            name: Desired storage name (e.g., 'docs/a.txt').
            max_length: Ignored; names are never truncated.

        Returns:
            The desired name if free, else the first free 'base(n)ext'.
        """
        name = str(name).replace('\\', '/')
        dir_name, file_name = os.path.split(name)
        file_root, file_ext = split_extension(file_name)

        candidate = name
        counter = 1
        while self.exists(candidate):
            candidate = os.path.join(
                dir_name,
                f'{file_root}({counter}){file_ext}',
            ).replace('\\', '/')
            counter += 1

        if candidate != name:
            logger.debug('Name collision: %s -> %s', name, candidate)
        return candidate

    @override
    def save(  # noqa: WPS211
        self,
        name: str,
        content: Any,
        max_length: int | None = None,
    ) -> str:
        """Save file to disk with error handling and logging.

        Args:
            name: Storage path for the file.
            content: File content (file-like object).
            max_length: Optional maximum length for the filename.

        Returns:
            Actual storage path used (may differ from name if conflicts).

        Raises:
            OSError: If writing fails.
        """
        try:
            logger.info('Writing file to storage: %s', name)
            saved_name = super().save(name, content, max_length)
            logger.info('Successfully wrote file: %s', saved_name)
        except Exception:
            logger.exception('Failed to write file to storage: %s', name)
            raise
        else:
            return saved_name

    @override
    def delete(self, name: str) -> None:
        """Delete file (or empty folder) with error handling and logging.

        A symlink is unlinked, even one pointing at a folder.

        Args:
            name: Storage path of file to delete.

        Raises:
            OSError: If delete fails.
        """
        try:
            logger.info('Deleting from storage: %s', name)
            path = self.path(name)
            if os.path.islink(path):
                os.unlink(path)
            else:
                super().delete(name)
            logger.info('Successfully deleted: %s', name)
        except Exception:
            logger.exception('Failed to delete from storage: %s', name)
            raise

    def move(self, source: str, destination: str) -> None:
        """Rename a file or folder inside the storage.

        Refuses to overwrite: the destination must not exist. The check
        and the rename are two steps, so a concurrent writer can still
        slip in between them.

        Args:
            source: Source storage path.
            destination: Destination storage path.

        Raises:
            FileExistsError: If destination already exists.
            OSError: If the rename fails.
        """
        source_path = self.path(source)
        destination_path = self.path(destination)
        try:
            logger.info('Moving: %s -> %s', source, destination)
            if os.path.lexists(destination_path):
                raise FileExistsError(
                    f'Destination already exists: {destination}',
                )
            os.rename(source_path, destination_path)
            logger.info('Moved: %s -> %s', source, destination)
        except Exception:
            logger.exception('Move failed: %s -> %s', source, destination)
            raise
