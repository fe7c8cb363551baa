"""Streaming zip archives of directories."""

import logging
import os
import stat
from collections.abc import Iterable, Iterator
from datetime import datetime
from pathlib import Path
from typing import Final

from stream_zip import ZIP_32, ZIP_64, stream_zip

logger = logging.getLogger(__name__)

_CHUNK_SIZE: Final = 64 * 1024  # 64KB read chunks
_FILE_MODE: Final = stat.S_IFREG | 0o644
_DIRECTORY_MODE: Final = stat.S_IFDIR | 0o755

# Zip timestamps cannot predate 1980
_ZIP_EPOCH: Final = datetime(1980, 1, 1)  # noqa: DTZ001

_Member = tuple[str, datetime, int, object, Iterable[bytes]]


def _modified_at(path: Path) -> datetime:
    mtime = datetime.fromtimestamp(path.lstat().st_mtime)  # noqa: DTZ006
    return max(mtime, _ZIP_EPOCH)


def _read_chunks(path: Path) -> Iterator[bytes]:
    """Yield file content lazily in fixed-size chunks.

    Args:
        path: File to read.

    Yields:
        Chunks of file content.
    """
    with path.open('rb') as file_obj:
        yield from iter(lambda: file_obj.read(_CHUNK_SIZE), b'')


def iter_members(directory: Path) -> Iterator[_Member]:
    """Walk a directory and yield stream-zip member tuples.

    Member names are relative to ``directory``. Sub-directories get their
    own entries so empty folders survive the round trip. Symlinks are
    skipped.

    Args:
        directory: Directory to archive.

    Yields:
        (name, modified_at, mode, method, chunks) tuples.
    """
    for dir_path, dir_names, file_names in os.walk(directory):
        current = Path(dir_path)
        dir_names.sort()

        for dir_name in dir_names:
            child = current / dir_name
            if child.is_symlink():
                continue
            member_name = child.relative_to(directory).as_posix() + '/'
            yield (
                member_name,
                _modified_at(child),
                _DIRECTORY_MODE,
                ZIP_32,
                (),
            )

        for file_name in sorted(file_names):
            child = current / file_name
            if child.is_symlink() or not child.is_file():
                continue
            yield (
                child.relative_to(directory).as_posix(),
                _modified_at(child),
                _FILE_MODE,
                ZIP_64,
                _read_chunks(child),
            )


def stream_directory(directory: Path) -> Iterator[bytes]:
    """Build a zip archive of a directory as a stream of bytes.

    Nothing is written to disk: the archive is produced while the
    consumer iterates.

    Args:
        directory: Directory to archive.

    Yields:
        Chunks of the zip archive.
    """
    logger.info('Streaming archive of directory: %s', directory)
    yield from stream_zip(iter_members(directory))
    logger.debug('Finished archive of directory: %s', directory)
