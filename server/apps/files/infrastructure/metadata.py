"""Metadata extraction utilities for files."""

import mimetypes
import os
from pathlib import Path, PurePosixPath
from typing import Any, BinaryIO, Final

_DEFAULT_MIME_TYPE: Final = 'application/octet-stream'


def detect_mime_type(filename: str) -> str:
    """Detect MIME type from filename extension.

    Args:
        filename: Filename with extension.

    Returns:
        MIME type string (e.g., 'image/jpeg', 'application/pdf').
        Returns 'application/octet-stream' if type cannot be determined.
    """
    mime_type, _ = mimetypes.guess_type(filename)
    if mime_type is None:
        return _DEFAULT_MIME_TYPE
    return mime_type


def extract_filename(client_name: str) -> str:
    """Extract the final component of a client-supplied file name.

    Browsers may send 'C:\\Users\\me\\a.txt' or 'folder/a.txt'; only
    the last component is kept.

    Args:
        client_name: File name as sent by the client.

    Returns:
        Filename (e.g., 'a.txt').
    """
    return PurePosixPath(client_name.replace('\\', '/')).name


def split_extension(filename: str) -> tuple[str, str]:
    """Split filename into base and last extension.

    Example: 'report.tar.gz' -> ('report.tar', '.gz').

    Args:
        filename: Filename without directory part.

    Returns:
        Tuple of base name and extension including the dot.
    """
    return os.path.splitext(filename)


def get_content_size(file_obj: BinaryIO | Any) -> int:
    """Get size of uploaded content.

    Args:
        file_obj: Django File/UploadedFile or a seekable file-like object.

    Returns:
        Size in bytes.
    """
    if hasattr(file_obj, 'size'):
        return file_obj.size
    position = file_obj.tell()
    file_obj.seek(0, os.SEEK_END)
    size = file_obj.tell()
    file_obj.seek(position)
    return size


def get_file_size(path: Path) -> int:
    """Get size of a file on disk without following symlinks.

    Args:
        path: Absolute file path.

    Returns:
        Size in bytes.
    """
    return path.lstat().st_size
