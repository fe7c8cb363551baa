"""Path translation between client paths and locations under the root.

Client paths are relative and slash separated: documents/reports.
They are resolved against the storage root: /srv/cloud/documents/reports.
"""

from pathlib import Path
from typing import Final, final

from server.apps.files.exceptions import InvalidPathError

# Character used to split client paths
_PATH_SEPARATOR: Final = '/'

_PARENT_SEGMENT: Final = '..'
_CURRENT_SEGMENT: Final = '.'
_NULL_BYTE: Final = '\x00'
_DELETE_CHAR: Final = '\x7f'


@final
class PathResolver:
    """Translates client paths into absolute paths under a root.

    Every path goes through segment validation before anything touches
    the filesystem, then the resolved location is checked to still be
    inside the root (symlinks included).
    """

    def __init__(self, root: Path) -> None:
        """Initialize resolver with the storage root.

        Args:
            root: Directory all paths are confined to.
        """
        self._root = Path(root).resolve()

    @property
    def root(self) -> Path:
        """Get the resolved storage root."""
        return self._root

    def split(self, rel_path: str) -> list[str]:
        """Split a client path into validated segments.

        Backslashes count as separators, empty and '.' segments are
        dropped.

        Args:
            rel_path: Client path (e.g., 'documents/reports').

        Returns:
            List of segments (e.g., ['documents', 'reports']).

        Raises:
            InvalidPathError: If a segment is '..' or contains a null byte.
        """
        normalized = (rel_path or '').replace('\\', _PATH_SEPARATOR)
        if _NULL_BYTE in normalized:
            raise InvalidPathError(f'Invalid path: {rel_path!r}')

        segments = []
        for segment in normalized.split(_PATH_SEPARATOR):
            if segment == _PARENT_SEGMENT:
                raise InvalidPathError(f'Invalid path: {rel_path!r}')
            if segment and segment != _CURRENT_SEGMENT:
                segments.append(segment)
        return segments

    def normalize(self, rel_path: str) -> str:
        """Normalize a client path to its canonical slash-joined form.

        Args:
            rel_path: Client path.

        Returns:
            Path without redundant separators ('' for root).
        """
        return _PATH_SEPARATOR.join(self.split(rel_path))

    def join_paths(self, parent: str, name: str) -> str:
        """Join parent path and name into a normalized client path.

        Args:
            parent: Parent client path (e.g., 'documents').
            name: Name to append (e.g., 'file.pdf').

        Returns:
            Joined path (e.g., 'documents/file.pdf').
        """
        return _PATH_SEPARATOR.join(self.split(parent) + self.split(name))

    def resolve(self, rel_path: str, name: str = '') -> Path:
        """Resolve a client path (and optional child name) under the root.

        Args:
            rel_path: Client path of a directory.
            name: Optional child name, may itself contain separators.

        Returns:
            Absolute path inside the root.

        Raises:
            InvalidPathError: If the path is malformed or escapes the root.
        """
        segments = self.split(rel_path) + self.split(name)
        candidate = self._root.joinpath(*segments).resolve()
        if candidate != self._root and self._root not in candidate.parents:
            raise InvalidPathError(
                f'Path escapes storage root: {rel_path!r} {name!r}',
            )
        return candidate

    def resolve_entry(self, rel_path: str, name: str) -> Path:
        """Locate a named entry without following it if it is a symlink.

        Only the parent folder is resolved and checked against the root.
        The last segment is appended as is, so deleting or renaming a
        link acts on the link and never on what it points to.

        Args:
            rel_path: Client path of the parent directory.
            name: Entry name, may itself contain separators.

        Returns:
            Absolute path of the entry inside the root.

        Raises:
            InvalidPathError: If nothing is named or the parent escapes.
        """
        segments = self.split(rel_path) + self.split(name)
        if not segments:
            raise InvalidPathError('Path must name an entry below the root')

        parent = self._root.joinpath(*segments[:-1]).resolve()
        if parent != self._root and self._root not in parent.parents:
            raise InvalidPathError(
                f'Path escapes storage root: {rel_path!r} {name!r}',
            )
        return parent / segments[-1]

    def to_relative(self, path: Path) -> str:
        """Convert an absolute path under the root back to a client path.

        The last component is kept as given, links are not followed.

        Args:
            path: Absolute path inside the root.

        Returns:
            Slash separated client path ('' for the root itself).
        """
        path = Path(path)
        located = path.parent.resolve() / path.name
        relative = located.relative_to(self._root).as_posix()
        return '' if relative == _CURRENT_SEGMENT else relative

    def is_root(self, rel_path: str) -> bool:
        """Check if path is the root directory.

        Args:
            rel_path: Client path to check.

        Returns:
            True if path is the root directory.
        """
        return not self.split(rel_path)


def validate_name(name: str) -> None:
    """Validate a single entry name (no separators, no traversal).

    Used for folder creation and deletion, where any '..' is refused.

    Args:
        name: Proposed file or folder name.

    Raises:
        InvalidPathError: If name is empty, contains '..', a path
            separator or a control character.
    """
    _check_segment(name)
    if _PARENT_SEGMENT in name:
        raise InvalidPathError(f'Invalid name: {name!r}')


def validate_upload_name(name: str) -> None:
    """Validate the file name of an upload.

    Dots inside a name are fine (v1..2.txt), only a '..' segment is not.

    Args:
        name: File name sent by the client, client folders stripped.

    Raises:
        InvalidPathError: If name is empty, '.', '..', contains a path
            separator or a control character.
    """
    _check_segment(name)
    if name == _PARENT_SEGMENT:
        raise InvalidPathError(f'Invalid name: {name!r}')


def validate_rename_target(name: str) -> None:
    """Validate a rename operand.

    Unlike entry names, rename operands may contain separators so an
    entry can be moved into an existing sub-folder.

    Args:
        name: Old or new name of the entry.

    Raises:
        InvalidPathError: If name is empty or contains '..' or a control
            character.
    """
    if not name or not name.strip(_PATH_SEPARATOR):
        raise InvalidPathError('Name cannot be empty')
    if _PARENT_SEGMENT in name or _has_control_chars(name):
        raise InvalidPathError(f'Invalid name: {name!r}')


def _check_segment(name: str) -> None:
    if not name or not name.strip():
        raise InvalidPathError('Name cannot be empty')
    if _has_control_chars(name):
        raise InvalidPathError(f'Invalid name: {name!r}')
    if _PATH_SEPARATOR in name or '\\' in name:
        raise InvalidPathError(f'Name must be a single segment: {name!r}')
    if name == _CURRENT_SEGMENT:
        raise InvalidPathError(f'Invalid name: {name!r}')


def _has_control_chars(name: str) -> bool:
    # Covers NUL and the CR/LF pair that would break response headers
    return any(char < ' ' or char == _DELETE_CHAR for char in name)
