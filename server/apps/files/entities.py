"""Value objects for files app.

There is no database: everything here is read from the filesystem on
demand and never cached.
"""

from dataclasses import dataclass
from typing import Final, final

# Default quota: 100 GB in bytes
DEFAULT_QUOTA_BYTES: Final = 100 * 1024 * 1024 * 1024


@final
@dataclass(frozen=True, slots=True)
class Entry:
    """Direct child of a directory, tagged file or directory."""

    name: str
    is_directory: bool

    def to_json(self) -> dict[str, str | bool]:
        """Serialize in the shape the web client expects.

        Returns:
            Dictionary with 'name' and 'isDirectory' keys.
        """
        return {'name': self.name, 'isDirectory': self.is_directory}


@final
@dataclass(frozen=True, slots=True)
class StorageUsage:
    """Storage usage of the root compared against the quota.

    The quota is advisory unless enforcement is switched on: usage may
    exceed it, in which case the percentage goes above 100.
    """

    used_bytes: int
    quota_bytes: int = DEFAULT_QUOTA_BYTES

    @property
    def percentage(self) -> float:
        """Get percentage of quota used (0 when quota is 0)."""
        if self.quota_bytes == 0:
            return 0.0
        return (self.used_bytes / self.quota_bytes) * 100

    def has_space_for(self, size_bytes: int) -> bool:
        """Check if there's enough space for the given size.

        Args:
            size_bytes: Size to check in bytes.

        Returns:
            True if there's enough space, False otherwise.
        """
        return self.used_bytes + size_bytes <= self.quota_bytes

    def available_bytes(self) -> int:
        """Get available storage space.

        Returns:
            Available bytes (never negative).
        """
        available = self.quota_bytes - self.used_bytes
        return max(0, available)
