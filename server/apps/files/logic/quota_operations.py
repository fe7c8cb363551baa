"""Business logic for storage quota operations."""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final, final

from server.apps.files.entities import StorageUsage
from server.apps.files.exceptions import QuotaExceededError

if TYPE_CHECKING:
    from server.apps.files.logic.file_operations import FileStore

_BYTE_UNITS: Final = ('B', 'KB', 'MB', 'GB', 'TB')
_UNIT_STEP: Final = 1024

logger = logging.getLogger(__name__)


@final
@dataclass(frozen=True, slots=True)
class StorageStatus:
    """Storage usage formatted for display."""

    used: str
    total: str
    percentage: str

    def to_json(self) -> dict[str, str]:
        """Serialize for the storage status endpoint.

        Returns:
            Dictionary with 'used', 'total' and 'percentage' keys.
        """
        return {
            'used': self.used,
            'total': self.total,
            'percentage': self.percentage,
        }


def format_bytes(size_bytes: float) -> str:
    """Format bytes in human-readable format.

    Picks the largest unit that keeps the value below 1024, capped at TB.

    Args:
        size_bytes: Size in bytes.

    Returns:
        Formatted size string (e.g., '1.50 MB', '234.00 KB').
    """
    scaled = float(size_bytes)
    unit_index = 0
    while scaled >= _UNIT_STEP and unit_index < len(_BYTE_UNITS) - 1:
        scaled /= _UNIT_STEP
        unit_index += 1
    return f'{scaled:.2f} {_BYTE_UNITS[unit_index]}'


def format_percentage(percentage: float) -> str:
    """Format percentage with two decimals.

    Args:
        percentage: Percentage value (may exceed 100).

    Returns:
        Percentage string (e.g., '12.34%').
    """
    return f'{percentage:.2f}%'


def get_storage_usage(store: 'FileStore') -> StorageUsage:
    """Compute live storage usage of the store's root.

    Walks the whole root on every call; nothing is cached.

    Args:
        store: File store to measure.

    Returns:
        StorageUsage with used and quota bytes.
    """
    used_bytes = store.size_of('')
    logger.debug(
        'Storage usage: %d of %d bytes',
        used_bytes,
        store.quota_bytes,
    )
    return StorageUsage(used_bytes=used_bytes, quota_bytes=store.quota_bytes)


def get_storage_status(store: 'FileStore') -> StorageStatus:
    """Get storage usage formatted for display.

    Args:
        store: File store to measure.

    Returns:
        StorageStatus with formatted used, total and percentage.
    """
    usage = get_storage_usage(store)
    return StorageStatus(
        used=format_bytes(usage.used_bytes),
        total=format_bytes(usage.quota_bytes),
        percentage=format_percentage(usage.percentage),
    )


def check_quota(store: 'FileStore', size_bytes: int) -> None:
    """Check if the store has enough quota for an upload.

    Args:
        store: File store receiving the upload.
        size_bytes: Size of the upload in bytes.

    Raises:
        QuotaExceededError: If upload would exceed quota.
    """
    usage = get_storage_usage(store)

    if not usage.has_space_for(size_bytes):
        logger.warning(
            'Quota exceeded: need %d, have %d available',
            size_bytes,
            usage.available_bytes(),
        )
        raise QuotaExceededError(
            quota_bytes=usage.quota_bytes,
            used_bytes=usage.used_bytes,
            required_bytes=size_bytes,
        )
