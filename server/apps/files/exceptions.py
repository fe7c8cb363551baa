"""Exceptions for files app."""


class FileStoreError(Exception):
    """Base class for all file store failures."""


class InvalidPathError(FileStoreError):
    """Raised when a path escapes the storage root or a name is malformed."""


class EntryNotFoundError(FileStoreError):
    """Raised when the target file or directory does not exist."""


class EntryExistsError(FileStoreError):
    """Raised when creating an entry that already exists."""


class OperationFailedError(FileStoreError):
    """Raised when the underlying filesystem call fails."""


class QuotaExceededError(FileStoreError):
    """Raised when upload would exceed the storage quota."""

    def __init__(
        self,
        quota_bytes: int,
        used_bytes: int,
        required_bytes: int,
    ) -> None:
        """Initialize QuotaExceededError.

        Args:
            quota_bytes: Total quota limit in bytes.
            used_bytes: Currently used bytes.
            required_bytes: Bytes needed for the operation.
        """
        self.quota_bytes = quota_bytes
        self.used_bytes = used_bytes
        self.required_bytes = required_bytes

        available = max(0, quota_bytes - used_bytes)
        super().__init__(
            f'Quota exceeded: need {required_bytes} bytes, '
            f'only {available} bytes available '
            f'(quota: {quota_bytes}, used: {used_bytes})',
        )
