"""Management command to report storage usage against the quota."""

import logging
from typing import Any

from django.core.management.base import BaseCommand, CommandError

from server.apps.files.exceptions import FileStoreError
from server.apps.files.logic.file_operations import FileStore
from server.apps.files.logic.quota_operations import (
    format_bytes,
    format_percentage,
    get_storage_usage,
)

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Print used and total storage for the root or a sub-folder."""

    help = 'Report storage usage against the quota'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--path',
            default='',
            help='Folder relative to the storage root (default: whole root)',
        )
        parser.add_argument(
            '--bytes',
            action='store_true',
            help='Print raw byte counts instead of formatted sizes',
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the report command.

        Args:
            args: Positional arguments (unused).
            options: Command options.

        Raises:
            CommandError: If the folder is invalid or missing.
        """
        store = FileStore.from_settings()
        rel_path = options['path']

        try:
            if rel_path:
                self._report_folder(store, rel_path, raw=options['bytes'])
                return
            usage = get_storage_usage(store)
        except FileStoreError as exc:
            raise CommandError(str(exc)) from exc

        if options['bytes']:
            self.stdout.write(f'Used: {usage.used_bytes}')
            self.stdout.write(f'Total: {usage.quota_bytes}')
        else:
            self.stdout.write(f'Used: {format_bytes(usage.used_bytes)}')
            self.stdout.write(f'Total: {format_bytes(usage.quota_bytes)}')

        message = f'{format_percentage(usage.percentage)} of quota used'
        if usage.has_space_for(0):
            self.stdout.write(self.style.SUCCESS(message))
        else:
            self.stdout.write(self.style.WARNING(f'{message} (over quota)'))

    def _report_folder(self, store: FileStore, rel_path: str, *, raw: bool) -> None:
        size_bytes = store.size_of(rel_path)
        size = str(size_bytes) if raw else format_bytes(size_bytes)
        self.stdout.write(f'{rel_path}: {size}')
