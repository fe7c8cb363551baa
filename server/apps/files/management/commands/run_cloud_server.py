"""Django management command to run the cloud drive server."""

import logging
import os
import shlex
import sys
from typing import Any, final

from typing_extensions import override

from cheroot.wsgi import Server as WSGIServer
from django.conf import settings
from django.core.management.base import BaseCommand
from django.core.wsgi import get_wsgi_application

logger = logging.getLogger(__name__)

# Set for the server process spawned by --reload
_RELOAD_ENV_VAR = 'CLOUD_RELOAD_SUBPROCESS'


@final
class Command(BaseCommand):
    """Run the cloud drive using cheroot's threaded WSGI server."""

    help = 'Run the cloud drive HTTP server'

    @override
    def add_arguments(self, parser: Any) -> None:
        """Add command arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--host',
            type=str,
            default=None,
            help='Host to bind to (default: from settings)',
        )
        parser.add_argument(
            '--port',
            type=int,
            default=None,
            help='Port to bind to (default: from settings)',
        )
        parser.add_argument(
            '--threads',
            type=int,
            default=None,
            help='Worker threads, one request each (default: from settings)',
        )
        parser.add_argument(
            '--reload',
            action='store_true',
            default=False,
            help='Enable auto-reload on code changes (development only)',
        )

    @override
    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the command.

        Args:
            args: Positional arguments.
            options: Keyword arguments from command line.
        """
        is_child = os.environ.get(_RELOAD_ENV_VAR) == 'true'

        if options['reload'] and not is_child:
            self._run_with_reload(options)
        else:
            self._run_server(options)

    def _build_server(self, options: dict[str, Any]) -> WSGIServer:
        """Create the cheroot server for the Django application.

        Args:
            options: Command options.

        Returns:
            Configured, not yet started, WSGI server.
        """
        host = options['host'] or settings.CLOUD_HOST
        port = options['port'] or settings.CLOUD_PORT
        threads = options['threads'] or settings.CLOUD_SERVER_THREADS

        server = WSGIServer(
            bind_addr=(host, port),
            wsgi_app=get_wsgi_application(),
            numthreads=threads,
        )

        # Sent as the Server response header
        server.server_name = 'CloudDrive'
        return server

    def _run_server(self, options: dict[str, Any]) -> None:
        """Run the server directly.

        Args:
            options: Command options.
        """
        server = self._build_server(options)
        host, port = server.bind_addr

        self.stdout.write(
            self.style.SUCCESS(
                f'Starting cloud drive on {host}:{port} '
                f'(storage root: {settings.CLOUD_STORAGE_ROOT})',
            ),
        )

        try:
            logger.info(
                'Cloud drive starting on %s:%d with %d threads',
                host,
                port,
                options['threads'] or settings.CLOUD_SERVER_THREADS,
            )
            server.start()
        except KeyboardInterrupt:
            self.stdout.write(self.style.WARNING('\nShutting down...'))
        finally:
            server.stop()
            self.stdout.write(self.style.SUCCESS('Cloud drive stopped'))

    def _run_with_reload(self, options: dict[str, Any]) -> None:
        """Restart the server in a child process whenever code changes.

        Python sources under ``server/`` and the ``config/.env`` file are
        watched.

        Args:
            options: Command options.
        """
        try:
            import watchfiles  # noqa: PLC0415
        except ImportError:
            self.stderr.write(
                self.style.ERROR(
                    'watchfiles is required for --reload. '
                    "Install with: pip install -e '.[dev]'",
                ),
            )
            sys.exit(1)

        self.stdout.write(
            self.style.SUCCESS(
                'Starting cloud drive with auto-reload enabled...',
            ),
        )
        os.environ[_RELOAD_ENV_VAR] = 'true'
        watchfiles.run_process(
            settings.BASE_DIR / 'server',
            settings.BASE_DIR / 'config',
            target=shlex.join(_child_command(options)),
            target_type='command',
            watch_filter=watchfiles.PythonFilter(extra_extensions=('.env',)),
            callback=self._report_changes,
        )

    def _report_changes(self, changes: set[tuple[Any, str]]) -> None:
        """Print what triggered a restart.

        Args:
            changes: Set of (change_type, path) tuples from watchfiles.
        """
        for change_type, path in sorted(changes):
            self.stdout.write(
                self.style.WARNING(f'{change_type.name}: {path}'),
            )
        self.stdout.write(self.style.SUCCESS('Restarting cloud drive...'))


def _child_command(options: dict[str, Any]) -> list[str]:
    """Build the argv of the server process run under the reloader.

    Args:
        options: Command options of the parent.

    Returns:
        Command line without ``--reload``.
    """
    argv = [sys.executable, '-m', 'django', 'run_cloud_server']
    for option in ('host', 'port', 'threads'):
        if options[option]:
            argv.extend([f'--{option}', str(options[option])])
    return argv
