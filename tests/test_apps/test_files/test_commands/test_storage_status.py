"""Tests for storage_status management command."""

from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError


class TestStorageStatusCommand:
    """Tests for storage_status management command."""

    def test_reports_formatted_usage(self, cloud_settings, populated_root):
        """Test default output uses formatted sizes."""
        out = StringIO()
        call_command('storage_status', stdout=out)

        output = out.getvalue()
        assert 'Used: 15.00 B' in output
        assert 'Total: 100.00 GB' in output
        assert '0.00% of quota used' in output
        assert 'over quota' not in output

    def test_reports_raw_bytes(self, cloud_settings, populated_root):
        """Test --bytes prints raw counts."""
        cloud_settings.CLOUD_QUOTA_BYTES = 1000
        out = StringIO()
        call_command('storage_status', '--bytes', stdout=out)

        output = out.getvalue()
        assert 'Used: 15' in output
        assert 'Total: 1000' in output
        assert '1.50% of quota used' in output

    def test_reports_over_quota(self, cloud_settings, populated_root):
        """Test usage above the quota is flagged."""
        cloud_settings.CLOUD_QUOTA_BYTES = 10
        out = StringIO()
        call_command('storage_status', stdout=out)

        assert '150.00% of quota used (over quota)' in out.getvalue()

    def test_reports_folder(self, cloud_settings, populated_root):
        """Test --path reports one sub-folder."""
        out = StringIO()
        call_command('storage_status', '--path', 'docs', stdout=out)

        assert out.getvalue().strip() == 'docs: 5.00 B'

    def test_missing_folder(self, cloud_settings):
        """Test a missing folder is a command error."""
        with pytest.raises(CommandError):
            call_command('storage_status', '--path', 'missing')

    def test_traversal(self, cloud_settings):
        """Test traversal is a command error."""
        with pytest.raises(CommandError):
            call_command('storage_status', '--path', '../..')
