"""Tests for path resolution under the storage root."""

import pytest

from server.apps.files.exceptions import InvalidPathError
from server.apps.files.infrastructure.paths import (
    PathResolver,
    validate_name,
    validate_rename_target,
    validate_upload_name,
)


@pytest.fixture
def resolver(storage_root):
    """Create PathResolver for the storage root.

    Returns:
        PathResolver instance.
    """
    return PathResolver(storage_root)


class TestPathResolverSplit:
    """Tests for split method."""

    def test_root_path(self, resolver):
        """Test empty and slash-only paths mean the root."""
        assert resolver.split('') == []
        assert resolver.split('/') == []
        assert resolver.split('.') == []

    def test_nested_path(self, resolver):
        """Test splitting nested path."""
        assert resolver.split('documents/reports') == ['documents', 'reports']

    def test_normalizes_separators(self, resolver):
        """Test redundant and backslash separators are normalized."""
        assert resolver.split('//documents\\reports/./') == [
            'documents',
            'reports',
        ]

    def test_rejects_parent_segment(self, resolver):
        """Test that path traversal is rejected."""
        with pytest.raises(InvalidPathError):
            resolver.split('..')
        with pytest.raises(InvalidPathError):
            resolver.split('documents/../../etc')
        with pytest.raises(InvalidPathError):
            resolver.split('documents\\..\\..')

    def test_rejects_null_bytes(self, resolver):
        """Test that null bytes are rejected."""
        with pytest.raises(InvalidPathError):
            resolver.split('file\x00.txt')

    def test_allows_dots_inside_segment(self, resolver):
        """Test '..' is only rejected as a whole segment."""
        assert resolver.split('v1..2/notes') == ['v1..2', 'notes']


class TestPathResolverResolve:
    """Tests for resolve method."""

    def test_resolve_root(self, resolver, storage_root):
        """Test resolving the root itself."""
        assert resolver.resolve('') == storage_root.resolve()

    def test_resolve_with_name(self, resolver, storage_root):
        """Test joining folder and name."""
        expected = (storage_root / 'docs' / 'a.txt').resolve()

        assert resolver.resolve('docs', 'a.txt') == expected

    def test_resolve_rejects_symlink_escape(
        self,
        resolver,
        storage_root,
        outside_dir,
    ):
        """Test symlinks leading outside the root are rejected."""
        (storage_root / 'escape').symlink_to(outside_dir)

        with pytest.raises(InvalidPathError):
            resolver.resolve('escape')

    def test_resolve_allows_symlink_inside_root(self, resolver, storage_root):
        """Test symlinks staying inside the root are fine."""
        (storage_root / 'real').mkdir()
        (storage_root / 'alias').symlink_to(storage_root / 'real')

        assert resolver.resolve('alias') == (storage_root / 'real').resolve()

    def test_to_relative(self, resolver, storage_root):
        """Test converting absolute paths back to client paths."""
        assert resolver.to_relative(storage_root) == ''
        assert resolver.to_relative(storage_root / 'docs' / 'a.txt') == (
            'docs/a.txt'
        )


class TestPathResolverHelpers:
    """Tests for helper methods."""

    def test_normalize(self, resolver):
        """Test canonical form of client paths."""
        assert resolver.normalize('/docs//reports/') == 'docs/reports'
        assert resolver.normalize('') == ''

    def test_join_paths(self, resolver):
        """Test joining parent path and name."""
        assert resolver.join_paths('', 'file.txt') == 'file.txt'
        assert resolver.join_paths('/docs/', 'file.txt') == 'docs/file.txt'

    def test_is_root(self, resolver):
        """Test root path detection."""
        assert resolver.is_root('') is True
        assert resolver.is_root('/') is True
        assert resolver.is_root('docs') is False


class TestNameValidation:
    """Tests for entry name validation."""

    @pytest.mark.parametrize('name', ['a.txt', 'My Folder', '.hidden'])
    def test_valid_names(self, name):
        """Test ordinary names pass."""
        validate_name(name)

    @pytest.mark.parametrize('name', [
        '',
        '   ',
        '.',
        '..',
        'a..b',
        'a/b',
        'a\\b',
        'a\x00b',
        'a\nb',
        'a\rb',
        'tab\there',
    ])
    def test_invalid_names(self, name):
        """Test malformed names are rejected."""
        with pytest.raises(InvalidPathError):
            validate_name(name)

    def test_rename_target_allows_separator(self):
        """Test rename operands may point into a sub-folder."""
        validate_rename_target('docs/a.txt')

    @pytest.mark.parametrize('name', ['', '/', '../a', 'a..b', 'a\nb'])
    def test_rename_target_invalid(self, name):
        """Test rename operands with '..' or nothing are rejected."""
        with pytest.raises(InvalidPathError):
            validate_rename_target(name)

    @pytest.mark.parametrize('name', ['v1..2.txt', 'notes..txt', '..hidden'])
    def test_upload_name_allows_inner_dots(self, name):
        """Test upload names only refuse '..' as the whole name."""
        validate_upload_name(name)

    @pytest.mark.parametrize('name', ['', '.', '..', 'a/b', 'a\nb'])
    def test_upload_name_invalid(self, name):
        """Test malformed upload names are rejected."""
        with pytest.raises(InvalidPathError):
            validate_upload_name(name)


class TestPathResolverResolveEntry:
    """Tests for resolve_entry method."""

    def test_keeps_symlink_as_last_segment(self, resolver, storage_root):
        """Test a link is returned as the link, not its target."""
        (storage_root / 'real.txt').write_bytes(b'real')
        (storage_root / 'link.txt').symlink_to(storage_root / 'real.txt')

        entry = resolver.resolve_entry('', 'link.txt')

        assert entry == storage_root.resolve() / 'link.txt'
        assert entry.is_symlink()
        assert resolver.to_relative(entry) == 'link.txt'

    def test_nested_name(self, resolver, storage_root):
        """Test separators in the name reach into sub-folders."""
        assert resolver.resolve_entry('docs', 'sub/a.txt') == (
            storage_root.resolve() / 'docs' / 'sub' / 'a.txt'
        )

    def test_rejects_root(self, resolver):
        """Test an empty path does not name an entry."""
        with pytest.raises(InvalidPathError):
            resolver.resolve_entry('', '.')

    def test_rejects_parent_escape(self, resolver, storage_root, outside_dir):
        """Test a parent link leading outside the root is rejected."""
        (storage_root / 'escape').symlink_to(outside_dir)

        with pytest.raises(InvalidPathError):
            resolver.resolve_entry('escape', 'secret.txt')
