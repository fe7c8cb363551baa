"""Infrastructure layer for files app.

This package contains integrations with external systems:
- Local filesystem storage backend
- Path resolution confined to the storage root
- Zip streaming and file metadata

Keep infrastructure concerns separate from business logic.
"""
