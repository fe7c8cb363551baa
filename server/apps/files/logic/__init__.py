"""Business logic layer for files app.

This package contains all business logic for file operations:
- Listing, upload, download, rename, delete and folder creation
- Recursive size and streamed zip archives of folders
- Storage usage and quota checks

Views stay thin and delegate here; filesystem details live in
the infrastructure package.
"""
