"""API route modules for the playshelf server.

Each module handles a specific domain:

- videos.py: Listing, detail and per-video mutations
- folders.py: Folder browsing
- playlists.py: Playlists and membership
- history.py: Watch history
- settings.py: Persisted settings
- scan.py: Starting scans and reading their status
- stream.py: Resolving a video id to its file
- routes.py: Registration under ``/api/`` and ``/api/v1/``

Shared pieces live in errors.py (error codes, ``api_error``), models.py
(query parsing, request bodies, serialization) and common.py (body parsing,
running catalog work in a thread).

Resource ID Schemes:
    - Videos: ``vid-`` plus a hash of the relative path
    - Playlists: ``pl-`` plus a UUID4 hex string
"""
