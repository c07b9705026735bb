"""Database migrations for playshelf.

Each migration function is idempotent and safe to run multiple times.

Modules:
- v01_to_v02: Metadata provenance and history ordering (v1→v2)
"""

from .v01_to_v02 import migrate_v1_to_v2

__all__ = ["migrate_v1_to_v2"]
