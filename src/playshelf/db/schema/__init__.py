"""Database schema management for playshelf.

This package provides schema definition, version management, and migrations
for the catalog database.

Module organization:
- definition.py: Schema DDL and creation (SCHEMA_VERSION, SCHEMA_SQL, create_schema)
- version.py: Version query helper (get_schema_version)
- initialize.py: Database initialization orchestration (initialize_database)
- migrations/: All schema migration functions

Usage:
    from playshelf.db.schema import initialize_database, SCHEMA_VERSION
"""

from .definition import SCHEMA_SQL, SCHEMA_VERSION, create_schema
from .initialize import initialize_database
from .migrations import migrate_v1_to_v2
from .version import get_schema_version

__all__ = [
    "SCHEMA_SQL",
    "SCHEMA_VERSION",
    "create_schema",
    "get_schema_version",
    "initialize_database",
    "migrate_v1_to_v2",
]
