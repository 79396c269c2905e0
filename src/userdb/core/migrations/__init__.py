"""Schema migrations for userdb.

Migrations are named, ordered steps registered on a ``MigrationRegistry``.
``MigrationRunner`` applies each one at most once per database file,
tracking applied names in the ``_migrations`` table.

Modules
-------
runner      MigrationRegistry, MigrationRunner, MigrationResult
versions    The default registry (``createTables``)

Tags:
    userdb, migrations, schema, idempotent, DDL
"""

from userdb.core.migrations.runner import (
    Migration,
    MigrationRecord,
    MigrationRegistry,
    MigrationResult,
    MigrationRunner,
)
from userdb.core.migrations.versions import registry as default_registry

__all__ = [
    "Migration",
    "MigrationRecord",
    "MigrationRegistry",
    "MigrationResult",
    "MigrationRunner",
    "default_registry",
]
