"""Migration from the legacy flat store into the SQLite record store."""

from .legacy_store import LegacyStore
from .migrator import MigrationResult, MigrationRoutine, MigrationState, parse_legacy_applications

__all__ = [
    'LegacyStore',
    'MigrationResult',
    'MigrationRoutine',
    'MigrationState',
    'parse_legacy_applications',
]
