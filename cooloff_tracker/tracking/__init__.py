"""Application tracking - record store, cool-off rules and the paginated view."""

from .database import ApplicationDatabase, get_application_database
from .eligibility import compute_cool_off_end, days_remaining, is_cool_off_active
from .errors import (
    DuplicateEntryError,
    MigrationError,
    MigrationParseError,
    MigrationSourceEmpty,
    MigrationSourceMissing,
    NotFoundError,
    StorageFailure,
    TrackerError,
)
from .manager import ApplicationManager, Page, Stats, get_application_manager
from .models import ApplicationDraft, ApplicationStatus, CoolOffStartType, JobApplication

__all__ = [
    'ApplicationDatabase',
    'get_application_database',
    'compute_cool_off_end',
    'days_remaining',
    'is_cool_off_active',
    'DuplicateEntryError',
    'MigrationError',
    'MigrationParseError',
    'MigrationSourceEmpty',
    'MigrationSourceMissing',
    'NotFoundError',
    'StorageFailure',
    'TrackerError',
    'ApplicationManager',
    'Page',
    'Stats',
    'get_application_manager',
    'ApplicationDraft',
    'ApplicationStatus',
    'CoolOffStartType',
    'JobApplication',
]
