"""One-shot migration of applications from the legacy flat store into SQLite."""

import json
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from pydantic import ValidationError

from .legacy_store import LegacyStore
from ..tracking.database import ApplicationDatabase
from ..tracking.errors import (
    MigrationError,
    MigrationParseError,
    MigrationSourceEmpty,
    MigrationSourceMissing,
    StorageFailure,
)
from ..tracking.models import JobApplication
from ..utils.config import config
from ..utils.logging import get_logger

logger = get_logger(__name__)


class MigrationState(str, Enum):
    IDLE = "idle"
    MIGRATING = "migrating"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class MigrationResult:
    """Outcome of a migration run."""

    state: MigrationState
    message: str
    record_count: int = 0

    @property
    def ok(self) -> bool:
        return self.state == MigrationState.SUCCESS


def parse_legacy_applications(blob: str) -> List[JobApplication]:
    """Decode the legacy JSON array into application records.

    Args:
        blob: JSON text of the legacy entry

    Returns:
        List[JobApplication]: Records, keeping any ids they carried

    Raises:
        MigrationParseError: Not JSON, not an array, or an invalid record
        MigrationSourceEmpty: The array has no entries
    """
    if not isinstance(blob, str):
        raise MigrationParseError(
            f"Stored data must be JSON text, got {type(blob).__name__}"
        )

    try:
        data = json.loads(blob)
    except json.JSONDecodeError as e:
        raise MigrationParseError(f"Stored data is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise MigrationParseError(
            f"Stored data must be a list of applications, got {type(data).__name__}"
        )

    if not data:
        raise MigrationSourceEmpty("No applications to migrate")

    records = []
    for index, entry in enumerate(data):
        try:
            records.append(JobApplication.model_validate(entry))
        except ValidationError as e:
            raise MigrationParseError(
                f"Application #{index + 1} is invalid: {e.error_count()} problem(s), "
                f"first: {e.errors()[0]['msg']}"
            ) from e

    return records


class MigrationRoutine:
    """Copies the legacy application list into the record store.

    States run idle -> migrating -> success | error. An errored routine can
    be run again; it is reset to idle first. The clear and insert happen in
    one transaction, so a failed run leaves the previous rows in place.
    """

    def __init__(
        self,
        database: ApplicationDatabase,
        legacy_store: Optional[LegacyStore] = None,
        key: Optional[str] = None,
        remove_source: Optional[bool] = None
    ):
        """Initialize migration routine.

        Args:
            database: Destination record store
            legacy_store: Source flat store (default from config)
            key: Name of the legacy entry (default migration.legacy_key)
            remove_source: Drop the legacy entry after success (default migration.remove_source)
        """
        self.database = database
        self.legacy_store = legacy_store or LegacyStore()
        self.key = key or config.get('migration.legacy_key', 'jobApplications')
        if remove_source is None:
            remove_source = bool(config.get('migration.remove_source', False))
        self.remove_source = remove_source

        self.state = MigrationState.IDLE
        self.message = ""
        self.record_count = 0

    @property
    def result(self) -> MigrationResult:
        return MigrationResult(self.state, self.message, self.record_count)

    def _set_state(self, state: MigrationState, message: str):
        self.state = state
        self.message = message
        logger.debug(f"Migration {state.value}: {message}")

    def reset(self):
        """Return an errored routine to idle so it can be retried."""
        if self.state == MigrationState.MIGRATING:
            raise RuntimeError("Cannot reset while a migration is running")
        self._set_state(MigrationState.IDLE, "")
        self.record_count = 0

    def _read_source(self) -> List[JobApplication]:
        try:
            blob = self.legacy_store.get_item(self.key)
        except (OSError, ValueError) as e:
            raise MigrationParseError(f"Could not read legacy store: {e}") from e

        if not blob:
            raise MigrationSourceMissing(f"No data found in legacy store under '{self.key}'")

        return parse_legacy_applications(blob)

    def run(self) -> MigrationResult:
        """Replace the record store contents with the legacy applications.

        Returns:
            MigrationResult: Final state, message and number of records migrated
        """
        if self.state == MigrationState.MIGRATING:
            raise RuntimeError("Migration already in progress")
        if self.state == MigrationState.ERROR:
            self.reset()

        self._set_state(MigrationState.MIGRATING, "Reading data from legacy store...")

        try:
            records = self._read_source()
            self.record_count = len(records)

            self._set_state(
                MigrationState.MIGRATING,
                f"Migrating {self.record_count} applications to the database..."
            )
            self.database.replace_all(records)

        except MigrationError as e:
            logger.error(f"Migration error: {e}")
            self._set_state(MigrationState.ERROR, str(e))
            return self.result

        except StorageFailure as e:
            logger.error(f"Migration error: {e}")
            self._set_state(MigrationState.ERROR, f"Migration failed: {e}")
            return self.result

        except Exception as e:
            logger.exception(f"Unexpected migration error: {e}")
            self._set_state(MigrationState.ERROR, f"Migration failed: {e}")
            return self.result

        self._set_state(
            MigrationState.SUCCESS,
            f"Successfully migrated {self.record_count} applications!"
        )
        logger.info(self.message)

        if self.remove_source:
            try:
                self.legacy_store.remove_item(self.key)
            except OSError as e:
                logger.warning(f"Migrated, but could not remove legacy entry '{self.key}': {e}")

        return self.result

    def verify(self) -> int:
        """Number of applications now in the record store.

        Raises:
            StorageFailure: The store could not be read
        """
        count = self.database.count()
        logger.info(f"Database contains {count} applications")
        return count
