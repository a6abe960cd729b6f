"""SQLite record store for tracked job applications."""

import sqlite3
from enum import Enum
from datetime import date
from pathlib import Path
from typing import Any, Iterable, List, Optional, Union

from .errors import NotFoundError, StorageFailure
from .models import JobApplication
from ..utils.config import config
from ..utils.logging import get_logger

logger = get_logger(__name__)

MEMORY = ":memory:"

# Columns with a secondary index; equality counts and sorting are limited to these
INDEXED_FIELDS = (
    'company',
    'job_title',
    'location',
    'status',
    'applied_date',
    'cool_off_ends',
    'cool_off_start_type',
)

SORTABLE_FIELDS = ('id',) + INDEXED_FIELDS


def _to_sql(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    return value


def _casefold(value: Optional[str]) -> Optional[str]:
    return value.casefold() if value is not None else None


class ApplicationDatabase:
    """Manages the SQLite table of job applications."""

    def __init__(self, db_path: Optional[Union[str, Path]] = None):
        """Initialize application database.

        Args:
            db_path: Path to SQLite database file, or ':memory:'. Defaults to
                COOLOFF_TRACKER_DB, then the config setting.
        """
        if db_path is None:
            db_path = config.get_database_path()

        self.db_path = str(db_path)
        if self.db_path != MEMORY:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        self.conn = None
        self._initialize_database()

    def _initialize_database(self):
        """Create database schema if it doesn't exist."""
        try:
            self.conn = sqlite3.connect(self.db_path)
            self.conn.row_factory = sqlite3.Row
            self.conn.create_function("casefold", 1, _casefold, deterministic=True)

            with self.conn:
                self.conn.execute("""
                    CREATE TABLE IF NOT EXISTS applications (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        company TEXT NOT NULL,
                        job_title TEXT NOT NULL,
                        location TEXT NOT NULL,
                        status TEXT NOT NULL DEFAULT 'Applied',
                        applied_date TEXT NOT NULL,
                        cool_off_ends TEXT NOT NULL,
                        cool_off_start_type TEXT NOT NULL DEFAULT 'application'
                    )
                """)

                for field in INDEXED_FIELDS:
                    self.conn.execute(
                        f"CREATE INDEX IF NOT EXISTS idx_applications_{field} "
                        f"ON applications({field})"
                    )

        except sqlite3.Error as e:
            logger.error(f"Failed to open database at {self.db_path}: {e}")
            raise StorageFailure(f"Could not open application database: {e}") from e

        logger.info(f"Database initialized at {self.db_path}")

    @property
    def _open_conn(self) -> sqlite3.Connection:
        if self.conn is None:
            logger.error(f"Database at {self.db_path} used after close")
            raise StorageFailure("Application database is closed")
        return self.conn

    def add(self, record: JobApplication) -> int:
        """Add a new application, ignoring any id it carries.

        Args:
            record: Application to store

        Returns:
            int: The id assigned by the store
        """
        row = record.to_row()
        row.pop('id')

        try:
            with self._open_conn:
                cursor = self._open_conn.execute("""
                    INSERT INTO applications (
                        company, job_title, location, status,
                        applied_date, cool_off_ends, cool_off_start_type
                    )
                    VALUES (
                        :company, :job_title, :location, :status,
                        :applied_date, :cool_off_ends, :cool_off_start_type
                    )
                """, row)

            application_id = cursor.lastrowid
            logger.info(f"Added application {application_id}: {record.job_title} at {record.company}")
            return application_id

        except sqlite3.Error as e:
            logger.error(f"Failed to add application: {e}")
            raise StorageFailure(f"Failed to save application: {e}") from e

    def get(self, application_id: int) -> Optional[JobApplication]:
        """Get a specific application by ID.

        Args:
            application_id: Application database ID

        Returns:
            Optional[JobApplication]: Record or None if not found
        """
        try:
            cursor = self._open_conn.execute(
                "SELECT * FROM applications WHERE id = ?", (application_id,)
            )
            row = cursor.fetchone()

        except sqlite3.Error as e:
            logger.error(f"Failed to get application {application_id}: {e}")
            raise StorageFailure(f"Failed to load application {application_id}: {e}") from e

        return JobApplication.from_row(row) if row else None

    def update(self, application_id: int, **fields) -> JobApplication:
        """Merge fields into a stored application.

        Args:
            application_id: Application database ID
            **fields: Attribute names (snake_case) and their new values

        Returns:
            JobApplication: The updated record

        Raises:
            NotFoundError: No application with that id
            ValueError: Unknown field, or an attempt to change the id
        """
        for immutable in ('id', 'applied_date'):
            if immutable in fields:
                raise ValueError(f"Application {immutable} cannot be changed")

        unknown = set(fields) - set(JobApplication.model_fields)
        if unknown:
            raise ValueError(f"Unknown application fields: {', '.join(sorted(unknown))}")

        current = self.get(application_id)
        if current is None:
            logger.warning(f"Application {application_id} not found")
            raise NotFoundError(application_id)

        updated = JobApplication.model_validate({**current.model_dump(), **fields})
        row = updated.to_row()

        try:
            with self._open_conn:
                self._open_conn.execute("""
                    UPDATE applications
                    SET company = :company, job_title = :job_title, location = :location,
                        status = :status, applied_date = :applied_date,
                        cool_off_ends = :cool_off_ends, cool_off_start_type = :cool_off_start_type
                    WHERE id = :id
                """, row)

        except sqlite3.Error as e:
            logger.error(f"Failed to update application {application_id}: {e}")
            raise StorageFailure(f"Failed to update application {application_id}: {e}") from e

        logger.info(f"Updated application {application_id}: {', '.join(sorted(fields))}")
        return updated

    def delete(self, application_id: int) -> bool:
        """Delete an application from the database.

        Args:
            application_id: Application database ID

        Returns:
            bool: True if a row was deleted, False if the id was absent
        """
        try:
            with self._open_conn:
                cursor = self._open_conn.execute(
                    "DELETE FROM applications WHERE id = ?", (application_id,)
                )

        except sqlite3.Error as e:
            logger.error(f"Failed to delete application {application_id}: {e}")
            raise StorageFailure(f"Failed to delete application {application_id}: {e}") from e

        if cursor.rowcount > 0:
            logger.info(f"Deleted application {application_id}")
            return True

        logger.warning(f"Application {application_id} not found")
        return False

    def count(self) -> int:
        """Total number of stored applications."""
        try:
            cursor = self._open_conn.execute("SELECT COUNT(*) AS total FROM applications")
            return cursor.fetchone()['total']

        except sqlite3.Error as e:
            logger.error(f"Failed to count applications: {e}")
            raise StorageFailure(f"Failed to count applications: {e}") from e

    def count_where(self, field: str, value: Any) -> int:
        """Count applications whose indexed `field` equals `value`.

        Args:
            field: One of INDEXED_FIELDS
            value: Value to match; enums and dates are compared by their stored text

        Returns:
            int: Number of matching applications
        """
        if field not in INDEXED_FIELDS:
            raise ValueError(f"Field is not indexed: {field}")

        try:
            cursor = self._open_conn.execute(
                f"SELECT COUNT(*) AS total FROM applications WHERE {field} = ?",
                (_to_sql(value),)
            )
            return cursor.fetchone()['total']

        except sqlite3.Error as e:
            logger.error(f"Failed to count applications by {field}: {e}")
            raise StorageFailure(f"Failed to count applications: {e}") from e

    def query(
        self,
        sort_field: str = 'applied_date',
        direction: str = 'desc',
        offset: int = 0,
        limit: int = 10
    ) -> List[JobApplication]:
        """Fetch a contiguous, ordered slice of applications.

        Rows that tie on `sort_field` are ordered by id in the same direction,
        so consecutive slices never overlap or skip rows.

        Args:
            sort_field: Column to order by (id or an indexed field)
            direction: 'asc' or 'desc'
            offset: Skip first N results
            limit: Maximum number of results

        Returns:
            List[JobApplication]: Records in order
        """
        if sort_field not in SORTABLE_FIELDS:
            raise ValueError(f"Cannot sort by {sort_field}")

        direction = direction.upper()
        if direction not in ('ASC', 'DESC'):
            raise ValueError(f"Sort direction must be 'asc' or 'desc', got {direction!r}")

        if offset < 0 or limit < 0:
            raise ValueError("offset and limit must not be negative")

        order_by = f"{sort_field} {direction}"
        if sort_field != 'id':
            order_by += f", id {direction}"

        try:
            cursor = self._open_conn.execute(
                f"SELECT * FROM applications ORDER BY {order_by} LIMIT ? OFFSET ?",
                (limit, offset)
            )
            rows = cursor.fetchall()

        except sqlite3.Error as e:
            logger.error(f"Failed to query applications: {e}")
            raise StorageFailure(f"Failed to load applications: {e}") from e

        return [JobApplication.from_row(row) for row in rows]

    def all(self) -> List[JobApplication]:
        """Every stored application, in id order."""
        try:
            rows = self._open_conn.execute("SELECT * FROM applications ORDER BY id").fetchall()

        except sqlite3.Error as e:
            logger.error(f"Failed to read applications: {e}")
            raise StorageFailure(f"Failed to load applications: {e}") from e

        return [JobApplication.from_row(row) for row in rows]

    def find_duplicate(
        self,
        company: str,
        job_title: str,
        location: str,
        exclude_id: Optional[int] = None
    ) -> Optional[JobApplication]:
        """Find an application with the same company, title and location, ignoring case.

        Args:
            company: Company name
            job_title: Job title
            location: Job location
            exclude_id: Application to ignore (the one being edited)

        Returns:
            Optional[JobApplication]: The clashing record, if any
        """
        try:
            cursor = self._open_conn.execute("""
                SELECT * FROM applications
                WHERE casefold(company) = casefold(?)
                  AND casefold(job_title) = casefold(?)
                  AND casefold(location) = casefold(?)
                  AND (? IS NULL OR id != ?)
                ORDER BY id
                LIMIT 1
            """, (company, job_title, location, exclude_id, exclude_id))
            row = cursor.fetchone()

        except sqlite3.Error as e:
            logger.error(f"Failed to check for duplicate application: {e}")
            raise StorageFailure(f"Failed to check for duplicates: {e}") from e

        return JobApplication.from_row(row) if row else None

    def _delete_all(self) -> int:
        return self._open_conn.execute("DELETE FROM applications").rowcount

    def _insert_all(self, records: Iterable[JobApplication]) -> int:
        rows = [record.to_row() for record in records]
        self._open_conn.executemany("""
            INSERT INTO applications (
                id, company, job_title, location, status,
                applied_date, cool_off_ends, cool_off_start_type
            )
            VALUES (
                :id, :company, :job_title, :location, :status,
                :applied_date, :cool_off_ends, :cool_off_start_type
            )
        """, rows)
        return len(rows)

    def clear(self) -> int:
        """Clear all applications from the database.

        WARNING: This deletes all application records permanently.

        Returns:
            int: Number of rows removed
        """
        try:
            with self._open_conn:
                removed = self._delete_all()

        except sqlite3.Error as e:
            logger.error(f"Failed to clear database: {e}")
            raise StorageFailure(f"Failed to clear applications: {e}") from e

        logger.warning(f"Cleared all applications from database ({removed} rows)")
        return removed

    def bulk_insert(self, records: Iterable[JobApplication]) -> int:
        """Insert records keeping their ids; records without an id get a fresh one.

        Returns:
            int: Number of rows inserted
        """
        try:
            with self._open_conn:
                inserted = self._insert_all(records)

        except sqlite3.Error as e:
            logger.error(f"Bulk insert failed: {e}")
            raise StorageFailure(f"Failed to insert applications: {e}") from e

        logger.info(f"Bulk inserted {inserted} applications")
        return inserted

    def replace_all(self, records: Iterable[JobApplication]) -> int:
        """Replace the whole table with `records` in a single transaction.

        If the insert fails the delete is rolled back and the previous rows
        remain.

        Returns:
            int: Number of rows inserted
        """
        try:
            with self._open_conn:
                removed = self._delete_all()
                inserted = self._insert_all(records)

        except sqlite3.Error as e:
            logger.error(f"Replacing applications failed, rolled back: {e}")
            raise StorageFailure(f"Failed to replace applications: {e}") from e

        logger.warning(f"Replaced {removed} applications with {inserted} records")
        return inserted

    def close(self):
        """Close database connection."""
        if getattr(self, "conn", None):
            self.conn.close()
            self.conn = None
            logger.debug("Database connection closed")

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def __del__(self):
        """Cleanup on deletion."""
        self.close()


# Singleton instance
_application_database = None


def get_application_database() -> ApplicationDatabase:
    """Get the process-wide ApplicationDatabase, opening it on first use.

    Prefer constructing ApplicationDatabase and passing it in; this accessor
    is for callers that want the configured default store.

    Returns:
        ApplicationDatabase: Global database instance
    """
    global _application_database
    if _application_database is None:
        _application_database = ApplicationDatabase()
    return _application_database
