"""Error types raised by the application tracker."""


class TrackerError(Exception):
    """Base class for tracker errors. str() is a user-facing message."""


class NotFoundError(TrackerError):
    """An operation referenced an application id that does not exist."""

    def __init__(self, application_id: int):
        self.application_id = application_id
        super().__init__(f"Application {application_id} not found")


class DuplicateEntryError(TrackerError):
    """A write would create a second application for the same company, role and location."""

    def __init__(self, company: str, job_title: str, location: str):
        self.company = company
        self.job_title = job_title
        self.location = location
        super().__init__(
            f"An application for {job_title} at {company} ({location}) already exists. "
            "You cannot apply to the same company, role, and location twice."
        )


class StorageFailure(TrackerError):
    """The underlying SQLite store failed."""


class MigrationError(TrackerError):
    """Base class for legacy migration failures."""


class MigrationSourceMissing(MigrationError):
    """The legacy store has no entry to migrate."""


class MigrationSourceEmpty(MigrationError):
    """The legacy entry exists but holds no applications."""


class MigrationParseError(MigrationError):
    """The legacy entry is not a valid list of applications."""
