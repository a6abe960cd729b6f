"""Application manager - the operations the tracker UI calls.

Wraps the record store with the duplicate rule, the cool-off rules and the
paginated, date-sorted view plus summary statistics.
"""

import math
from dataclasses import dataclass
from datetime import date
from typing import Callable, List, Optional

from .database import ApplicationDatabase, get_application_database
from .eligibility import compute_cool_off_end, cool_off_after_status_change, is_cool_off_active
from .errors import DuplicateEntryError, NotFoundError, StorageFailure
from .models import ApplicationDraft, ApplicationStatus, JobApplication
from ..utils.config import config
from ..utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


@dataclass
class Page:
    """One page of applications, newest first."""

    records: List[JobApplication]
    total_count: int
    page_number: int = 1
    page_size: int = 10

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size) if self.page_size else 0

    @property
    def first_index(self) -> int:
        """1-based position of the first record on this page ("Showing X to ...")."""
        if not self.records:
            return 0
        return (self.page_number - 1) * self.page_size + 1

    @property
    def last_index(self) -> int:
        if not self.records:
            return 0
        return min(self.page_number * self.page_size, self.total_count)


@dataclass
class Stats:
    """Summary counts shown above the application table."""

    total: int = 0
    interviewing: int = 0
    offers: int = 0
    active_cool_offs: int = 0


def visible_page_numbers(current: int, total_pages: int) -> List[Optional[int]]:
    """Page buttons to show: first, last, and neighbours of the current page.

    A gap between shown pages is marked with None (an ellipsis).
    """
    pages = [
        page for page in range(1, total_pages + 1)
        if page == 1 or page == total_pages or abs(page - current) <= 1
    ]

    window: List[Optional[int]] = []
    for page in pages:
        if window and page - window[-1] > 1:
            window.append(None)
        window.append(page)
    return window


class ApplicationManager:
    """Create, edit and list job applications.

    Mutations return the stored record and raise on failure; callers decide
    when to reload the page and stats. Reads keep the last good result if the
    store fails.
    """

    def __init__(
        self,
        database: Optional[ApplicationDatabase] = None,
        page_size: Optional[int] = None,
        clock: Optional[Callable[[], date]] = None,
        cool_off_months: Optional[int] = None
    ):
        """Initialize application manager.

        Args:
            database: Record store (defaults to the configured global store)
            page_size: Applications per page (default from config)
            clock: Returns today's date (default date.today)
            cool_off_months: Cool-off length (default from config)
        """
        self.database = database or get_application_database()
        self.page_size = page_size or config.page_size
        self.clock = clock or date.today
        self.cool_off_months = cool_off_months or config.cool_off_months

        self._last_page = Page(records=[], total_count=0, page_size=self.page_size)
        self._last_stats = Stats()

        logger.info("ApplicationManager initialized")

    def today(self) -> date:
        return self.clock()

    def is_duplicate(self, draft: ApplicationDraft, exclude_id: Optional[int] = None) -> bool:
        """Whether another application has the same company, title and location (any case)."""
        existing = self.database.find_duplicate(
            draft.company, draft.job_title, draft.location, exclude_id=exclude_id
        )
        return existing is not None

    def _check_duplicate(self, draft: ApplicationDraft, exclude_id: Optional[int] = None):
        if self.is_duplicate(draft, exclude_id=exclude_id):
            logger.info(
                f"Rejected duplicate application: {draft.job_title} at {draft.company} ({draft.location})"
            )
            raise DuplicateEntryError(draft.company, draft.job_title, draft.location)

    def create_application(self, draft: ApplicationDraft) -> JobApplication:
        """Record a new application dated today.

        Args:
            draft: Form fields

        Returns:
            JobApplication: The stored record with its new id

        Raises:
            DuplicateEntryError: Same company, title and location already tracked
            StorageFailure: The store could not be written
        """
        self._check_duplicate(draft)

        applied_date = self.today()
        record = JobApplication(
            **draft.model_dump(),
            applied_date=applied_date,
            cool_off_ends=compute_cool_off_end(applied_date, self.cool_off_months),
        )
        record.id = self.database.add(record)
        return record

    def update_application(self, application_id: int, draft: ApplicationDraft) -> JobApplication:
        """Save edited form fields. The applied date and cool-off end are left as they are.

        Raises:
            NotFoundError: No application with that id
            DuplicateEntryError: The edit would clash with a different application
        """
        if self.database.get(application_id) is None:
            raise NotFoundError(application_id)

        self._check_duplicate(draft, exclude_id=application_id)
        return self.database.update(application_id, **draft.model_dump())

    def delete_application(self, application_id: int) -> None:
        """Delete an application.

        Raises:
            NotFoundError: No application with that id
        """
        if not self.database.delete(application_id):
            raise NotFoundError(application_id)

    def change_status(self, application_id: int, new_status: ApplicationStatus) -> JobApplication:
        """Move an application to a new status.

        Rejecting an application whose cool-off starts on rejection restarts
        the cool-off from today.

        Raises:
            NotFoundError: No application with that id
        """
        new_status = ApplicationStatus(new_status)

        record = self.database.get(application_id)
        if record is None:
            raise NotFoundError(application_id)

        cool_off_ends = cool_off_after_status_change(
            record, new_status, self.today(), self.cool_off_months
        )
        if cool_off_ends != record.cool_off_ends:
            logger.info(f"Application {application_id} cool-off restarted, now ends {cool_off_ends}")

        return self.database.update(application_id, status=new_status, cool_off_ends=cool_off_ends)

    def load_page(self, page_number: int = 1, page_size: Optional[int] = None) -> Page:
        """Get one page of applications sorted by applied date, newest first.

        Args:
            page_number: 1-based page number
            page_size: Override the configured page size

        Returns:
            Page: Records plus the unfiltered total. If the store fails, the
                previously loaded page.
        """
        if page_number < 1:
            raise ValueError(f"Page number must be at least 1, got {page_number}")

        page_size = page_size or self.page_size
        offset = (page_number - 1) * page_size

        try:
            total = self.database.count()
            records = self.database.query(
                sort_field='applied_date',
                direction='desc',
                offset=offset,
                limit=page_size
            )
        except StorageFailure as e:
            logger.error(f"Error loading applications: {e}")
            return self._last_page

        self._last_page = Page(
            records=records,
            total_count=total,
            page_number=page_number,
            page_size=page_size
        )
        return self._last_page

    def load_stats(self) -> Stats:
        """Get summary statistics.

        Returns:
            Stats: total, interviewing, offers and active cool-offs. If the
                store fails, the previously loaded stats.
        """
        try:
            total = self.database.count()
            interviewing = self.database.count_where('status', ApplicationStatus.INTERVIEWING)
            offers = self.database.count_where('status', ApplicationStatus.OFFER)

            # Cool-off state depends on today, so it cannot come from an index
            today = self.today()
            active = sum(
                1 for record in self.database.all()
                if is_cool_off_active(record.cool_off_ends, today)
            )
        except StorageFailure as e:
            logger.error(f"Error loading stats: {e}")
            return self._last_stats

        self._last_stats = Stats(
            total=total,
            interviewing=interviewing,
            offers=offers,
            active_cool_offs=active
        )
        return self._last_stats


# Singleton instance
_application_manager = None


def get_application_manager() -> ApplicationManager:
    """Get singleton ApplicationManager instance.

    Logging is set up from the config on first use.

    Returns:
        ApplicationManager: Global manager bound to the global database
    """
    global _application_manager
    if _application_manager is None:
        configure_logging()
        _application_manager = ApplicationManager()
    return _application_manager
