"""Data models for tracked job applications."""

from datetime import date
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ApplicationStatus(str, Enum):
    APPLIED = "Applied"
    INTERVIEWING = "Interviewing"
    OFFER = "Offer"
    REJECTED = "Rejected"
    WITHDRAWN = "Withdrawn"


class CoolOffStartType(str, Enum):
    """Which event starts the cool-off clock."""
    APPLICATION = "application"
    REJECTION = "rejection"


class ApplicationDraft(BaseModel):
    """Editable fields of an application, as entered in the form.

    Attributes:
        company: Company name
        job_title: Role applied for
        location: Job location (city, state, or 'Remote')
        status: Current application status
        cool_off_start_type: Whether the cool-off runs from applying or from rejection
    """
    model_config = ConfigDict(populate_by_name=True)

    company: str
    job_title: str = Field(alias="jobTitle")
    location: str
    status: ApplicationStatus = ApplicationStatus.APPLIED
    cool_off_start_type: CoolOffStartType = Field(
        default=CoolOffStartType.APPLICATION, alias="coolOffStartType"
    )

    @field_validator("company", "job_title", "location")
    @classmethod
    def strip_and_require_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value


class JobApplication(ApplicationDraft):
    """A stored application record.

    `id` is None until the record has been written. The camelCase aliases
    match the JSON written by the earlier flat-store version.
    """
    id: Optional[int] = None
    applied_date: date = Field(alias="appliedDate")
    cool_off_ends: date = Field(alias="coolOffEnds")

    def to_row(self) -> Dict[str, Any]:
        """Column values for the applications table."""
        return {
            'id': self.id,
            'company': self.company,
            'job_title': self.job_title,
            'location': self.location,
            'status': self.status.value,
            'applied_date': self.applied_date.isoformat(),
            'cool_off_ends': self.cool_off_ends.isoformat(),
            'cool_off_start_type': self.cool_off_start_type.value,
        }

    @classmethod
    def from_row(cls, row) -> "JobApplication":
        return cls.model_validate(dict(row))

    def to_legacy(self) -> Dict[str, Any]:
        """Serialise in the flat-store JSON shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
