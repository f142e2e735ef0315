# covershift/schemas/job.py
import uuid
from datetime import date, datetime
from typing import Literal

from pydantic import ConfigDict, field_validator, model_validator
from sqlmodel import SQLModel, Field

JobStatus = Literal["open", "requested", "accepted", "declined", "cancelled"]


def _strip_or_none(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    return v or None


class JobCreate(SQLModel):
    """
    Payload for posting a job.

    Backend derives:
      - created_by from token
      - status = 'requested' when requested_teacher is set, else 'open'
    """

    model_config = ConfigDict(extra="forbid")

    title: str = Field(max_length=200)
    school: str | None = None
    notes: str | None = None
    start_date: date
    end_date: date | None = None
    requested_teacher: uuid.UUID | None = None

    @field_validator("title")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title cannot be empty")
        return v

    @field_validator("school", "notes")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        return _strip_or_none(v)

    @model_validator(mode="after")
    def check_range(self):
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self


class JobUpdate(SQLModel):
    """
    Partial edit by the creating principal. Status is not editable here.
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(default=None, max_length=200)
    school: str | None = None
    notes: str | None = None
    start_date: date | None = None
    end_date: date | None = None

    @field_validator("title")
    @classmethod
    def not_empty(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("title cannot be empty")
        return v

    @field_validator("school", "notes")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        return _strip_or_none(v)


class JobRead(SQLModel):
    id: uuid.UUID
    title: str
    school: str | None
    notes: str | None
    start_date: date
    end_date: date | None
    status: JobStatus
    created_by: uuid.UUID
    accepted_by: uuid.UUID | None
    requested_teacher: uuid.UUID | None
    created_at: datetime


class BookingRead(JobRead):
    """
    Job as shown on the principal's bookings page.
    """

    requested_teacher_name: str | None = None
    accepted_by_name: str | None = None


class BookingsRead(SQLModel):
    """
    Upcoming bookings grouped by status.
    """

    open: list[BookingRead]
    requested: list[BookingRead]
    accepted: list[BookingRead]
