# covershift/models/job.py
import uuid
from datetime import date, datetime, timezone

from sqlmodel import SQLModel, Field


class Job(SQLModel, table=True):
    """
    A booking request / assignment posted by a principal.

    Status lifecycle (see covershift.services.job_lifecycle):
      open | requested -> accepted -> open (release)
      requested -> declined (or open, when DECLINE_REOPENS_JOB is set)

    "cancelled" is a valid stored value but nothing produces it.
    """

    __tablename__ = "jobs"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    title: str = Field(max_length=200)
    school: str | None = None
    notes: str | None = None

    start_date: date = Field(index=True)
    # NULL means a single-day job
    end_date: date | None = None

    # open | requested | accepted | declined | cancelled
    status: str = Field(
        default="open",
        index=True,
        description="Job status lifecycle",
    )

    created_by: uuid.UUID = Field(
        foreign_key="profiles.id",
        index=True,
        description="Owning principal",
    )

    accepted_by: uuid.UUID | None = Field(
        default=None,
        foreign_key="profiles.id",
        index=True,
    )

    requested_teacher: uuid.UUID | None = Field(
        default=None,
        foreign_key="profiles.id",
        index=True,
        description="Teacher pre-selected by the principal",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )

    @property
    def last_date(self) -> date:
        """Final day covered by the job."""
        return self.end_date or self.start_date
