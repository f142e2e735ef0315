# covershift/models/notification.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Notification(SQLModel, table=True):
    """
    In-app notification for a single recipient.

    kind: job_requested | job_accepted | job_declined | job_released
    """

    __tablename__ = "notifications"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: uuid.UUID = Field(foreign_key="profiles.id", index=True)

    job_id: uuid.UUID | None = Field(
        default=None,
        foreign_key="jobs.id",
        index=True,
    )

    kind: str = Field(index=True)
    message: str

    is_read: bool = Field(default=False, index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
