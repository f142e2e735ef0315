# covershift/schemas/notification.py
import uuid
from datetime import datetime

from pydantic import ConfigDict
from sqlmodel import SQLModel, Field


class JobRef(SQLModel):
    id: uuid.UUID | None = None


class NotifyJobRequest(SQLModel):
    """
    Body of POST /notify-job-request, as sent by the booking page:

        {"teacherId": "...", "job": {"id": "..."}}

    Fields are optional here so missing values map to 400 in the
    service instead of a 422 validation error.
    """

    model_config = ConfigDict(populate_by_name=True)

    teacher_id: uuid.UUID | None = Field(default=None, alias="teacherId")
    job: JobRef | None = None


class NotifyResult(SQLModel):
    ok: bool


class NotificationRead(SQLModel):
    id: uuid.UUID
    user_id: uuid.UUID
    job_id: uuid.UUID | None
    kind: str
    message: str
    is_read: bool
    created_at: datetime
