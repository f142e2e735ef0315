# covershift/models/availability.py
import uuid
import datetime as dt

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


class Availability(SQLModel, table=True):
    """
    A teacher's declared availability for one weekday of one week.

    Natural key: (user_id, weekday, effective_from), upserted on conflict.
    """

    __tablename__ = "availability"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "weekday", "effective_from", name="uq_availability_week_day"
        ),
    )

    id: int | None = Field(default=None, primary_key=True)

    user_id: uuid.UUID = Field(foreign_key="profiles.id", index=True)

    # 1 = Monday ... 5 = Friday
    weekday: int = Field(ge=1, le=5)

    is_available: bool = Field(default=False)

    # Monday anchoring the week
    effective_from: dt.date = Field(index=True)


class AvailabilityOverride(SQLModel, table=True):
    """
    Per-date exception to the weekly pattern.

    Written with available=False for every day of a job a teacher accepts.
    """

    __tablename__ = "availability_overrides"
    __table_args__ = (
        UniqueConstraint("teacher_id", "date", name="uq_override_teacher_date"),
    )

    id: int | None = Field(default=None, primary_key=True)

    teacher_id: uuid.UUID = Field(foreign_key="profiles.id", index=True)
    date: dt.date = Field(index=True)
    available: bool = Field(default=False)
