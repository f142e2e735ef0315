# covershift/schemas/availability.py
from datetime import date

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

WEEKDAYS = (1, 2, 3, 4, 5)


class DayAvailability(SQLModel):
    weekday: int = Field(ge=1, le=5)
    is_available: bool


class AvailabilityWeekRead(SQLModel):
    """
    Five-day grid for one week. Days without a stored row are unavailable.
    """

    effective_from: date
    days: list[DayAvailability]


class AvailabilityWeekSave(SQLModel):
    model_config = ConfigDict(extra="forbid")

    effective_from: date
    days: list[DayAvailability]

    @field_validator("effective_from")
    @classmethod
    def must_be_monday(cls, v: date) -> date:
        if v.isoweekday() != 1:
            raise ValueError("effective_from must be a Monday")
        return v

    @field_validator("days")
    @classmethod
    def unique_weekdays(cls, v: list[DayAvailability]) -> list[DayAvailability]:
        seen = [d.weekday for d in v]
        if len(seen) != len(set(seen)):
            raise ValueError("each weekday may appear only once")
        return v
