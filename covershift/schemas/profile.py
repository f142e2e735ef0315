# covershift/schemas/profile.py
import re
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

Role = Literal["principal", "teacher"]

IRISH_26_COUNTIES = (
    "Carlow", "Cavan", "Clare", "Cork", "Donegal", "Dublin", "Galway", "Kerry",
    "Kildare", "Kilkenny", "Laois", "Leitrim", "Limerick", "Longford", "Louth",
    "Mayo", "Meath", "Monaghan", "Offaly", "Roscommon", "Sligo", "Tipperary",
    "Waterford", "Westmeath", "Wexford", "Wicklow",
)

PHONE_RE = re.compile(r"^(?:\+353\s?|\(0\)\s?|0)(?:[1-9]\d{0,1})\s?\d{3}\s?\d{4}$")
TCN_RE = re.compile(r"^[A-Za-z0-9\-]{5,20}$")


class ProfileRead(SQLModel):
    """Response schema returned to clients."""

    id: uuid.UUID
    email: str | None
    full_name: str | None
    avatar_url: str | None
    role: str | None
    phone_number: str | None
    county: str | None
    teaching_council_number: str | None
    qualifications_url: str | None
    school_name: str | None
    school_address: str | None
    school_roll_number: str | None
    created_at: datetime


class ProfileSync(SQLModel):
    """
    Login-time upsert: the sign-in page tells us which side the user
    signed in on.
    """

    model_config = ConfigDict(extra="forbid")

    role: Role

    @field_validator("role", mode="before")
    @classmethod
    def normalize(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
            if v == "sub":
                return "teacher"
        return v


class ProfileUpdate(SQLModel):
    """
    Partial profile edit. Empty strings clear a field.
    """

    model_config = ConfigDict(extra="forbid")

    full_name: str | None = Field(default=None, max_length=200)
    phone_number: str | None = None
    county: str | None = None
    teaching_council_number: str | None = None
    school_name: str | None = None
    school_address: str | None = None
    school_roll_number: str | None = None

    @field_validator(
        "full_name",
        "phone_number",
        "county",
        "teaching_council_number",
        "school_name",
        "school_address",
        "school_roll_number",
    )
    @classmethod
    def strip(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return v.strip()

    @field_validator("phone_number")
    @classmethod
    def valid_phone(cls, v: str | None) -> str | None:
        if v and not PHONE_RE.match(v):
            raise ValueError("Enter a valid Irish phone number")
        return v

    @field_validator("county")
    @classmethod
    def valid_county(cls, v: str | None) -> str | None:
        if v and v not in IRISH_26_COUNTIES:
            raise ValueError("Select a valid county")
        return v

    @field_validator("teaching_council_number")
    @classmethod
    def valid_tcn(cls, v: str | None) -> str | None:
        if v and not TCN_RE.match(v):
            raise ValueError("Enter a valid TCN")
        return v


class TeacherRead(SQLModel):
    """Teacher card shown to principals."""

    id: uuid.UUID
    full_name: str | None
    email: str | None
    avatar_url: str | None
    county: str | None
    phone_number: str | None
    teaching_council_number: str | None
    qualifications_url: str | None
