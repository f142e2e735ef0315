# covershift/models/profile.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Profile(SQLModel, table=True):
    """
    Persistent profile for any user (principal or teacher).

    Identity:
      - id: MUST match Supabase auth.users.id (UUID from JWT "sub")

    Role:
      - free text as stored by the front-end; compared only after
        normalization (see covershift.core.role_gate.normalize_role).
      - NULL until the login-time sync sets it.

    Passwords and sessions live in Supabase Auth; this row only mirrors
    identity plus the teacher / principal profile fields.
    """

    __tablename__ = "profiles"

    id: uuid.UUID = Field(
        primary_key=True,
        index=True,
        description="Matches Supabase auth.users.id",
    )

    email: str | None = Field(
        default=None,
        index=True,
        description="Email from Supabase auth.users",
    )

    full_name: str | None = Field(default=None, max_length=200)
    avatar_url: str | None = None

    role: str | None = Field(
        default=None,
        index=True,
        description="Application role: principal | teacher",
    )

    # Teacher-only fields
    phone_number: str | None = None
    county: str | None = None
    teaching_council_number: str | None = None
    qualifications_url: str | None = None

    # Principal-only fields
    school_name: str | None = None
    school_address: str | None = None
    school_roll_number: str | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
