# covershift/repositories/profile_repo.py
import uuid

from sqlalchemy import func, or_
from sqlmodel import Session, select

from covershift.models.profile import Profile


class ProfileRepository:
    """
    Data access layer for Profile.

    Responsibilities:
      - Pure DB operations (CRUD + queries)
      - No FastAPI, no HTTP, no business logic
    """

    def get_by_id(self, session: Session, profile_id: uuid.UUID) -> Profile | None:
        """Return a Profile by primary key, or None if not found."""
        return session.get(Profile, profile_id)

    def get_role(self, session: Session, profile_id: uuid.UUID) -> str | None:
        """Raw stored role for a profile (not normalized)."""
        stmt = select(Profile.role).where(Profile.id == profile_id)
        return session.exec(stmt).first()

    def get_many(self, session: Session, ids: list[uuid.UUID]) -> dict[uuid.UUID, Profile]:
        if not ids:
            return {}
        stmt = select(Profile).where(Profile.id.in_(ids))
        return {p.id: p for p in session.exec(stmt).all()}

    def list_by_role_candidates(
        self,
        session: Session,
        raw_roles: list[str],
        search: str | None = None,
    ) -> list[Profile]:
        """
        Profiles whose trimmed, lowercased role is in `raw_roles`,
        ordered by full_name then email (NULLs first).
        """
        stmt = select(Profile).where(func.lower(func.trim(Profile.role)).in_(raw_roles))
        if search:
            needle = f"%{search.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(Profile.full_name).like(needle),
                    func.lower(Profile.email).like(needle),
                    func.lower(Profile.county).like(needle),
                )
            )
        stmt = stmt.order_by(
            Profile.full_name.is_not(None),
            Profile.full_name.asc(),
            Profile.email.is_not(None),
            Profile.email.asc(),
        )
        return session.exec(stmt).all()

    def upsert(self, session: Session, profile: Profile) -> Profile:
        """Insert or update a Profile keyed by id."""
        profile = session.merge(profile)
        session.commit()
        session.refresh(profile)
        return profile

    def update(self, session: Session, profile: Profile) -> Profile:
        """Persist changes to an existing Profile."""
        session.add(profile)
        session.commit()
        session.refresh(profile)
        return profile
