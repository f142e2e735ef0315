# covershift/repositories/availability_repo.py
import uuid
from datetime import date

from sqlmodel import Session, select

from covershift.models.availability import Availability, AvailabilityOverride


class AvailabilityRepository:
    """
    Data access layer for weekly availability rows and per-date overrides.

    Upserts are done as select-then-write on the natural keys so they
    behave the same on Postgres and SQLite. Callers commit.
    """

    # ---- Weekly pattern ----

    def list_week(
        self,
        session: Session,
        user_id: uuid.UUID,
        effective_from: date,
    ) -> list[Availability]:
        stmt = (
            select(Availability)
            .where(
                Availability.user_id == user_id,
                Availability.effective_from == effective_from,
            )
            .order_by(Availability.weekday.asc())
        )
        return session.exec(stmt).all()

    def list_up_to(self, session: Session, monday: date) -> list[Availability]:
        """All rows anchored on or before `monday`, newest week first."""
        stmt = (
            select(Availability)
            .where(Availability.effective_from <= monday)
            .order_by(Availability.effective_from.desc())
        )
        return session.exec(stmt).all()

    def upsert_day(
        self,
        session: Session,
        user_id: uuid.UUID,
        weekday: int,
        effective_from: date,
        is_available: bool,
    ) -> Availability:
        stmt = select(Availability).where(
            Availability.user_id == user_id,
            Availability.weekday == weekday,
            Availability.effective_from == effective_from,
        )
        row = session.exec(stmt).first()
        if row is None:
            row = Availability(
                user_id=user_id,
                weekday=weekday,
                effective_from=effective_from,
                is_available=is_available,
            )
        else:
            row.is_available = is_available
        session.add(row)
        return row

    # ---- Overrides ----

    def list_overrides(
        self,
        session: Session,
        first: date,
        last: date,
        teacher_id: uuid.UUID | None = None,
    ) -> list[AvailabilityOverride]:
        stmt = select(AvailabilityOverride).where(
            AvailabilityOverride.date >= first,
            AvailabilityOverride.date <= last,
        )
        if teacher_id is not None:
            stmt = stmt.where(AvailabilityOverride.teacher_id == teacher_id)
        return session.exec(stmt.order_by(AvailabilityOverride.date.asc())).all()

    def upsert_override(
        self,
        session: Session,
        teacher_id: uuid.UUID,
        day: date,
        available: bool,
    ) -> AvailabilityOverride:
        stmt = select(AvailabilityOverride).where(
            AvailabilityOverride.teacher_id == teacher_id,
            AvailabilityOverride.date == day,
        )
        row = session.exec(stmt).first()
        if row is None:
            row = AvailabilityOverride(teacher_id=teacher_id, date=day, available=available)
        else:
            row.available = available
        session.add(row)
        return row

    def delete_overrides(
        self,
        session: Session,
        teacher_id: uuid.UUID,
        days: list[date],
    ) -> int:
        if not days:
            return 0
        stmt = select(AvailabilityOverride).where(
            AvailabilityOverride.teacher_id == teacher_id,
            AvailabilityOverride.date.in_(days),
            AvailabilityOverride.available.is_(False),
        )
        rows = session.exec(stmt).all()
        for row in rows:
            session.delete(row)
        return len(rows)
