# covershift/services/availability_service.py
import uuid
from collections import defaultdict
from datetime import date, timedelta

from fastapi import HTTPException, status
from sqlmodel import Session

from covershift.core.role_gate import TEACHER
from covershift.models.profile import Profile
from covershift.repositories.availability_repo import AvailabilityRepository
from covershift.repositories.profile_repo import ProfileRepository
from covershift.schemas.availability import (
    WEEKDAYS,
    AvailabilityWeekRead,
    AvailabilityWeekSave,
    DayAvailability,
)
from covershift.services.job_lifecycle import each_date

# Stored role values that normalize to "teacher"
TEACHER_ROLE_VALUES = [TEACHER, "sub"]


def monday_of(day: date) -> date:
    return day - timedelta(days=day.isoweekday() - 1)


class AvailabilityService:
    """
    Weekly availability grids and "who can cover these dates" lookups.

    Availability model:
      - A teacher saves a Mon-Fri pattern anchored on a Monday
        (effective_from). The pattern holds for that week and every
        following week until a later week is saved.
      - Per-date overrides (written when a job is accepted) take
        precedence over the weekly pattern.
    """

    def __init__(self, repo: AvailabilityRepository, profile_repo: ProfileRepository):
        self.repo = repo
        self.profile_repo = profile_repo

    # ----- Teacher grid -----

    def get_week(
        self,
        session: Session,
        teacher: Profile,
        effective_from: date,
    ) -> AvailabilityWeekRead:
        """
        Five-day grid for the given week; unsaved days read as unavailable.
        """
        self._require_monday(effective_from)
        rows = {r.weekday: r.is_available for r in self.repo.list_week(session, teacher.id, effective_from)}
        return AvailabilityWeekRead(
            effective_from=effective_from,
            days=[DayAvailability(weekday=d, is_available=rows.get(d, False)) for d in WEEKDAYS],
        )

    def save_week(
        self,
        session: Session,
        teacher: Profile,
        payload: AvailabilityWeekSave,
    ) -> AvailabilityWeekRead:
        """
        Upsert all five rows of the week. Days left out of the payload
        are stored as unavailable.
        """
        given = {d.weekday: d.is_available for d in payload.days}
        try:
            for weekday in WEEKDAYS:
                self.repo.upsert_day(
                    session,
                    teacher.id,
                    weekday,
                    payload.effective_from,
                    given.get(weekday, False),
                )
            session.commit()
        except Exception:
            session.rollback()
            raise
        return self.get_week(session, teacher, payload.effective_from)

    # ----- Principal lookups -----

    def list_teachers(self, session: Session, search: str | None = None) -> list[Profile]:
        """All teachers, ordered by name then email, optionally filtered."""
        needle = (search or "").strip() or None
        return self.profile_repo.list_by_role_candidates(session, TEACHER_ROLE_VALUES, needle)

    def eligible_teachers(
        self,
        session: Session,
        start: date,
        end: date | None = None,
    ) -> list[Profile]:
        """
        Teachers free on every school day (Mon-Fri) in [start, end].

        Weekend days are ignored. A date is free when the teacher's
        override says so, or, without an override, when the latest weekly
        pattern at or before that week marks the weekday available.
        """
        end = end or start
        if end < start:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="end_date cannot be before start_date",
            )

        school_days = [d for d in each_date(start, end) if d.isoweekday() <= 5]
        teachers = self.list_teachers(session)
        if not school_days:
            return teachers

        overrides: dict[tuple[uuid.UUID, date], bool] = {
            (o.teacher_id, o.date): o.available
            for o in self.repo.list_overrides(session, school_days[0], school_days[-1])
        }

        # user -> effective_from -> weekday -> is_available
        weeks: dict[uuid.UUID, dict[date, dict[int, bool]]] = defaultdict(lambda: defaultdict(dict))
        for row in self.repo.list_up_to(session, monday_of(school_days[-1])):
            weeks[row.user_id][row.effective_from][row.weekday] = row.is_available

        def free_on(teacher_id: uuid.UUID, day: date) -> bool:
            if (teacher_id, day) in overrides:
                return overrides[(teacher_id, day)]
            anchor = monday_of(day)
            saved = [w for w in weeks.get(teacher_id, {}) if w <= anchor]
            if not saved:
                return False
            pattern = weeks[teacher_id][max(saved)]
            return pattern.get(day.isoweekday(), False)

        return [t for t in teachers if all(free_on(t.id, d) for d in school_days)]

    @staticmethod
    def _require_monday(day: date) -> None:
        if day.isoweekday() != 1:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="effective_from must be a Monday",
            )
