# covershift/services/job_service.py
import uuid
from datetime import date

from fastapi import HTTPException, status
from sqlmodel import Session

from covershift.core.role_gate import TEACHER, normalize_role
from covershift.models.job import Job
from covershift.models.profile import Profile
from covershift.repositories.job_repo import JobRepository
from covershift.repositories.profile_repo import ProfileRepository
from covershift.schemas.job import BookingRead, BookingsRead

UPCOMING_STATUSES = ["open", "requested", "accepted"]


class JobService:
    """
    Read views over jobs for teachers and principals.

    Transitions live in JobLifecycle; nothing here writes.
    """

    def __init__(self, job_repo: JobRepository, profile_repo: ProfileRepository):
        self.job_repo = job_repo
        self.profile_repo = profile_repo

    # -------- Teacher views --------

    def list_open(self, session: Session) -> list[Job]:
        """Jobs any teacher may pick up."""
        return self.job_repo.list_by_status(session, "open")

    def list_my_requests(self, session: Session, teacher: Profile) -> list[Job]:
        """Requests addressed to this teacher that still need an answer."""
        return self.job_repo.list_requested_for(session, teacher.id)

    def list_my_jobs(self, session: Session, teacher: Profile) -> list[Job]:
        """Jobs this teacher has accepted."""
        return self.job_repo.list_accepted_by(session, teacher.id)

    # -------- Principal views --------

    def upcoming_bookings(
        self,
        session: Session,
        principal: Profile,
        today: date | None = None,
    ) -> BookingsRead:
        """
        The principal's current and future jobs grouped by status.

        A job is upcoming while its last day (end_date, or start_date for
        single-day jobs) is today or later.
        """
        today = today or date.today()
        jobs = [
            j
            for j in self.job_repo.list_created_by(session, principal.id, UPCOMING_STATUSES)
            if j.last_date >= today
        ]
        bookings = self._with_names(session, jobs)

        return BookingsRead(
            open=[b for b in bookings if b.status == "open"],
            requested=[b for b in bookings if b.status == "requested"],
            accepted=[b for b in bookings if b.status == "accepted"],
        )

    def past_bookings(
        self,
        session: Session,
        principal: Profile,
        today: date | None = None,
    ) -> list[BookingRead]:
        """Jobs whose last day is before today, newest first."""
        today = today or date.today()
        jobs = [
            j
            for j in self.job_repo.list_created_by(session, principal.id, newest_first=True)
            if j.last_date < today
        ]
        return self._with_names(session, jobs)

    # -------- Detail --------

    def get_job(self, session: Session, viewer: Profile, job_id: uuid.UUID) -> Job:
        """
        A job is visible to its creator, to the teachers it names, and to
        any teacher while it is open.

        - 404 otherwise, so ids of other schools' jobs don't leak.
        """
        job = self.job_repo.get_by_id(session, job_id)
        if job and self._can_view(job, viewer):
            return job
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Job not found",
        )

    @staticmethod
    def _can_view(job: Job, viewer: Profile) -> bool:
        if viewer.id in (job.created_by, job.requested_teacher, job.accepted_by):
            return True
        return job.status == "open" and normalize_role(viewer.role) == TEACHER

    def _with_names(self, session: Session, jobs: list[Job]) -> list[BookingRead]:
        ids = {j.requested_teacher for j in jobs if j.requested_teacher}
        ids |= {j.accepted_by for j in jobs if j.accepted_by}
        people = self.profile_repo.get_many(session, list(ids))

        def name(profile_id: uuid.UUID | None) -> str | None:
            p = people.get(profile_id) if profile_id else None
            if p is None:
                return None
            return p.full_name or p.email

        return [
            BookingRead(
                **j.model_dump(),
                requested_teacher_name=name(j.requested_teacher),
                accepted_by_name=name(j.accepted_by),
            )
            for j in jobs
        ]
