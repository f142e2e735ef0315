# covershift/services/job_lifecycle.py
import logging
import uuid
from datetime import date, timedelta

from fastapi import HTTPException, status
from sqlmodel import Session

from covershift.core.role_gate import TEACHER, normalize_role
from covershift.models.job import Job
from covershift.models.notification import Notification
from covershift.models.profile import Profile
from covershift.repositories.availability_repo import AvailabilityRepository
from covershift.repositories.job_repo import JobRepository
from covershift.repositories.notification_repo import NotificationRepository
from covershift.repositories.profile_repo import ProfileRepository
from covershift.schemas.job import JobCreate, JobUpdate

logger = logging.getLogger(__name__)

# Which states each teacher/holder event may start from
TRANSITIONS: dict[str, set[str]] = {
    "accept": {"open", "requested"},
    "decline": {"requested"},
    "release": {"accepted"},
}


def each_date(start: date, end: date | None) -> list[date]:
    """
    Every calendar day in [start, end] inclusive.

    A missing end means a single-day job; a reversed range is walked
    from the earlier date.
    """
    last = end or start
    first, last = min(start, last), max(start, last)
    return [first + timedelta(days=i) for i in range((last - first).days + 1)]


class JobLifecycle:
    """
    The single authority for job status transitions.

    Every transition is one conditional UPDATE whose WHERE clause carries
    the guard (status + owner column). The affected-row count is always
    checked: zero rows means the guard failed and the caller gets an
    error, never a silent success.

    Side effects of a transition (availability overrides, notifications)
    are written in the same transaction as the job update.
    """

    def __init__(
        self,
        job_repo: JobRepository,
        profile_repo: ProfileRepository,
        availability_repo: AvailabilityRepository,
        notification_repo: NotificationRepository,
        decline_reopens: bool = False,
    ):
        self.job_repo = job_repo
        self.profile_repo = profile_repo
        self.availability_repo = availability_repo
        self.notification_repo = notification_repo
        self.decline_reopens = decline_reopens

    # -------- Creation --------

    def create_job(self, session: Session, principal: Profile, payload: JobCreate) -> Job:
        """
        Post a job. Status is "requested" when a teacher is preselected,
        otherwise "open".
        """
        if payload.requested_teacher is not None:
            self._ensure_teacher(session, principal, payload.requested_teacher)

        job = Job(
            title=payload.title,
            school=payload.school,
            notes=payload.notes,
            start_date=payload.start_date,
            end_date=payload.end_date,
            created_by=principal.id,
            requested_teacher=payload.requested_teacher,
            status="requested" if payload.requested_teacher else "open",
        )
        try:
            job = self.job_repo.create(session, job)
            session.commit()
        except Exception:
            session.rollback()
            raise
        session.refresh(job)

        logger.info(f"Job {job.id} created by {principal.id} as {job.status}")
        return job

    # -------- Teacher events --------

    def accept(self, session: Session, teacher: Profile, job_id: uuid.UUID) -> Job:
        """
        open      -> accepted  (guard: still open and unclaimed)
        requested -> accepted  (guard: requested_teacher is the caller)

        Marks every day of the job unavailable for the teacher in the
        same transaction.
        """
        job = self._get_or_404(session, job_id)
        self._check_from(job, "accept")
        from_status = job.status

        if from_status == "open":
            guards = [
                Job.status == "open",
                Job.accepted_by.is_(None),
                Job.requested_teacher.is_(None),
            ]
        else:
            guards = [
                Job.status == "requested",
                Job.requested_teacher == teacher.id,
            ]

        try:
            changed = self.job_repo.conditional_update(
                session,
                job_id,
                guards,
                {"status": "accepted", "accepted_by": teacher.id},
            )
            if changed == 0:
                self._raise_guard_failed(session, job_id, teacher.id, "accept")

            for day in each_date(job.start_date, job.end_date):
                self.availability_repo.upsert_override(session, teacher.id, day, False)

            self._notify(
                session,
                job.created_by,
                job_id,
                "job_accepted",
                f"{self._display_name(teacher)} accepted \"{job.title}\".",
            )
            session.commit()
        except Exception:
            session.rollback()
            raise

        logger.info(f"Job {job_id}: {from_status} -> accepted by {teacher.id}")
        return self._reload(session, job_id)

    def decline(
        self,
        session: Session,
        teacher: Profile,
        job_id: uuid.UUID,
        reopen: bool | None = None,
    ) -> Job:
        """
        requested -> declined (or -> open with the request cleared, when
        `reopen` is set; defaults to the instance setting).
        """
        job = self._get_or_404(session, job_id)
        self._check_from(job, "decline")

        if reopen is None:
            reopen = self.decline_reopens
        if reopen:
            values = {"status": "open", "requested_teacher": None}
        else:
            values = {"status": "declined"}

        try:
            changed = self.job_repo.conditional_update(
                session,
                job_id,
                [Job.status == "requested", Job.requested_teacher == teacher.id],
                values,
            )
            if changed == 0:
                self._raise_guard_failed(session, job_id, teacher.id, "decline")

            self._notify(
                session,
                job.created_by,
                job_id,
                "job_declined",
                f"{self._display_name(teacher)} declined \"{job.title}\".",
            )
            session.commit()
        except Exception:
            session.rollback()
            raise

        logger.info(f"Job {job_id}: requested -> {values['status']} by {teacher.id}")
        return self._reload(session, job_id)

    def release(self, session: Session, actor: Profile, job_id: uuid.UUID) -> Job:
        """
        accepted -> open (guard: caller is the accepted_by holder).
        The job goes back on the open board, so any earlier request is cleared.

        The overrides written on accept are removed, except for days
        still covered by another accepted job of the same teacher.
        """
        job = self._get_or_404(session, job_id)
        self._check_from(job, "release")

        try:
            changed = self.job_repo.conditional_update(
                session,
                job_id,
                [Job.status == "accepted", Job.accepted_by == actor.id],
                {"status": "open", "accepted_by": None, "requested_teacher": None},
            )
            if changed == 0:
                self._raise_guard_failed(session, job_id, actor.id, "release")

            self._free_days(session, actor.id, job)

            if job.created_by != actor.id:
                self._notify(
                    session,
                    job.created_by,
                    job_id,
                    "job_released",
                    f"{self._display_name(actor)} released \"{job.title}\".",
                )
            session.commit()
        except Exception:
            session.rollback()
            raise

        logger.info(f"Job {job_id}: accepted -> open, released by {actor.id}")
        return self._reload(session, job_id)

    # -------- Creator events --------

    def edit(
        self,
        session: Session,
        principal: Profile,
        job_id: uuid.UUID,
        payload: JobUpdate,
    ) -> Job:
        """
        Field updates by the creating principal. Status is unchanged.

        Dates of an accepted job are frozen: the teacher's overrides were
        written for the accepted span.
        """
        job = self._get_or_404(session, job_id)
        if job.created_by != principal.id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only the creator can edit this job",
            )

        values = payload.model_dump(exclude_unset=True)
        if "title" in values and values["title"] is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="title cannot be empty",
            )
        if "start_date" in values and values["start_date"] is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="start_date is required",
            )

        start = values.get("start_date", job.start_date)
        end = values.get("end_date", job.end_date)
        if end is not None and end < start:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="end_date cannot be before start_date",
            )

        dates_changed = start != job.start_date or end != job.end_date
        if dates_changed and job.status == "accepted":
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Dates of an accepted job cannot change; release it first",
            )

        if not values:
            return job

        guards = [Job.created_by == principal.id]
        if dates_changed:
            # The job must not have been accepted in the meantime
            guards.append(Job.status != "accepted")

        try:
            changed = self.job_repo.conditional_update(session, job_id, guards, values)
            if changed == 0:
                self._raise_guard_failed(session, job_id, principal.id, "edit")
            session.commit()
        except Exception:
            session.rollback()
            raise

        return self._reload(session, job_id)

    def delete(self, session: Session, principal: Profile, job_id: uuid.UUID) -> None:
        """
        Remove a job (creator only). An accepted job frees its teacher's days.
        """
        job = self._get_or_404(session, job_id)
        if job.created_by != principal.id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only the creator can delete this job",
            )
        holder = job.accepted_by if job.status == "accepted" else None

        try:
            self.notification_repo.delete_for_job(session, job_id)
            session.flush()
            changed = self.job_repo.conditional_delete(
                session, job_id, [Job.created_by == principal.id]
            )
            if changed == 0:
                self._raise_guard_failed(session, job_id, principal.id, "delete")
            if holder is not None:
                self._free_days(session, holder, job)
            session.commit()
        except Exception:
            session.rollback()
            raise

        logger.info(f"Job {job_id} deleted by {principal.id}")

    # -------- Helpers --------

    def _get_or_404(self, session: Session, job_id: uuid.UUID) -> Job:
        job = self.job_repo.get_by_id(session, job_id)
        if not job:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Job not found",
            )
        return job

    def _fresh(self, session: Session, job_id: uuid.UUID) -> Job | None:
        return session.get(Job, job_id, populate_existing=True)

    def _reload(self, session: Session, job_id: uuid.UUID) -> Job:
        """Re-read a job after a successful write; 404 if it vanished meanwhile."""
        job = self._fresh(session, job_id)
        if job is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Job not found",
            )
        return job

    @staticmethod
    def _check_from(job: Job, event: str) -> None:
        if job.status not in TRANSITIONS[event]:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Cannot {event} a job that is {job.status}",
            )

    def _raise_guard_failed(
        self,
        session: Session,
        job_id: uuid.UUID,
        actor_id: uuid.UUID,
        event: str,
    ) -> None:
        """
        A guarded write touched no rows. Re-read the row and explain why.
        """
        current = self._fresh(session, job_id)
        if current is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Job not found",
            )

        if event in ("edit", "delete") and current.created_by != actor_id:
            detail = f"Only the creator can {event} this job"
            code = status.HTTP_403_FORBIDDEN
        elif (
            event in ("accept", "decline")
            and current.status == "requested"
            and current.requested_teacher != actor_id
        ):
            detail = "This request isn't assigned to you"
            code = status.HTTP_403_FORBIDDEN
        elif (
            event == "release"
            and current.status == "accepted"
            and current.accepted_by != actor_id
        ):
            detail = "Only the teacher holding this job can release it"
            code = status.HTTP_403_FORBIDDEN
        else:
            detail = f"Job changed concurrently (now {current.status}); {event} not applied"
            code = status.HTTP_409_CONFLICT

        logger.info(f"Job {job_id}: {event} by {actor_id} rejected ({detail})")
        raise HTTPException(status_code=code, detail=detail)

    def _free_days(self, session: Session, teacher_id: uuid.UUID, job: Job) -> None:
        days = each_date(job.start_date, job.end_date)
        others = self.job_repo.list_accepted_overlapping(
            session,
            teacher_id,
            days[0],
            days[-1],
            exclude_job_id=job.id,
        )
        still_busy: set[date] = set()
        for other in others:
            still_busy.update(each_date(other.start_date, other.end_date))

        self.availability_repo.delete_overrides(
            session,
            teacher_id,
            [d for d in days if d not in still_busy],
        )

    def _ensure_teacher(
        self,
        session: Session,
        principal: Profile,
        teacher_id: uuid.UUID,
    ) -> None:
        if teacher_id == principal.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You cannot request yourself",
            )
        teacher = self.profile_repo.get_by_id(session, teacher_id)
        if teacher is None or normalize_role(teacher.role) != TEACHER:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Requested teacher not found",
            )

    def _notify(
        self,
        session: Session,
        user_id: uuid.UUID,
        job_id: uuid.UUID,
        kind: str,
        message: str,
    ) -> None:
        self.notification_repo.add(
            session,
            Notification(user_id=user_id, job_id=job_id, kind=kind, message=message),
        )

    @staticmethod
    def _display_name(profile: Profile) -> str:
        return profile.full_name or profile.email or "A teacher"
