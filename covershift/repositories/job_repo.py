# covershift/repositories/job_repo.py
import uuid
from datetime import date
from typing import Any

from sqlalchemy import delete as sa_delete, func, update as sa_update
from sqlmodel import Session, select

from covershift.models.job import Job


class JobRepository:
    """
    Data access layer for jobs.

    NOTE:
      - No commits here; lifecycle transitions touch several tables and
        the service owns the transaction.
      - Guarded writes return the affected-row count. Zero means the
        guard did not hold (stale state, wrong owner, or missing row).
    """

    # ---- Reads ----

    def get_by_id(self, session: Session, job_id: uuid.UUID) -> Job | None:
        return session.get(Job, job_id)

    def list_by_status(self, session: Session, status: str) -> list[Job]:
        stmt = (
            select(Job)
            .where(Job.status == status)
            .order_by(Job.start_date.asc())
        )
        return session.exec(stmt).all()

    def list_requested_for(self, session: Session, teacher_id: uuid.UUID) -> list[Job]:
        stmt = (
            select(Job)
            .where(Job.status == "requested", Job.requested_teacher == teacher_id)
            .order_by(Job.start_date.asc())
        )
        return session.exec(stmt).all()

    def list_accepted_by(self, session: Session, teacher_id: uuid.UUID) -> list[Job]:
        stmt = (
            select(Job)
            .where(Job.accepted_by == teacher_id)
            .order_by(Job.start_date.asc())
        )
        return session.exec(stmt).all()

    def list_created_by(
        self,
        session: Session,
        principal_id: uuid.UUID,
        statuses: list[str] | None = None,
        newest_first: bool = False,
    ) -> list[Job]:
        stmt = select(Job).where(Job.created_by == principal_id)
        if statuses:
            stmt = stmt.where(Job.status.in_(statuses))
        order = Job.start_date.desc() if newest_first else Job.start_date.asc()
        return session.exec(stmt.order_by(order)).all()

    def list_accepted_overlapping(
        self,
        session: Session,
        teacher_id: uuid.UUID,
        first: date,
        last: date,
        exclude_job_id: uuid.UUID | None = None,
    ) -> list[Job]:
        """
        Accepted jobs of a teacher whose span intersects [first, last].
        """
        stmt = select(Job).where(
            Job.accepted_by == teacher_id,
            Job.status == "accepted",
            Job.start_date <= last,
            func.coalesce(Job.end_date, Job.start_date) >= first,
        )
        if exclude_job_id is not None:
            stmt = stmt.where(Job.id != exclude_job_id)
        return session.exec(stmt).all()

    # ---- Writes ----

    def create(self, session: Session, job: Job) -> Job:
        session.add(job)
        session.flush()
        session.refresh(job)
        return job

    def conditional_update(
        self,
        session: Session,
        job_id: uuid.UUID,
        guards: list[Any],
        values: dict[str, Any],
    ) -> int:
        """
        UPDATE jobs SET <values> WHERE id = :job_id AND <guards>.

        Returns the number of rows changed.
        """
        stmt = (
            sa_update(Job)
            .where(Job.id == job_id, *guards)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = session.execute(stmt)
        return result.rowcount or 0

    def conditional_delete(
        self,
        session: Session,
        job_id: uuid.UUID,
        guards: list[Any],
    ) -> int:
        stmt = (
            sa_delete(Job)
            .where(Job.id == job_id, *guards)
            .execution_options(synchronize_session=False)
        )
        result = session.execute(stmt)
        return result.rowcount or 0
