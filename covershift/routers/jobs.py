# covershift/routers/jobs.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from covershift.core.auth import require_auth, require_principal, require_teacher
from covershift.core.config import get_settings
from covershift.database import get_session
from covershift.models.profile import Profile
from covershift.repositories.availability_repo import AvailabilityRepository
from covershift.repositories.job_repo import JobRepository
from covershift.repositories.notification_repo import NotificationRepository
from covershift.repositories.profile_repo import ProfileRepository
from covershift.schemas.job import (
    BookingRead,
    BookingsRead,
    JobCreate,
    JobRead,
    JobUpdate,
)
from covershift.services.job_lifecycle import JobLifecycle
from covershift.services.job_service import JobService

router = APIRouter(prefix="/jobs", tags=["Jobs"])

settings = get_settings()

job_repo = JobRepository()
profile_repo = ProfileRepository()
lifecycle = JobLifecycle(
    job_repo,
    profile_repo,
    AvailabilityRepository(),
    NotificationRepository(),
)
service = JobService(job_repo, profile_repo)


# -------- Principal endpoints --------


@router.post(
    "",
    response_model=JobRead,
    status_code=status.HTTP_201_CREATED,
)
def create_job(
    payload: JobCreate,
    session: Session = Depends(get_session),
    current: Profile = Depends(require_principal),
):
    """
    Post a job.

    - status = "requested" if `requested_teacher` is set, else "open".
    """
    return lifecycle.create_job(session, current, payload)


@router.get("/bookings", response_model=BookingsRead)
def upcoming_bookings(
    session: Session = Depends(get_session),
    current: Profile = Depends(require_principal),
):
    """
    The principal's upcoming jobs grouped into open / requested / accepted.
    """
    return service.upcoming_bookings(session, current)


@router.get("/bookings/past", response_model=list[BookingRead])
def past_bookings(
    session: Session = Depends(get_session),
    current: Profile = Depends(require_principal),
):
    """Jobs that have already finished, newest first."""
    return service.past_bookings(session, current)


@router.patch("/{job_id}", response_model=JobRead)
def edit_job(
    job_id: uuid.UUID,
    payload: JobUpdate,
    session: Session = Depends(get_session),
    current: Profile = Depends(require_principal),
):
    """Edit a job you created."""
    return lifecycle.edit(session, current, job_id, payload)


@router.delete("/{job_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_job(
    job_id: uuid.UUID,
    session: Session = Depends(get_session),
    current: Profile = Depends(require_principal),
):
    """Delete a job you created."""
    lifecycle.delete(session, current, job_id)
    return None


# -------- Teacher endpoints --------


@router.get("/open", response_model=list[JobRead])
def list_open_jobs(
    session: Session = Depends(get_session),
    current: Profile = Depends(require_teacher),
):
    """Jobs any teacher can accept, soonest first."""
    return service.list_open(session)


@router.get("/requests", response_model=list[JobRead])
def list_my_requests(
    session: Session = Depends(get_session),
    current: Profile = Depends(require_teacher),
):
    """Requests addressed to the current teacher."""
    return service.list_my_requests(session, current)


@router.get("/mine", response_model=list[JobRead])
def list_my_jobs(
    session: Session = Depends(get_session),
    current: Profile = Depends(require_teacher),
):
    """Jobs the current teacher has accepted."""
    return service.list_my_jobs(session, current)


@router.post("/{job_id}/accept", response_model=JobRead)
def accept_job(
    job_id: uuid.UUID,
    session: Session = Depends(get_session),
    current: Profile = Depends(require_teacher),
):
    """
    Accept an open job, or a request addressed to you.

    - 409 if someone else got there first.
    - 403 if the request names a different teacher.
    """
    return lifecycle.accept(session, current, job_id)


@router.post("/{job_id}/decline", response_model=JobRead)
def decline_job(
    job_id: uuid.UUID,
    session: Session = Depends(get_session),
    current: Profile = Depends(require_teacher),
):
    """
    Decline a request addressed to you.

    DECLINE_REOPENS_JOB decides whether the job ends "declined" or goes
    back to the open board.
    """
    return lifecycle.decline(
        session, current, job_id, reopen=settings.DECLINE_REOPENS_JOB
    )


@router.post("/{job_id}/release", response_model=JobRead)
def release_job(
    job_id: uuid.UUID,
    session: Session = Depends(get_session),
    current: Profile = Depends(require_auth),
):
    """
    Give back a job you accepted; it returns to the open board.
    """
    return lifecycle.release(session, current, job_id)


# -------- Shared --------


@router.get("/{job_id}", response_model=JobRead)
def get_job(
    job_id: uuid.UUID,
    session: Session = Depends(get_session),
    current: Profile = Depends(require_auth),
):
    """Job detail, visible to the people it concerns."""
    return service.get_job(session, current, job_id)
