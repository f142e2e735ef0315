# covershift/routers/availability.py
from datetime import date

from fastapi import APIRouter, Depends
from sqlmodel import Session

from covershift.core.auth import require_principal, require_teacher
from covershift.database import get_session
from covershift.models.profile import Profile
from covershift.repositories.availability_repo import AvailabilityRepository
from covershift.repositories.profile_repo import ProfileRepository
from covershift.schemas.availability import AvailabilityWeekRead, AvailabilityWeekSave
from covershift.schemas.profile import TeacherRead
from covershift.services.availability_service import AvailabilityService

router = APIRouter(tags=["Availability"])

service = AvailabilityService(AvailabilityRepository(), ProfileRepository())


# -------- Teacher grid --------


@router.get("/availability/me", response_model=AvailabilityWeekRead)
def read_my_week(
    effective_from: date,
    session: Session = Depends(get_session),
    current: Profile = Depends(require_teacher),
):
    """
    Mon-Fri grid for the week starting `effective_from` (a Monday).
    """
    return service.get_week(session, current, effective_from)


@router.put("/availability/me", response_model=AvailabilityWeekRead)
def save_my_week(
    payload: AvailabilityWeekSave,
    session: Session = Depends(get_session),
    current: Profile = Depends(require_teacher),
):
    """Save the whole week; omitted days are stored as unavailable."""
    return service.save_week(session, current, payload)


# -------- Principal lookups --------


@router.get("/teachers", response_model=list[TeacherRead])
def list_teachers(
    q: str | None = None,
    session: Session = Depends(get_session),
    current: Profile = Depends(require_principal),
):
    """
    All teachers, ordered by name then email.

    - `q` filters on name, email or county.
    """
    return service.list_teachers(session, q)


@router.get("/teachers/available", response_model=list[TeacherRead])
def list_available_teachers(
    start_date: date,
    end_date: date | None = None,
    session: Session = Depends(get_session),
    current: Profile = Depends(require_principal),
):
    """Teachers free on every school day between the two dates."""
    return service.eligible_teachers(session, start_date, end_date)
