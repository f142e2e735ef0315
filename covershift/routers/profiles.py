# covershift/routers/profiles.py
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlmodel import Session

from covershift.core.auth import require_auth, require_teacher
from covershift.database import get_session
from covershift.models.profile import Profile
from covershift.repositories.profile_repo import ProfileRepository
from covershift.schemas.profile import ProfileRead, ProfileSync, ProfileUpdate
from covershift.services.profile_service import ProfileService

router = APIRouter(prefix="/profiles", tags=["Profiles"])

repo = ProfileRepository()
service = ProfileService(repo)


@router.get("/me", response_model=ProfileRead)
def read_me(current: Profile = Depends(require_auth)):
    """
    Return the caller's profile.

    The row is created on the first authenticated request.
    """
    return current


@router.post("/me/sync", response_model=ProfileRead)
def sync_me(
    payload: ProfileSync,
    session: Session = Depends(get_session),
    current: Profile = Depends(require_auth),
):
    """
    Login-time upsert. Sets the role the user signed in as.
    """
    return service.sync(session, current, payload)


@router.patch("/me", response_model=ProfileRead)
def update_me(
    payload: ProfileUpdate,
    session: Session = Depends(get_session),
    current: Profile = Depends(require_auth),
):
    """Partial profile update."""
    return service.update_me(session, current, payload)


@router.post("/me/avatar", response_model=ProfileRead)
def upload_avatar(
    file: UploadFile = File(...),
    session: Session = Depends(get_session),
    current: Profile = Depends(require_auth),
):
    """
    Upload or replace the caller's avatar (JPEG, PNG, WEBP).
    """
    if not file.content_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing content-type for uploaded file",
        )
    return service.set_avatar(session, current, file.content_type, file.file.read())


@router.post("/me/qualifications", response_model=ProfileRead)
def upload_qualifications(
    file: UploadFile = File(...),
    session: Session = Depends(get_session),
    current: Profile = Depends(require_teacher),
):
    """
    Upload or replace the teacher's qualifications document (PDF or image).
    """
    if not file.content_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing content-type for uploaded file",
        )
    return service.set_qualifications(
        session, current, file.content_type, file.file.read()
    )
