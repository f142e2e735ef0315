# covershift/routers/notifications.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from covershift.core.auth import get_current_profile, require_auth
from covershift.database import get_session
from covershift.models.profile import Profile
from covershift.repositories.job_repo import JobRepository
from covershift.repositories.notification_repo import NotificationRepository
from covershift.schemas.notification import (
    NotificationRead,
    NotifyJobRequest,
    NotifyResult,
)
from covershift.services.notification_service import NotificationService

router = APIRouter(tags=["Notifications"])

service = NotificationService(NotificationRepository(), JobRepository())


@router.post("/notify-job-request", response_model=NotifyResult)
def notify_job_request(
    payload: NotifyJobRequest,
    session: Session = Depends(get_session),
    current: Profile | None = Depends(get_current_profile),
):
    """
    Email a teacher about a booking request.

    Auth:
      - Bearer token or the `sb-access-token` cookie.
      - Caller must have created the job.
    """
    return service.notify_job_request(session, current, payload)


@router.get("/notifications/me", response_model=list[NotificationRead])
def list_my_notifications(
    unread_only: bool = False,
    skip: int = 0,
    limit: int = 50,
    session: Session = Depends(get_session),
    current: Profile = Depends(require_auth),
):
    """The caller's notifications, newest first."""
    return service.list_mine(session, current, unread_only, skip, limit)


@router.post("/notifications/{notification_id}/read", response_model=NotificationRead)
def mark_notification_read(
    notification_id: uuid.UUID,
    session: Session = Depends(get_session),
    current: Profile = Depends(require_auth),
):
    return service.mark_read(session, current, notification_id)
