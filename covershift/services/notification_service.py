# covershift/services/notification_service.py
import logging
import smtplib
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from covershift.core.config import get_settings
from covershift.core.email_client import (
    email_is_configured,
    render_job_request_email,
    send_email,
)
from covershift.core.role_gate import TEACHER, normalize_role
from covershift.core.supabase_client import lookup_user_email
from covershift.models.notification import Notification
from covershift.models.profile import Profile
from covershift.repositories.job_repo import JobRepository
from covershift.repositories.notification_repo import NotificationRepository
from covershift.schemas.notification import NotifyJobRequest

settings = get_settings()
logger = logging.getLogger(__name__)


class NotificationService:
    """
    Booking request emails plus the in-app notification inbox.
    """

    def __init__(self, repo: NotificationRepository, job_repo: JobRepository):
        self.repo = repo
        self.job_repo = job_repo

    def notify_job_request(
        self,
        session: Session,
        caller: Profile | None,
        payload: NotifyJobRequest,
    ) -> dict[str, bool]:
        """
        Email a teacher that a principal requested them for a job.

        Checks, in order:
          - 500 email delivery not configured
          - 400 teacherId / job.id missing
          - 401 no valid caller
          - 404 job not found
          - 403 caller did not create the job
          - 400 teacher has no email in Supabase Auth
          - 500 mail provider failure
        """
        if not email_is_configured():
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Email delivery is not configured",
            )

        job_id = payload.job.id if payload.job else None
        if payload.teacher_id is None or job_id is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Missing required fields.",
            )

        if caller is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Unauthorized",
            )

        job = self.job_repo.get_by_id(session, job_id)
        if job is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Job not found",
            )
        if job.created_by != caller.id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Forbidden",
            )

        try:
            teacher_email = lookup_user_email(payload.teacher_id)
        except RuntimeError as e:
            logger.error(f"notify-job-request misconfigured: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=str(e),
            )
        if not teacher_email:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Teacher email not found",
            )

        subject, text_body, html_body = render_job_request_email(
            job.school,
            job.start_date,
            job.end_date,
            f"{settings.APP_ORIGIN.rstrip('/')}/teacher/requests",
        )
        try:
            send_email(teacher_email, subject, text_body, html_body)
        except (RuntimeError, smtplib.SMTPException, OSError) as e:
            logger.error(f"notify-job-request error: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Could not send email",
            )

        # Inbox entry only for an existing teacher profile
        recipient = session.get(Profile, payload.teacher_id)
        if recipient is not None and normalize_role(recipient.role) == TEACHER:
            self.repo.add(
                session,
                Notification(
                    user_id=payload.teacher_id,
                    job_id=job.id,
                    kind="job_requested",
                    message=f"You've been requested for \"{job.title}\".",
                ),
            )
            session.commit()
        return {"ok": True}

    # ----- Inbox -----

    def list_mine(
        self,
        session: Session,
        current: Profile,
        unread_only: bool = False,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Notification]:
        return self.repo.list_for_user(session, current.id, unread_only, skip, limit)

    def mark_read(
        self,
        session: Session,
        current: Profile,
        notification_id: uuid.UUID,
    ) -> Notification:
        """
        - 404 if the notification does not exist or belongs to someone else.
        """
        notification = self.repo.get_by_id(session, notification_id)
        if notification is None or notification.user_id != current.id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Notification not found",
            )
        notification.is_read = True
        session.add(notification)
        session.commit()
        session.refresh(notification)
        return notification
