# covershift/repositories/notification_repo.py
import uuid

from sqlmodel import Session, select

from covershift.models.notification import Notification


class NotificationRepository:
    """
    Data access layer for notifications. Callers commit.
    """

    def add(self, session: Session, notification: Notification) -> Notification:
        session.add(notification)
        session.flush()
        return notification

    def get_by_id(self, session: Session, notification_id: uuid.UUID) -> Notification | None:
        return session.get(Notification, notification_id)

    def list_for_user(
        self,
        session: Session,
        user_id: uuid.UUID,
        unread_only: bool = False,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Notification]:
        stmt = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.is_read.is_(False))
        stmt = stmt.order_by(Notification.created_at.desc()).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def delete_for_job(self, session: Session, job_id: uuid.UUID) -> None:
        stmt = select(Notification).where(Notification.job_id == job_id)
        for row in session.exec(stmt).all():
            session.delete(row)
