"""Inbox routes for the caller's notifications."""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from app.core.database import get_session
from app.core.errors import NotFound
from app.core.security import get_current_subject
from app.models import Notification
from app.models.notification import NotificationRead

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("")
async def list_notifications(
    subject_id: str = Depends(get_current_subject),
    session: Session = Depends(get_session),
):
    """List the caller's notifications, newest first."""
    statement = (
        select(Notification)
        .where(Notification.subject_id == subject_id)
        .order_by(Notification.created_at.desc())
    )
    return [NotificationRead.model_validate(n) for n in session.exec(statement).all()]


@router.post("/{notification_id}/read")
async def mark_read(
    notification_id: UUID,
    subject_id: str = Depends(get_current_subject),
    session: Session = Depends(get_session),
):
    """Mark one of the caller's notifications as read."""
    notification = session.get(Notification, notification_id)
    if not notification or notification.subject_id != subject_id:
        raise NotFound("Notification not found")

    notification.is_read = True
    session.add(notification)
    session.commit()
    session.refresh(notification)
    return NotificationRead.model_validate(notification)
