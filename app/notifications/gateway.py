"""Notification delivery: inbox persistence plus realtime push.

``NotificationGateway`` does the actual work and never raises; failures are
logged. ``BackgroundNotifier`` is the sink handed to the registration
service during a request. It queues gateway calls on FastAPI background
tasks so delivery happens after the response has been sent.
"""
import logging
from datetime import UTC, datetime, timedelta

from fastapi import BackgroundTasks, Depends
from sqlmodel import Session, select

from app.core.database import get_engine
from app.models import Notification
from app.models.notification import NotificationRead
from app.notifications.hub import RealtimeHub, hub, user_room

logger = logging.getLogger(__name__)


class NotificationGateway:
    """Persist inbox rows and push them to connected subjects."""

    def __init__(self, engine, realtime: RealtimeHub = hub):
        self.engine = engine
        self.realtime = realtime

    async def notify(
        self, subject_id: str, kind: str, title: str, body: str, meta: dict | None = None
    ) -> Notification | None:
        try:
            with Session(self.engine) as session:
                notification = Notification(
                    subject_id=subject_id,
                    kind=kind,
                    title=title,
                    message=body,
                    meta=meta or {},
                )
                session.add(notification)
                session.commit()
                session.refresh(notification)

                await self._push(session, notification)
                return notification
        except Exception:
            logger.exception(f"Failed to notify {subject_id}")
            return None

    async def broadcast(self, room: str, event: str, payload: dict) -> int:
        try:
            return await self.realtime.publish(room, event, payload)
        except Exception:
            logger.exception(f"Failed to broadcast {event} to {room}")
            return 0

    async def redeliver_pending(self, window: timedelta) -> int:
        """Re-push undelivered inbox rows newer than ``window`` to online subjects.

        Returns the number of notifications delivered.
        """
        cutoff = datetime.now(UTC) - window
        delivered = 0
        with Session(self.engine) as session:
            statement = (
                select(Notification)
                .where(Notification.delivered_at == None)  # noqa: E711
                .where(Notification.created_at >= cutoff)
                .order_by(Notification.created_at)
            )
            for notification in session.exec(statement).all():
                if not self.realtime.has_listeners(user_room(notification.subject_id)):
                    continue
                if await self._push(session, notification):
                    delivered += 1
        return delivered

    async def _push(self, session: Session, notification: Notification) -> bool:
        payload = NotificationRead.model_validate(notification).model_dump(mode="json")
        count = await self.realtime.publish(
            user_room(notification.subject_id), "notification:new", payload
        )
        if not count:
            return False
        notification.delivered_at = datetime.now(UTC)
        session.add(notification)
        session.commit()
        return True


class BackgroundNotifier:
    """Notification sink that defers delivery to FastAPI background tasks."""

    def __init__(self, background_tasks: BackgroundTasks, gateway: NotificationGateway):
        self.background_tasks = background_tasks
        self.gateway = gateway

    def notify(self, subject_id: str, kind: str, title: str, body: str, meta: dict) -> None:
        self.background_tasks.add_task(self.gateway.notify, subject_id, kind, title, body, meta)

    def broadcast(self, room: str, event: str, payload: dict) -> None:
        self.background_tasks.add_task(self.gateway.broadcast, room, event, payload)


def get_notifier(background_tasks: BackgroundTasks, engine=Depends(get_engine)):
    """Dependency providing the request's notification sink."""
    return BackgroundNotifier(background_tasks, NotificationGateway(engine))
