"""Background job scheduler for notification redelivery."""
import logging
from datetime import timedelta

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.core.config import settings
from app.core.database import engine
from app.notifications.gateway import NotificationGateway

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


async def redelivery_job():
    """Push inbox notifications that no socket has received yet."""
    try:
        gateway = NotificationGateway(engine)
        window = timedelta(hours=settings.notification_redelivery_window_hours)
        delivered = await gateway.redeliver_pending(window)
        if delivered:
            logger.info(f"Redelivered {delivered} notifications")
    except Exception as e:
        logger.error(f"Notification redelivery failed: {e}")


def start_scheduler():
    """Start the background scheduler."""
    scheduler.add_job(
        redelivery_job,
        trigger=IntervalTrigger(seconds=settings.notification_redelivery_seconds),
        id="notification_redelivery",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(
        f"Scheduler started, redelivering notifications every "
        f"{settings.notification_redelivery_seconds} seconds"
    )


def shutdown_scheduler():
    """Graceful shutdown."""
    scheduler.shutdown(wait=False)
    logger.info("Scheduler shut down")
