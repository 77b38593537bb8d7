"""Notification model for the in-app inbox.

Every status change produces an inbox row for the affected subject. The row
doubles as the delivery record for realtime pushes: ``delivered_at`` stays
empty until at least one of the subject's open sockets received it.
"""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class Notification(SQLModel, table=True):
    """An inbox message for a subject.

    Attributes:
        id: Unique identifier (UUID).
        subject_id: Recipient.
        kind: "approval", "rejection" or "registration".
        title: Short headline.
        message: Body text.
        meta: Related ids and a client URL.
        is_read: Whether the subject dismissed it.
        created_at: When it was written.
        delivered_at: When a realtime push first reached the subject.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    subject_id: str = Field(index=True)
    kind: str
    title: str
    message: str
    meta: dict = Field(default_factory=dict, sa_column=Column(JSON))
    is_read: bool = Field(default=False)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC), index=True)
    delivered_at: datetime | None = None


class NotificationRead(SQLModel):
    id: UUID
    kind: str
    title: str
    message: str
    meta: dict
    is_read: bool
    created_at: datetime
