"""Event model for schedulable activities.

This module defines the Event model (a workshop, webinar or internship that
subjects register for) together with the request and response shapes used
by the API. Each event owns a participant ledger, see
``app.models.participant``.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlmodel import Field, Relationship, SQLModel

from app.models.status import EventType

if TYPE_CHECKING:
    from app.models.participant import Participant
    from app.models.registration import Registration


class EventBase(SQLModel):
    title: str
    type: EventType = Field(default=EventType.WORKSHOP, index=True)
    price: float | None = Field(default=None, ge=0)
    date: datetime = Field(index=True)
    end_date: datetime | None = None
    capacity: int | None = Field(default=None, ge=0)
    meeting_link: str | None = None
    instructor: str | None = None
    image_url: str | None = None


class Event(EventBase, table=True):
    """A workshop, webinar or internship.

    Attributes:
        id: Unique identifier (UUID).
        title: Display title.
        type: Which history bucket the event belongs to.
        price: Registration fee. ``None`` or 0 means the event is free and
            registrations are approved immediately.
        date: When the event starts.
        end_date: When the event ends, if known.
        capacity: Optional participant cap (informational).
        meeting_link: Join link, only ever shown to approved registrants.
        participants: The denormalized participant ledger.
        registrations: Registration Store rows for this event.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Relationships
    participants: list["Participant"] = Relationship(
        back_populates="event",
        sa_relationship_kwargs={
            "order_by": "Participant.registered_at",
            "cascade": "all, delete-orphan",
        },
    )
    registrations: list["Registration"] = Relationship(back_populates="event")

    @property
    def is_free(self) -> bool:
        return not self.price


class EventCreate(EventBase):
    pass


class EventSummary(SQLModel):
    """Event fields embedded in registration and history responses."""
    id: UUID
    title: str
    type: EventType
    price: float | None = None
    date: datetime
    end_date: datetime | None = None
    meeting_link: str | None = None
    instructor: str | None = None
    image_url: str | None = None
