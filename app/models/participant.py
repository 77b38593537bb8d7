"""Participant model: the per-event participant ledger.

Each row is a denormalized snapshot of a subject who joined an event. Rows
are written when a registration is approved, when a free event is joined
directly, or by legacy imports that never created a Registration. A subject
appears at most once per event.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID, uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

from app.models.status import PaymentStatus, RegistrationStatus, payment_status_for

if TYPE_CHECKING:
    from app.models.event import Event


class Participant(SQLModel, table=True):
    """A subject's entry in an event's participant ledger.

    Attributes:
        id: Unique identifier (UUID).
        event_id: Foreign key to the parent Event.
        subject_id: External identity id of the participant.
        email: Email at the time of joining.
        name: Display name at the time of joining.
        registered_at: When the entry was written.
        status: Snapshot status; payment status is derived from it.
        event: Reference to the parent Event object.
    """
    __table_args__ = (
        UniqueConstraint("event_id", "subject_id", name="uq_participant_event_subject"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    event_id: UUID = Field(foreign_key="event.id", index=True)
    subject_id: str = Field(index=True)
    email: str = ""
    name: str = ""
    registered_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    status: RegistrationStatus = Field(default=RegistrationStatus.APPROVED)

    # Relationship
    event: Optional["Event"] = Relationship(back_populates="participants")

    @property
    def payment_status(self) -> PaymentStatus:
        return payment_status_for(self.status)


class ParticipantRead(SQLModel):
    subject_id: str
    email: str
    name: str
    registered_at: datetime
    status: RegistrationStatus
    payment_status: PaymentStatus
