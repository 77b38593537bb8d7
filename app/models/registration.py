"""Registration model: one subject's application to one event.

Registrations are the source of truth for paid and explicit sign-ups. A
subject has at most one registration per event; a rejected registration is
reused when the subject applies again rather than creating a second row.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID, uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

from app.models.event import EventSummary
from app.models.status import PaymentStatus, RegistrationStatus, payment_status_for
from app.models.subject import SubjectRead

if TYPE_CHECKING:
    from app.models.event import Event
    from app.models.subject import Subject


class Registration(SQLModel, table=True):
    """A subject's registration for an event.

    Attributes:
        id: Unique identifier (UUID).
        subject_id: Foreign key to the registering Subject.
        event_id: Foreign key to the Event.
        name_on_certificate: Name to print on the participation certificate.
        payment_reference: Payment reference supplied by the subject, or a
            synthesized ``FREE-...`` value for free events. Globally unique.
        status: Lifecycle state. Payment status is derived from it.
        rejection_reason: Why the registration was rejected; empty otherwise.
        rejected_at: When it was rejected; None otherwise.
        admin_message: Optional note from the reviewing admin.
        created_at: When the subject first applied.
        updated_at: Last modification time.
    """
    __table_args__ = (
        UniqueConstraint("subject_id", "event_id", name="uq_registration_subject_event"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    subject_id: str = Field(foreign_key="subject.id", index=True)
    event_id: UUID = Field(foreign_key="event.id", index=True)
    name_on_certificate: str
    payment_reference: str = Field(unique=True, index=True)
    status: RegistrationStatus = Field(default=RegistrationStatus.PENDING)
    rejection_reason: str = ""
    rejected_at: datetime | None = None
    admin_message: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC), index=True)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Relationships
    event: Optional["Event"] = Relationship(back_populates="registrations")
    subject: Optional["Subject"] = Relationship()

    @property
    def payment_status(self) -> PaymentStatus:
        return payment_status_for(self.status)

    @property
    def is_approved(self) -> bool:
        return (
            self.status == RegistrationStatus.APPROVED
            and self.payment_status == PaymentStatus.APPROVED
        )


class RegistrationCreate(SQLModel):
    event_id: UUID
    name_on_certificate: str
    payment_reference: str | None = None


class StatusUpdate(SQLModel):
    # Left as a plain string so unknown values surface as a 400, not a 422
    status: str
    rejection_reason: str | None = None
    admin_message: str | None = None


class RegistrationRead(SQLModel):
    id: UUID
    subject_id: str
    event_id: UUID
    name_on_certificate: str
    payment_reference: str
    status: RegistrationStatus
    payment_status: PaymentStatus
    rejection_reason: str
    rejected_at: datetime | None = None
    admin_message: str
    created_at: datetime
    updated_at: datetime


class MyRegistration(RegistrationRead):
    event: EventSummary


class EventRegistration(RegistrationRead):
    subject: SubjectRead | None = None
