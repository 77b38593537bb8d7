"""Registration status transitions.

``RegistrationService`` owns every write to the Registration Store. It decides
the initial state of a registration from the event price, handles
re-registration after a rejection, moves registrations through the
pending/approved/rejected lifecycle, keeps the participant ledger in step and
hands status-change messages to an optional notification sink.
"""
import logging
import re
import secrets
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.core.config import settings
from app.core.errors import Conflict, NotFound, ValidationError
from app.models import Event, Registration, RegistrationStatus, Subject
from app.models.status import parse_status
from app.notifications.hub import ADMIN_ROOM, user_room
from app.registrations import ledger

logger = logging.getLogger(__name__)

# Bank transfer references are 10-18 digits
PAYMENT_REFERENCE_PATTERN = re.compile(r"^[0-9]{10,18}$")


class NotificationSink(Protocol):
    """Fire-and-forget delivery of status changes."""

    def notify(self, subject_id: str, kind: str, title: str, body: str, meta: dict) -> None: ...

    def broadcast(self, room: str, event: str, payload: dict) -> None: ...


@dataclass
class RegistrationResult:
    registration: Registration
    re_registered: bool = False


def synthesize_free_reference() -> str:
    """Build a unique reference for a free registration (time + random suffix)."""
    millis = int(time.time() * 1000)
    return f"{settings.free_reference_prefix}-{millis}-{secrets.token_hex(4)}"


class RegistrationService:
    """Status transition controller for registrations."""

    def __init__(self, session: Session, notifier: NotificationSink | None = None):
        self.session = session
        self.notifier = notifier

    def register_for_event(
        self,
        subject_id: str,
        event_id: UUID,
        name_on_certificate: str,
        payment_reference: str | None = None,
    ) -> RegistrationResult:
        """Register a subject for an event, or re-register after a rejection.

        Free events (no price or price 0) are approved immediately and the
        subject is appended to the participant ledger. Paid events need a
        payment reference and start out pending.

        Raises:
            NotFound: Unknown subject or event.
            ValidationError: Missing name, or a missing/malformed payment
                reference on a paid event.
            Conflict: An active registration exists, or the payment
                reference is already in use.
        """
        subject = self.session.get(Subject, subject_id)
        if not subject:
            raise NotFound("User profile not found")
        event = self.session.get(Event, event_id)
        if not event:
            raise NotFound("Event not found")

        name = (name_on_certificate or "").strip()
        if not name:
            raise ValidationError("Name on certificate is required")

        is_free = event.is_free
        reference = self._resolve_reference(is_free, payment_reference)
        status = RegistrationStatus.APPROVED if is_free else RegistrationStatus.PENDING

        existing = self.session.exec(
            select(Registration)
            .where(Registration.subject_id == subject.id)
            .where(Registration.event_id == event.id)
            .execution_options(populate_existing=True)
        ).first()

        if existing:
            if existing.status != RegistrationStatus.REJECTED:
                raise Conflict("You have already registered for this event")
            if not is_free:
                self._ensure_reference_unused(reference, exclude=existing.id)

            existing.payment_reference = reference
            existing.status = status
            existing.rejection_reason = ""
            existing.rejected_at = None
            existing.name_on_certificate = name
            existing.updated_at = datetime.now(UTC)
            registration = self._save(existing)
            logger.info(f"{subject.id} re-registered for {event.id} as {status.value}")
            re_registered = True
        else:
            if not is_free:
                self._ensure_reference_unused(reference)

            registration = self._save(
                Registration(
                    subject_id=subject.id,
                    event_id=event.id,
                    name_on_certificate=name,
                    payment_reference=reference,
                    status=status,
                )
            )
            logger.info(f"{subject.id} registered for {event.id} as {status.value}")
            re_registered = False

        if registration.status == RegistrationStatus.APPROVED:
            ledger.add_participant(self.session, event, subject)
        ledger.mirror_status(self.session, event.id, subject.id, registration.status)

        self._broadcast(ADMIN_ROOM, "stats:updated", {
            "type": "registration",
            "action": "re-registered" if re_registered else "created",
        })
        return RegistrationResult(registration, re_registered)

    def update_registration_status(
        self,
        registration_id: UUID,
        new_status: str,
        rejection_reason: str | None = None,
        admin_message: str | None = None,
    ) -> Registration:
        """Move a registration to pending, approved or rejected (admin).

        The registration is re-read from the database before it is changed.
        Approval appends the subject to the ledger if absent; an existing
        ledger snapshot always takes the new status, but is never removed.
        """
        status = parse_status(new_status)
        if status is None:
            raise ValidationError("Invalid status")

        registration = self.session.get(
            Registration, registration_id, populate_existing=True
        )
        if not registration:
            raise NotFound("Registration not found")

        registration.status = status
        if status == RegistrationStatus.REJECTED:
            registration.rejection_reason = (
                rejection_reason or admin_message or settings.default_rejection_reason
            )
            registration.rejected_at = datetime.now(UTC)
        else:
            registration.rejection_reason = ""
            registration.rejected_at = None
        if admin_message is not None:
            registration.admin_message = admin_message
        registration.updated_at = datetime.now(UTC)

        registration = self._save(registration)
        logger.info(f"Registration {registration.id} set to {status.value}")

        event = registration.event
        subject = registration.subject
        if status == RegistrationStatus.APPROVED and event and subject:
            ledger.add_participant(self.session, event, subject)
        ledger.mirror_status(self.session, registration.event_id, registration.subject_id, status)

        self._notify_status_change(registration, event)
        return registration

    def _resolve_reference(self, is_free: bool, payment_reference: str | None) -> str:
        # Whatever a client sends for a free event is ignored
        if is_free:
            return synthesize_free_reference()

        reference = (payment_reference or "").strip()
        if not reference:
            raise ValidationError("Payment reference is required for paid events")
        if not PAYMENT_REFERENCE_PATTERN.match(reference):
            raise ValidationError("Invalid payment reference number")
        return reference

    def _ensure_reference_unused(self, reference: str, exclude: UUID | None = None) -> None:
        statement = select(Registration).where(Registration.payment_reference == reference)
        if exclude is not None:
            statement = statement.where(Registration.id != exclude)
        if self.session.exec(statement).first():
            raise Conflict("This payment reference number has already been used")

    def _save(self, registration: Registration) -> Registration:
        self.session.add(registration)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logger.warning(f"Registration write rejected by constraint: {e.orig}")
            raise Conflict("Duplicate registration or payment reference") from e
        self.session.refresh(registration)
        return registration

    def _notify_status_change(self, registration: Registration, event: Event | None) -> None:
        title = event.title if event else "your event"
        status = registration.status
        if status == RegistrationStatus.APPROVED:
            kind = "approval"
            headline = "Registration Approved"
            message = f'Your registration for "{title}" has been approved! You\'re all set.'
        elif status == RegistrationStatus.REJECTED:
            kind = "rejection"
            headline = "Registration Rejected"
            message = (
                f'Your registration for "{title}" was rejected. '
                f"Reason: {registration.rejection_reason}"
            )
        else:
            kind = "registration"
            headline = "Registration Status Updated"
            message = f'Your registration status for "{title}" has been updated to {status.value}.'

        self._notify(registration.subject_id, kind, headline, message, {
            "event_id": str(registration.event_id),
            "registration_id": str(registration.id),
            "url": "/workshops",
        })
        self._broadcast(user_room(registration.subject_id), "registration:status-updated", {
            "registration_id": str(registration.id),
            "status": status.value,
            "event": {"id": str(registration.event_id), "title": title},
            "message": message,
        })
        self._broadcast(ADMIN_ROOM, "stats:updated", {
            "type": "registration",
            "action": status.value,
        })

    def _notify(self, subject_id: str, kind: str, title: str, body: str, meta: dict) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.notify(subject_id, kind, title, body, meta)
        except Exception:
            logger.exception(f"Notification to {subject_id} failed; state change kept")

    def _broadcast(self, room: str, event: str, payload: dict) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.broadcast(room, event, payload)
        except Exception:
            logger.exception(f"Broadcast of {event} to {room} failed; state change kept")
