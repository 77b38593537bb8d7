"""Participant ledger maintenance.

The ledger is a per-event set of participant snapshots. Every write here is
idempotent: membership is re-read from the database before appending, and
the ``(event_id, subject_id)`` unique constraint catches the remaining race
where two sessions append at the same moment. Each helper commits its own
change so a ledger write never rides on (or rolls back) the registration
write that triggered it.
"""
import logging
from datetime import UTC, datetime

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.core.errors import Conflict, NotFound, ValidationError
from app.models import Event, Participant, RegistrationStatus, Subject

logger = logging.getLogger(__name__)


def find_participant(session: Session, event_id, subject_id: str) -> Participant | None:
    """Return the ledger entry for a subject, reading the latest committed state."""
    statement = (
        select(Participant)
        .where(Participant.event_id == event_id)
        .where(Participant.subject_id == subject_id)
        .execution_options(populate_existing=True)
    )
    return session.exec(statement).first()


def add_participant(
    session: Session,
    event: Event,
    subject: Subject,
    status: RegistrationStatus = RegistrationStatus.APPROVED,
) -> bool:
    """Append a subject to an event's ledger. Returns True if a row was written."""
    if find_participant(session, event.id, subject.id):
        logger.debug(f"{subject.id} already in ledger of {event.id}, skipping append")
        return False

    participant = Participant(
        event_id=event.id,
        subject_id=subject.id,
        email=subject.email,
        name=subject.display_name,
        registered_at=datetime.now(UTC),
        status=status,
    )
    session.add(participant)
    try:
        session.commit()
    except IntegrityError:
        # Lost the race to a concurrent append; the subject is present either way
        session.rollback()
        logger.info(f"Concurrent ledger append for {subject.id} on {event.id} ignored")
        return False

    logger.info(f"Added {subject.id} to ledger of event {event.id}")
    return True


def mirror_status(
    session: Session, event_id, subject_id: str, status: RegistrationStatus
) -> bool:
    """Copy a registration status onto an existing ledger snapshot.

    Membership itself is never removed here. Returns True if the snapshot
    changed.
    """
    participant = find_participant(session, event_id, subject_id)
    if participant is None or participant.status == status:
        return False

    participant.status = status
    session.add(participant)
    session.commit()
    logger.info(f"Ledger snapshot for {subject_id} on {event_id} set to {status.value}")
    return True


def join_free_event(session: Session, event: Event, subject: Subject) -> Participant:
    """Join a free event directly through the ledger, without a Registration."""
    if not event.is_free:
        raise ValidationError("Paid events require a registration with a payment reference")
    if find_participant(session, event.id, subject.id):
        raise Conflict("Already registered for this event")
    if not add_participant(session, event, subject):
        raise Conflict("Already registered for this event")
    return find_participant(session, event.id, subject.id)


def remove_participant(session: Session, event: Event, subject_id: str) -> bool:
    """Explicit unregister. Returns True if an entry was removed."""
    participant = find_participant(session, event.id, subject_id)
    if participant is None:
        return False

    session.delete(participant)
    session.commit()
    logger.info(f"Removed {subject_id} from ledger of event {event.id}")
    return True


def set_participant_status(
    session: Session, event: Event, subject_id: str, status: RegistrationStatus
) -> Participant:
    """Admin override of a ledger-only participant's status."""
    participant = find_participant(session, event.id, subject_id)
    if participant is None:
        raise NotFound("Participant not found")

    participant.status = status
    session.add(participant)
    session.commit()
    session.refresh(participant)
    return participant
