"""Event routes: admin setup, registration review and ledger membership."""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlmodel import Field, Session, SQLModel

from app.core.database import get_session
from app.core.errors import NotFound, ValidationError
from app.core.security import get_current_subject, require_admin
from app.models import Event, Subject
from app.models.event import EventCreate, EventSummary
from app.models.participant import ParticipantRead
from app.models.status import parse_status
from app.registrations import ledger
from app.registrations.history import get_event_registrations

router = APIRouter(prefix="/events", tags=["events"])


class EventDetail(EventSummary):
    capacity: int | None = None
    participants: list[ParticipantRead] = Field(default_factory=list)


class ParticipantStatusUpdate(SQLModel):
    status: str


def _get_event(session: Session, event_id: UUID) -> Event:
    event = session.get(Event, event_id)
    if not event:
        raise NotFound("Event not found")
    return event


def _get_subject(session: Session, subject_id: str) -> Subject:
    subject = session.get(Subject, subject_id)
    if not subject:
        raise NotFound("User profile not found")
    return subject


@router.post("", status_code=201, dependencies=[Depends(require_admin)])
async def create_event(payload: EventCreate, session: Session = Depends(get_session)):
    """Create an event (admin). A missing or zero price makes it free."""
    event = Event.model_validate(payload)
    session.add(event)
    session.commit()
    session.refresh(event)
    return EventDetail.model_validate(event)


@router.get("/{event_id}", dependencies=[Depends(require_admin)])
async def event_detail(event_id: UUID, session: Session = Depends(get_session)):
    """Show an event with its full participant ledger (admin)."""
    return EventDetail.model_validate(_get_event(session, event_id))


@router.get("/{event_id}/registrations", dependencies=[Depends(require_admin)])
async def event_registrations(event_id: UUID, session: Session = Depends(get_session)):
    """List every registration for an event, newest first (admin)."""
    return get_event_registrations(session, event_id)


@router.post("/{event_id}/join")
async def join_event(
    event_id: UUID,
    subject_id: str = Depends(get_current_subject),
    session: Session = Depends(get_session),
):
    """
    Join a free event directly.

    Adds the caller to the participant list without a registration record.
    Paid events are refused with 400; use POST /registrations instead.
    """
    event = _get_event(session, event_id)
    subject = _get_subject(session, subject_id)
    participant = ledger.join_free_event(session, event, subject)
    session.refresh(event)
    return {
        "success": True,
        "message": "Successfully registered for event",
        "participant": ParticipantRead.model_validate(participant),
        "participant_count": len(event.participants),
    }


@router.delete("/{event_id}/participants/me")
async def unregister(
    event_id: UUID,
    subject_id: str = Depends(get_current_subject),
    session: Session = Depends(get_session),
):
    """
    Remove the caller from an event's participant list.

    This is the only operation that removes ledger membership. Any
    registration record is left untouched.
    """
    event = _get_event(session, event_id)
    removed = ledger.remove_participant(session, event, subject_id)
    if not removed:
        raise NotFound("Not registered for this event")
    session.refresh(event)
    return {
        "success": True,
        "message": "Successfully unregistered from event",
        "participant_count": len(event.participants),
    }


@router.put(
    "/{event_id}/participants/{subject_id}/status",
    dependencies=[Depends(require_admin)],
)
async def update_participant_status(
    event_id: UUID,
    subject_id: str,
    payload: ParticipantStatusUpdate,
    session: Session = Depends(get_session),
):
    """Set the status of a ledger-only participant (admin)."""
    status = parse_status(payload.status)
    if status is None:
        raise ValidationError("Invalid status")

    event = _get_event(session, event_id)
    participant = ledger.set_participant_status(session, event, subject_id, status)
    return {
        "success": True,
        "message": f"Participant status updated to {status.value}",
        "participant": ParticipantRead.model_validate(participant),
    }
