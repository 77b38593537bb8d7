"""Read models that reconcile the Registration Store with the participant ledger.

A subject's participation can be recorded in two places: a Registration row
(paid or explicit sign-ups) and an event's participant ledger (approved
registrations, free joins and legacy imports that never had a Registration).
The two can disagree, so history is built as a merge keyed by event id:
Registration-derived items are placed first and win, ledger-only events fill
in the rest.
"""
from datetime import datetime
from uuid import UUID

from sqlmodel import Field, Session, SQLModel, select

from app.core.errors import NotFound
from app.models import Event, EventType, Participant, Registration, RegistrationStatus, Subject
from app.models.event import EventSummary
from app.models.registration import EventRegistration, MyRegistration
from app.models.status import display_status_for


class HistoryItem(SQLModel):
    event_id: UUID
    title: str
    type: EventType
    date: datetime
    end_date: datetime | None = None
    image_url: str | None = None
    instructor: str | None = None
    display_status: str
    registration_status: str
    meeting_link: str | None = None
    rejection_reason: str | None = None


class ParticipationHistory(SQLModel):
    workshops: list[HistoryItem] = Field(default_factory=list)
    webinars: list[HistoryItem] = Field(default_factory=list)
    internships: list[HistoryItem] = Field(default_factory=list)


def _history_item(
    event: Event,
    status: RegistrationStatus,
    approved: bool,
    rejection_reason: str | None = None,
) -> HistoryItem:
    return HistoryItem(
        event_id=event.id,
        title=event.title,
        type=event.type,
        date=event.date,
        end_date=event.end_date,
        image_url=event.image_url,
        instructor=event.instructor,
        display_status=display_status_for(status),
        registration_status=getattr(status, "value", status),
        meeting_link=event.meeting_link if approved else None,
        rejection_reason=rejection_reason or None,
    )


def get_participation_history(session: Session, subject_id: str) -> ParticipationHistory:
    """Build a subject's history, one item per event, bucketed by event type."""
    if not session.get(Subject, subject_id):
        raise NotFound("User not found")

    registrations = session.exec(
        select(Registration)
        .where(Registration.subject_id == subject_id)
        .order_by(Registration.created_at.desc())
    ).all()

    ledger_rows = session.exec(
        select(Participant, Event)
        .join(Event, Participant.event_id == Event.id)
        .where(Participant.subject_id == subject_id)
        .order_by(Event.date.desc())
    ).all()

    merged: dict[UUID, HistoryItem] = {}

    # First pass: Registration Store, newest application first
    for registration in registrations:
        event = registration.event
        if event is None or event.id in merged:
            continue
        merged[event.id] = _history_item(
            event,
            registration.status,
            approved=registration.is_approved,
            rejection_reason=registration.rejection_reason,
        )

    # Second pass: ledger-only events (free joins, legacy imports)
    for participant, event in ledger_rows:
        if event.id in merged:
            continue
        status = participant.status or RegistrationStatus.APPROVED
        merged[event.id] = _history_item(
            event, status, approved=status == RegistrationStatus.APPROVED
        )

    history = ParticipationHistory()
    buckets = {
        EventType.WORKSHOP: history.workshops,
        EventType.WEBINAR: history.webinars,
        EventType.INTERNSHIP: history.internships,
    }
    for item in merged.values():
        bucket = buckets.get(item.type)
        if bucket is not None:
            bucket.append(item)
    return history


def event_summary(event: Event, include_meeting_link: bool) -> EventSummary:
    """Summarize an event, withholding the meeting link unless allowed."""
    summary = EventSummary.model_validate(event)
    if not include_meeting_link:
        summary.meeting_link = None
    return summary


def get_my_registrations(session: Session, subject_id: str) -> list[MyRegistration]:
    """A subject's registrations, newest first, with meeting links redacted
    for anything not fully approved."""
    if not session.get(Subject, subject_id):
        raise NotFound("User not found")

    registrations = session.exec(
        select(Registration)
        .where(Registration.subject_id == subject_id)
        .order_by(Registration.created_at.desc())
    ).all()

    results = []
    for registration in registrations:
        if registration.event is None:
            continue
        summary = event_summary(registration.event, registration.is_approved)
        results.append(MyRegistration.model_validate(registration, update={"event": summary}))
    return results


def get_event_registrations(session: Session, event_id: UUID) -> list[EventRegistration]:
    """All registrations for an event with their subject profile (admin view)."""
    if not session.get(Event, event_id):
        raise NotFound("Event not found")

    registrations = session.exec(
        select(Registration)
        .where(Registration.event_id == event_id)
        .order_by(Registration.created_at.desc())
    ).all()
    return [EventRegistration.model_validate(r) for r in registrations]
