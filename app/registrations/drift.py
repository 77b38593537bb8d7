"""Detect and repair disagreement between registrations and the ledger."""
import logging
from dataclasses import dataclass, field

from sqlalchemy import and_
from sqlmodel import Session, select

from app.models import Participant, Registration, RegistrationStatus
from app.registrations import ledger

logger = logging.getLogger(__name__)


@dataclass
class LedgerDrift:
    """Registrations whose ledger state does not match.

    Attributes:
        missing: Approved registrations with no ledger entry.
        mismatched: (participant, registration) pairs whose statuses differ.
    """
    missing: list[Registration] = field(default_factory=list)
    mismatched: list[tuple[Participant, Registration]] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not self.missing and not self.mismatched


def find_ledger_drift(session: Session) -> LedgerDrift:
    """Compare every registration with its ledger entry, if any."""
    statement = select(Registration, Participant).outerjoin(
        Participant,
        and_(
            Participant.event_id == Registration.event_id,
            Participant.subject_id == Registration.subject_id,
        ),
    )
    drift = LedgerDrift()
    for registration, participant in session.exec(statement).all():
        if participant is None:
            if registration.status == RegistrationStatus.APPROVED:
                drift.missing.append(registration)
        elif participant.status != registration.status:
            drift.mismatched.append((participant, registration))
    return drift


def repair_ledger_drift(session: Session, drift: LedgerDrift) -> dict:
    """Append missing participants and mirror mismatched statuses.

    Returns:
        dict with keys: appended, mirrored, skipped
    """
    stats = {"appended": 0, "mirrored": 0, "skipped": 0}

    for registration in drift.missing:
        event, subject = registration.event, registration.subject
        if event is None or subject is None:
            stats["skipped"] += 1
            continue
        if ledger.add_participant(session, event, subject):
            stats["appended"] += 1
        else:
            stats["skipped"] += 1

    for _participant, registration in drift.mismatched:
        if ledger.mirror_status(
            session, registration.event_id, registration.subject_id, registration.status
        ):
            stats["mirrored"] += 1
        else:
            stats["skipped"] += 1

    logger.info(f"Ledger drift repaired: {stats}")
    return stats
