"""Tests for participant ledger maintenance and drift repair."""

import pytest
from sqlmodel import Session, select

from app.core.errors import Conflict, NotFound, ValidationError
from app.models import Participant, Registration, RegistrationStatus
from app.registrations import ledger
from app.registrations.drift import find_ledger_drift, repair_ledger_drift


class TestLedger:
    """Tests for idempotent ledger writes."""

    def test_add_participant_snapshot(self, session: Session, subject, free_event):
        assert ledger.add_participant(session, free_event, subject) is True

        participant = ledger.find_participant(session, free_event.id, subject.id)
        assert participant.email == subject.email
        assert participant.name == "Alice Liddell"
        assert participant.status == RegistrationStatus.APPROVED

    def test_add_participant_is_idempotent(self, session: Session, subject, free_event):
        ledger.add_participant(session, free_event, subject)
        assert ledger.add_participant(session, free_event, subject) is False

        session.refresh(free_event)
        assert len(free_event.participants) == 1

    def test_mirror_status(self, session: Session, subject, free_event):
        ledger.add_participant(session, free_event, subject)

        assert ledger.mirror_status(
            session, free_event.id, subject.id, RegistrationStatus.REJECTED
        ) is True
        assert ledger.mirror_status(
            session, free_event.id, subject.id, RegistrationStatus.REJECTED
        ) is False
        assert ledger.find_participant(session, free_event.id, subject.id).status == "rejected"

    def test_mirror_status_never_adds(self, session: Session, subject, free_event):
        assert ledger.mirror_status(
            session, free_event.id, subject.id, RegistrationStatus.APPROVED
        ) is False
        assert ledger.find_participant(session, free_event.id, subject.id) is None

    def test_join_free_event(self, session: Session, subject, free_event):
        participant = ledger.join_free_event(session, free_event, subject)

        assert participant.subject_id == subject.id
        with pytest.raises(Conflict):
            ledger.join_free_event(session, free_event, subject)

    def test_join_paid_event_refused(self, session: Session, subject, paid_event):
        with pytest.raises(ValidationError):
            ledger.join_free_event(session, paid_event, subject)

    def test_remove_participant(self, session: Session, subject, free_event):
        ledger.add_participant(session, free_event, subject)

        assert ledger.remove_participant(session, free_event, subject.id) is True
        assert ledger.remove_participant(session, free_event, subject.id) is False

    def test_set_participant_status(self, session: Session, subject, free_event):
        ledger.add_participant(session, free_event, subject)

        participant = ledger.set_participant_status(
            session, free_event, subject.id, RegistrationStatus.PENDING
        )

        assert participant.status == RegistrationStatus.PENDING
        assert participant.payment_status == "PENDING"

    def test_set_status_unknown_participant(self, session: Session, free_event):
        with pytest.raises(NotFound):
            ledger.set_participant_status(
                session, free_event, "ghost", RegistrationStatus.APPROVED
            )


class TestLedgerDrift:
    """Tests for the registration/ledger drift report."""

    def _register(self, session, subject, event, status, reference):
        registration = Registration(
            subject_id=subject.id,
            event_id=event.id,
            name_on_certificate="x",
            payment_reference=reference,
            status=status,
        )
        session.add(registration)
        session.commit()
        return registration

    def test_clean(self, session: Session, subject, paid_event):
        self._register(session, subject, paid_event, RegistrationStatus.PENDING, "1111111111")

        assert find_ledger_drift(session).is_clean

    def test_detects_and_repairs(self, session: Session, subject, other_subject, paid_event):
        self._register(session, subject, paid_event, RegistrationStatus.APPROVED, "1111111111")
        self._register(session, other_subject, paid_event, RegistrationStatus.REJECTED, "2222222222")
        session.add(Participant(event_id=paid_event.id, subject_id=other_subject.id))
        session.commit()

        drift = find_ledger_drift(session)
        assert [r.subject_id for r in drift.missing] == [subject.id]
        assert [p.subject_id for p, _ in drift.mismatched] == [other_subject.id]

        stats = repair_ledger_drift(session, drift)

        assert stats == {"appended": 1, "mirrored": 1, "skipped": 0}
        assert find_ledger_drift(session).is_clean
        statuses = {
            p.subject_id: p.status
            for p in session.exec(
                select(Participant).where(Participant.event_id == paid_event.id)
            ).all()
        }
        assert statuses == {
            subject.id: RegistrationStatus.APPROVED,
            other_subject.id: RegistrationStatus.REJECTED,
        }
