"""Registration routes for subjects and reviewing admins."""
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlmodel import Session

from app.core.database import get_session
from app.core.security import get_current_subject, require_admin
from app.models import RegistrationStatus
from app.models.registration import RegistrationCreate, RegistrationRead, StatusUpdate
from app.notifications.gateway import get_notifier
from app.registrations.history import get_my_registrations, get_participation_history
from app.registrations.service import RegistrationService

router = APIRouter(prefix="/registrations", tags=["registrations"])


@router.post("", status_code=201)
async def register_for_event(
    payload: RegistrationCreate,
    response: Response,
    subject_id: str = Depends(get_current_subject),
    session: Session = Depends(get_session),
    notifier=Depends(get_notifier),
):
    """
    Register the caller for an event.

    Free events are approved on the spot. Paid events need a payment
    reference and wait for admin review. A subject whose previous
    registration was rejected may apply again; that returns 200 instead of
    201 and reuses the existing registration.
    """
    result = RegistrationService(session, notifier).register_for_event(
        subject_id,
        payload.event_id,
        payload.name_on_certificate,
        payload.payment_reference,
    )
    registration = result.registration

    if result.re_registered:
        response.status_code = 200
        message = "Re-registration submitted successfully. Pending verification."
    else:
        message = "Registration submitted successfully. Pending verification."
    if registration.status == RegistrationStatus.APPROVED:
        message = "Registration confirmed."

    return {
        "success": True,
        "message": message,
        "registration": RegistrationRead.model_validate(registration),
    }


@router.get("/my")
async def my_registrations(
    subject_id: str = Depends(get_current_subject),
    session: Session = Depends(get_session),
):
    """
    List the caller's registrations, newest first.

    Meeting links are only included for registrations that are approved.
    """
    return get_my_registrations(session, subject_id)


@router.get("/history")
async def participation_history(
    subject_id: str = Depends(get_current_subject),
    session: Session = Depends(get_session),
):
    """
    Return the caller's workshops, webinars and internships.

    Merges registrations with event participant lists so every event shows
    up exactly once, with the registration's status taking precedence.
    """
    return get_participation_history(session, subject_id)


@router.put("/{registration_id}/status", dependencies=[Depends(require_admin)])
async def update_registration_status(
    registration_id: UUID,
    payload: StatusUpdate,
    session: Session = Depends(get_session),
    notifier=Depends(get_notifier),
):
    """
    Approve, reject or reset a registration (admin).

    The subject is notified and admin dashboards receive a stats update
    once the response has been sent.
    """
    registration = RegistrationService(session, notifier).update_registration_status(
        registration_id,
        payload.status,
        rejection_reason=payload.rejection_reason,
        admin_message=payload.admin_message,
    )
    return {
        "success": True,
        "message": f"Registration {registration.status.value} successfully",
        "registration": RegistrationRead.model_validate(registration),
    }
