"""Profile routes for syncing the caller's identity into a Subject."""
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.database import get_session
from app.core.errors import NotFound
from app.core.security import get_current_subject
from app.models import Subject
from app.models.subject import SubjectRead, SubjectUpdate

router = APIRouter(prefix="/users", tags=["users"])


@router.put("/me")
async def upsert_profile(
    payload: SubjectUpdate,
    subject_id: str = Depends(get_current_subject),
    session: Session = Depends(get_session),
):
    """
    Create or update the caller's profile.

    Called by the client after sign-in so that registrations can resolve
    the caller's name and email.
    """
    subject = session.get(Subject, subject_id)
    if subject:
        subject.sqlmodel_update(payload.model_dump())
    else:
        subject = Subject(id=subject_id, **payload.model_dump())
    session.add(subject)
    session.commit()
    session.refresh(subject)
    return SubjectRead.model_validate(subject)


@router.get("/me")
async def get_profile(
    subject_id: str = Depends(get_current_subject),
    session: Session = Depends(get_session),
):
    """Return the caller's profile."""
    subject = session.get(Subject, subject_id)
    if not subject:
        raise NotFound("User profile not found")
    return SubjectRead.model_validate(subject)
