from app.models.event import Event
from app.models.notification import Notification
from app.models.participant import Participant
from app.models.registration import Registration
from app.models.status import EventType, PaymentStatus, RegistrationStatus
from app.models.subject import Subject

__all__ = [
    "Event",
    "EventType",
    "Notification",
    "Participant",
    "PaymentStatus",
    "Registration",
    "RegistrationStatus",
    "Subject",
]
