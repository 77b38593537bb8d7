"""Status vocabularies shared by registrations and the participant ledger.

A registration carries a single stored ``RegistrationStatus``. The payment
status shown to clients is never stored; it is derived from the registration
status by ``payment_status_for`` so the two can never drift apart.
"""

from enum import Enum


class RegistrationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class EventType(str, Enum):
    WORKSHOP = "workshop"
    WEBINAR = "webinar"
    INTERNSHIP = "internship"


_PAYMENT_STATUS = {
    RegistrationStatus.PENDING: PaymentStatus.PENDING,
    RegistrationStatus.APPROVED: PaymentStatus.APPROVED,
    RegistrationStatus.REJECTED: PaymentStatus.REJECTED,
}

_DISPLAY_STATUS = {
    RegistrationStatus.APPROVED: "Approved",
    RegistrationStatus.REJECTED: "Rejected",
    RegistrationStatus.PENDING: "Pending",
}


def payment_status_for(status: RegistrationStatus) -> PaymentStatus:
    """Map a registration status to its lockstep payment status."""
    return _PAYMENT_STATUS[RegistrationStatus(status)]


def parse_status(value: str | None) -> RegistrationStatus | None:
    """Parse a client-supplied status, returning None for unknown values."""
    try:
        return RegistrationStatus(value)
    except ValueError:
        return None


def display_status_for(status) -> str:
    """UI label for a status; anything unrecognised reads as "Registered"."""
    return _DISPLAY_STATUS.get(parse_status(status), "Registered")
