"""Identity dependencies.

Authentication happens upstream (an auth proxy verifies the caller's
credential). This service only trusts the forwarded subject id header and
checks a shared admin key for admin operations.
"""
import logging
import secrets

from fastapi import Request

from app.core.config import settings
from app.core.errors import Forbidden, Unauthorized

logger = logging.getLogger(__name__)


def subject_from_headers(headers) -> str:
    """Return the verified subject id forwarded by the auth proxy."""
    subject_id = (headers.get(settings.subject_header) or "").strip()
    if not subject_id:
        raise Unauthorized("Missing subject identity")
    return subject_id


def check_admin_key(headers) -> None:
    """Raise unless the admin key header matches the configured key."""
    supplied = headers.get(settings.admin_key_header)
    if not supplied:
        raise Unauthorized("Missing admin key")
    if not secrets.compare_digest(supplied, settings.admin_api_key):
        logger.warning("Rejected admin request with invalid key")
        raise Forbidden("Invalid admin key")


def get_current_subject(request: Request) -> str:
    """Dependency yielding the caller's subject id."""
    return subject_from_headers(request.headers)


def require_admin(request: Request) -> None:
    """Dependency guarding admin-only routes."""
    check_admin_key(request.headers)
