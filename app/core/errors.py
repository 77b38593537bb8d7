"""Error taxonomy for registration operations.

Domain code raises these exceptions; the application converts them into
structured JSON responses at the request boundary (see ``app.main``).
"""

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class RegistrationError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500
    kind = "error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class Unauthorized(RegistrationError):
    status_code = 401
    kind = "unauthorized"


class Forbidden(RegistrationError):
    status_code = 403
    kind = "forbidden"


class NotFound(RegistrationError):
    status_code = 404
    kind = "not_found"


class ValidationError(RegistrationError):
    status_code = 400
    kind = "validation_error"


class Conflict(RegistrationError):
    status_code = 409
    kind = "conflict"


async def registration_error_handler(request: Request, exc: RegistrationError):
    """Render a RegistrationError as ``{"error": kind, "detail": message}``."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.kind, "detail": exc.detail},
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Render malformed request bodies as a ``validation_error`` (400)."""
    messages = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"] if part != "body")
        messages.append(f"{field}: {error['msg']}" if field else error["msg"])
    return JSONResponse(
        status_code=ValidationError.status_code,
        content={"error": ValidationError.kind, "detail": "; ".join(messages)},
    )
