"""
Action error taxonomy.

Handlers raise these and the exception handlers in main.py turn them into a
uniform ``{"message": ...}`` body (or a redirect for auth failures).
"""
from fastapi import status


class ActionError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "An error occurred"

    def __init__(self, message: str = None, status_code: int = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationFailed(ActionError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class NotFound(ActionError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(ActionError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class ExternalServiceError(ActionError):
    """A collaborator (payment provider, file storage) failed; the cause is logged, not returned."""
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "External service is unavailable, please try again later"


class AuthRedirect(Exception):
    """No session, or a non-admin reaching an admin action."""

    def __init__(self, reason: str = "unauthenticated"):
        self.reason = reason
        super().__init__(reason)


def format_validation_errors(errors) -> str:
    """Flatten pydantic/FastAPI error dicts into one readable message."""
    parts = []
    for err in errors:
        loc = [str(x) for x in (err.get("loc") or []) if x not in ("body", "query", "path", "form")]
        msg = err.get("msg", "invalid value")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        parts.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return "; ".join(parts) or ValidationFailed.default_message
