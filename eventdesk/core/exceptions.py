"""
Domain exceptions.

Raised by services for workflow failures that callers map to HTTP responses.
Access predicates never raise these; they return a Deny decision instead.
"""

from __future__ import annotations

from fastapi import status


class EventDeskError(Exception):
    """Base class for domain errors carrying an HTTP status and a stable code."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "EVENTDESK_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_detail(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class NotAuthenticated(EventDeskError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "NOT_AUTHENTICATED"


class AccessDenied(EventDeskError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "ACCESS_DENIED"


class InvalidToken(EventDeskError):
    code = "INVALID_INVITATION_TOKEN"

    def __init__(self, message: str = "Invalid invitation token") -> None:
        super().__init__(message)


class AlreadyResolved(EventDeskError):
    code = "INVITATION_RESOLVED"

    def __init__(self, current_status: str) -> None:
        super().__init__(f"This invitation has already been {current_status}")
        self.current_status = current_status


class InvitationExpired(EventDeskError):
    code = "INVITATION_EXPIRED"

    def __init__(self, message: str = "This invitation has expired") -> None:
        super().__init__(message)


class EmailMismatch(EventDeskError):
    code = "EMAIL_MISMATCH"

    def __init__(
        self, message: str = "This invitation was sent to a different email address"
    ) -> None:
        super().__init__(message)


class TenantNotFound(EventDeskError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "TENANT_NOT_FOUND"


class OwnershipConflict(EventDeskError):
    code = "OWNS_ORGANIZATIONS"
