"""
gymdesk/core/errors.py
Domain exceptions.

Every business-rule rejection raised by the services derives from `GymDeskError`
and carries a machine readable `error_code` plus optional `details`. The HTTP
layer turns them into JSON responses in `gymdesk.core.handlers`; nothing here
knows about FastAPI.
"""
from typing import Any, Dict, List, Optional


class GymDeskError(Exception):
    """Base class for all application errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.error_code, "message": self.message, "details": self.details}


# --------- Input / lookup ---------

class ValidationError(GymDeskError):
    """Bad input shape or range; the operation was not attempted."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message, "VALIDATION_ERROR", {"field": field} if field else {})


class NotFound(GymDeskError):
    def __init__(self, resource: str, resource_id: str) -> None:
        super().__init__(
            f"{resource} not found",
            "NOT_FOUND",
            {"resource": resource, "resource_id": resource_id},
        )


# --------- Business rules ---------

class CapacityExceeded(GymDeskError):
    def __init__(self, shift_id: str, capacity: Optional[int] = None) -> None:
        details: Dict[str, Any] = {"shift_id": shift_id}
        if capacity is not None:
            details["capacity"] = capacity
        super().__init__("The shift is full", "CAPACITY_EXCEEDED", details)


class AlreadyBooked(GymDeskError):
    def __init__(self, shift_id: str, client_id: str) -> None:
        super().__init__(
            "The client is already booked for this shift",
            "ALREADY_BOOKED",
            {"shift_id": shift_id, "client_id": client_id},
        )


class ReferentialConflict(GymDeskError):
    """A delete was blocked because other documents still reference the target."""

    def __init__(self, message: str, resource_id: str, dependents: List[str]) -> None:
        super().__init__(
            message,
            "REFERENTIAL_CONFLICT",
            {"resource_id": resource_id, "dependents": dependents},
        )


class AccountAlreadyLinked(GymDeskError):
    def __init__(self, account_id: str, tenant_id: str, client_id: str) -> None:
        super().__init__(
            "This account is already linked to another client",
            "ACCOUNT_ALREADY_LINKED",
            {"account_id": account_id, "tenant_id": tenant_id, "client_id": client_id},
        )


class NotAssociated(GymDeskError):
    """The signed-in account has no client record in any gym yet."""

    def __init__(self, account_id: str) -> None:
        super().__init__(
            "Your client profile has not been linked by the gym yet. Please contact the gym.",
            "NOT_ASSOCIATED",
            {"account_id": account_id},
        )


class PartialCascadeFailure(GymDeskError):
    """The primary delete succeeded but some dependent cleanups failed."""

    def __init__(self, resource_id: str, failures: List[Dict[str, str]]) -> None:
        super().__init__(
            "The record was deleted but some related data could not be cleaned up",
            "PARTIAL_CASCADE_FAILURE",
            {"resource_id": resource_id, "failures": failures},
        )


# --------- Storage ---------

class StoreUnavailable(GymDeskError):
    """Network or backend failure. Safe to retry the same operation."""

    def __init__(self, message: str = "The data store is unavailable, please try again") -> None:
        super().__init__(message, "STORE_UNAVAILABLE")


class VersionConflict(GymDeskError):
    """A conditional write lost against a concurrent change of the same document."""

    def __init__(self, path: str) -> None:
        super().__init__("The document changed since it was read", "VERSION_CONFLICT", {"path": path})


# --------- Identity ---------

class IdentityError(GymDeskError):
    """Sign-in / sign-up rejected by the identity provider."""

    default_message = "Authentication error"
    code = "IDENTITY_ERROR"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message, self.code)


class EmailInUse(IdentityError):
    default_message = "The email address is already in use"
    code = "EMAIL_IN_USE"


class InvalidEmail(IdentityError):
    default_message = "The email address is badly formatted"
    code = "INVALID_EMAIL"


class WeakPassword(IdentityError):
    default_message = "The password must be at least 6 characters long"
    code = "WEAK_PASSWORD"


class InvalidCredentials(IdentityError):
    default_message = "Invalid credentials, check your email and password"
    code = "INVALID_CREDENTIALS"


class MethodDisabled(IdentityError):
    default_message = "Email/password sign-in is not enabled for this project"
    code = "METHOD_DISABLED"
