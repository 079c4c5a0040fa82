# app/errors.py
"""
Domain error taxonomy. Services raise these; app.main maps them to HTTP responses.
"""


class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "domain_error"
    status_code = 400

    def __init__(self, message: str = None, code: str = None):
        self.message = message or (self.__doc__ or self.code).strip()
        super().__init__(self.message)
        if code:
            self.code = code

    def to_dict(self) -> dict:
        return {"success": False, "code": self.code, "message": self.message}


# ── Validation ───────────────────────────────────────────────────────────────
class ValidationError(DomainError):
    """Input data is missing or malformed."""

    code = "validation_error"
    status_code = 400


class InvalidStatus(ValidationError):
    """Status value is not one of the allowed values."""

    code = "invalid_status"


class NotEligible(ValidationError):
    """Only SOS accounts can be approved."""

    code = "not_eligible"


# ── Conflict ─────────────────────────────────────────────────────────────────
class ConflictError(DomainError):
    """Uniqueness or state rule violated."""

    code = "conflict"
    status_code = 409


class AlreadyCheckedIn(ConflictError):
    """Person is already checked in."""

    code = "already_checked_in"


class AlreadyApproved(ConflictError):
    """User is already approved."""

    code = "already_approved"


class DuplicateKey(ConflictError):
    """A record with this key already exists."""

    code = "duplicate_key"


class InvalidTransition(ConflictError):
    """Status change is not allowed from the current status."""

    code = "invalid_transition"


# ── Not found ────────────────────────────────────────────────────────────────
class NotFoundError(DomainError):
    """Record not found."""

    code = "not_found"
    status_code = 404


class NoActiveEntry(NotFoundError):
    """No active check-in found for this person."""

    code = "no_active_entry"


# ── Authorization ────────────────────────────────────────────────────────────
class AuthzError(DomainError):
    """Access denied."""

    code = "forbidden"
    status_code = 403


class InvalidCredentials(AuthzError):
    """Invalid email or password."""

    code = "invalid_credentials"
    status_code = 401


class TokenInvalid(AuthzError):
    """Token is not valid."""

    code = "token_invalid"
    status_code = 401


class PendingApproval(AuthzError):
    """Account is pending admin approval. Please contact an administrator."""

    code = "pending_approval"


class Deactivated(AuthzError):
    """Account has been deactivated. Please contact an administrator."""

    code = "deactivated"


class Forbidden(AuthzError):
    """Insufficient permissions."""

    code = "forbidden"


# ── Best-effort side effects ─────────────────────────────────────────────────
class DependencyFailure(DomainError):
    """A secondary side effect failed. Logged, never returned to the caller."""

    code = "dependency_failure"
    status_code = 500
