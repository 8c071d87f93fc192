class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class MalformedToken(DomainError):
    """Decoded QR text is not a session token payload."""


class ExpiredOrUnknownToken(DomainError):
    """Payload is well formed but matches no live token."""


class MissingIdentity(DomainError):
    """No student identity accompanied the scan."""


class ClockOrScheduleUnavailable(DomainError):
    """The schedule source could not be read; token rotation must stop."""
