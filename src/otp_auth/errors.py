"""Error kinds raised by the authentication core.

Every inbound operation either returns its success value or raises exactly
one of these.  The ``kind`` tag is stable and transport-agnostic; the HTTP
layer maps it to a status code.
"""


class AuthError(Exception):
    """Base class for all authentication errors."""

    kind = "auth_error"
    default_message = "Authentication error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(AuthError):
    """Malformed phone number or code.  Caller's fault; never retried."""

    kind = "validation_error"
    default_message = "Invalid request"


class RateLimitedError(AuthError):
    kind = "rate_limited"
    default_message = "Rate limit exceeded"


class InvalidOrExpiredError(AuthError):
    """Wrong code, no challenge, or expired challenge.

    The three cases share one error so callers cannot probe whether a
    challenge exists for a phone number.
    """

    kind = "invalid_or_expired"
    default_message = "Invalid or expired OTP"


class TokenInvalidError(AuthError):
    kind = "token_invalid"
    default_message = "Invalid session token"


class TokenExpiredError(AuthError):
    kind = "token_expired"
    default_message = "Session expired. Please log in again."


class UserNotFoundError(AuthError):
    kind = "not_found"
    default_message = "User not found"


class StoreError(AuthError):
    """A backing store (key-value or identity directory) failed."""

    kind = "store_error"
    default_message = "Backing store unavailable"
