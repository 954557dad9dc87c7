"""Relay error taxonomy.

Every failure that leaves a relay is a RelayError carrying the HTTP status it
is rendered with; the exception handlers in main.py turn it into a JSON body.
"""


class RelayError(Exception):
    """Base class for errors returned to relay callers."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequest(RelayError):
    status_code = 400
    default_message = "Invalid request"


class Unauthorized(RelayError):
    """Missing or invalid credential. Terminal; the caller must sign in again."""

    status_code = 401
    default_message = "Unauthorized"


class PaymentRequired(RelayError):
    status_code = 402
    default_message = "Service temporarily unavailable. Please try again later."


class Forbidden(RelayError):
    """Authenticated but lacking the required role."""

    status_code = 403
    default_message = "Forbidden"


class NotFound(RelayError):
    status_code = 404
    default_message = "Not found"


class RateLimited(RelayError):
    """Local or upstream rate limit; the caller must back off."""

    status_code = 429
    default_message = "Rate limit exceeded. Please try again in a moment."


class UpstreamUnavailable(RelayError):
    """Upstream failure other than rate limiting or billing. Safe to retry later."""

    status_code = 500
    default_message = "Upstream service error"


class MalformedUpstreamResponse(RelayError):
    """The structured payload could not be extracted from upstream output."""

    status_code = 500
    default_message = "Failed to parse upstream response"
