# perchfinder/core/errors.py
"""
Error taxonomy shared by the advice backend and the recommendation client.

Each error carries the HTTP status the backend answers with and the
`error_code` used in JSON error bodies.
"""

from typing import Any, Optional


class PerchfinderError(Exception):
    status_code = 500
    error_code = "INTERNAL_SERVER_ERROR"
    default_message = "Något gick fel."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self) -> dict:
        return {"error_code": self.error_code, "message": self.message}


class Unauthenticated(PerchfinderError):
    status_code = 401
    error_code = "UNAUTHENTICATED"
    default_message = "Du måste vara inloggad."


class EmailNotVerified(PerchfinderError):
    # 401 rather than 412: one status for every credential problem on the HTTP endpoint
    status_code = 401
    error_code = "EMAIL_NOT_VERIFIED"
    default_message = "Verifiera din e-postadress först."


class OriginNotAllowed(PerchfinderError):
    status_code = 403
    error_code = "ORIGIN_NOT_ALLOWED"
    default_message = "Origin not allowed."


class Forbidden(PerchfinderError):
    status_code = 403
    error_code = "FORBIDDEN"
    default_message = "Du saknar behörighet för denna vy."


class PayloadTooLarge(PerchfinderError):
    status_code = 413
    error_code = "PAYLOAD_TOO_LARGE"
    default_message = "Request body is too large."


class InvalidArgument(PerchfinderError):
    status_code = 400
    error_code = "INVALID_ARGUMENT"
    default_message = "Ogiltig data."

    def __init__(self, message: Optional[str] = None, details: Any = None):
        super().__init__(message)
        self.details = details

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.details is not None:
            body["details"] = self.details
        return body


class RateLimited(PerchfinderError):
    status_code = 429
    error_code = "RATE_LIMITED"
    default_message = "För många AI-anrop. Försök igen senare."

    def __init__(self, retry_after_seconds: int, message: Optional[str] = None):
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["retry_after_seconds"] = self.retry_after_seconds
        return body


class UpstreamFailure(PerchfinderError):
    """Weather lookup or language model call failed."""
    status_code = 500
    error_code = "UPSTREAM_FAILURE"
    default_message = "Kunde inte hämta rekommendation just nu."


class RequestFailed(PerchfinderError):
    """Client side: the advice endpoint answered with an unexpected status."""
    error_code = "REQUEST_FAILED"
    default_message = "Kunde inte hämta rekommendation just nu."

    def __init__(self, status_code: Optional[int] = None, message: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
