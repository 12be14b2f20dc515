# ==============================================================================
# Collector Errors
# ==============================================================================
"""
Exceptions raised by the request normalizer and the session lifecycle.

Every CollectorError carries the HTTP status code and the client-facing
message used by the web layer. StoreFailure is the only server-side error;
everything else is detected locally and never retried.
"""


class CollectorError(Exception):
    """Base class for errors returned to the caller."""

    status_code = 400
    message = "Bad request."

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_payload(self) -> dict:
        """Response body for this error."""
        return {"error": self.message}


class InvalidRequestBody(CollectorError):
    """Body is not valid JSON, or not a JSON object."""

    message = "Invalid JSON in request body"


class InvalidFingerprintType(CollectorError):
    """Fingerprint is neither a string nor a number."""

    message = "Fingerprint must be a string or number."


class MissingFingerprint(CollectorError):
    """Fingerprint is empty after trimming."""

    message = "Fingerprint missing."


class InvalidWebsiteName(CollectorError):
    """Website name rejected by strict validation."""

    message = "websiteName must match [A-Za-z0-9_.-]{1,128}."


class SessionAlreadyEnded(CollectorError):
    """Close requested for a session that is already closed."""

    message = "Session has already ended."


class NoActiveSession(CollectorError):
    """Close requested but the fingerprint has no session at all."""

    status_code = 404
    message = "No active session found for this fingerprint."


class StoreFailure(CollectorError):
    """The session store failed; surfaced as an internal error."""

    status_code = 500
    message = "Internal Server Error"

    def __init__(self, details: str):
        self.details = details
        super().__init__()

    def to_payload(self) -> dict:
        return {"error": self.message, "details": self.details}
