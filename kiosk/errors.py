"""Error taxonomy for the kiosk backend.

Every error carries the machine-readable ``status`` string and the HTTP
status code the API layer answers with.
"""


class KioskError(Exception):
    """Base class for all kiosk errors."""

    status: str = "ERROR"
    status_code: int = 500

    def __init__(self, message: str = "Unexpected server error"):
        super().__init__(message)
        self.message = message

    def as_dict(self) -> dict[str, str]:
        return {"status": self.status, "message": self.message}


class StoreUnavailableError(KioskError, ConnectionError):
    """The patient store is unreachable or misconfigured."""

    status = "STORE_UNAVAILABLE"
    status_code = 503


class InputValidationError(KioskError):
    """A request is missing fields or carries malformed ones."""

    status = "BAD_REQUEST"
    status_code = 400


class NotFoundError(KioskError):
    """A delete or undo target does not exist."""

    status = "NOT_FOUND"
    status_code = 404


class SignatureMismatchError(KioskError):
    """A payment signature does not match the expected HMAC."""

    status = "INVALID_SIGNATURE"
    status_code = 400


class UnimplementedError(KioskError, NotImplementedError):
    """The requested integration path is not available."""

    status = "NOT_IMPLEMENTED"
    status_code = 501


class GatewayError(KioskError):
    """The payment gateway could not be reached."""

    status = "GATEWAY_ERROR"
    status_code = 502
