"""
Application errors.

Every handler raises one of these; the Flask error handlers registered in
``khanya.utils.http`` turn them into the ``{success: false, error}`` envelope.
"""


class KhanyaError(Exception):
    """Base error carrying the HTTP status the caller should see."""

    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(KhanyaError):
    status_code = 400


class MissingIdentity(ValidationError):
    pass


class InvalidPhoneFormat(ValidationError):
    pass


class InvalidOrExpiredPin(ValidationError):
    def __init__(self, message: str = "Invalid or expired PIN"):
        super().__init__(message)


class ConfigurationError(KhanyaError):
    status_code = 500


class Forbidden(KhanyaError):
    status_code = 403


class Unauthorized(Forbidden):
    # admin gate answers unauthenticated callers with 403 as well
    pass


class UpstreamRejected(KhanyaError):
    status_code = 400


class DeliveryError(KhanyaError):
    status_code = 500


class NotFound(KhanyaError):
    status_code = 404


class ReconciliationGap(KhanyaError):
    """Payment captured by the processor but the local order was not updated."""

    def __init__(self, reference: str, amount, message: str = None):
        super().__init__(
            message or "Payment received but order update failed. Please contact support."
        )
        self.reference = reference
        self.amount = amount
