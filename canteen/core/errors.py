"""
Domain errors raised by the service layer.

Each error carries the HTTP status and a short machine code; the handlers in
`canteen.core.exception_handlers` turn them into the standard JSON envelope.
"""


class CanteenError(Exception):
    status_code = 500
    code = "server_error"
    # Message shown to clients when the error must not leak detail
    public_message = None

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__


class ValidationError(CanteenError):
    status_code = 400
    code = "validation_error"


class InvalidStatus(ValidationError):
    code = "invalid_status"


class NotFound(CanteenError):
    status_code = 404
    code = "not_found"


class ReferenceNotFound(NotFound):
    code = "reference_not_found"


class Conflict(CanteenError):
    status_code = 409
    code = "conflict"


class InvalidStatusTransition(Conflict):
    code = "invalid_status_transition"


class AuthenticationFailed(CanteenError):
    """Payment signature mismatch. Never describes what did not match."""
    status_code = 400
    code = "authentication_failed"
    public_message = "Payment verification failed"


class NotAuthenticated(CanteenError):
    status_code = 401
    code = "not_authenticated"


class PermissionDenied(CanteenError):
    status_code = 403
    code = "permission_denied"


class StorageUnavailable(CanteenError):
    status_code = 503
    code = "storage_unavailable"
    public_message = "Service temporarily unavailable"


class StorageTimeout(StorageUnavailable):
    status_code = 504
    code = "timeout"


class PaymentGatewayError(CanteenError):
    status_code = 502
    code = "payment_gateway_error"
    public_message = "Payment gateway request failed"


class PaymentGatewayTimeout(PaymentGatewayError):
    status_code = 504
    code = "timeout"


class ConfigurationError(CanteenError):
    """A required secret or setting is missing."""
    status_code = 500
    code = "configuration_error"
    public_message = "Server is not configured for this operation"
