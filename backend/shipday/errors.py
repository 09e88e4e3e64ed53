"""
Domain error taxonomy
- Each error carries the HTTP status it maps to; handlers in main.py render {"detail": message}.
"""


class ShipdayError(Exception):
    status_code = 500

    def __init__(self, message: str = "Internal Server Error"):
        super().__init__(message)
        self.message = message


class ValidationError(ShipdayError):
    """Malformed or missing input."""

    status_code = 400


class NotFound(ShipdayError):
    """Referenced entity absent, or in the wrong state for the requested transition."""

    status_code = 404


class DuplicateIdError(ShipdayError):
    """Unique-constraint collision on a generated identifier."""

    status_code = 400


class PaymentProviderError(ShipdayError):
    """Upstream payment gateway failure."""

    status_code = 502


class DeliveryError(ShipdayError):
    """A message the caller asked for (e.g. a verification email) could not be delivered."""

    status_code = 502


class Unauthorized(ShipdayError):
    status_code = 401


class Forbidden(Unauthorized):
    status_code = 403
