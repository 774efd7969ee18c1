"""
Domain errors raised by the service layer.

Each error carries the HTTP status it maps to; ``main.py`` registers a single
handler that turns any ``DomainError`` into a JSON response.
"""


class DomainError(Exception):
    """Base class for errors reported back to the caller"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """Input is malformed or inconsistent with the stored state"""

    status_code = 400


class NotFoundError(DomainError):
    """A referenced record does not exist"""

    status_code = 404


class PermissionDeniedError(DomainError):
    """The caller's role lacks the required capability"""

    status_code = 403
