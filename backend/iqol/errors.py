"""
Domain errors raised by the services and translated to HTTP responses in main.py.
"""


class DashboardError(Exception):
    """Base class for errors surfaced to the client as {"detail": message}."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthError(DashboardError):
    """Authentication or authorization failure.

    ``kind`` is "invalid" when the credential maps to no active user and
    "forbidden" when the user is known but policy denies the operation.
    """

    INVALID = "invalid"
    FORBIDDEN = "forbidden"

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind

    @property
    def status_code(self) -> int:
        return 403 if self.kind == self.FORBIDDEN else 401

    @classmethod
    def invalid(cls, message: str = "Invalid or expired token. Please log in again.") -> "AuthError":
        return cls(cls.INVALID, message)

    @classmethod
    def forbidden(cls, message: str = "You do not have access to this resource.") -> "AuthError":
        return cls(cls.FORBIDDEN, message)


class ValidationError(DashboardError):
    """A required field is missing or a value is out of range."""

    status_code = 400


class NotFoundError(DashboardError):
    status_code = 404


class PersistenceError(DashboardError):
    """The database rejected or failed a read/write. Carries the underlying message."""

    status_code = 503
