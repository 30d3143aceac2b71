"""Application error kinds.

Every error raised by the service layer is an ``AppError``. The API layer turns
it into the uniform error envelope using ``status_code``, ``code`` and
``message``; nothing else about the error is sent to the client.
"""

from fastapi import status


class AppError(Exception):
    """Base class for errors that map onto an HTTP error envelope."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_SERVER_ERROR"
    message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidInput(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_INPUT"
    message = "Invalid input data"


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"
    message = "Authentication required"


class InvalidCredentials(Unauthorized):
    """Raised for both unknown emails and wrong passwords."""

    code = "INVALID_CREDENTIALS"
    message = "Invalid email or password"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "RESOURCE_NOT_FOUND"
    message = "Resource not found"


class OperationTimeout(AppError):
    status_code = status.HTTP_408_REQUEST_TIMEOUT
    code = "TIMEOUT"
    message = "Operation timed out"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"
    message = "Account already exists"


class DuplicateEmail(Conflict):
    code = "DUPLICATE_EMAIL"
    message = "Email already exists"


class DuplicatePhone(Conflict):
    code = "DUPLICATE_PHONE"
    message = "Phone already exists"


class InternalError(AppError):
    """Unexpected failure. Always reported with the generic message."""

    def __init__(self, message: str | None = None):
        # The detail is kept for logs only.
        super().__init__(None)
        self.detail = message
