"""
Error kinds shared by the simulated API and the client stores.
"""


class TalentFlowError(Exception):
    """Base class for all application errors."""


class StorageUnavailableError(TalentFlowError):
    """The persisted store could not be opened or migrated. Fatal at startup."""


class ReorderInProgressError(TalentFlowError):
    """A reorder was requested while a previous one is still in flight."""

    def __init__(self, message: str = "A reorder is already in progress"):
        super().__init__(message)


class ApiError(TalentFlowError):
    """An HTTP-shaped failure carrying the status code it maps to."""

    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_body(self) -> dict:
        return {"error": self.message}


class NotFoundError(ApiError):
    status_code = 404


class InvalidRequestError(ApiError):
    """Malformed body or field values."""

    status_code = 400


class ConflictError(InvalidRequestError):
    """Duplicate slug, or a second assessment for the same job."""


class TransientError(ApiError):
    """Injected 500 or transport failure; recoverable by retrying."""

    status_code = 500


def error_for_status(status_code: int, message: str) -> ApiError:
    """Rebuild the matching error kind from a response status code."""
    if status_code == 404:
        return NotFoundError(message)
    if status_code in (400, 409, 422):
        return InvalidRequestError(message, status_code)
    if status_code >= 500:
        return TransientError(message, status_code)
    return ApiError(message, status_code)
