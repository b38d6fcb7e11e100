"""Domain error taxonomy.

Each error carries the HTTP status it is rendered with by the exception
handler registered in ``main.py``.
"""


class DomainError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(DomainError):
    status_code = 400


class NotFound(DomainError):
    status_code = 404


class SlotUnavailable(DomainError):
    status_code = 400

    def __init__(self, message: str = "The selected time slot is not available"):
        super().__init__(message)


class Conflict(DomainError):
    status_code = 409

    def __init__(self, message: str = "There is already an appointment at this time"):
        super().__init__(message)


class AlreadyCancelled(DomainError):
    status_code = 400

    def __init__(self, message: str = "Appointment is already cancelled"):
        super().__init__(message)


class ExternalServiceError(DomainError):
    """Calendar provider call failed, timed out, or credentials are unusable."""

    status_code = 502


class StorageError(DomainError):
    status_code = 500
