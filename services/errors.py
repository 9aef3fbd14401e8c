"""Error taxonomy shared by the store, the service and the HTTP layer."""


class TrackerError(Exception):
    """Base error; carries the HTTP status it maps to."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TrackerError):
    """Missing or malformed input."""

    status_code = 400


class NotFoundError(TrackerError):
    """Referenced user does not exist."""

    status_code = 404


class ConflictError(TrackerError):
    """Uniqueness violation reported by the store."""

    status_code = 409


class PersistenceError(TrackerError):
    """Store unavailable or failed unexpectedly."""

    status_code = 500
