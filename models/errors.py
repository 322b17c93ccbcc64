"""
Error types for the rota scheduling system.

Validation errors and not-found errors are the only exceptions raised by the
scheduling core. Conflicts are never raised; they are returned as
ConflictResult values (see models.conflicts).
"""


class RotaError(Exception):
    """Base class for all rota scheduling errors."""

    http_status = 500

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        """Boundary representation of the error."""
        return {
            "error": type(self).__name__,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(RotaError, ValueError):
    """Input rejected before any conflict logic runs."""

    http_status = 400


class InvalidTimeFormat(ValidationError):
    """A time string could not be parsed as HH:MM (00:00 - 23:59)."""


class NotFoundError(RotaError, LookupError):
    """A requested record does not exist in the data store."""

    http_status = 404


class ShiftNotFound(NotFoundError):
    pass


class TemplateNotFound(NotFoundError):
    pass


class StaffNotFound(NotFoundError):
    pass
