class ReportRequestError(Exception):
    """Raised when a report request cannot be read."""


class ReportValidationError(ReportRequestError):
    """Raised when a report request fails validation."""
