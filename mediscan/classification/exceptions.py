class ReferenceRangeError(Exception):
    """Raised when reference-range definitions cannot be loaded."""


class ReferenceRangeValidationError(ReferenceRangeError):
    """Raised when a reference-range definition violates its kind's rules."""
