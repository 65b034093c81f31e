class ReportExtractionError(Exception):
    """Raised when text cannot be extracted from an uploaded report."""
