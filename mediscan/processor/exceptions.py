class ProcessorError(Exception):
    """Base exception for all processor-related errors."""


class FileReadError(ProcessorError):
    """Raised when an input file cannot be read from disk."""


class ArtifactWriteError(ProcessorError):
    """Raised when the finished PDF cannot be written to its destination."""
