class RenderError(Exception):
    """Base exception for all rendering errors."""


class GeometryError(RenderError, ValueError):
    """Raised when a page geometry cannot hold a single table row."""


class RenderTargetError(RenderError):
    """Raised when the drawing backend or output target fails."""
