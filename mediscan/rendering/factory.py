from mediscan.config.settings import Settings
from mediscan.rendering.base import BaseCanvasBackend
from mediscan.rendering.pymupdf_backend import PyMuPdfCanvasBackend
from mediscan.rendering.reportlab_backend import ReportLabCanvasBackend


class CanvasBackendFactory:
    """Creates the drawing backend named by settings."""

    BACKENDS: dict[str, type[BaseCanvasBackend]] = {
        "reportlab": ReportLabCanvasBackend,
        "pymupdf": PyMuPdfCanvasBackend,
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseCanvasBackend:
        backend = settings.render_backend.lower()
        backend_cls = cls.BACKENDS.get(backend)
        if backend_cls is None:
            raise ValueError(
                f"Unknown render backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
            )
        return backend_cls()
