from abc import ABC, abstractmethod

from mediscan.rendering.primitives import RenderedReport


class BaseCanvasBackend(ABC):
    """Contract for all drawing backends."""

    @abstractmethod
    def draw(self, report: RenderedReport) -> bytes:
        """Draw every page of a finished layout into a PDF.

        Args:
            report: Pages with footers, as produced by ``stamp_footers``.

        Returns:
            The complete PDF file content.

        Raises:
            RenderTargetError: if drawing fails for any reason. No partial
                output is returned.
        """


def hex_to_rgb(color: str) -> tuple[float, float, float]:
    """Convert ``#RRGGBB`` to an RGB triple in the 0..1 range."""
    value = color.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Expected a #RRGGBB colour, got {color!r}")
    return (
        int(value[0:2], 16) / 255,
        int(value[2:4], 16) / 255,
        int(value[4:6], 16) / 255,
    )
