import pymupdf

from mediscan.logging.logger import Log
from mediscan.rendering.base import BaseCanvasBackend, hex_to_rgb
from mediscan.rendering.exceptions import RenderTargetError
from mediscan.rendering.primitives import (
    ALIGN_CENTER,
    ALIGN_RIGHT,
    FONT_BOLD,
    FONT_ITALIC,
    DrawOp,
    ImageOp,
    RectOp,
    RenderedReport,
    TextOp,
)

# PyMuPDF's short names for the Base-14 Helvetica family.
_FONT_NAMES = {
    FONT_BOLD: "hebo",
    FONT_ITALIC: "heit",
}
_DEFAULT_FONT = "helv"


class PyMuPdfCanvasBackend(BaseCanvasBackend):
    """Draws a finished layout with PyMuPDF (top-down coordinates, no flipping)."""

    def draw(self, report: RenderedReport) -> bytes:
        try:
            doc = pymupdf.open()
        except Exception as exc:
            raise RenderTargetError(f"pymupdf could not create a document: {exc}") from exc
        try:
            for page in report.pages:
                pdf_page = doc.new_page(width=report.width, height=report.height)
                for op in page.ops:
                    self._draw_op(pdf_page, op)
            doc.set_metadata({"title": report.title, "creator": "mediscan"})
            content: bytes = doc.tobytes(garbage=3, deflate=True)
        except RenderTargetError:
            raise
        except Exception as exc:
            raise RenderTargetError(f"pymupdf drawing failed: {exc}") from exc
        finally:
            doc.close()
        Log.debug("Drew PDF with pymupdf", pages=report.page_count, size=len(content))
        return content

    def _draw_op(self, pdf_page: pymupdf.Page, op: DrawOp) -> None:
        if isinstance(op, RectOp):
            rect = pymupdf.Rect(op.x, op.y, op.x + op.width, op.y + op.height)
            stroke = hex_to_rgb(op.stroke_color) if op.stroke_color else None
            fill = hex_to_rgb(op.fill_color) if op.fill_color else None
            pdf_page.draw_rect(
                rect,
                color=stroke,
                fill=fill,
                width=op.line_width if stroke else 0,
            )
        elif isinstance(op, TextOp):
            fontname = _FONT_NAMES.get(op.font, _DEFAULT_FONT)
            x = op.x
            if op.align in (ALIGN_RIGHT, ALIGN_CENTER):
                width = pymupdf.get_text_length(op.text, fontname=fontname, fontsize=op.size)
                x -= width if op.align == ALIGN_RIGHT else width / 2
            pdf_page.insert_text(
                (x, op.y),
                op.text,
                fontname=fontname,
                fontsize=op.size,
                color=hex_to_rgb(op.color),
            )
        elif isinstance(op, ImageOp):
            pdf_page.insert_image(
                pymupdf.Rect(op.x, op.y, op.x + op.width, op.y + op.height),
                stream=op.data,
                keep_proportion=True,
            )
