import io

from reportlab.lib.colors import HexColor
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from mediscan.logging.logger import Log
from mediscan.rendering.base import BaseCanvasBackend
from mediscan.rendering.exceptions import RenderTargetError
from mediscan.rendering.primitives import (
    ALIGN_CENTER,
    ALIGN_RIGHT,
    DrawOp,
    ImageOp,
    RectOp,
    RenderedReport,
    TextOp,
)


class ReportLabCanvasBackend(BaseCanvasBackend):
    """Draws a finished layout with the ReportLab canvas API."""

    def draw(self, report: RenderedReport) -> bytes:
        buffer = io.BytesIO()
        try:
            pdf = canvas.Canvas(
                buffer,
                pagesize=(report.width, report.height),
                invariant=True,
            )
            pdf.setTitle(report.title)
            pdf.setCreator("mediscan")
            for page in report.pages:
                for op in page.ops:
                    self._draw_op(pdf, op, report.height)
                pdf.showPage()
            pdf.save()
            content = buffer.getvalue()
        except RenderTargetError:
            raise
        except Exception as exc:
            raise RenderTargetError(f"reportlab drawing failed: {exc}") from exc
        finally:
            buffer.close()
        Log.debug("Drew PDF with reportlab", pages=report.page_count, size=len(content))
        return content

    def _draw_op(self, pdf: canvas.Canvas, op: DrawOp, page_height: float) -> None:
        if isinstance(op, RectOp):
            self._draw_rect(pdf, op, page_height)
        elif isinstance(op, TextOp):
            self._draw_text(pdf, op, page_height)
        elif isinstance(op, ImageOp):
            pdf.drawImage(
                ImageReader(io.BytesIO(op.data)),
                op.x,
                page_height - op.y - op.height,
                width=op.width,
                height=op.height,
                preserveAspectRatio=True,
                mask="auto",
            )

    @staticmethod
    def _draw_rect(pdf: canvas.Canvas, op: RectOp, page_height: float) -> None:
        if op.fill_color is not None:
            pdf.setFillColor(HexColor(op.fill_color))
        if op.stroke_color is not None:
            pdf.setStrokeColor(HexColor(op.stroke_color))
            pdf.setLineWidth(op.line_width)
        pdf.rect(
            op.x,
            page_height - op.y - op.height,
            op.width,
            op.height,
            stroke=1 if op.stroke_color is not None else 0,
            fill=1 if op.fill_color is not None else 0,
        )

    @staticmethod
    def _draw_text(pdf: canvas.Canvas, op: TextOp, page_height: float) -> None:
        pdf.setFont(op.font, op.size)
        pdf.setFillColor(HexColor(op.color))
        y = page_height - op.y
        if op.align == ALIGN_RIGHT:
            pdf.drawRightString(op.x, y, op.text)
        elif op.align == ALIGN_CENTER:
            pdf.drawCentredString(op.x, y, op.text)
        else:
            pdf.drawString(op.x, y, op.text)
