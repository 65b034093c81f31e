"""Body pass of the paginated report renderer.

Walks a ReportDocument through the page state machine

    PageHeader -> SectionHeader -> TableHeader -> Row* -> Narrative -> ... -> Closing

placing fixed-height blocks below a PageCursor. Before any block is placed the
cursor decides whether it fits; if not, the page is closed, a new page header
is drawn and, when the break falls inside a table, the table header is drawn
again. Footers are added afterwards by ``stamp_footers`` because the total
page count is only known once this pass is complete.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from pathlib import Path

from mediscan.classification.models import ClassifiedParameter
from mediscan.config.settings import Settings
from mediscan.logging.logger import Log
from mediscan.report.models import ReportDocument, ReportEntry
from mediscan.rendering.cursor import PageCursor
from mediscan.rendering.footer import stamp_footers
from mediscan.rendering.geometry import PageGeometry
from mediscan.rendering.primitives import (
    ALIGN_RIGHT,
    CLOSING,
    FONT_BOLD,
    FONT_ITALIC,
    FONT_REGULAR,
    METADATA,
    NARRATIVE,
    NOTICE,
    PAGE_HEADER,
    ROW,
    SECTION_HEADER,
    TABLE_HEADER,
    Block,
    BuiltPages,
    DrawOp,
    ImageOp,
    RectOp,
    RenderedReport,
    TextOp,
)
from mediscan.rendering.text import fit_text, pdf_safe, wrap_text
from mediscan.styling.style_map import StatusStyleMap

BRAND_COLOR = "#3B82F6"
TEXT_COLOR = "#111827"
MUTED_COLOR = "#6B7280"
ERROR_COLOR = "#B91C1C"
STRIPE_COLOR = "#F3F4F6"
TABLE_HEADER_COLOR = "#E5E7EB"
RULE_COLOR = "#D1D5DB"
WHITE = "#FFFFFF"

TITLE_SIZE = 16.0
SUBTITLE_SIZE = 11.0
BODY_SIZE = 9.0
SMALL_SIZE = 8.0
CELL_PADDING = 4.0

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"

COLUMNS: tuple[tuple[str, float], ...] = (
    ("Parameter", 0.32),
    ("Value", 0.14),
    ("Unit", 0.14),
    ("Reference Range", 0.18),
    ("Status", 0.22),
)

NO_DATA_TEXT = "No data extracted for this entry."
NO_ENTRIES_TEXT = "No report entries were provided."

DEFAULT_RECOMMENDATIONS: tuple[str, ...] = (
    "Discuss any out-of-range values with a qualified healthcare professional.",
    "Repeat abnormal tests as advised by your doctor to confirm the findings.",
    "Keep this report with your medical records and bring it to your next consultation.",
)

DEFAULT_DISCLAIMER = (
    "This report is generated automatically for informational purposes only. "
    "It is not a medical diagnosis and does not replace advice from a licensed "
    "healthcare professional."
)


@dataclass(frozen=True)
class RenderOptions:
    """Document-level text and assets that are not part of the data."""

    product_name: str = "MediScan AI Health Report"
    confidentiality_label: str = "Confidential"
    disclaimer: str = DEFAULT_DISCLAIMER
    recommendations: tuple[str, ...] = DEFAULT_RECOMMENDATIONS
    logo: bytes | None = None

    @property
    def footer_label(self) -> str:
        if not self.confidentiality_label:
            return self.product_name
        return f"{self.product_name} | {self.confidentiality_label}"

    @classmethod
    def from_settings(cls, settings: Settings) -> "RenderOptions":
        logo = None
        if settings.logo_path:
            try:
                logo = Path(settings.logo_path).read_bytes()
            except OSError as exc:
                Log.warning("Logo could not be read, rendering without it", error=str(exc))
        return cls(
            product_name=settings.product_name,
            confidentiality_label=settings.confidentiality_label,
            logo=logo,
        )


class PaginatedRenderer:
    """Lays out a ReportDocument into pages of positioned draw primitives."""

    def __init__(
        self,
        geometry: PageGeometry,
        style_map: StatusStyleMap,
        options: RenderOptions | None = None,
    ) -> None:
        self._geometry = geometry
        self._style_map = style_map
        self._options = options or RenderOptions()

    @property
    def geometry(self) -> PageGeometry:
        return self._geometry

    @property
    def options(self) -> RenderOptions:
        return self._options

    def render(self, document: ReportDocument) -> RenderedReport:
        """Run the body pass and the footer pass."""
        built = self.layout(document)
        return stamp_footers(
            built,
            self._geometry,
            label=self._options.footer_label,
            title=document.title,
        )

    def layout(self, document: ReportDocument) -> BuiltPages:
        """Body pass: place every block, breaking pages as needed. No footers."""
        run = _LayoutRun(self._geometry, self._style_map, self._options, document)
        built = run.execute()
        Log.debug(
            "Laid out report body",
            pages=built.page_count,
            entries=len(document.entries),
            warnings=len(built.warnings),
        )
        return built


class _LayoutRun:
    """State for a single layout call; never reused."""

    def __init__(
        self,
        geometry: PageGeometry,
        style_map: StatusStyleMap,
        options: RenderOptions,
        document: ReportDocument,
    ) -> None:
        self._g = geometry
        self._styles = style_map
        self._options = options
        self._document = document
        self._cursor = PageCursor(geometry)
        self._warnings: list[str] = []
        self._columns = _column_layout(geometry)

    def execute(self) -> BuiltPages:
        self._page_header()
        self._metadata()
        self._cursor.skip(self._g.block_gap)

        if not self._document.entries:
            self._text_lines(NOTICE, [NO_ENTRIES_TEXT], FONT_ITALIC, MUTED_COLOR)
            self._cursor.skip(self._g.block_gap)
        for entry in self._document.entries:
            self._entry(entry)

        self._closing()
        pages = self._cursor.finish()
        return BuiltPages(pages=tuple(pages), warnings=tuple(self._warnings))

    # ------------------------------------------------------------------
    # Page-break bookkeeping
    # ------------------------------------------------------------------

    def _break_page(self) -> None:
        self._cursor.close_page()
        Log.debug(
            "Page break",
            page=self._cursor.page_index,
            section=self._cursor.section_title,
            in_table=self._cursor.in_table,
        )
        self._page_header()
        if self._cursor.in_table:
            self._table_header()

    def _keep_together(self, height: float) -> None:
        """Start a new page unless ``height`` fits here or the page is already fresh."""
        if not self._cursor.fits(height) and not self._cursor.is_fresh:
            self._break_page()

    def _place(
        self,
        kind: str,
        height: float,
        build_ops: Callable[[float, float], tuple[DrawOp, ...]],
    ) -> Block:
        cursor = self._cursor
        if not cursor.fits(height) and not cursor.is_fresh:
            self._break_page()
        if cursor.fits(height):
            return cursor.place(kind, height, build_ops)

        # Taller than a fresh page: clamp to what is left and drop what overflows.
        clamped = max(cursor.remaining(), 0.0)
        message = (
            f"{kind} block of {height:g}pt does not fit the {clamped:g}pt available "
            f"on page {cursor.page_index}; content truncated"
        )
        Log.warning(message)
        self._warnings.append(message)
        return cursor.place(
            kind,
            clamped,
            lambda top, h: _clip(build_ops(top, height), top + h),
        )

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def _page_header(self) -> None:
        g = self._g
        document = self._document
        cursor = self._cursor
        first_page = cursor.page_index == 1
        section = cursor.section_title
        logo = self._options.logo

        def build(top: float, height: float) -> tuple[DrawOp, ...]:
            ops: list[DrawOp] = []
            text_x = g.margin_left
            if logo is not None and height > 12:
                side = height - 12
                ops.append(ImageOp(x=g.margin_left, y=top, width=side, height=side, data=logo))
                text_x += side + 8
            right_x = g.width - g.margin_right
            first_line = top + height * 0.38
            second_line = top + height * 0.68
            if first_page:
                ops.append(TextOp(
                    text_x, first_line, pdf_safe(self._options.product_name),
                    FONT_BOLD, TITLE_SIZE, BRAND_COLOR,
                ))
                ops.append(TextOp(
                    text_x, second_line, pdf_safe(document.title),
                    FONT_REGULAR, SUBTITLE_SIZE, TEXT_COLOR,
                ))
                ops.append(TextOp(
                    right_x, first_line,
                    f"Generated: {document.generated_at.strftime(TIMESTAMP_FORMAT)}",
                    FONT_REGULAR, SMALL_SIZE, MUTED_COLOR, ALIGN_RIGHT,
                ))
            else:
                ops.append(TextOp(
                    text_x, first_line, pdf_safe(self._options.product_name),
                    FONT_BOLD, SUBTITLE_SIZE, BRAND_COLOR,
                ))
                ops.append(TextOp(
                    text_x, second_line,
                    pdf_safe(f"{document.subject.name} - {document.title}"),
                    FONT_REGULAR, SMALL_SIZE, MUTED_COLOR,
                ))
                if section:
                    label = fit_text(
                        pdf_safe(f"{section} (continued)"),
                        FONT_ITALIC, SMALL_SIZE, g.content_width / 2,
                    )
                    ops.append(TextOp(
                        right_x, first_line, label,
                        FONT_ITALIC, SMALL_SIZE, MUTED_COLOR, ALIGN_RIGHT,
                    ))
            ops.append(RectOp(
                g.margin_left, top + height - 4, g.content_width, 1.0, fill_color=BRAND_COLOR,
            ))
            return tuple(ops)

        cursor.place(PAGE_HEADER, g.page_header_height, build)

    def _metadata(self) -> None:
        """Subject and report details in two columns, one block per line."""
        document = self._document
        abnormal = sum(len(e.abnormal_parameters) for e in document.entries)
        fields: list[tuple[str, str]] = [
            ("Name", document.subject.name),
            ("Subject ID", document.subject.subject_id or "N/A"),
            ("Report", document.title),
            ("Generated", document.generated_at.strftime(TIMESTAMP_FORMAT)),
            ("Entries", str(len(document.entries))),
            ("Abnormal findings", str(abnormal)),
        ]
        fields.extend(document.subject.extra)

        g = self._g
        column_width = g.content_width / 2
        label_width = column_width * 0.4
        for start in range(0, len(fields), 2):
            pair = fields[start:start + 2]

            def build(
                top: float, height: float, pair: Sequence[tuple[str, str]] = pair
            ) -> tuple[DrawOp, ...]:
                ops: list[DrawOp] = [
                    RectOp(g.margin_left, top, g.content_width, height, fill_color=STRIPE_COLOR),
                ]
                baseline = _baseline(top, height, BODY_SIZE)
                for i, (label, value) in enumerate(pair):
                    x = g.margin_left + i * column_width + CELL_PADDING
                    ops.append(TextOp(
                        x, baseline,
                        fit_text(pdf_safe(f"{label}:"), FONT_BOLD, BODY_SIZE, label_width),
                        FONT_BOLD, BODY_SIZE, TEXT_COLOR,
                    ))
                    ops.append(TextOp(
                        x + label_width, baseline,
                        fit_text(
                            pdf_safe(value), FONT_REGULAR, BODY_SIZE,
                            column_width - label_width - 2 * CELL_PADDING,
                        ),
                        FONT_REGULAR, BODY_SIZE, TEXT_COLOR,
                    ))
                return tuple(ops)

            self._place(METADATA, g.line_height, build)

    def _entry(self, entry: ReportEntry) -> None:
        g = self._g
        cursor = self._cursor
        if entry.parameters and not entry.failed:
            first_block = g.table_header_height + g.row_height
        else:
            first_block = g.line_height
        self._keep_together(g.section_header_height + first_block)

        cursor.section_title = entry.title
        self._section_header(entry)

        if entry.failed:
            self._text_lines(
                NOTICE,
                self._wrap(f"Processing failed: {entry.processing_error}", FONT_BOLD, BODY_SIZE),
                FONT_BOLD,
                ERROR_COLOR,
            )
        elif not entry.parameters:
            self._text_lines(NOTICE, [NO_DATA_TEXT], FONT_ITALIC, MUTED_COLOR)
        else:
            self._open_table()
            for index, parameter in enumerate(entry.parameters):
                self._row(parameter, striped=index % 2 == 1)
            cursor.in_table = False

        if entry.interpretation is not None:
            self._paragraph("Analysis", entry.interpretation.analysis)
            self._paragraph("Suggestion", entry.interpretation.suggestion)
            self._paragraph("Prescription", entry.interpretation.prescription)
        self._paragraph("Notes", entry.notes)

        cursor.section_title = None
        cursor.skip(g.block_gap)

    def _section_header(self, entry: ReportEntry) -> None:
        g = self._g
        details = entry.timestamp.strftime(TIMESTAMP_FORMAT)
        if entry.source_name:
            details = f"{details} | {entry.source_name}"

        def build(top: float, height: float) -> tuple[DrawOp, ...]:
            baseline = _baseline(top, height, SUBTITLE_SIZE)
            return (
                RectOp(g.margin_left, top + 2, g.content_width, max(height - 4, 0.0),
                       fill_color=BRAND_COLOR),
                TextOp(
                    g.margin_left + CELL_PADDING * 1.5, baseline,
                    fit_text(pdf_safe(entry.title), FONT_BOLD, SUBTITLE_SIZE,
                             g.content_width * 0.6),
                    FONT_BOLD, SUBTITLE_SIZE, WHITE,
                ),
                TextOp(
                    g.width - g.margin_right - CELL_PADDING * 1.5, baseline,
                    fit_text(pdf_safe(details), FONT_REGULAR, SMALL_SIZE,
                             g.content_width * 0.38),
                    FONT_REGULAR, SMALL_SIZE, WHITE, ALIGN_RIGHT,
                ),
            )

        self._place(SECTION_HEADER, g.section_header_height, build)

    def _open_table(self) -> None:
        g = self._g
        cursor = self._cursor
        cursor.in_table = True
        if not cursor.fits(g.table_header_height + g.row_height) and not cursor.is_fresh:
            self._break_page()  # draws the table header on the new page
        else:
            self._table_header()

    def _table_header(self) -> None:
        g = self._g
        columns = self._columns

        def build(top: float, height: float) -> tuple[DrawOp, ...]:
            baseline = _baseline(top, height, SMALL_SIZE)
            ops: list[DrawOp] = [
                RectOp(g.margin_left, top, g.content_width, height,
                       fill_color=TABLE_HEADER_COLOR),
            ]
            for label, x, width in columns:
                ops.append(TextOp(
                    x + CELL_PADDING, baseline,
                    fit_text(label, FONT_BOLD, SMALL_SIZE, width - 2 * CELL_PADDING),
                    FONT_BOLD, SMALL_SIZE, TEXT_COLOR,
                ))
            return tuple(ops)

        self._cursor.place(TABLE_HEADER, g.table_header_height, build)

    def _row(self, parameter: ClassifiedParameter, striped: bool) -> None:
        g = self._g
        style = self._styles.style_for(parameter.status_label)
        cells = (
            parameter.name,
            parameter.display_value,
            parameter.result.unit,
            parameter.result.display_range,
        )
        columns = self._columns

        def build(top: float, height: float) -> tuple[DrawOp, ...]:
            baseline = _baseline(top, height, BODY_SIZE)
            ops: list[DrawOp] = []
            if striped:
                ops.append(RectOp(g.margin_left, top, g.content_width, height,
                                  fill_color=STRIPE_COLOR))
            for text, (_label, x, width) in zip(cells, columns):
                ops.append(TextOp(
                    x + CELL_PADDING, baseline,
                    fit_text(pdf_safe(text), FONT_REGULAR, BODY_SIZE,
                             width - 2 * CELL_PADDING),
                    FONT_REGULAR, BODY_SIZE, TEXT_COLOR,
                ))
            _label, status_x, status_width = columns[-1]
            ops.append(RectOp(
                status_x + 1, top + 1, status_width - 2, max(height - 2, 0.0),
                fill_color=style.fill_color,
            ))
            ops.append(TextOp(
                status_x + CELL_PADDING, baseline,
                fit_text(
                    pdf_safe(f"{style.icon} {parameter.status_label}"),
                    FONT_BOLD, BODY_SIZE, status_width - 2 * CELL_PADDING,
                ),
                FONT_BOLD, BODY_SIZE, style.text_color,
            ))
            ops.append(RectOp(g.margin_left, top + height - 0.5, g.content_width, 0.5,
                              fill_color=RULE_COLOR))
            return tuple(ops)

        self._place(ROW, g.row_height, build)

    def _paragraph(self, label: str, text: str) -> None:
        lines = self._wrap(text, FONT_REGULAR, BODY_SIZE)
        if not lines:
            return
        self._keep_together(2 * self._g.line_height)
        self._text_lines(NARRATIVE, [f"{label}:"], FONT_BOLD, TEXT_COLOR)
        self._text_lines(NARRATIVE, lines, FONT_REGULAR, TEXT_COLOR)

    def _closing(self) -> None:
        g = self._g
        recommendations = [
            line
            for item in self._options.recommendations
            for line in self._wrap(f"- {item}", FONT_REGULAR, BODY_SIZE)
        ]
        if recommendations:
            self._keep_together(2 * g.line_height)
            self._text_lines(CLOSING, ["Recommendations"], FONT_BOLD, TEXT_COLOR)
            self._text_lines(CLOSING, recommendations, FONT_REGULAR, TEXT_COLOR)
            self._cursor.skip(g.block_gap / 2)

        disclaimer = self._wrap(self._options.disclaimer, FONT_ITALIC, SMALL_SIZE)
        self._keep_together(2 * g.line_height)
        self._text_lines(CLOSING, ["Disclaimer"], FONT_BOLD, TEXT_COLOR)
        self._text_lines(CLOSING, disclaimer, FONT_ITALIC, MUTED_COLOR, size=SMALL_SIZE)

    def _text_lines(
        self,
        kind: str,
        lines: Sequence[str],
        font: str,
        color: str,
        size: float = BODY_SIZE,
    ) -> None:
        g = self._g
        for line in lines:
            def build(top: float, height: float, line: str = line) -> tuple[DrawOp, ...]:
                return (
                    TextOp(g.margin_left + CELL_PADDING, _baseline(top, height, size),
                           line, font, size, color),
                )

            self._place(kind, g.line_height, build)

    def _wrap(self, text: str, font: str, size: float) -> list[str]:
        return wrap_text(pdf_safe(text), font, size, self._g.content_width - 2 * CELL_PADDING)


def _column_layout(geometry: PageGeometry) -> list[tuple[str, float, float]]:
    columns: list[tuple[str, float, float]] = []
    x = geometry.margin_left
    for label, share in COLUMNS:
        width = geometry.content_width * share
        columns.append((label, x, width))
        x += width
    return columns


def _baseline(top: float, height: float, size: float) -> float:
    """Baseline that vertically centres a line of ``size`` in a block."""
    return top + height / 2 + size * 0.35


def _clip(ops: tuple[DrawOp, ...], bottom: float) -> tuple[DrawOp, ...]:
    clipped: list[DrawOp] = []
    for op in ops:
        if isinstance(op, TextOp):
            if op.y <= bottom:
                clipped.append(op)
        elif op.y < bottom:
            clipped.append(replace(op, height=min(op.height, bottom - op.y)))
    return tuple(clipped)
