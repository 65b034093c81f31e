"""Footer pass: stamps ``Page i of N`` on pages built by the body pass."""

from dataclasses import replace

from mediscan.rendering.geometry import PageGeometry
from mediscan.rendering.primitives import (
    ALIGN_RIGHT,
    FONT_REGULAR,
    BuiltPages,
    DrawOp,
    RectOp,
    RenderedReport,
    TextOp,
)
from mediscan.rendering.text import fit_text, pdf_safe

FOOTER_SIZE = 8.0
FOOTER_COLOR = "#6B7280"
FOOTER_RULE_COLOR = "#D1D5DB"


def page_label(index: int, total: int) -> str:
    return f"Page {index} of {total}"


def stamp_footers(
    built: BuiltPages,
    geometry: PageGeometry,
    *,
    label: str,
    title: str = "",
) -> RenderedReport:
    """Return the finished report: each built page plus its footer.

    ``N`` is the number of pages the body pass produced, so it can only be
    stamped once that pass is complete.
    """
    total = built.page_count
    pages = tuple(
        replace(page, footer=footer_ops(page.index, total, geometry, label))
        for page in built.pages
    )
    return RenderedReport(
        pages=pages,
        width=geometry.width,
        height=geometry.height,
        warnings=built.warnings,
        title=title,
    )


def footer_ops(
    index: int,
    total: int,
    geometry: PageGeometry,
    label: str,
) -> tuple[DrawOp, ...]:
    """Rule, product label and page counter inside the footer reserve."""
    rule_y = geometry.body_bottom + 4
    baseline = geometry.height - geometry.footer_reserve / 2 + FOOTER_SIZE * 0.35 + 2
    counter = page_label(index, total)
    return (
        RectOp(
            geometry.margin_left, rule_y, geometry.content_width, 0.5,
            fill_color=FOOTER_RULE_COLOR,
        ),
        TextOp(
            geometry.margin_left, baseline,
            fit_text(pdf_safe(label), FONT_REGULAR, FOOTER_SIZE, geometry.content_width * 0.7),
            FONT_REGULAR, FOOTER_SIZE, FOOTER_COLOR,
        ),
        TextOp(
            geometry.width - geometry.margin_right, baseline, counter,
            FONT_REGULAR, FOOTER_SIZE, FOOTER_COLOR, ALIGN_RIGHT,
        ),
    )
