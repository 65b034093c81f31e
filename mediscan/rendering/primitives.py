"""Positioned draw primitives and the page structures the renderer builds.

All coordinates are top-down points: ``RectOp.y`` is the rectangle's top edge
and ``TextOp.y`` is the text baseline, both measured from the top of the page.
"""

from dataclasses import dataclass

FONT_REGULAR = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
FONT_ITALIC = "Helvetica-Oblique"

ALIGN_LEFT = "left"
ALIGN_RIGHT = "right"
ALIGN_CENTER = "center"

# Block kinds, in the order the renderer's state machine visits them.
PAGE_HEADER = "page_header"
METADATA = "metadata"
SECTION_HEADER = "section_header"
TABLE_HEADER = "table_header"
ROW = "row"
NOTICE = "notice"
NARRATIVE = "narrative"
CLOSING = "closing"


@dataclass(frozen=True)
class RectOp:
    x: float
    y: float
    width: float
    height: float
    fill_color: str | None = None
    stroke_color: str | None = None
    line_width: float = 0.5


@dataclass(frozen=True)
class TextOp:
    x: float
    y: float
    text: str
    font: str = FONT_REGULAR
    size: float = 9.0
    color: str = "#000000"
    align: str = ALIGN_LEFT


@dataclass(frozen=True)
class ImageOp:
    x: float
    y: float
    width: float
    height: float
    data: bytes


DrawOp = RectOp | TextOp | ImageOp


@dataclass(frozen=True)
class Block:
    """A fixed-height slice of a page; blocks never straddle a page break."""

    kind: str
    top: float
    height: float
    ops: tuple[DrawOp, ...]

    @property
    def bottom(self) -> float:
        return self.top + self.height


@dataclass(frozen=True)
class Page:
    index: int
    blocks: tuple[Block, ...]
    footer: tuple[DrawOp, ...] = ()

    @property
    def ops(self) -> tuple[DrawOp, ...]:
        body = tuple(op for block in self.blocks for op in block.ops)
        return body + self.footer

    @property
    def content_bottom(self) -> float:
        return max((block.bottom for block in self.blocks), default=0.0)

    def kinds(self) -> list[str]:
        return [block.kind for block in self.blocks]

    def texts(self) -> list[str]:
        return [op.text for op in self.ops if isinstance(op, TextOp)]


@dataclass(frozen=True)
class BuiltPages:
    """Body-pass output: laid-out pages without footers."""

    pages: tuple[Page, ...]
    warnings: tuple[str, ...] = ()

    @property
    def page_count(self) -> int:
        return len(self.pages)


@dataclass(frozen=True)
class RenderedReport:
    """Finished layout: every page carries its ``Page i of N`` footer."""

    pages: tuple[Page, ...]
    width: float
    height: float
    warnings: tuple[str, ...] = ()
    title: str = ""

    @property
    def page_count(self) -> int:
        return len(self.pages)
