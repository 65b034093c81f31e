from collections.abc import Callable
from dataclasses import dataclass, field

from mediscan.rendering.geometry import PageGeometry
from mediscan.rendering.primitives import PAGE_HEADER, TABLE_HEADER, Block, DrawOp, Page

# Float slack for accumulated block heights.
_EPSILON = 1e-6

OpsFactory = Callable[[float, float], tuple[DrawOp, ...]]


@dataclass
class PageCursor:
    """Mutable layout position for one render call.

    Holds the current page number, vertical offset, the section being drawn
    (so continuation pages can say what they continue) and whether a table is
    open (so its header is redrawn after a page break).
    """

    geometry: PageGeometry
    page_index: int = 1
    y: float = 0.0
    section_title: str | None = None
    in_table: bool = False
    blocks: list[Block] = field(default_factory=list)
    pages: list[Page] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.y = self.geometry.margin_top

    def remaining(self) -> float:
        return self.geometry.height - self.geometry.footer_reserve - self.y

    def fits(self, height: float) -> bool:
        """The single page-break predicate: does a block of ``height`` fit below the cursor?"""
        return height <= self.remaining() + _EPSILON

    @property
    def is_fresh(self) -> bool:
        """True while the page holds nothing but its page and table headers."""
        return all(block.kind in (PAGE_HEADER, TABLE_HEADER) for block in self.blocks)

    def place(self, kind: str, height: float, build_ops: OpsFactory) -> Block:
        block = Block(kind=kind, top=self.y, height=height, ops=build_ops(self.y, height))
        self.blocks.append(block)
        self.y += height
        return block

    def skip(self, gap: float) -> None:
        """Advance by ``gap`` without drawing, never past the footer reserve."""
        self.y = min(self.y + gap, self.geometry.body_bottom)

    def close_page(self) -> None:
        self.pages.append(Page(index=self.page_index, blocks=tuple(self.blocks)))
        self.page_index += 1
        self.blocks = []
        self.y = self.geometry.margin_top

    def finish(self) -> list[Page]:
        if self.blocks:
            self.close_page()
        return self.pages
