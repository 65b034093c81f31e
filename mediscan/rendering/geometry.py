from dataclasses import dataclass, fields

from reportlab.lib.pagesizes import A4, letter

from mediscan.config.settings import Settings
from mediscan.rendering.exceptions import GeometryError

PAGE_SIZES: dict[str, tuple[float, float]] = {
    "a4": A4,
    "letter": letter,
}

MIN_FOOTER_RESERVE = 12.0


@dataclass(frozen=True)
class PageGeometry:
    """Page size, margins and fixed block heights, all in points.

    Coordinates used by the renderer run top-down: ``y = 0`` is the top edge
    of the page. Body content must end at ``height - footer_reserve``.
    """

    width: float
    height: float
    margin_top: float = 40.0
    margin_left: float = 40.0
    margin_right: float = 40.0
    footer_reserve: float = 36.0
    row_height: float = 18.0
    page_header_height: float = 52.0
    section_header_height: float = 24.0
    table_header_height: float = 20.0
    line_height: float = 13.0
    block_gap: float = 10.0

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if value < 0:
                raise GeometryError(f"'{f.name}' must not be negative, got {value}")
        for name in ("width", "height", "row_height", "table_header_height", "line_height"):
            if getattr(self, name) <= 0:
                raise GeometryError(f"'{name}' must be positive")
        if self.footer_reserve < MIN_FOOTER_RESERVE:
            raise GeometryError(
                f"'footer_reserve' must be at least {MIN_FOOTER_RESERVE:g}pt to hold the footer"
            )
        if self.content_width <= 0:
            raise GeometryError("Margins leave no horizontal room for content")
        if self.table_header_height + self.row_height > self.usable_height:
            raise GeometryError(
                "Page cannot hold a table header and one row below the page header "
                f"(usable height {self.usable_height:g}pt)"
            )

    @property
    def content_width(self) -> float:
        return self.width - self.margin_left - self.margin_right

    @property
    def body_top(self) -> float:
        return self.margin_top + self.page_header_height

    @property
    def body_bottom(self) -> float:
        return self.height - self.footer_reserve

    @property
    def usable_height(self) -> float:
        """Vertical room for body blocks on a page that holds only its header."""
        return self.body_bottom - self.body_top

    @classmethod
    def for_page_size(cls, page_size: str, **overrides: float) -> "PageGeometry":
        size = PAGE_SIZES.get(page_size.lower())
        if size is None:
            raise GeometryError(
                f"Unknown page size '{page_size}'. Choose from: {sorted(PAGE_SIZES)}"
            )
        width, height = size
        return cls(width=width, height=height, **overrides)

    @classmethod
    def a4(cls, **overrides: float) -> "PageGeometry":
        return cls.for_page_size("a4", **overrides)

    @classmethod
    def letter(cls, **overrides: float) -> "PageGeometry":
        return cls.for_page_size("letter", **overrides)

    @classmethod
    def from_settings(cls, settings: Settings) -> "PageGeometry":
        return cls.for_page_size(
            settings.page_size,
            margin_top=settings.page_margin,
            margin_left=settings.page_margin,
            margin_right=settings.page_margin,
            footer_reserve=settings.footer_reserve,
            row_height=settings.row_height,
        )
