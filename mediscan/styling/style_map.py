from collections.abc import Mapping
from dataclasses import dataclass

from mediscan.classification.labels import (
    CRITICAL_HIGH,
    CRITICAL_LOW,
    ELEVATED,
    HIGH,
    INDETERMINATE,
    LOW,
    NORMAL,
    POSITIVE,
    SLIGHTLY_HIGH,
    SLIGHTLY_LOW,
    severity_rank,
)

WHITE = "#FFFFFF"
BLACK = "#000000"

GREEN = "#22C55E"
AMBER = "#FBBF24"
RED = "#EF4444"
DARK_RED = "#B91C1C"
GREY = "#6B7280"


@dataclass(frozen=True)
class StatusStyle:
    """Visual encoding of a status label.

    ``text_color`` is chosen per style rather than computed from the fill, so
    the map stays the single source of truth for how a status looks.
    """

    fill_color: str
    text_color: str
    risk_weight: int
    icon: str


def _style(fill: str, text: str, label: str, icon: str) -> StatusStyle:
    return StatusStyle(
        fill_color=fill,
        text_color=text,
        risk_weight=severity_rank(label),
        icon=icon,
    )


DEFAULT_STYLES: dict[str, StatusStyle] = {
    NORMAL: _style(GREEN, WHITE, NORMAL, "="),
    SLIGHTLY_LOW: _style(AMBER, BLACK, SLIGHTLY_LOW, "-"),
    SLIGHTLY_HIGH: _style(AMBER, BLACK, SLIGHTLY_HIGH, "+"),
    ELEVATED: _style(AMBER, BLACK, ELEVATED, "^"),
    LOW: _style(RED, WHITE, LOW, "v"),
    HIGH: _style(RED, WHITE, HIGH, "^"),
    POSITIVE: _style(RED, WHITE, POSITIVE, "+"),
    CRITICAL_LOW: _style(DARK_RED, WHITE, CRITICAL_LOW, "!"),
    CRITICAL_HIGH: _style(DARK_RED, WHITE, CRITICAL_HIGH, "!"),
    INDETERMINATE: _style(GREY, WHITE, INDETERMINATE, "?"),
}


class StatusStyleMap:
    """Maps status labels to their visual style; unknown labels look Indeterminate."""

    def __init__(
        self,
        styles: Mapping[str, StatusStyle],
        fallback: StatusStyle | None = None,
    ) -> None:
        self._styles = dict(styles)
        self._fallback = fallback or self._styles.get(INDETERMINATE) or DEFAULT_STYLES[INDETERMINATE]

    def style_for(self, label: str) -> StatusStyle:
        return self._styles.get(label, self._fallback)

    def with_overrides(self, overrides: Mapping[str, StatusStyle]) -> "StatusStyleMap":
        merged = dict(self._styles)
        merged.update(overrides)
        return StatusStyleMap(merged, fallback=self._fallback)

    def __call__(self, label: str) -> StatusStyle:
        return self.style_for(label)

    def __contains__(self, label: object) -> bool:
        return label in self._styles


def default_style_map() -> StatusStyleMap:
    return StatusStyleMap(DEFAULT_STYLES)
