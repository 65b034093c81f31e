"""Text measurement helpers backed by ReportLab font metrics."""

from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth

ELLIPSIS = "..."

# Base-14 fonts only cover Latin-1; map the few characters lab reports use.
_TRANSLATIONS = str.maketrans({
    "μ": "µ",  # greek mu -> micro sign
    "–": "-",
    "—": "-",
    "‘": "'",
    "’": "'",
    "“": '"',
    "”": '"',
    "…": ELLIPSIS,
    "•": "-",
})


def pdf_safe(text: str) -> str:
    """Replace characters the standard PDF fonts cannot draw."""
    translated = text.translate(_TRANSLATIONS)
    return "".join(ch if ord(ch) < 256 else "?" for ch in translated)


def text_width(text: str, font: str, size: float) -> float:
    return stringWidth(text, font, size)


def fit_text(text: str, font: str, size: float, max_width: float) -> str:
    """Truncate ``text`` with an ellipsis so it fits in ``max_width`` points."""
    if text_width(text, font, size) <= max_width:
        return text
    if text_width(ELLIPSIS, font, size) > max_width:
        return ""
    lo, hi = 0, len(text)
    while lo < hi:
        mid = (lo + hi + 1) // 2
        if text_width(text[:mid].rstrip() + ELLIPSIS, font, size) <= max_width:
            lo = mid
        else:
            hi = mid - 1
    return text[:lo].rstrip() + ELLIPSIS


def wrap_text(text: str, font: str, size: float, max_width: float) -> list[str]:
    """Split ``text`` into lines no wider than ``max_width``; blank input gives no lines."""
    lines: list[str] = []
    for paragraph in text.splitlines():
        if not paragraph.strip():
            continue
        for line in simpleSplit(paragraph, font, size, max_width):
            lines.append(fit_text(line, font, size, max_width))
    return lines
