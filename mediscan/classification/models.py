from dataclasses import dataclass

from mediscan.classification.labels import (
    KIND_GREATER_THAN,
    KIND_LESS_THAN,
    KIND_NUMERIC,
    NORMAL,
)

RawValue = float | int | str


@dataclass(frozen=True)
class ReferenceRangeDefinition:
    """Reference range for a parameter, by kind."""

    kind: str
    min: float | None = None
    max: float | None = None
    unit: str = ""
    description: str = ""

    @property
    def display_range(self) -> str | None:
        """Printable range (``12-16``, ``>40``, ``<100``), or None for qualitative kinds."""
        if self.kind == KIND_NUMERIC and self.min is not None and self.max is not None:
            return f"{self.min:g}-{self.max:g}"
        if self.kind == KIND_GREATER_THAN and self.min is not None:
            return f">{self.min:g}"
        if self.kind == KIND_LESS_THAN and self.max is not None:
            return f"<{self.max:g}"
        return None


@dataclass(frozen=True)
class ExtractedParameter:
    """A single measured parameter as supplied by the caller or an extractor."""

    name: str
    raw_value: RawValue
    unit: str = ""
    range_definition: ReferenceRangeDefinition | None = None
    reported_range: str = ""


@dataclass(frozen=True)
class ClassificationResult:
    """Status label plus display metadata for one parameter."""

    status_label: str
    numeric_value: float | None = None
    display_range: str = "N/A"
    unit: str = ""
    range_kind: str | None = None

    @property
    def is_normal(self) -> bool:
        return self.status_label == NORMAL


@dataclass(frozen=True)
class ClassifiedParameter:
    """An extracted parameter paired with its classification."""

    parameter: ExtractedParameter
    result: ClassificationResult

    @property
    def name(self) -> str:
        return self.parameter.name

    @property
    def status_label(self) -> str:
        return self.result.status_label

    @property
    def display_value(self) -> str:
        value = self.parameter.raw_value
        if isinstance(value, float):
            return f"{value:g}"
        return str(value)
