"""Derives a tiered status label from a raw value and its reference range.

Banding outside a numeric range is proportional to the width of the range,
so each parameter gets its own absolute tolerance before it is flagged as
critical.
"""

import math
from collections.abc import Iterable

from mediscan.classification.labels import (
    CRITICAL_HIGH,
    CRITICAL_LOW,
    ELEVATED,
    HIGH,
    INDETERMINATE,
    KIND_GREATER_THAN,
    KIND_LESS_THAN,
    KIND_NUMERIC,
    KIND_QUALITATIVE,
    LOW,
    NORMAL,
    POSITIVE,
    SLIGHTLY_HIGH,
    SLIGHTLY_LOW,
)
from mediscan.classification.models import (
    ClassificationResult,
    ClassifiedParameter,
    ExtractedParameter,
    RawValue,
    ReferenceRangeDefinition,
)
from mediscan.classification.registry import ReferenceRangeRegistry
from mediscan.logging.logger import Log

UNKNOWN_NUMERIC_STATUSES = frozenset({NORMAL, INDETERMINATE})

_NORMAL_WORDS = ("negative", "absent", "normal")
_POSITIVE_WORDS = ("positive", "present", "detected")
_INDETERMINATE_WORDS = ("indeterminate", "trace")

# Fractions of the normal range width.
CRITICAL_LOW_FACTOR = 0.5
LOW_FACTOR = 0.1
SLIGHTLY_LOW_FACTOR = 0.02
CRITICAL_HIGH_FACTOR = 0.5
ELEVATED_FACTOR = 0.25
SLIGHTLY_HIGH_FACTOR = 0.1


def classify(
    name: str,
    raw_value: RawValue,
    definition: ReferenceRangeDefinition | None,
    *,
    unit: str = "",
    reported_range: str = "",
    unknown_numeric_status: str = NORMAL,
) -> ClassificationResult:
    """Classify one measurement against its (possibly absent) definition.

    Never raises: malformed or unexpected input falls back to ``Normal`` or
    ``Indeterminate``.
    """
    numeric_value = _as_number(raw_value)
    display_range = _display_range(definition, reported_range)
    resolved_unit = unit or (definition.unit if definition else "")

    if definition is None:
        if isinstance(raw_value, str):
            label = _match_qualitative(raw_value) or NORMAL
        elif numeric_value is not None:
            label = unknown_numeric_status
        else:
            label = NORMAL
        Log.debug("No reference range, using default", parameter=name, status=label)
    elif definition.kind == KIND_QUALITATIVE:
        text_label = _match_qualitative(raw_value) if isinstance(raw_value, str) else None
        label = text_label or INDETERMINATE
    elif numeric_value is None:
        Log.warning(
            "Expected a numeric value",
            parameter=name,
            value=raw_value,
            kind=definition.kind,
        )
        label = INDETERMINATE
    else:
        label = _band(numeric_value, definition)

    return ClassificationResult(
        status_label=label,
        numeric_value=numeric_value,
        display_range=display_range,
        unit=resolved_unit,
        range_kind=definition.kind if definition else None,
    )


class Classifier:
    """Classifies parameters against an injected reference-range registry."""

    def __init__(
        self,
        registry: ReferenceRangeRegistry,
        *,
        unknown_numeric_status: str = NORMAL,
    ) -> None:
        if unknown_numeric_status not in UNKNOWN_NUMERIC_STATUSES:
            raise ValueError(
                f"Unknown numeric status '{unknown_numeric_status}'. "
                f"Choose from: {sorted(UNKNOWN_NUMERIC_STATUSES)}"
            )
        self._registry = registry
        self._unknown_numeric_status = unknown_numeric_status

    @property
    def registry(self) -> ReferenceRangeRegistry:
        return self._registry

    def classify(self, name: str, raw_value: RawValue, unit: str = "") -> ClassificationResult:
        return classify(
            name,
            raw_value,
            self._registry.lookup(name),
            unit=unit,
            unknown_numeric_status=self._unknown_numeric_status,
        )

    def classify_parameter(self, parameter: ExtractedParameter) -> ClassifiedParameter:
        definition = parameter.range_definition or self._registry.lookup(parameter.name)
        result = classify(
            parameter.name,
            parameter.raw_value,
            definition,
            unit=parameter.unit,
            reported_range=parameter.reported_range,
            unknown_numeric_status=self._unknown_numeric_status,
        )
        return ClassifiedParameter(parameter=parameter, result=result)

    def classify_many(
        self, parameters: Iterable[ExtractedParameter]
    ) -> list[ClassifiedParameter]:
        return [self.classify_parameter(p) for p in parameters]


def _band(value: float, definition: ReferenceRangeDefinition) -> str:
    low_bound = definition.min
    high_bound = definition.max

    if definition.kind == KIND_NUMERIC:
        if low_bound is None or high_bound is None:
            return NORMAL
        width = high_bound - low_bound
        if value < low_bound:
            return _band_below(value, low_bound, width)
        if value > high_bound:
            return _band_above(value, high_bound, width)
        return NORMAL

    if definition.kind == KIND_GREATER_THAN and low_bound is not None:
        return LOW if value < low_bound else NORMAL

    if definition.kind == KIND_LESS_THAN and high_bound is not None:
        return HIGH if value > high_bound else NORMAL

    return NORMAL


def _band_below(value: float, low_bound: float, width: float) -> str:
    if value <= low_bound - CRITICAL_LOW_FACTOR * width:
        return CRITICAL_LOW
    if value <= low_bound - LOW_FACTOR * width:
        return LOW
    if value <= low_bound - SLIGHTLY_LOW_FACTOR * width:
        return SLIGHTLY_LOW
    return LOW


def _band_above(value: float, high_bound: float, width: float) -> str:
    if value >= high_bound + CRITICAL_HIGH_FACTOR * width:
        return CRITICAL_HIGH
    if value >= high_bound + ELEVATED_FACTOR * width:
        return ELEVATED
    if value >= high_bound + SLIGHTLY_HIGH_FACTOR * width:
        return SLIGHTLY_HIGH
    return HIGH


def _match_qualitative(text: str) -> str | None:
    lowered = text.lower()
    if any(word in lowered for word in _NORMAL_WORDS):
        return NORMAL
    if any(word in lowered for word in _POSITIVE_WORDS):
        return POSITIVE
    if any(word in lowered for word in _INDETERMINATE_WORDS):
        return INDETERMINATE
    return None


def _as_number(raw_value: RawValue) -> float | None:
    if isinstance(raw_value, bool) or not isinstance(raw_value, (int, float)):
        return None
    number = float(raw_value)
    if not math.isfinite(number):
        return None
    return number


def _display_range(definition: ReferenceRangeDefinition | None, reported_range: str) -> str:
    if definition is not None and definition.display_range is not None:
        return definition.display_range
    return reported_range or "N/A"
