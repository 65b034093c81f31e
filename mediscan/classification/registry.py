from collections.abc import Iterator, Mapping
from types import MappingProxyType

from mediscan.classification.labels import (
    KIND_GREATER_THAN,
    KIND_LESS_THAN,
    KIND_NUMERIC,
    KIND_QUALITATIVE,
)
from mediscan.classification.models import ReferenceRangeDefinition


def _numeric(min_: float, max_: float, unit: str, description: str) -> ReferenceRangeDefinition:
    return ReferenceRangeDefinition(
        kind=KIND_NUMERIC, min=min_, max=max_, unit=unit, description=description
    )


def _at_least(min_: float, unit: str, description: str) -> ReferenceRangeDefinition:
    return ReferenceRangeDefinition(
        kind=KIND_GREATER_THAN, min=min_, unit=unit, description=description
    )


def _at_most(max_: float, unit: str, description: str) -> ReferenceRangeDefinition:
    return ReferenceRangeDefinition(
        kind=KIND_LESS_THAN, max=max_, unit=unit, description=description
    )


def _qualitative(description: str) -> ReferenceRangeDefinition:
    return ReferenceRangeDefinition(kind=KIND_QUALITATIVE, description=description)


DEFAULT_REFERENCE_RANGES: Mapping[str, ReferenceRangeDefinition] = MappingProxyType({
    "Hemoglobin": _numeric(12.0, 16.0, "g/dL", "Measures the oxygen-carrying capacity of blood."),
    "WBC Count": _numeric(
        4.0, 11.0, "x10^9/L", "Indicates immune system activity and potential infection."
    ),
    "Platelet Count": _numeric(150, 450, "x10^9/L", "Essential for blood clotting."),
    "Total Cholesterol": _at_most(200, "mg/dL", "Overall cholesterol level."),
    "LDL Cholesterol": _at_most(
        100, "mg/dL", '"Bad" cholesterol, contributes to artery plaque.'
    ),
    "HDL Cholesterol": _at_least(
        40, "mg/dL", '"Good" cholesterol, helps remove bad cholesterol.'
    ),
    "Triglycerides": _at_most(150, "mg/dL", "Type of fat in the blood."),
    "Creatinine": _numeric(0.6, 1.2, "mg/dL", "Waste product filtered by kidneys."),
    "eGFR": _at_least(
        60,
        "mL/min/1.73m²",
        "Estimated Glomerular Filtration Rate (kidney filtering capacity).",
    ),
    "ALT (SGPT)": _numeric(7, 56, "U/L", "Liver enzyme, elevated in liver damage."),
    "TSH": _numeric(
        0.4, 4.0, "μIU/mL", "Thyroid Stimulating Hormone, indicates thyroid activity."
    ),
    "Free T4": _numeric(0.8, 1.8, "ng/dL", "Active form of thyroid hormone."),
    "HbA1c": _at_most(5.6, "%", "Average blood sugar over 2-3 months."),
    "Fasting Glucose": _numeric(70, 100, "mg/dL", "Blood sugar after fasting."),
    "RBC in Urine": _at_most(
        2, "/HPF", "Red blood cells in urine, indicates bleeding in urinary tract."
    ),
    "Pus Cells in Urine": _at_most(
        5, "/HPF", "White blood cells in urine, indicates infection."
    ),
    "Bacteria in Urine": _qualitative("Presence of bacteria in urine."),
    "Protein in Urine": _qualitative(
        "Indicates kidney damage if present in significant amounts."
    ),
    "COVID-19 Test": _qualitative("Detects presence of SARS-CoV-2 virus."),
})


class ReferenceRangeRegistry:
    """Read-only mapping from parameter name to its reference-range definition.

    Registries are plain objects handed to the classifier, so tests and
    callers can build their own without touching a shared table.
    """

    def __init__(self, definitions: Mapping[str, ReferenceRangeDefinition]) -> None:
        self._definitions: dict[str, ReferenceRangeDefinition] = dict(definitions)
        self._folded: dict[str, str] = {
            name.casefold(): name for name in self._definitions
        }

    def lookup(self, name: str) -> ReferenceRangeDefinition | None:
        """Return the definition for ``name`` (exact match first, then case-insensitive)."""
        definition = self._definitions.get(name)
        if definition is not None:
            return definition
        canonical = self._folded.get(name.strip().casefold())
        if canonical is None:
            return None
        return self._definitions[canonical]

    def canonical_name(self, name: str) -> str | None:
        """Return the registered spelling of ``name``, if it is known."""
        if name in self._definitions:
            return name
        return self._folded.get(name.strip().casefold())

    def names(self) -> list[str]:
        return list(self._definitions)

    def with_definitions(
        self, definitions: Mapping[str, ReferenceRangeDefinition]
    ) -> "ReferenceRangeRegistry":
        """Return a new registry with ``definitions`` added or replaced."""
        merged = dict(self._definitions)
        merged.update(definitions)
        return ReferenceRangeRegistry(merged)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.lookup(name) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)


def default_registry() -> ReferenceRangeRegistry:
    """Build a registry holding the built-in adult reference ranges."""
    return ReferenceRangeRegistry(DEFAULT_REFERENCE_RANGES)
