import json
from pathlib import Path

import pytest

from mediscan.classification.exceptions import (
    ReferenceRangeError,
    ReferenceRangeValidationError,
)
from mediscan.classification.labels import KIND_GREATER_THAN, KIND_NUMERIC, KIND_QUALITATIVE
from mediscan.classification.models import ReferenceRangeDefinition
from mediscan.classification.registry import (
    DEFAULT_REFERENCE_RANGES,
    ReferenceRangeRegistry,
    default_registry,
)
from mediscan.classification.registry_loader import (
    build_definition,
    build_definitions,
    build_registry,
    load_reference_ranges,
)
from mediscan.config.settings import Settings


class TestDefaultRegistry:
    def test_contains_builtin_parameters(self, registry: ReferenceRangeRegistry) -> None:
        assert len(registry) == len(DEFAULT_REFERENCE_RANGES)
        assert "Hemoglobin" in registry
        assert "COVID-19 Test" in registry

    def test_lookup_exact(self, registry: ReferenceRangeRegistry) -> None:
        definition = registry.lookup("Hemoglobin")
        assert definition == ReferenceRangeDefinition(
            KIND_NUMERIC, 12.0, 16.0, "g/dL", definition.description  # type: ignore[union-attr]
        )

    def test_lookup_ignores_case_and_whitespace(self, registry: ReferenceRangeRegistry) -> None:
        assert registry.lookup("  hdl cholesterol ") == registry.lookup("HDL Cholesterol")
        assert registry.canonical_name("hba1c") == "HbA1c"

    def test_absent_name_returns_none(self, registry: ReferenceRangeRegistry) -> None:
        assert registry.lookup("Vitamin Q") is None
        assert registry.canonical_name("Vitamin Q") is None
        assert "Vitamin Q" not in registry

    def test_each_call_builds_independent_registry(self) -> None:
        first = default_registry()
        extended = first.with_definitions({"Ferritin": ReferenceRangeDefinition(KIND_NUMERIC, 15, 150)})
        assert "Ferritin" in extended
        assert "Ferritin" not in first
        assert "Ferritin" not in default_registry()

    def test_with_definitions_overrides(self, registry: ReferenceRangeRegistry) -> None:
        override = ReferenceRangeDefinition(KIND_NUMERIC, 13.0, 17.0, "g/dL")
        updated = registry.with_definitions({"Hemoglobin": override})
        assert updated.lookup("Hemoglobin") == override
        assert len(updated) == len(registry)


class TestBuildDefinition:
    def test_numeric(self) -> None:
        definition = build_definition("Ferritin", {"kind": "numeric", "min": 15, "max": 150, "unit": "ng/mL"})
        assert definition.min == 15.0
        assert definition.max == 150.0
        assert definition.display_range == "15-150"

    def test_accepts_type_key(self) -> None:
        definition = build_definition("HDL", {"type": "greater_than", "min": 40})
        assert definition.kind == KIND_GREATER_THAN

    def test_qualitative_needs_no_bounds(self) -> None:
        assert build_definition("Culture", {"kind": "qualitative"}).kind == KIND_QUALITATIVE

    @pytest.mark.parametrize(
        ("raw", "match"),
        [
            ("numeric", "must be an object"),
            ({"kind": "ratio"}, "'kind' must be one of"),
            ({"kind": "numeric", "min": 1}, "need 'min' and 'max'"),
            ({"kind": "numeric", "min": 5, "max": 1}, "greater than 'max'"),
            ({"kind": "greater_than"}, "need 'min'"),
            ({"kind": "less_than", "min": 3}, "need 'max'"),
            ({"kind": "numeric", "min": "1", "max": 2}, "must be a number"),
            ({"kind": "numeric", "min": True, "max": 2}, "must be a number"),
            ({"kind": "qualitative", "unit": 5}, "'unit' must be a string"),
        ],
    )
    def test_invalid_definitions(self, raw: object, match: str) -> None:
        with pytest.raises(ReferenceRangeValidationError, match=match):
            build_definition("X", raw)

    def test_build_definitions_requires_object(self) -> None:
        with pytest.raises(ReferenceRangeValidationError):
            build_definitions([{"kind": "numeric"}])

    def test_build_definitions_rejects_blank_names(self) -> None:
        with pytest.raises(ReferenceRangeValidationError, match="non-empty"):
            build_definitions({"  ": {"kind": "qualitative"}})


class TestLoadReferenceRanges:
    def test_loads_file(self, tmp_path: Path) -> None:
        path = tmp_path / "ranges.json"
        path.write_text(json.dumps({"Ferritin": {"kind": "numeric", "min": 15, "max": 150}}))
        definitions = load_reference_ranges(path)
        assert list(definitions) == ["Ferritin"]

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ReferenceRangeError, match="Failed to read"):
            load_reference_ranges(tmp_path / "missing.json")

    def test_invalid_json_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "ranges.json"
        path.write_text("{not json")
        with pytest.raises(ReferenceRangeError, match="Invalid reference range JSON"):
            load_reference_ranges(path)


class TestBuildRegistry:
    def test_without_path_uses_builtin_table(self) -> None:
        registry = build_registry(Settings(reference_ranges_path=""))
        assert len(registry) == len(DEFAULT_REFERENCE_RANGES)

    def test_file_extends_and_overrides(self, tmp_path: Path) -> None:
        path = tmp_path / "ranges.json"
        path.write_text(json.dumps({
            "Ferritin": {"kind": "numeric", "min": 15, "max": 150},
            "Hemoglobin": {"kind": "numeric", "min": 13, "max": 17, "unit": "g/dL"},
        }))
        registry = build_registry(Settings(reference_ranges_path=str(path)))
        assert "Ferritin" in registry
        assert registry.lookup("Hemoglobin").min == 13.0  # type: ignore[union-attr]
        assert len(registry) == len(DEFAULT_REFERENCE_RANGES) + 1
