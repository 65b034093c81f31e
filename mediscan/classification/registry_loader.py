"""Loads reference-range definitions from a JSON file and validates them."""

import json
from pathlib import Path
from typing import Any

from mediscan.classification.exceptions import (
    ReferenceRangeError,
    ReferenceRangeValidationError,
)
from mediscan.classification.labels import (
    KIND_GREATER_THAN,
    KIND_LESS_THAN,
    KIND_NUMERIC,
    RANGE_KINDS,
)
from mediscan.classification.models import ReferenceRangeDefinition
from mediscan.classification.registry import ReferenceRangeRegistry, default_registry
from mediscan.config.settings import Settings
from mediscan.logging.logger import Log


def load_reference_ranges(path: Path) -> dict[str, ReferenceRangeDefinition]:
    """Read a ``{name: definition}`` JSON object from ``path``.

    Raises:
        ReferenceRangeError: if the file cannot be read or is not valid JSON.
        ReferenceRangeValidationError: if any definition is malformed.
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ReferenceRangeError(f"Failed to read reference ranges: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ReferenceRangeError(f"Invalid reference range JSON: {exc}") from exc
    return build_definitions(raw)


def build_definitions(data: Any) -> dict[str, ReferenceRangeDefinition]:
    """Validate parsed JSON and build reference-range definitions.

    Raises:
        ReferenceRangeValidationError: on any validation failure.
    """
    if not isinstance(data, dict):
        raise ReferenceRangeValidationError("Reference ranges must be a JSON object")
    definitions: dict[str, ReferenceRangeDefinition] = {}
    for name, raw in data.items():
        if not isinstance(name, str) or not name.strip():
            raise ReferenceRangeValidationError("Parameter names must be non-empty strings")
        definitions[name.strip()] = build_definition(name, raw)
    return definitions


def build_registry(settings: Settings) -> ReferenceRangeRegistry:
    """Built-in registry, extended or overridden by ``reference_ranges_path``."""
    registry = default_registry()
    if not settings.reference_ranges_path:
        return registry
    extra = load_reference_ranges(Path(settings.reference_ranges_path))
    Log.info(
        "Loaded reference ranges from file",
        path=settings.reference_ranges_path,
        count=len(extra),
    )
    return registry.with_definitions(extra)


def build_definition(name: str, raw: Any) -> ReferenceRangeDefinition:
    if not isinstance(raw, dict):
        raise ReferenceRangeValidationError(f"{name}: definition must be an object")
    kind = raw.get("kind", raw.get("type"))
    if kind not in RANGE_KINDS:
        raise ReferenceRangeValidationError(
            f"{name}: 'kind' must be one of {sorted(RANGE_KINDS)}, got {kind!r}"
        )
    min_val = _optional_number(raw.get("min"), name, "min")
    max_val = _optional_number(raw.get("max"), name, "max")
    unit = raw.get("unit", "")
    description = raw.get("description", "")
    if not isinstance(unit, str):
        raise ReferenceRangeValidationError(f"{name}: 'unit' must be a string")
    if not isinstance(description, str):
        raise ReferenceRangeValidationError(f"{name}: 'description' must be a string")

    if kind == KIND_NUMERIC:
        if min_val is None or max_val is None:
            raise ReferenceRangeValidationError(f"{name}: numeric ranges need 'min' and 'max'")
        if min_val > max_val:
            raise ReferenceRangeValidationError(
                f"{name}: 'min' ({min_val:g}) is greater than 'max' ({max_val:g})"
            )
    if kind == KIND_GREATER_THAN and min_val is None:
        raise ReferenceRangeValidationError(f"{name}: greater_than ranges need 'min'")
    if kind == KIND_LESS_THAN and max_val is None:
        raise ReferenceRangeValidationError(f"{name}: less_than ranges need 'max'")

    return ReferenceRangeDefinition(
        kind=kind,
        min=min_val,
        max=max_val,
        unit=unit,
        description=description,
    )


def _optional_number(value: Any, name: str, field: str) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ReferenceRangeValidationError(f"{name}: '{field}' must be a number or null")
    return float(value)
