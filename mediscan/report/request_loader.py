"""Validates a JSON export request and builds a ReportRequest."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from mediscan.classification.exceptions import ReferenceRangeValidationError
from mediscan.classification.models import ExtractedParameter
from mediscan.classification.registry_loader import build_definition
from mediscan.report.exceptions import ReportRequestError, ReportValidationError
from mediscan.report.models import RawEntry, ReportRequest, SubjectInfo

_MAX_ENTRIES = 500
_MAX_PARAMETERS = 200


def load_request(path: Path, *, now: datetime | None = None) -> ReportRequest:
    """Read and validate a request file.

    Raises:
        ReportRequestError: if the file cannot be read or parsed.
        ReportValidationError: if the content is invalid.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ReportRequestError(f"Failed to read request: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ReportRequestError(f"Invalid request JSON: {exc}") from exc
    return validate_and_build(data, now=now)


def validate_and_build(data: Any, *, now: datetime | None = None) -> ReportRequest:
    """Validate parsed JSON and build a ReportRequest.

    ``generated_at`` falls back to ``now`` (or the current time) when absent.
    Timestamps carrying a UTC offset are converted to naive local time so
    every entry orders against every other.

    Raises:
        ReportValidationError: on any validation failure.
    """
    if not isinstance(data, dict):
        raise ReportValidationError("Request must be a JSON object")
    for field in ("subject", "entries"):
        if field not in data:
            raise ReportValidationError(f"Missing required top-level field: {field}")

    subject = _build_subject(data["subject"])
    generated_at = _build_timestamp(data.get("generated_at"), "generated_at")
    if generated_at is None:
        generated_at = _to_local_naive(now) if now else datetime.now()
    title = data.get("title", "Health Report")
    if not isinstance(title, str) or not title.strip():
        raise ReportValidationError("'title' must be a non-empty string")

    entries = _build_entries(data["entries"], default_timestamp=generated_at)
    return ReportRequest(
        subject=subject,
        generated_at=generated_at,
        entries=entries,
        title=title,
    )


def _build_subject(raw: Any) -> SubjectInfo:
    if not isinstance(raw, dict):
        raise ReportValidationError("'subject' must be an object")
    name = raw.get("name")
    if not name or not isinstance(name, str):
        raise ReportValidationError("'subject.name' must be a non-empty string")
    subject_id = raw.get("id", "")
    if not isinstance(subject_id, (str, int)) or isinstance(subject_id, bool):
        raise ReportValidationError("'subject.id' must be a string")
    extra = raw.get("details", {})
    if not isinstance(extra, dict):
        raise ReportValidationError("'subject.details' must be an object")
    return SubjectInfo(
        name=name,
        subject_id=str(subject_id),
        extra=tuple((str(k), str(v)) for k, v in extra.items()),
    )


def _build_timestamp(raw: Any, field: str) -> datetime | None:
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise ReportValidationError(f"'{field}' must be an ISO 8601 string or null")
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError as exc:
        raise ReportValidationError(f"'{field}' is not a valid ISO 8601 timestamp") from exc
    return _to_local_naive(parsed)


def _to_local_naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def _build_entries(raw: Any, default_timestamp: datetime) -> list[RawEntry]:
    if not isinstance(raw, list):
        raise ReportValidationError("'entries' must be a list")
    if len(raw) > _MAX_ENTRIES:
        raise ReportValidationError(f"Too many entries: {len(raw)} (max {_MAX_ENTRIES})")
    return [_build_entry(item, i, default_timestamp) for i, item in enumerate(raw)]


def _build_entry(raw: Any, index: int, default_timestamp: datetime) -> RawEntry:
    if not isinstance(raw, dict):
        raise ReportValidationError(f"Entry at index {index} must be an object")
    title = raw.get("title", "Measurement")
    if not isinstance(title, str) or not title.strip():
        raise ReportValidationError(f"Entry at index {index}: 'title' must be a non-empty string")
    timestamp = _build_timestamp(raw.get("timestamp"), f"entries[{index}].timestamp")
    notes = raw.get("notes", "")
    if not isinstance(notes, str):
        raise ReportValidationError(f"Entry at index {index}: 'notes' must be a string")

    parameters_raw = raw.get("parameters", [])
    if not isinstance(parameters_raw, list):
        raise ReportValidationError(f"Entry at index {index}: 'parameters' must be a list")
    if len(parameters_raw) > _MAX_PARAMETERS:
        raise ReportValidationError(
            f"Entry at index {index}: too many parameters "
            f"({len(parameters_raw)}, max {_MAX_PARAMETERS})"
        )
    parameters = [
        _build_parameter(item, index, p_index) for p_index, item in enumerate(parameters_raw)
    ]
    return RawEntry(
        title=title,
        timestamp=timestamp or default_timestamp,
        parameters=parameters,
        notes=notes,
        source_name=str(raw.get("source", "")),
    )


def _build_parameter(raw: Any, entry_index: int, index: int) -> ExtractedParameter:
    where = f"Entry {entry_index}, parameter {index}"
    if not isinstance(raw, dict):
        raise ReportValidationError(f"{where} must be an object")
    name = raw.get("name")
    if not name or not isinstance(name, str):
        raise ReportValidationError(f"{where}: 'name' must be a non-empty string")
    if "value" not in raw:
        raise ReportValidationError(f"{where}: 'value' is required")
    value = raw["value"]
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ReportValidationError(f"{where}: 'value' must be a number or a string")
    unit = raw.get("unit", "")
    if not isinstance(unit, str):
        raise ReportValidationError(f"{where}: 'unit' must be a string")
    reported_range = raw.get("reported_range", "")
    if not isinstance(reported_range, str):
        raise ReportValidationError(f"{where}: 'reported_range' must be a string")

    definition = None
    if raw.get("reference_range") is not None:
        try:
            definition = build_definition(name, raw["reference_range"])
        except ReferenceRangeValidationError as exc:
            raise ReportValidationError(f"{where}: {exc}") from exc

    return ExtractedParameter(
        name=name,
        raw_value=value,
        unit=unit,
        range_definition=definition,
        reported_range=reported_range,
    )
