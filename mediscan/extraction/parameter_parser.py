"""Finds known parameters in the plain text of a lab report.

A line is recognised when it starts with a registered parameter name and is
followed by a value, e.g.::

    Hemoglobin 10.5 g/dL 12.0-16.0
    LDL Cholesterol: 160 mg/dL <100
    COVID-19 Test Positive Negative
"""

import re
from typing import ClassVar

from mediscan.classification.models import ExtractedParameter
from mediscan.classification.registry import ReferenceRangeRegistry
from mediscan.logging.logger import Log


class ParameterParser:
    """Turns report text into ExtractedParameters for names the registry knows."""

    _NUMBER_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[-+]?\d+(?:[.,]\d+)?$")
    _RANGE_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"(?:\d+(?:[.,]\d+)?\s*-\s*\d+(?:[.,]\d+)?)|(?:[<>]=?\s*\d+(?:[.,]\d+)?)"
    )
    _NEGATION_WORDS: ClassVar[frozenset[str]] = frozenset({"not", "non", "no"})

    def __init__(self, registry: ReferenceRangeRegistry) -> None:
        self._registry = registry
        names = sorted(registry.names(), key=len, reverse=True)
        self._name_re = re.compile(
            r"^\s*(?P<name>" + "|".join(re.escape(n) for n in names) + r")(?![\w(])"
            r"\s*[:=]?\s*(?P<rest>.*)$",
            re.IGNORECASE,
        ) if names else None

    def parse(self, text: str) -> list[ExtractedParameter]:
        if self._name_re is None:
            return []
        found: dict[str, ExtractedParameter] = {}
        for line in text.splitlines():
            parameter = self._parse_line(line)
            if parameter is None:
                continue
            if parameter.name in found:
                Log.debug("Ignoring repeated parameter", parameter=parameter.name)
                continue
            found[parameter.name] = parameter
        return list(found.values())

    def _parse_line(self, line: str) -> ExtractedParameter | None:
        match = self._name_re.match(line) if self._name_re is not None else None
        if match is None:
            return None
        name = self._registry.canonical_name(match.group("name")) or match.group("name")
        tokens = match.group("rest").split()
        if not tokens:
            return None

        first = tokens[0]
        if self._NUMBER_RE.match(first):
            value: float | str = float(first.replace(",", "."))
            rest = tokens[1:]
        else:
            take = 2 if first.lower() in self._NEGATION_WORDS and len(tokens) > 1 else 1
            value = " ".join(tokens[:take])
            rest = tokens[take:]

        remainder = " ".join(rest)
        range_match = self._RANGE_RE.search(remainder)
        reported_range = ""
        unit = ""
        if range_match is not None:
            reported_range = re.sub(r"\s+", "", range_match.group(0))
            before = remainder[:range_match.start()].split()
            unit = before[0] if before else ""
        elif isinstance(value, float) and rest:
            unit = rest[0]
        elif rest:
            reported_range = " ".join(rest)

        return ExtractedParameter(
            name=name,
            raw_value=value,
            unit=unit,
            reported_range=reported_range,
        )
