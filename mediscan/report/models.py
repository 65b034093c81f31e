from dataclasses import dataclass, field
from datetime import datetime

from mediscan.classification.labels import ABNORMAL_LABELS
from mediscan.classification.models import ClassifiedParameter, ExtractedParameter


@dataclass(frozen=True)
class Interpretation:
    """Narrative summary derived from an entry's classified parameters."""

    analysis: str
    suggestion: str
    prescription: str


@dataclass(frozen=True)
class ReportEntry:
    """One measurement occasion: a batch of classified parameters plus free text."""

    title: str
    timestamp: datetime
    parameters: tuple[ClassifiedParameter, ...] = ()
    interpretation: Interpretation | None = None
    notes: str = ""
    source_name: str = ""
    processing_error: str = ""

    @property
    def abnormal_parameters(self) -> tuple[ClassifiedParameter, ...]:
        return tuple(p for p in self.parameters if p.status_label in ABNORMAL_LABELS)

    @property
    def failed(self) -> bool:
        return bool(self.processing_error)


@dataclass(frozen=True)
class SubjectInfo:
    """The person the document is about."""

    name: str
    subject_id: str = ""
    extra: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class ReportDocument:
    """Everything needed to render one export; built per request, then discarded."""

    subject: SubjectInfo
    generated_at: datetime
    entries: tuple[ReportEntry, ...] = ()
    title: str = "Health Report"

    def sorted_entries(self, newest_first: bool = True) -> "ReportDocument":
        """Return a copy with entries ordered by timestamp."""
        ordered = sorted(self.entries, key=lambda e: e.timestamp, reverse=newest_first)
        return ReportDocument(
            subject=self.subject,
            generated_at=self.generated_at,
            entries=tuple(ordered),
            title=self.title,
        )

    @property
    def parameter_count(self) -> int:
        return sum(len(e.parameters) for e in self.entries)


@dataclass(frozen=True)
class RawEntry:
    """An entry as submitted, before classification."""

    title: str
    timestamp: datetime
    parameters: list[ExtractedParameter] = field(default_factory=list)
    notes: str = ""
    source_name: str = ""
    processing_error: str = ""


@dataclass(frozen=True)
class ReportRequest:
    """A validated export request: subject plus raw entries."""

    subject: SubjectInfo
    generated_at: datetime
    entries: list[RawEntry] = field(default_factory=list)
    title: str = "Health Report"
