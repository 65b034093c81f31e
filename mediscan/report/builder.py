from mediscan.classification.classifier import Classifier
from mediscan.logging.logger import Log
from mediscan.report.interpretation import Interpreter
from mediscan.report.models import (
    Interpretation,
    RawEntry,
    ReportDocument,
    ReportEntry,
    ReportRequest,
)

FAILED_INTERPRETATION = Interpretation(
    analysis="File could not be processed due to an error.",
    suggestion="Please try again or upload a different file.",
    prescription="",
)


class ReportBuilder:
    """Classifies raw entries and groups them into a ReportDocument."""

    def __init__(self, classifier: Classifier, interpreter: Interpreter) -> None:
        self._classifier = classifier
        self._interpreter = interpreter

    def build_entry(self, raw: RawEntry) -> ReportEntry:
        if raw.processing_error:
            Log.warning(
                "Entry carries a processing error",
                title=raw.title,
                source=raw.source_name,
            )
            return ReportEntry(
                title=raw.title,
                timestamp=raw.timestamp,
                interpretation=FAILED_INTERPRETATION,
                notes=raw.notes,
                source_name=raw.source_name,
                processing_error=raw.processing_error,
            )

        classified = tuple(self._classifier.classify_many(raw.parameters))
        interpretation = self._interpreter.interpret(classified)
        entry = ReportEntry(
            title=raw.title,
            timestamp=raw.timestamp,
            parameters=classified,
            interpretation=interpretation,
            notes=raw.notes,
            source_name=raw.source_name,
        )
        Log.debug(
            "Built report entry",
            title=entry.title,
            parameters=len(classified),
            abnormal=len(entry.abnormal_parameters),
        )
        return entry

    def build_document(self, request: ReportRequest, newest_first: bool = True) -> ReportDocument:
        entries = tuple(self.build_entry(raw) for raw in request.entries)
        document = ReportDocument(
            subject=request.subject,
            generated_at=request.generated_at,
            entries=entries,
            title=request.title,
        )
        return document.sorted_entries(newest_first=newest_first)
