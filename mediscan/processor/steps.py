from datetime import datetime
from pathlib import Path

from mediscan.extraction.base import BaseReportTextExtractor
from mediscan.extraction.exceptions import ReportExtractionError
from mediscan.extraction.parameter_parser import ParameterParser
from mediscan.extraction.report_type import detect_report_type
from mediscan.logging.logger import Log
from mediscan.processor.exceptions import FileReadError
from mediscan.processor.file_store import FileStore
from mediscan.processor.pipeline import PipelineStep, ReportContext
from mediscan.rendering.base import BaseCanvasBackend
from mediscan.rendering.footer import stamp_footers
from mediscan.rendering.layout import PaginatedRenderer
from mediscan.report.builder import ReportBuilder
from mediscan.report.models import RawEntry, ReportRequest
from mediscan.report.request_loader import load_request

UNREADABLE_TITLE = "Unreadable Report"


class LogFailureStep(PipelineStep):
    def run(self, context: ReportContext) -> ReportContext:
        Log.error(
            f"Report for {context.output_path} failed: {context.error_message}"
        )
        return context


class LoadRequestStep(PipelineStep):
    def run(self, context: ReportContext) -> ReportContext:
        if context.request_path is None:
            raise ValueError("ReportContext.request_path must be set before loading")
        context.request = load_request(context.request_path, now=context.generated_at)
        Log.info(
            f"Loaded request {context.request_path.name}: "
            f"{len(context.request.entries)} entries"
        )
        return context


class ExtractUploadsStep(PipelineStep):
    """Turns each uploaded lab PDF into one raw entry.

    A file that cannot be read or parsed becomes an entry carrying the error
    instead of aborting the batch.
    """

    def __init__(
        self,
        file_store: FileStore,
        extractor: BaseReportTextExtractor,
        parser: ParameterParser,
    ) -> None:
        self._file_store = file_store
        self._extractor = extractor
        self._parser = parser

    def run(self, context: ReportContext) -> ReportContext:
        if context.subject is None:
            raise ValueError("ReportContext.subject must be set before extraction")
        generated_at = context.generated_at or datetime.now()
        entries = [self._extract(path, generated_at) for path in context.upload_paths]
        context.request = ReportRequest(
            subject=context.subject,
            generated_at=generated_at,
            entries=entries,
        )
        failed = sum(1 for entry in entries if entry.processing_error)
        Log.info(f"Extracted {len(entries)} uploads ({failed} failed)")
        return context

    def _extract(self, path: Path, generated_at: datetime) -> RawEntry:
        try:
            text = self._extractor.extract(self._file_store.read(path))
        except (FileReadError, ReportExtractionError) as exc:
            Log.warning(f"Upload {path.name} could not be processed: {exc}")
            return RawEntry(
                title=UNREADABLE_TITLE,
                timestamp=generated_at,
                source_name=path.name,
                processing_error=str(exc),
            )
        parameters = self._parser.parse(text)
        title = detect_report_type(path.name, (p.name for p in parameters))
        Log.info(f"Parsed {len(parameters)} parameters from {path.name} ({title})")
        return RawEntry(
            title=title,
            timestamp=generated_at,
            parameters=parameters,
            source_name=path.name,
        )


class BuildDocumentStep(PipelineStep):
    def __init__(self, builder: ReportBuilder, newest_first: bool = True) -> None:
        self._builder = builder
        self._newest_first = newest_first

    def run(self, context: ReportContext) -> ReportContext:
        if context.request is None:
            raise ValueError("ReportContext.request must be set before building")
        context.document = self._builder.build_document(
            context.request, newest_first=self._newest_first
        )
        Log.info(
            f"Built document for {context.document.subject.name}: "
            f"{len(context.document.entries)} entries, "
            f"{context.document.parameter_count} parameters"
        )
        return context


class LayoutStep(PipelineStep):
    def __init__(self, renderer: PaginatedRenderer) -> None:
        self._renderer = renderer

    def run(self, context: ReportContext) -> ReportContext:
        if context.document is None:
            raise ValueError("ReportContext.document must be set before layout")
        context.built = self._renderer.layout(context.document)
        for warning in context.built.warnings:
            Log.warning(warning)
        return context


class StampFootersStep(PipelineStep):
    def __init__(self, renderer: PaginatedRenderer) -> None:
        self._renderer = renderer

    def run(self, context: ReportContext) -> ReportContext:
        if context.built is None or context.document is None:
            raise ValueError("ReportContext.built must be set before stamping footers")
        context.rendered = stamp_footers(
            context.built,
            self._renderer.geometry,
            label=self._renderer.options.footer_label,
            title=context.document.title,
        )
        return context


class DrawStep(PipelineStep):
    def __init__(self, backend: BaseCanvasBackend) -> None:
        self._backend = backend

    def run(self, context: ReportContext) -> ReportContext:
        if context.rendered is None:
            raise ValueError("ReportContext.rendered must be set before drawing")
        context.pdf_bytes = self._backend.draw(context.rendered)
        Log.info(
            f"Drew {context.rendered.page_count} pages ({len(context.pdf_bytes)} bytes)"
        )
        return context


class WriteArtifactStep(PipelineStep):
    def __init__(self, file_store: FileStore) -> None:
        self._file_store = file_store

    def run(self, context: ReportContext) -> ReportContext:
        if not context.pdf_bytes:
            raise ValueError("ReportContext.pdf_bytes must be set before writing")
        self._file_store.write(context.output_path, context.pdf_bytes)
        Log.info(f"Report written to {context.output_path}")
        return context
