from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from mediscan.classification.registry import ReferenceRangeRegistry
from mediscan.extraction.exceptions import ReportExtractionError
from mediscan.extraction.parameter_parser import ParameterParser
from mediscan.processor.exceptions import ArtifactWriteError, FileReadError
from mediscan.processor.file_store import FileStore
from mediscan.processor.pipeline import PipelineStep, ReportContext
from mediscan.processor.processor import ReportProcessor
from mediscan.processor.steps import (
    UNREADABLE_TITLE,
    BuildDocumentStep,
    DrawStep,
    ExtractUploadsStep,
    LayoutStep,
    LoadRequestStep,
    LogFailureStep,
    StampFootersStep,
    WriteArtifactStep,
)
from mediscan.rendering.geometry import PageGeometry
from mediscan.rendering.layout import PaginatedRenderer
from mediscan.report.builder import ReportBuilder
from mediscan.report.models import ReportRequest, SubjectInfo
from mediscan.styling.style_map import StatusStyleMap

GENERATED_AT = datetime(2025, 3, 1, 9, 30)


def _context(**kwargs: object) -> ReportContext:
    return ReportContext(output_path=Path("/tmp/out.pdf"), **kwargs)  # type: ignore[arg-type]


def _make_step(name: str, calls: list[str]) -> MagicMock:
    step = MagicMock(spec=PipelineStep)

    def run(context: ReportContext) -> ReportContext:
        calls.append(name)
        return context

    step.run.side_effect = run
    return step


class TestReportProcessor:
    def test_runs_steps_in_order(self) -> None:
        calls: list[str] = []
        steps = [_make_step(n, calls) for n in ("load", "build", "draw")]
        failed_step = MagicMock(spec=PipelineStep)
        processor = ReportProcessor(steps=steps, failed_step=failed_step)

        context = processor.process(_context())

        assert calls == ["load", "build", "draw"]
        assert context.error_message == ""
        failed_step.run.assert_not_called()

    def test_failure_runs_hook_and_reraises(self) -> None:
        calls: list[str] = []
        broken = MagicMock(spec=PipelineStep)
        broken.run.side_effect = ArtifactWriteError("disk full")
        after = _make_step("after", calls)
        failed_step = MagicMock(spec=PipelineStep)
        processor = ReportProcessor(steps=[broken, after], failed_step=failed_step)
        context = _context()

        with pytest.raises(ArtifactWriteError, match="disk full"):
            processor.process(context)

        assert calls == []
        failed_step.run.assert_called_once_with(context)
        assert "disk full" in context.error_message

    def test_log_failure_step_logs_error(self, caplog: pytest.LogCaptureFixture) -> None:
        context = _context(error_message="DrawStep: boom")
        with caplog.at_level("ERROR", logger="mediscan"):
            assert LogFailureStep().run(context) is context
        assert "DrawStep: boom" in caplog.text


class TestLoadRequestStep:
    def test_requires_path(self) -> None:
        with pytest.raises(ValueError, match="request_path"):
            LoadRequestStep().run(_context())

    def test_loads_request(self, tmp_path: Path) -> None:
        path = tmp_path / "request.json"
        path.write_text('{"subject": {"name": "Jane"}, "entries": []}')
        context = LoadRequestStep().run(_context(request_path=path, generated_at=GENERATED_AT))
        assert context.request is not None
        assert context.request.generated_at == GENERATED_AT


class TestExtractUploadsStep:
    def _step(self, registry: ReferenceRangeRegistry) -> tuple[ExtractUploadsStep, MagicMock, MagicMock]:
        file_store = MagicMock(spec=FileStore)
        extractor = MagicMock()
        step = ExtractUploadsStep(file_store, extractor, ParameterParser(registry))
        return step, file_store, extractor

    def test_parses_each_upload(self, registry: ReferenceRangeRegistry) -> None:
        step, file_store, extractor = self._step(registry)
        file_store.read.return_value = b"%PDF-fake"
        extractor.extract.return_value = "LDL Cholesterol 160 mg/dL <100\nHDL Cholesterol 35 mg/dL"

        context = step.run(_context(
            upload_paths=[Path("lipids.pdf")],
            subject=SubjectInfo(name="Jane"),
            generated_at=GENERATED_AT,
        ))

        assert context.request is not None
        [entry] = context.request.entries
        assert entry.title == "Lipid Profile"
        assert entry.source_name == "lipids.pdf"
        assert entry.timestamp == GENERATED_AT
        assert [p.name for p in entry.parameters] == ["LDL Cholesterol", "HDL Cholesterol"]

    def test_failed_upload_becomes_error_entry(self, registry: ReferenceRangeRegistry) -> None:
        step, file_store, extractor = self._step(registry)
        file_store.read.side_effect = [b"%PDF-ok", FileReadError("File not found: gone.pdf")]
        extractor.extract.side_effect = [ReportExtractionError("pdfplumber extraction failed")]

        context = step.run(_context(
            upload_paths=[Path("broken.pdf"), Path("gone.pdf")],
            subject=SubjectInfo(name="Jane"),
            generated_at=GENERATED_AT,
        ))

        assert context.request is not None
        entries = context.request.entries
        assert [e.title for e in entries] == [UNREADABLE_TITLE, UNREADABLE_TITLE]
        assert entries[0].processing_error == "pdfplumber extraction failed"
        assert entries[1].processing_error == "File not found: gone.pdf"

    def test_requires_subject(self, registry: ReferenceRangeRegistry) -> None:
        step, _file_store, _extractor = self._step(registry)
        with pytest.raises(ValueError, match="subject"):
            step.run(_context())


class TestRenderSteps:
    def _renderer(self, style_map: StatusStyleMap) -> PaginatedRenderer:
        return PaginatedRenderer(PageGeometry.a4(), style_map)

    def test_build_layout_stamp_draw_write(
        self,
        tmp_path: Path,
        report_builder: ReportBuilder,
        sample_request: ReportRequest,
        style_map: StatusStyleMap,
    ) -> None:
        renderer = self._renderer(style_map)
        backend = MagicMock()
        backend.draw.return_value = b"%PDF-1.4 fake"
        output = tmp_path / "out.pdf"
        context = ReportContext(output_path=output, request=sample_request)

        for step in (
            BuildDocumentStep(report_builder),
            LayoutStep(renderer),
            StampFootersStep(renderer),
            DrawStep(backend),
            WriteArtifactStep(FileStore()),
        ):
            context = step.run(context)

        assert context.document is not None
        assert context.built is not None and context.rendered is not None
        assert context.rendered.page_count == context.built.page_count
        assert all(page.footer for page in context.rendered.pages)
        backend.draw.assert_called_once_with(context.rendered)
        assert output.read_bytes() == b"%PDF-1.4 fake"

    def test_steps_check_their_inputs(self, style_map: StatusStyleMap, report_builder: ReportBuilder) -> None:
        renderer = self._renderer(style_map)
        for step in (
            BuildDocumentStep(report_builder),
            LayoutStep(renderer),
            StampFootersStep(renderer),
            DrawStep(MagicMock()),
            WriteArtifactStep(FileStore()),
        ):
            with pytest.raises(ValueError, match="must be set"):
                step.run(_context())

    def test_build_document_honours_order(
        self, report_builder: ReportBuilder, sample_request: ReportRequest
    ) -> None:
        context = BuildDocumentStep(report_builder, newest_first=False).run(
            _context(request=sample_request)
        )
        assert context.document is not None
        assert context.document.entries[0].title == "Complete Blood Count (CBC)"

