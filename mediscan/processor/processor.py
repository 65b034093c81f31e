from mediscan.classification.classifier import Classifier
from mediscan.classification.registry import ReferenceRangeRegistry
from mediscan.classification.registry_loader import build_registry
from mediscan.config.settings import Settings
from mediscan.extraction.factory import ReportTextExtractorFactory
from mediscan.extraction.parameter_parser import ParameterParser
from mediscan.logging.logger import Log
from mediscan.processor.file_store import FileStore
from mediscan.processor.pipeline import PipelineStep, ReportContext
from mediscan.processor.steps import (
    BuildDocumentStep,
    DrawStep,
    ExtractUploadsStep,
    LayoutStep,
    LoadRequestStep,
    LogFailureStep,
    StampFootersStep,
    WriteArtifactStep,
)
from mediscan.rendering.factory import CanvasBackendFactory
from mediscan.rendering.geometry import PageGeometry
from mediscan.rendering.layout import PaginatedRenderer, RenderOptions
from mediscan.report.builder import ReportBuilder
from mediscan.report.interpretation import Interpreter
from mediscan.styling.style_map import default_style_map


class ReportProcessor:
    """Runs the export pipeline steps in order.

    On the first failing step the failure hook runs and the error is re-raised,
    so the caller sees exactly one terminal error.
    """

    def __init__(self, steps: list[PipelineStep], failed_step: PipelineStep) -> None:
        self._steps = steps
        self._failed_step = failed_step

    def process(self, context: ReportContext) -> ReportContext:
        Log.info(f"Processing report {context.output_path}")
        for step in self._steps:
            try:
                context = step.run(context)
            except Exception as exc:
                context.error_message = f"{type(step).__name__}: {exc}"
                self._failed_step.run(context)
                raise
        return context


def _build_builder(settings: Settings, registry: ReferenceRangeRegistry) -> ReportBuilder:
    classifier = Classifier(
        registry, unknown_numeric_status=settings.unknown_numeric_status
    )
    return ReportBuilder(classifier, Interpreter(registry))


def _render_steps(settings: Settings, file_store: FileStore) -> list[PipelineStep]:
    renderer = PaginatedRenderer(
        PageGeometry.from_settings(settings),
        default_style_map(),
        RenderOptions.from_settings(settings),
    )
    backend = CanvasBackendFactory.create(settings)
    return [
        LayoutStep(renderer),
        StampFootersStep(renderer),
        DrawStep(backend),
        WriteArtifactStep(file_store),
    ]


def build_export_processor(settings: Settings) -> ReportProcessor:
    """Pipeline for a JSON request file: load -> build -> layout -> footers -> draw -> write."""
    registry = build_registry(settings)
    file_store = FileStore()
    steps: list[PipelineStep] = [
        LoadRequestStep(),
        BuildDocumentStep(_build_builder(settings, registry), settings.newest_first),
        *_render_steps(settings, file_store),
    ]
    return ReportProcessor(steps=steps, failed_step=LogFailureStep())


def build_analyze_processor(settings: Settings) -> ReportProcessor:
    """Pipeline for uploaded lab PDFs: extract -> build -> layout -> footers -> draw -> write."""
    registry = build_registry(settings)
    file_store = FileStore()
    steps: list[PipelineStep] = [
        ExtractUploadsStep(
            file_store,
            ReportTextExtractorFactory.create(settings),
            ParameterParser(registry),
        ),
        BuildDocumentStep(_build_builder(settings, registry), settings.newest_first),
        *_render_steps(settings, file_store),
    ]
    return ReportProcessor(steps=steps, failed_step=LogFailureStep())
