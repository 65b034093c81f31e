from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from mediscan.rendering.primitives import BuiltPages, RenderedReport
from mediscan.report.models import ReportDocument, ReportRequest, SubjectInfo


@dataclass(slots=True)
class ReportContext:
    output_path: Path
    request_path: Path | None = None
    upload_paths: list[Path] = field(default_factory=list)
    subject: SubjectInfo | None = None
    generated_at: datetime | None = None
    request: ReportRequest | None = None
    document: ReportDocument | None = None
    built: BuiltPages | None = None
    rendered: RenderedReport | None = None
    pdf_bytes: bytes = b""
    error_message: str = ""


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: ReportContext) -> ReportContext:
        raise NotImplementedError
