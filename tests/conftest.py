import io
from datetime import datetime

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from mediscan.classification.classifier import Classifier
from mediscan.classification.models import ExtractedParameter
from mediscan.classification.registry import ReferenceRangeRegistry, default_registry
from mediscan.report.builder import ReportBuilder
from mediscan.report.interpretation import Interpreter
from mediscan.report.models import RawEntry, ReportRequest, SubjectInfo
from mediscan.styling.style_map import StatusStyleMap, default_style_map


def _pdf_with_lines(*pages: list[str]) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    for lines in pages:
        y = 720
        for line in lines:
            c.drawString(72, y, line)
            y -= 18
        c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    return _pdf_with_lines(["Hello PDF World"])


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    return _pdf_with_lines(["Page one content"], ["Page two content"])


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    return _pdf_with_lines([])


@pytest.fixture()
def lab_report_pdf_bytes() -> bytes:
    """A lipid panel laid out the way lab printouts usually are."""
    return _pdf_with_lines([
        "City Lab - Lipid Profile",
        "Patient: Jane Doe",
        "Total Cholesterol 230 mg/dL <200",
        "LDL Cholesterol 160 mg/dL <100",
        "HDL Cholesterol 35 mg/dL >40",
        "Triglycerides 120 mg/dL <150",
    ])


@pytest.fixture()
def registry() -> ReferenceRangeRegistry:
    return default_registry()


@pytest.fixture()
def classifier(registry: ReferenceRangeRegistry) -> Classifier:
    return Classifier(registry)


@pytest.fixture()
def style_map() -> StatusStyleMap:
    return default_style_map()


@pytest.fixture()
def report_builder(classifier: Classifier, registry: ReferenceRangeRegistry) -> ReportBuilder:
    return ReportBuilder(classifier, Interpreter(registry))


@pytest.fixture()
def sample_request() -> ReportRequest:
    return ReportRequest(
        subject=SubjectInfo(name="Jane Doe", subject_id="P-001"),
        generated_at=datetime(2025, 3, 1, 9, 30),
        entries=[
            RawEntry(
                title="Complete Blood Count (CBC)",
                timestamp=datetime(2025, 2, 1, 8, 0),
                parameters=[
                    ExtractedParameter("Hemoglobin", 10.5, "g/dL"),
                    ExtractedParameter("WBC Count", 7.0),
                    ExtractedParameter("Platelet Count", 300),
                ],
            ),
            RawEntry(
                title="Lipid Profile",
                timestamp=datetime(2025, 2, 20, 8, 0),
                parameters=[
                    ExtractedParameter("LDL Cholesterol", 160, "mg/dL"),
                    ExtractedParameter("HDL Cholesterol", 55, "mg/dL"),
                ],
                notes="Fasting sample.",
            ),
        ],
    )
