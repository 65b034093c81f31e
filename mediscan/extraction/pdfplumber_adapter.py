import io

import pdfplumber

from mediscan.extraction.base import BaseReportTextExtractor
from mediscan.extraction.exceptions import ReportExtractionError


class PdfPlumberExtractor(BaseReportTextExtractor):
    """Reads report text page by page with pdfplumber."""

    def extract_pages(self, pdf_bytes: bytes) -> list[str]:
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                return [(page.extract_text() or "").strip() for page in pdf.pages]
        except Exception as exc:
            raise ReportExtractionError(f"pdfplumber extraction failed: {exc}") from exc
