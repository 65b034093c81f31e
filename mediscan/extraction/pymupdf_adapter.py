import pymupdf

from mediscan.extraction.base import BaseReportTextExtractor
from mediscan.extraction.exceptions import ReportExtractionError


class PyMuPdfExtractor(BaseReportTextExtractor):
    """Reads report text page by page with PyMuPDF."""

    def extract_pages(self, pdf_bytes: bytes) -> list[str]:
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                return [page.get_text().strip() for page in doc]
        except Exception as exc:
            raise ReportExtractionError(f"pymupdf extraction failed: {exc}") from exc
