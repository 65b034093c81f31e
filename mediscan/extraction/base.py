from abc import ABC, abstractmethod


class BaseReportTextExtractor(ABC):
    """Contract for all uploaded-report text extraction adapters."""

    @abstractmethod
    def extract_pages(self, pdf_bytes: bytes) -> list[str]:
        """Extract the text of each page, in page order.

        Args:
            pdf_bytes: Raw PDF file content.

        Returns:
            One stripped string per page (empty for pages without text).

        Raises:
            ReportExtractionError: if extraction fails for any reason.
        """

    def extract(self, pdf_bytes: bytes) -> str:
        """Extract the whole document as a single string."""
        return "\n".join(self.extract_pages(pdf_bytes)).strip()
