from mediscan.config.settings import Settings
from mediscan.extraction.base import BaseReportTextExtractor
from mediscan.extraction.pdfplumber_adapter import PdfPlumberExtractor
from mediscan.extraction.pymupdf_adapter import PyMuPdfExtractor


class ReportTextExtractorFactory:
    """Creates the text extractor named by ``pdf_engine``."""

    ADAPTERS: dict[str, type[BaseReportTextExtractor]] = {
        "pdfplumber": PdfPlumberExtractor,
        "pymupdf": PyMuPdfExtractor,
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseReportTextExtractor:
        engine = settings.pdf_engine.lower()
        adapter_cls = cls.ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls()
