from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    # Engine names are resolved by the extractor and backend factories.
    pdf_engine: str = "pdfplumber"
    render_backend: str = "reportlab"

    page_size: Literal["A4", "letter"] = "A4"
    page_margin: float = Field(default=40.0, ge=0)
    footer_reserve: float = Field(default=36.0, gt=0)
    row_height: float = Field(default=18.0, gt=0)

    unknown_numeric_status: Literal["Normal", "Indeterminate"] = "Normal"
    reference_ranges_path: str = ""

    logo_path: str = ""
    product_name: str = "MediScan AI Health Report"
    confidentiality_label: str = "Confidential"

    output_dir: str = "reports"
    newest_first: bool = True
