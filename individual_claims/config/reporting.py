"""Output, logging, and report configuration."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field


class ReportConfig(BaseModel):
    """HTML report configuration.

    Controls where the rendered report and simulation extracts are written
    and how the embedded figures and claim viewer are produced.
    """

    output_directory: str = Field(default="outputs", description="Directory for report outputs")
    report_file: str = Field(
        default="claim_development_report.html", description="Report file name"
    )
    title: str = Field(
        default="Individual Claim Development Simulation", description="Report title"
    )
    figure_dpi: int = Field(default=100, ge=50, le=600)
    max_viewer_claims: int = Field(
        default=200, ge=1, description="Claims offered in the interactive claim viewer"
    )
    save_simulations: bool = Field(default=False, description="Write trial-level CSV")

    @property
    def output_path(self) -> Path:
        """Get output directory as Path object.

        Returns:
            Path object for the output directory.
        """
        return Path(self.output_directory)

    @property
    def report_path(self) -> Path:
        """Full path of the rendered HTML report."""
        return self.output_path / self.report_file


class LoggingConfig(BaseModel):
    """Logging configuration.

    Controls logging behavior including level, output destinations,
    and message formatting.
    """

    enabled: bool = Field(default=True, description="Enable logging")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    log_file: Optional[str] = Field(
        default=None, description="Log file path (None=no file logging)"
    )
    console_output: bool = Field(default=True, description="Log to console")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )
